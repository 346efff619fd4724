import logging
import shutil
import tempfile
import uuid
from pathlib import Path

from codex_explorer.core.index import build_filtered_index, write_filtered_index

logger = logging.getLogger(__name__)

SESSION_INDEX_NAME = "filtered_ast.json"


class AskSession:
    """Private index for one question against an ad-hoc project root.

    Owns a ``<base_dir>/<uuid>`` directory; ``cleanup`` removes it and may be
    called more than once.
    """

    def __init__(self, session_id: str, directory: Path, project_root: Path):
        self.id = session_id
        self.dir = directory
        self.project_root = project_root
        self.index_path = directory / SESSION_INDEX_NAME
        self._cleaned = False

    def cleanup(self) -> None:
        if self._cleaned:
            return
        self._cleaned = True
        shutil.rmtree(self.dir, ignore_errors=True)
        logger.debug("Removed ask session %s", self.id)

    def __enter__(self) -> "AskSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cleanup()


def create_ask_session(
    project_root: str | Path, base_dir: str | Path | None = None, c_header_as_cpp: bool = False
) -> AskSession:
    root = Path(project_root).resolve()
    if not root.is_dir():
        raise NotADirectoryError(f"Project root is not a directory: {root}")

    session_id = str(uuid.uuid4())
    directory = Path(base_dir or tempfile.gettempdir()).resolve() / session_id
    directory.mkdir(parents=True)
    session = AskSession(session_id, directory, root)
    try:
        write_filtered_index(build_filtered_index(root, c_header_as_cpp), session.index_path)
    except BaseException:
        session.cleanup()
        raise
    logger.info("Ask session %s indexed %s", session_id, root)
    return session
