"""Shallow, project-wide signature index (the "filtered AST")."""

import logging
import os
import tempfile
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import cast

from pydantic import ValidationError
from tree_sitter import Node
from tree_sitter_language_pack import SupportedLanguage, get_parser

from codex_explorer.core.ast import relative_path
from codex_explorer.core.languages import detect_language_from_path, is_supported_file
from codex_explorer.core.signatures import extract_c_signatures, extract_cpp_signatures, extract_js_signatures
from codex_explorer.models import ClassSignature, FileIndexItem, FilteredIndex, FunctionSignature, MethodSignature

logger = logging.getLogger(__name__)

EXCLUDED_DIRS: frozenset[str] = frozenset(
    {
        "node_modules",
        ".git",
        "out",
        "build",
        "dist",
        "gen",
        "generated",
        "__snapshots__",
        "__fixtures__",
        ".next",
        ".turbo",
        "__pycache__",
        ".venv",
        "venv",
        ".mypy_cache",
        ".pytest_cache",
        ".tox",
    }
)

_Extractor = Callable[[Node, bytes], list[FunctionSignature | MethodSignature | ClassSignature]]

_EXTRACTORS: dict[str, _Extractor] = {
    "javascript": extract_js_signatures,
    "typescript": extract_js_signatures,
    "tsx": extract_js_signatures,
    "c": extract_c_signatures,
    "cpp": extract_cpp_signatures,
}


class IndexNotFoundError(FileNotFoundError):
    """The index file does not exist yet; build it and retry."""


def walk_supported_files(project_root: Path) -> list[Path]:
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(project_root):
        dirnames[:] = [d for d in dirnames if d not in EXCLUDED_DIRS]
        for name in filenames:
            path = Path(dirpath) / name
            if is_supported_file(path):
                found.append(path)
    return found


def parse_one_for_index(abs_path: Path, project_root: Path, c_header_as_cpp: bool = False) -> FileIndexItem:
    language = detect_language_from_path(abs_path, c_header_as_cpp)
    items: list[FunctionSignature | MethodSignature | ClassSignature] = []

    extractor = _EXTRACTORS.get(language)
    if extractor is not None:
        source = abs_path.read_bytes()
        tree = get_parser(cast(SupportedLanguage, language)).parse(source)
        items = extractor(tree.root_node, source)

    return FileIndexItem(
        file=relative_path(abs_path, project_root),
        lang=abs_path.suffix.lower().lstrip("."),
        ast=items,
    )


def build_filtered_index(project_root: str | Path, c_header_as_cpp: bool = False) -> FilteredIndex:
    root = Path(project_root).resolve()
    index: list[FileIndexItem] = []

    for abs_path in walk_supported_files(root):
        try:
            index.append(parse_one_for_index(abs_path, root, c_header_as_cpp))
        except Exception as e:  # noqa: BLE001
            logger.warning("Index parse error at %s: %s", abs_path, e)

    index.sort(key=lambda item: item.file)
    return FilteredIndex(
        root=str(root),
        files=[item.file for item in index],
        index=index,
        generated_at=datetime.now(timezone.utc).isoformat(),
    )


def write_filtered_index(index: FilteredIndex, path: str | Path) -> None:
    """Write the index as JSON, replacing any previous file atomically."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = index.model_dump_json(by_alias=True, indent=2)
    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            tmp.write(payload)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def ensure_filtered_index(
    path: str | Path, project_root: str | Path, force: bool = False, c_header_as_cpp: bool = False
) -> bool:
    """Build the index unless it already exists. Returns True when it was (re)built."""
    target = Path(path)
    if target.exists() and not force:
        return False
    index = build_filtered_index(project_root, c_header_as_cpp)
    write_filtered_index(index, target)
    logger.info("Filtered index generated at %s (files=%d)", target, len(index.files))
    return True


def load_filtered_index(path: str | Path) -> FilteredIndex:
    target = Path(path)
    try:
        raw = target.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise IndexNotFoundError(f"Filtered index not found: {target}") from None
    try:
        return FilteredIndex.model_validate_json(raw)
    except ValidationError as e:
        raise ValueError(f"Invalid filtered index at {target}: {e}") from e
