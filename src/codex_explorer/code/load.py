import logging
import math
import re
from collections.abc import Sequence
from pathlib import Path

from codex_explorer.config import Settings
from codex_explorer.core.ast import PathOutsideProjectError, resolve_in_project
from codex_explorer.models import CodeRange, CodeSlice

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r?\n")


def read_file_lines(abs_path: str | Path, start: int, end: int) -> str | None:
    """Return lines ``start..end`` (1-based, inclusive) of a UTF-8 file.

    The range is clamped so it is never empty or negative; a range past the end
    of the file yields whatever lines exist. Read failures return None.
    """
    try:
        raw = Path(abs_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Cannot read %s: %s", abs_path, e)
        return None
    lines = _LINE_BREAK.split(raw)
    start = max(1, int(start))
    end = max(start, int(end))
    return "\n".join(lines[start - 1 : end])


def estimate_code_tokens(code: str) -> int:
    return math.ceil(len(code) / 4)


def trim_slices_to_tokens(slices: Sequence[CodeSlice], budget: int) -> list[CodeSlice]:
    kept: list[CodeSlice] = []
    used = 0
    for code_slice in slices:
        cost = estimate_code_tokens(code_slice.code)
        if used + cost > budget:
            break
        kept.append(code_slice)
        used += cost
    return kept


def load_code_slices(
    ranges: Sequence[CodeRange], project_root: Path, settings: Settings, token_budget: int = 0
) -> list[CodeSlice]:
    """Read the selected ranges from disk under the configured caps.

    At most ``code_max_files`` ranges are considered. Slices are accepted in
    order until the byte cap would overflow, then optionally trimmed again to
    ``token_budget`` (or ``max_code_tokens`` when no dynamic budget applies).
    """
    if not ranges:
        return []
    picked = list(ranges[: settings.code_max_files]) if settings.code_max_files > 0 else list(ranges)

    slices: list[CodeSlice] = []
    total_bytes = 0
    for code_range in picked:
        try:
            abs_path = resolve_in_project(project_root, code_range.file)
        except PathOutsideProjectError:
            logger.warning("Skipping range outside project root: %s", code_range.file)
            continue
        code = read_file_lines(abs_path, code_range.start_line, code_range.end_line)
        if code is None:
            continue
        size = len(code.encode("utf-8"))
        if settings.code_max_bytes > 0 and total_bytes + size > settings.code_max_bytes:
            break
        slices.append(CodeSlice(**code_range.model_dump(), code=code))
        total_bytes += size

    budget = token_budget if token_budget > 0 else settings.max_code_tokens
    if budget > 0:
        return trim_slices_to_tokens(slices, budget)
    return slices
