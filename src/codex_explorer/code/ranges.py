import logging

from pydantic import ValidationError

from codex_explorer.config import Settings
from codex_explorer.core.meta import describe_asts
from codex_explorer.core.ports.oracle import DecisionOracle, ask_json
from codex_explorer.graph.state import ExplorationState
from codex_explorer.models import CodeRange
from codex_explorer.oracle.prompts import PROMPT_SELECT_CODE_RANGES

logger = logging.getLogger(__name__)

DEMO_RANGE_LINES = 200


def select_code_ranges(
    oracle: DecisionOracle | None, state: ExplorationState, settings: Settings
) -> list[CodeRange]:
    """Choose the source line ranges to load for the answer.

    Planning works from the pruned trees when any survived, otherwise from the
    full detailed trees.
    """
    source = state.pruned_asts if state.pruned_asts else state.detailed_asts
    if not source:
        return []

    if oracle is None:
        limit = settings.code_max_files if settings.code_max_files > 0 else len(source)
        return [
            CodeRange(file=ast.file_path, start_line=1, end_line=DEMO_RANGE_LINES, rationale="demo: first 200 lines")
            for ast in source[:limit]
        ]

    payload = {
        "question": state.question,
        "filteredAstMeta": {"files": state.index_files},
        "astMeta": describe_asts(source),
    }
    parsed, _ = ask_json(oracle, PROMPT_SELECT_CODE_RANGES, payload)
    if parsed is None:
        return []
    raw_ranges = parsed.get("ranges")
    if not isinstance(raw_ranges, list):
        return []

    ranges: list[CodeRange] = []
    for item in raw_ranges:
        try:
            ranges.append(CodeRange.model_validate(item))
        except ValidationError:
            logger.debug("Skipping invalid code range: %r", item)
    return ranges
