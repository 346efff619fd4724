import logging

from pydantic import ValidationError

from codex_explorer.core.meta import describe_asts
from codex_explorer.core.ports.oracle import DecisionOracle, ask_json
from codex_explorer.graph.state import ExplorationState
from codex_explorer.models import PruneMode, PrunePlan, SliceRule
from codex_explorer.oracle.prompts import PROMPT_PRUNE_PLAN

logger = logging.getLogger(__name__)

DEMO_MAX_NODES = 200


def demo_prune_plan(state: ExplorationState) -> PrunePlan:
    """Slice every detailed tree by the hints chosen when deciding files."""
    hints = state.slice_hints
    if hints is None:
        return PrunePlan(mode=PruneMode.KEEP_SOME, rationale="demo plan by sliceHints")
    capped = hints.model_copy(update={"max_nodes": min(DEMO_MAX_NODES, hints.max_nodes)})
    return PrunePlan(
        mode=PruneMode.KEEP_SOME,
        slice=[SliceRule(file=ast.file_path, by=capped) for ast in state.detailed_asts],
        rationale="demo plan by sliceHints",
    )


def keep_all_plan(state: ExplorationState) -> PrunePlan:
    return PrunePlan(
        mode=PruneMode.KEEP_SOME,
        keep_full=[ast.file_path for ast in state.detailed_asts],
        rationale="fallback: oracle plan unusable, keeping whole files",
    )


def collect_prune_plan(oracle: DecisionOracle | None, state: ExplorationState) -> PrunePlan:
    if oracle is None:
        return demo_prune_plan(state)

    payload = {
        "question": state.question,
        "filteredAstMeta": {"files": state.index_files},
        "files": [ast.file_path for ast in state.detailed_asts],
        "astMeta": describe_asts(state.detailed_asts),
    }
    parsed, _ = ask_json(oracle, PROMPT_PRUNE_PLAN, payload)
    if parsed is None:
        return keep_all_plan(state)
    try:
        return PrunePlan.model_validate(parsed)
    except ValidationError as e:
        logger.warning("Discarding malformed prune plan: %s", e)
        return keep_all_plan(state)
