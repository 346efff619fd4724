"""Pipeline stages.

Every stage takes the shared ``ExplorationState`` and a ``StageContext`` and
returns the state. Stages are wrapped by ``traced`` with small projections so
DEBUG logs stay readable.
"""

import logging
import re
from dataclasses import dataclass

from pydantic import ValidationError

from codex_explorer.code.answer import answer_question
from codex_explorer.code.load import load_code_slices
from codex_explorer.code.ranges import select_code_ranges
from codex_explorer.config import Settings
from codex_explorer.core.ast import load_detailed_asts
from codex_explorer.core.budget import calc_code_budget
from codex_explorer.core.index import IndexNotFoundError, load_filtered_index
from codex_explorer.core.ports.oracle import DecisionOracle, ask_json
from codex_explorer.graph.state import ExplorationState
from codex_explorer.models import SliceHints
from codex_explorer.oracle.prompts import PROMPT_DECIDE_FILES
from codex_explorer.prune.apply import apply_prune_plan
from codex_explorer.prune.planner import collect_prune_plan
from codex_explorer.tracing import TraceOptions, traced

logger = logging.getLogger(__name__)

DEFAULT_FILE_PICK = 3
_JS_SUFFIXES = (".ts", ".tsx", ".jsx", ".js")
_WANTS_MORE = re.compile(r"파일|file|module|더|expand|detail", re.IGNORECASE)


@dataclass(frozen=True)
class StageContext:
    settings: Settings
    oracle: DecisionOracle | None = None


def default_file_pick(files: list[str]) -> list[str]:
    """First few JS/TS files, or the first few files of any kind."""
    js_files = [f for f in files if f.endswith(_JS_SUFFIXES)]
    return (js_files or files)[:DEFAULT_FILE_PICK]


def default_slice_hints(question: str, hint_types: list[str]) -> SliceHints:
    return SliceHints(symbols=[question] if question else [], hint_types=hint_types, max_nodes=200)


@traced(
    TraceOptions(
        tag="load_index",
        pick_args=lambda args: {"q": len(args[0].question)},
        pick_result=lambda s: {"fileCount": len(s.index_files)},
    )
)
def load_index(state: ExplorationState, ctx: StageContext) -> ExplorationState:
    state.filtered_index = load_filtered_index(state.index_path)
    return state


@traced(
    TraceOptions(
        tag="decide_files",
        pick_args=lambda args: {
            "q": len(args[0].question),
            "prevParsed": len(args[0].trace.all_parsed()),
            "droppedAllPrev": args[0].dropped_all,
        },
        pick_result=lambda s: {"want": s.want_files},
    )
)
def decide_files(state: ExplorationState, ctx: StageContext) -> ExplorationState:
    if state.filtered_index is None:
        raise IndexNotFoundError("Filtered index is not loaded")

    files = state.index_files
    if ctx.oracle is None:
        state.want_files = default_file_pick(files)
        state.slice_hints = default_slice_hints(state.question, ["function_declaration", "method_definition"])
    else:
        payload = {
            "question": state.question,
            "filteredAst": state.filtered_index.model_dump(by_alias=True),
            "hint": {
                "previousParsed": sorted(state.trace.all_parsed()),
                "droppedAllInLastPrune": state.dropped_all,
            },
        }
        parsed, _ = ask_json(ctx.oracle, PROMPT_DECIDE_FILES, payload)
        if parsed is None:
            state.want_files = default_file_pick(files)
            state.slice_hints = default_slice_hints(state.question, ["function_declaration"])
        else:
            want = parsed.get("wantFiles")
            state.want_files = [f for f in want if isinstance(f, str)] if isinstance(want, list) else []
            state.slice_hints = _parse_hints(parsed.get("sliceHints"))

    state.trace.record_requested(state.want_files)
    return state


def _parse_hints(raw: object) -> SliceHints | None:
    if not isinstance(raw, dict):
        return None
    try:
        return SliceHints.model_validate(raw)
    except ValidationError as e:
        logger.warning("Ignoring malformed slice hints: %s", e)
        return None


@traced(
    TraceOptions(
        tag="fetch_detail",
        pick_args=lambda args: {"want": args[0].want_files},
        pick_result=lambda s: {"parsed": len(s.detailed_asts)},
    )
)
def fetch_detail(state: ExplorationState, ctx: StageContext) -> ExplorationState:
    asts, parsed = load_detailed_asts(state.want_files, state.project_root, ctx.settings.c_header_as_cpp)
    state.detailed_asts = asts
    state.trace.record_parsed(parsed)
    return state


@traced(
    TraceOptions(
        tag="prune",
        pick_args=lambda args: {"files": len(args[0].detailed_asts)},
        pick_result=lambda s: {"kept": len(s.pruned_asts or []), "droppedAll": s.dropped_all},
    )
)
def prune(state: ExplorationState, ctx: StageContext) -> ExplorationState:
    if not state.detailed_asts:
        state.pruned_asts = []
        state.dropped_all = False
        return state

    plan = collect_prune_plan(ctx.oracle, state)
    result = apply_prune_plan(
        state.detailed_asts,
        plan,
        question=state.question,
        index_files=state.index_files,
        settings=ctx.settings,
    )
    state.prune_plan = plan
    state.prune_plan_applied = result.applied_plan
    state.pruned_asts = result.pruned
    state.dropped_all = result.dropped_all
    state.trace.prune.append(result.trace_item)
    return state


@traced(
    TraceOptions(
        tag="select_ranges",
        pick_args=lambda args: {
            "pruned": len(args[0].pruned_asts or []),
            "total": len(args[0].detailed_asts),
        },
        pick_result=lambda s: {"ranges": s.code_ranges},
    )
)
def select_ranges(state: ExplorationState, ctx: StageContext) -> ExplorationState:
    state.code_ranges = select_code_ranges(ctx.oracle, state, ctx.settings)
    return state


@traced(
    TraceOptions(
        tag="load_slices",
        pick_args=lambda args: {"ranges": args[0].code_ranges},
        pick_result=lambda s: {"slices": len(s.code_slices)},
    )
)
def load_slices(state: ExplorationState, ctx: StageContext) -> ExplorationState:
    budget = calc_code_budget(ctx.settings, state.question, state.index_files)
    state.code_slices = load_code_slices(state.code_ranges, state.project_root, ctx.settings, token_budget=budget)
    return state


@traced(
    TraceOptions(
        tag="answer",
        pick_args=lambda args: {"slices": len(args[0].code_slices)},
        pick_result=lambda s: {"answerLen": len(s.answer), "followups": s.followups},
    )
)
def answer(state: ExplorationState, ctx: StageContext) -> ExplorationState:
    result = answer_question(ctx.oracle, state)
    state.answer = result.answer
    state.followups = result.followups
    if result.want_files is not None:
        state.want_files = result.want_files
    return state


def should_loop(state: ExplorationState) -> bool:
    """Whether another decide/fetch round could add information.

    Never after a full drop; only when the followups ask for more files and
    at least one wanted file has not been parsed yet.
    """
    if state.dropped_all:
        return False
    if not state.followups:
        return False
    if not _WANTS_MORE.search(" ".join(state.followups)):
        return False
    parsed = state.trace.all_parsed()
    return any(f not in parsed for f in state.want_files)


def decide_files_again(state: ExplorationState, ctx: StageContext) -> ExplorationState:
    """Loop-back variant of ``decide_files`` that skips already-parsed files."""
    state.loop_count += 1
    state.trace.iterations += 1
    state = decide_files(state, ctx)

    parsed = state.trace.all_parsed()
    state.want_files = [f for f in state.want_files if f not in parsed]
    state.trace.record_requested(state.want_files)
    if not state.want_files:
        state.followups = []
    return state
