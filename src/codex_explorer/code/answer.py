"""Final answer stage.

The answer is produced from the loaded code slices. When no slice could be
loaded but pruned trees remain, the trees themselves are used instead.
"""

import logging
from typing import Any, NamedTuple

from codex_explorer.core.ports.oracle import DecisionOracle, ask_json
from codex_explorer.graph.state import ExplorationState
from codex_explorer.models import DetailedAst
from codex_explorer.oracle.prompts import PROMPT_ANSWER_FROM_AST, PROMPT_ANSWER_FROM_CODE

logger = logging.getLogger(__name__)

DEMO_SLICE_CHARS = 500
UNPARSABLE_ANSWER = "(unparsable oracle response)"


class Answer(NamedTuple):
    answer: str
    followups: list[str]
    # None when the oracle did not name any files to expand.
    want_files: list[str] | None = None


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if isinstance(v, str) and v]


def _interpret(parsed: dict[str, Any] | None, raw: str) -> Answer:
    if parsed is None:
        return Answer(raw or UNPARSABLE_ANSWER, [])
    want = parsed.get("wantFiles")
    return Answer(
        answer=str(parsed.get("answer") or ""),
        followups=_str_list(parsed.get("followups")),
        want_files=_str_list(want) if isinstance(want, list) else None,
    )


def demo_code_answer(state: ExplorationState) -> str:
    lines = [
        "Demo (code-based):",
        f"- question: {state.question}",
        f"- code slices: {len(state.code_slices)}",
    ]
    for code_slice in state.code_slices[:2]:
        lines.append("")
        lines.append(f"[{code_slice.file}:{code_slice.start_line}-{code_slice.end_line}]")
        lines.append(f"{code_slice.code[:DEMO_SLICE_CHARS]}...")
    return "\n".join(lines)


def answer_from_code(oracle: DecisionOracle | None, state: ExplorationState) -> Answer:
    if oracle is None:
        return Answer(demo_code_answer(state), [])

    payload = {
        "question": state.question,
        "codeSlices": [s.model_dump(by_alias=True, exclude_none=True) for s in state.code_slices],
        "astMeta": [{"file": ast.file_path} for ast in state.pruned_asts or []],
        "filteredAstMeta": {"files": state.index_files},
    }
    parsed, raw = ask_json(oracle, PROMPT_ANSWER_FROM_CODE, payload)
    return _interpret(parsed, raw)


def _trees_for_prompt(state: ExplorationState) -> list[DetailedAst]:
    if state.pruned_asts is not None:
        return state.pruned_asts
    if state.mode_used == "slice" and state.slice_hints is not None:
        cap = state.slice_hints.max_nodes
        return [
            ast.model_copy(update={"root": ast.root.model_copy(update={"children": ast.root.children[:cap]})})
            for ast in state.detailed_asts
        ]
    return state.detailed_asts


def answer_from_ast(oracle: DecisionOracle | None, state: ExplorationState) -> Answer:
    trees = _trees_for_prompt(state)
    if oracle is None:
        return Answer(f"Demo (AST-based): using {len(trees)} file(s)", [])

    payload = {
        "question": state.question,
        "filteredAst": state.filtered_index.model_dump(by_alias=True) if state.filtered_index else None,
        "detailedAsts": [ast.model_dump(by_alias=True) for ast in trees],
        "pruned": state.pruned_asts is not None,
        "droppedAll": state.dropped_all,
    }
    parsed, raw = ask_json(oracle, PROMPT_ANSWER_FROM_AST, payload)
    return _interpret(parsed, raw)


def answer_question(oracle: DecisionOracle | None, state: ExplorationState) -> Answer:
    """Answer from code when slices were loaded, else from the surviving trees."""
    if not state.code_slices and state.pruned_asts:
        logger.info("No code slices loaded; answering from %d pruned tree(s)", len(state.pruned_asts))
        return answer_from_ast(oracle, state)
    return answer_from_code(oracle, state)
