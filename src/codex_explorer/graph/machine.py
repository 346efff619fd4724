"""Fixed-order exploration pipeline with a single conditional back-edge.

    load_index -> decide_files -> fetch_detail -> prune
        -> select_ranges -> load_slices -> answer
        -> (should_loop ? decide_files_again -> fetch_detail ... : END)
"""

import logging
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from codex_explorer.config import Settings
from codex_explorer.core.ports.oracle import DecisionOracle
from codex_explorer.graph import nodes
from codex_explorer.graph.nodes import StageContext
from codex_explorer.graph.state import ExplorationState
from codex_explorer.models import AskResult

logger = logging.getLogger(__name__)

# The back-edge is taken at most once per question.
MAX_EXTRA_ITERATIONS = 1


class Stage(str, Enum):
    LOAD_INDEX = "load_index"
    DECIDE_FILES = "decide_files"
    FETCH_DETAIL = "fetch_detail"
    PRUNE = "prune"
    SELECT_RANGES = "select_ranges"
    LOAD_SLICES = "load_slices"
    ANSWER = "answer"
    DECIDE_FILES_AGAIN = "decide_files_again"


StageFn = Callable[[ExplorationState, StageContext], ExplorationState]

STAGES: dict[Stage, StageFn] = {
    Stage.LOAD_INDEX: nodes.load_index,
    Stage.DECIDE_FILES: nodes.decide_files,
    Stage.FETCH_DETAIL: nodes.fetch_detail,
    Stage.PRUNE: nodes.prune,
    Stage.SELECT_RANGES: nodes.select_ranges,
    Stage.LOAD_SLICES: nodes.load_slices,
    Stage.ANSWER: nodes.answer,
    Stage.DECIDE_FILES_AGAIN: nodes.decide_files_again,
}

_NEXT: dict[Stage, Stage] = {
    Stage.LOAD_INDEX: Stage.DECIDE_FILES,
    Stage.DECIDE_FILES: Stage.FETCH_DETAIL,
    Stage.FETCH_DETAIL: Stage.PRUNE,
    Stage.PRUNE: Stage.SELECT_RANGES,
    Stage.SELECT_RANGES: Stage.LOAD_SLICES,
    Stage.LOAD_SLICES: Stage.ANSWER,
    Stage.DECIDE_FILES_AGAIN: Stage.FETCH_DETAIL,
}


class ExplorationOrchestrator:
    """Runs one question through the pipeline.

    The oracle is optional; without one every decision point uses its
    deterministic fallback.
    """

    def __init__(self, settings: Settings, oracle: DecisionOracle | None = None):
        self.settings = settings
        self.oracle = oracle

    def _after(self, stage: Stage, state: ExplorationState) -> Stage | None:
        if stage is Stage.ANSWER:
            if state.loop_count < MAX_EXTRA_ITERATIONS and nodes.should_loop(state):
                return Stage.DECIDE_FILES_AGAIN
            return None
        if stage is Stage.DECIDE_FILES_AGAIN and not state.want_files:
            # Nothing new to fetch; keep the previous answer.
            return None
        return _NEXT[stage]

    def run(
        self, question: str, project_root: str | Path | None = None, index_path: str | Path | None = None
    ) -> ExplorationState:
        state = ExplorationState(
            question=question,
            project_root=Path(project_root or self.settings.project_root).resolve(),
            index_path=Path(index_path or self.settings.filtered_ast_path),
            mode_used=self.settings.prompt_mode,
        )
        ctx = StageContext(settings=self.settings, oracle=self.oracle)

        stage: Stage | None = Stage.LOAD_INDEX
        while stage is not None:
            state = STAGES[stage](state, ctx)
            stage = self._after(stage, state)

        logger.info(
            "Answered in %d iteration(s); parsed %d file(s)", state.trace.iterations + 1, len(state.trace.all_parsed())
        )
        return state


def run_graph(
    question: str,
    settings: Settings,
    oracle: DecisionOracle | None = None,
    project_root: str | Path | None = None,
    index_path: str | Path | None = None,
) -> AskResult:
    state = ExplorationOrchestrator(settings, oracle).run(question, project_root=project_root, index_path=index_path)
    return AskResult(
        answer=state.answer,
        followups=state.followups,
        want_files=state.want_files,
        mode_used=state.mode_used,
        trace=state.trace,
    )
