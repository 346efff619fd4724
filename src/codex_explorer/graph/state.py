from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from codex_explorer.models import (
    CodeRange,
    CodeSlice,
    DetailedAst,
    FilteredIndex,
    PromptMode,
    PrunePlan,
    SliceHints,
    TraceBuffer,
)


@dataclass
class ExplorationState:
    """Mutable record threaded through one question's pipeline run."""

    question: str
    project_root: Path
    index_path: Path
    mode_used: PromptMode = "slice"

    filtered_index: FilteredIndex | None = None
    want_files: list[str] = field(default_factory=list)
    slice_hints: SliceHints | None = None
    detailed_asts: list[DetailedAst] = field(default_factory=list)

    pruned_asts: list[DetailedAst] | None = None
    prune_plan: PrunePlan | None = None
    prune_plan_applied: PrunePlan | None = None
    dropped_all: bool = False

    code_ranges: list[CodeRange] = field(default_factory=list)
    code_slices: list[CodeSlice] = field(default_factory=list)

    answer: str = ""
    followups: list[str] = field(default_factory=list)
    loop_count: int = 0
    trace: TraceBuffer = field(default_factory=TraceBuffer)

    @property
    def index_files(self) -> list[str]:
        return self.filtered_index.files if self.filtered_index is not None else []
