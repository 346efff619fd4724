from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Position(_Model):
    row: int
    column: int


class AstNode(_Model):
    type: str
    start_position: Position = Field(alias="startPosition")
    end_position: Position = Field(alias="endPosition")
    sample: str = ""
    children: list[AstNode] = Field(default_factory=list)


AstNode.model_rebuild()  # necessary for recursive types


class DetailedAst(_Model):
    file_path: str = Field(alias="filePath")
    language: str
    root: AstNode


# --- Signatures (shallow index) ---


class FunctionSignature(_Model):
    type: Literal["function"] = "function"
    name: str
    params: list[str] = Field(default_factory=list)
    where: Literal["definition", "declaration"] | None = None


class MethodSignature(_Model):
    type: Literal["method"] = "method"
    name: str
    params: list[str] = Field(default_factory=list)
    where: Literal["definition", "declaration"] | None = None


class ClassSignature(_Model):
    type: Literal["class"] = "class"
    name: str
    methods: list[MethodSignature] = Field(default_factory=list)


Signature = Annotated[FunctionSignature | MethodSignature | ClassSignature, Field(discriminator="type")]


class FileIndexItem(_Model):
    file: str
    lang: str
    ast: list[Signature] = Field(default_factory=list)


class FilteredIndex(_Model):
    root: str
    files: list[str] = Field(default_factory=list)
    index: list[FileIndexItem] = Field(default_factory=list)
    generated_at: str = Field(alias="generatedAt")


# --- Slicing and pruning ---


class SliceHints(_Model):
    """Matching policy for predicate slices.

    ``types`` is accepted as an input alias because prune plans use that key.
    """

    symbols: list[str] = Field(default_factory=list)
    hint_types: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("hintTypes", "hint_types", "types"),
        serialization_alias="hintTypes",
    )
    max_nodes: int = Field(
        200,
        validation_alias=AliasChoices("maxNodes", "max_nodes"),
        serialization_alias="maxNodes",
    )


class PruneMode(str, Enum):
    DROP_ALL = "DROP_ALL"
    KEEP_SOME = "KEEP_SOME"
    KEEP_MIN = "KEEP_MIN"


class SliceRule(_Model):
    file: str
    by: SliceHints | None = None
    paths: list[str] = Field(default_factory=list)


class PrunePlan(_Model):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    mode: PruneMode = PruneMode.KEEP_SOME
    keep_full: list[str] = Field(default_factory=list)
    slice: list[SliceRule] = Field(default_factory=list)
    drop: list[str] = Field(default_factory=list)
    rationale: str = ""


# --- Code ranges ---


class CodeRange(_Model):
    file: str
    start_line: int = Field(alias="startLine")
    end_line: int = Field(alias="endLine")
    rationale: str | None = None


class CodeSlice(CodeRange):
    code: str


# --- Tracing ---


class PruneTraceItem(_Model):
    mode: PruneMode
    planned_files: list[str] = Field(alias="plannedFiles")
    kept_files: list[str] = Field(alias="keptFiles")
    dropped_files: list[str] = Field(alias="droppedFiles")
    est_tokens_before: int = Field(alias="estTokensBefore")
    est_tokens_after: int = Field(alias="estTokensAfter")


class TraceBuffer(_Model):
    iterations: int = 0
    files_requested: list[list[str]] = Field(default_factory=list, alias="filesRequested")
    files_parsed: list[list[str]] = Field(default_factory=list, alias="filesParsed")
    prune: list[PruneTraceItem] = Field(default_factory=list)

    def record_requested(self, files: list[str]) -> None:
        _set_at(self.files_requested, self.iterations, list(files))

    def record_parsed(self, files: list[str]) -> None:
        _set_at(self.files_parsed, self.iterations, list(files))

    def all_parsed(self) -> set[str]:
        return {f for batch in self.files_parsed for f in batch}


def _set_at(rows: list[list[str]], index: int, value: list[str]) -> None:
    while len(rows) <= index:
        rows.append([])
    rows[index] = value


PromptMode = Literal["slice", "full"]


class AskResult(_Model):
    answer: str
    followups: list[str] = Field(default_factory=list)
    want_files: list[str] = Field(default_factory=list, alias="wantFiles")
    mode_used: PromptMode = Field("slice", alias="modeUsed")
    trace: TraceBuffer | None = None
