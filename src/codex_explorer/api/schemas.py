from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from codex_explorer.models import DetailedAst, FilteredIndex


class _Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class HealthResponse(_Schema):
    status: str = "ok"
    mode: str
    llm: bool


class LivenessResponse(_Schema):
    status: str = "ok"


class ReadinessResponse(_Schema):
    status: str = "ok"
    index: str = "present"


class FilteredAstResponse(_Schema):
    filtered_ast: FilteredIndex = Field(alias="filteredAst")


class RebuildResponse(_Schema):
    root: str
    path: str
    files: int
    generated_at: str = Field(alias="generatedAt")


class DetailedAstRequest(_Schema):
    files: list[str]


class DetailedAstResponse(_Schema):
    detailed_asts: list[DetailedAst] = Field(alias="detailedAsts")


class AskRequest(_Schema):
    question: str = Field(min_length=1)
    project_root: str | None = Field(None, alias="projectRoot")
