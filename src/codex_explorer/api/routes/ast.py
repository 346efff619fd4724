from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from codex_explorer.api.dependencies import get_settings_dep
from codex_explorer.api.schemas import (
    DetailedAstRequest,
    DetailedAstResponse,
    FilteredAstResponse,
    RebuildResponse,
)
from codex_explorer.config import Settings
from codex_explorer.core.ast import PathOutsideProjectError, parse_file_to_ast, resolve_in_project
from codex_explorer.core.index import (
    IndexNotFoundError,
    build_filtered_index,
    load_filtered_index,
    write_filtered_index,
)
from codex_explorer.core.languages import UnsupportedExtensionError
from codex_explorer.models import DetailedAst

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ast", tags=["ast"])


@router.get("/filtered", response_model=FilteredAstResponse)
def filtered(settings: Settings = Depends(get_settings_dep)) -> FilteredAstResponse:
    """Return the project-wide signature index."""
    try:
        index = load_filtered_index(settings.filtered_ast_path)
    except IndexNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{e}. The index is being generated; retry shortly.",
        ) from e
    return FilteredAstResponse(filtered_ast=index)


@router.post("/filtered/rebuild", response_model=RebuildResponse)
def rebuild(settings: Settings = Depends(get_settings_dep)) -> RebuildResponse:
    """Rebuild the signature index from the configured project root."""
    index = build_filtered_index(settings.project_root, settings.c_header_as_cpp)
    write_filtered_index(index, settings.filtered_ast_path)
    logger.info("Rebuilt filtered index (%d files)", len(index.files))
    return RebuildResponse(
        root=index.root,
        path=str(settings.filtered_ast_path),
        files=len(index.files),
        generated_at=index.generated_at,
    )


@router.post("/detailed", response_model=DetailedAstResponse)
def detailed(body: DetailedAstRequest, settings: Settings = Depends(get_settings_dep)) -> DetailedAstResponse:
    """Parse the requested project files into detailed trees."""
    if not body.files:
        raise HTTPException(status_code=400, detail="files must be a non-empty array")

    results: list[DetailedAst] = []
    for rel in body.files:
        try:
            abs_path = resolve_in_project(settings.project_root, rel)
            if abs_path.is_dir():
                continue
            results.append(parse_file_to_ast(abs_path, settings.project_root, settings.c_header_as_cpp))
        except (PathOutsideProjectError, UnsupportedExtensionError) as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        except FileNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
    return DetailedAstResponse(detailed_asts=results)
