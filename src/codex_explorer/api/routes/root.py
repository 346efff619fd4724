from __future__ import annotations

from typing import Any

from fastapi import APIRouter

TITLE = "Codex Explorer API"
DESCRIPTION = "Answer questions about a source tree using signature indexes, pruned ASTs and code slices."
VERSION = "0.1.0"

router = APIRouter()


@router.get("/")
async def root() -> dict[str, Any]:
    """Root discovery endpoint: API directory for programmatic and human clients."""
    return {
        "meta": {
            "title": TITLE,
            "description": DESCRIPTION,
            "version": VERSION,
        },
        "links": {
            "self": "/",
            "health": "/health",
            "filteredAst": "/ast/filtered",
            "detailedAst": "/ast/detailed",
            "ask": "/graph/ask",
            "openapi": "/openapi.json",
            "docs": "/docs",
        },
    }
