from __future__ import annotations

from fastapi import FastAPI

from codex_explorer.api.lifespan import lifespan
from codex_explorer.api.routes.ask import router as ask_router
from codex_explorer.api.routes.ast import router as ast_router
from codex_explorer.api.routes.health import router as health_router
from codex_explorer.api.routes.root import DESCRIPTION, TITLE, VERSION
from codex_explorer.api.routes.root import router as root_router


def create_app() -> FastAPI:
    app = FastAPI(
        title=TITLE,
        description=DESCRIPTION,
        version=VERSION,
        lifespan=lifespan,
    )

    app.include_router(root_router, include_in_schema=False)
    app.include_router(health_router, include_in_schema=False)
    app.include_router(ast_router)
    app.include_router(ask_router)

    return app
