from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.concurrency import run_in_threadpool

from codex_explorer.api.dependencies import get_settings_dep, reset_oracle
from codex_explorer.core.index import ensure_filtered_index

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = app.dependency_overrides.get(get_settings_dep, get_settings_dep)()
    try:
        await run_in_threadpool(
            ensure_filtered_index,
            settings.filtered_ast_path,
            settings.project_root,
            settings.regenerate_filtered,
            settings.c_header_as_cpp,
        )
    except OSError:
        logger.exception("Could not prepare filtered index at %s", settings.filtered_ast_path)
    logger.info("Filtered index path %s", settings.filtered_ast_path)
    yield
    reset_oracle()
