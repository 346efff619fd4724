from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from codex_explorer.api.dependencies import get_oracle, get_settings_dep
from codex_explorer.api.schemas import AskRequest
from codex_explorer.config import Settings
from codex_explorer.core.index import IndexNotFoundError
from codex_explorer.core.ports.oracle import DecisionOracle
from codex_explorer.core.session import create_ask_session
from codex_explorer.graph.machine import run_graph
from codex_explorer.models import AskResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/graph", tags=["graph"])


@router.post("/ask", response_model=AskResult)
def ask(
    body: AskRequest,
    settings: Settings = Depends(get_settings_dep),
    oracle: DecisionOracle | None = Depends(get_oracle),
) -> AskResult:
    """Run the exploration pipeline for one question.

    With ``projectRoot`` a private index is built for that tree and removed
    once the answer is ready.
    """
    try:
        if body.project_root is None:
            return run_graph(body.question, settings, oracle)
        try:
            session = create_ask_session(body.project_root, c_header_as_cpp=settings.c_header_as_cpp)
        except NotADirectoryError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        with session:
            return run_graph(
                body.question,
                settings,
                oracle,
                project_root=session.project_root,
                index_path=session.index_path,
            )
    except IndexNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e
