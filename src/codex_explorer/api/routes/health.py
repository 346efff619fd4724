from fastapi import APIRouter, Depends, Response, status

from codex_explorer.api.dependencies import get_settings_dep
from codex_explorer.api.schemas import HealthResponse, LivenessResponse, ReadinessResponse
from codex_explorer.config import Settings

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(settings: Settings = Depends(get_settings_dep)) -> HealthResponse:
    return HealthResponse(mode=settings.prompt_mode, llm=bool(settings.llm_api_key))


@router.get("/healthz/live", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    """Liveness probe: is the process alive?"""
    return LivenessResponse()


@router.get("/healthz/ready", response_model=ReadinessResponse)
async def readiness(
    response: Response,
    settings: Settings = Depends(get_settings_dep),
) -> ReadinessResponse:
    """Readiness probe: checks that the filtered index has been generated."""
    if settings.filtered_ast_path.is_file():
        return ReadinessResponse(status="ok", index="present")
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(status="degraded", index="missing")
