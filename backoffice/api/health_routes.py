# =============================================================================
# BACKOFFICE SERVICE - HEALTH ROUTES
# =============================================================================
# File: backoffice/api/health_routes.py
# Description: Liveness and readiness endpoints for monitoring and orchestration
# =============================================================================

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from backoffice.api.deps import DatabaseManagerDep, SettingsDep
from backoffice.users.schemas import HealthResponse, ReadinessResponse
from backoffice.utils.helpers import format_uptime, utc_now


router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check",
    description="Quick health check for load balancers. Does not touch databases.",
)
async def health_check(request: Request, settings: SettingsDep) -> HealthResponse:
    started_at = request.app.state.started_at
    return HealthResponse(
        status="healthy",
        service=settings.app_name,
        version=settings.app_version,
        uptime=format_uptime(utc_now() - started_at),
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Ping every configured database; 503 if any of them fails.",
    responses={503: {"model": ReadinessResponse}},
)
async def readiness_check(manager: DatabaseManagerDep):
    """
    Readiness check.

    Each database reports "ok" or its error message.
    """
    results = await manager.health()
    databases = {
        name: "ok" if error is None else str(error)
        for name, error in results.items()
    }

    if all(error is None for error in results.values()):
        return ReadinessResponse(status="ready", databases=databases)

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=ReadinessResponse(status="not ready", databases=databases).model_dump(),
    )
