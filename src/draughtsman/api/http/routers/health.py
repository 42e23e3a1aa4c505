"""Health check endpoints.

Endpoint Summary:
    GET /health         - Liveness probe (process is running)
    GET /health/ready   - Readiness probe (deployer loop is running)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from starlette.responses import JSONResponse

from src.draughtsman.api.http.schemas.health import (
    DeployerHealth,
    LivenessResponse,
    OverallStatus,
    ReadinessResponse,
)
from src.draughtsman.service.service import Service

router = APIRouter(prefix="/health", tags=["health"])


def get_service(request: Request) -> Service:
    """Get the service instance stored on the application."""
    return request.app.state.service


@router.get(
    "",
    response_model=LivenessResponse,
    summary="Liveness probe",
)
async def health() -> LivenessResponse:
    """Returns 200 as long as the process is running."""
    return LivenessResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    responses={503: {"model": ReadinessResponse}},
)
async def ready(service: Service = Depends(get_service)) -> JSONResponse:
    """Returns 200 once the deployer loop runs, 503 otherwise.

    A failing poll does not make the agent unready; it is reported in
    ``deployer.last_error`` and retried on the next tick.
    """
    state = service.state()
    response = ReadinessResponse(
        status=OverallStatus.READY if state.running else OverallStatus.NOT_READY,
        environment=service.config.environment,
        deployer=DeployerHealth(
            running=state.running,
            in_flight=state.in_flight,
            last_tick_at=state.last_tick_at,
            last_error=state.last_error,
        ),
    )
    return JSONResponse(
        status_code=200 if state.running else 503,
        content=response.model_dump(mode="json"),
    )
