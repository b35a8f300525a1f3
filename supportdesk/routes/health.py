"""
Health check endpoints

- GET /api/health - Basic liveness, never touches the backend
- GET /api/health/connection - Backend connectivity via the Connection Guard
"""
import time
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field

from supportdesk.dependencies import get_connection_guard
from supportdesk.models.schemas import ConnectionStatus
from supportdesk.services.connection import ConnectionGuard
from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

# Application start time for uptime calculation
APP_START_TIME = time.time()


class HealthResponse(BaseModel):
    """Basic health check response"""
    status: str = Field(..., description="Overall status: healthy")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: str = Field(..., description="Application version")
    uptime_seconds: float = Field(..., description="Application uptime in seconds")


class ConnectionHealth(BaseModel):
    """Backend connectivity as seen by the Connection Guard"""
    status: str = Field(..., description="healthy or unhealthy")
    connection: ConnectionStatus
    model_loaded: bool = False


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check"
)
async def basic_health_check(request: Request) -> HealthResponse:
    """
    Always returns 200 OK. Does not check the backend.
    """
    return HealthResponse(
        status="healthy",
        version=request.app.version,
        uptime_seconds=round(time.time() - APP_START_TIME, 2)
    )


@router.get(
    "/connection",
    response_model=ConnectionHealth,
    status_code=status.HTTP_200_OK,
    summary="Backend connectivity"
)
async def connection_health_check(
    request: Request,
    guard: ConnectionGuard = Depends(get_connection_guard)
) -> ConnectionHealth:
    """
    Runs ensure_connection(): cached for the freshness window, and shared
    with any probe already in flight. Always 200; the body carries status.
    """
    connected = await guard.ensure_connection()
    if not connected:
        logger.warning("Backend connection check failed")

    service = getattr(request.app.state, "ticket_service", None)
    return ConnectionHealth(
        status="healthy" if connected else "unhealthy",
        connection=guard.status(),
        model_loaded=bool(service and service.triage.model_loaded)
    )
