"""Health check endpoints."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from authgate.config import settings
from authgate.core.responses import success_response
from authgate.database import check_database_connection

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check payload."""

    status: str
    version: str
    environment: str


class DetailedHealthResponse(HealthResponse):
    """Detailed health check payload."""

    database: str


@router.get("/health", summary="Basic health check")
async def health_check() -> JSONResponse:
    """
    Basic health check endpoint.

    Returns:
        Basic health status
    """
    return success_response(
        HealthResponse(
            status="healthy",
            version=settings.app_version,
            environment=settings.environment,
        )
    )


@router.get("/health/detailed", summary="Detailed health check")
async def detailed_health_check() -> JSONResponse:
    """
    Detailed health check with database status.

    Returns:
        Detailed health status including dependencies
    """
    db_healthy = await check_database_connection()

    return success_response(
        DetailedHealthResponse(
            status="healthy" if db_healthy else "degraded",
            version=settings.app_version,
            environment=settings.environment,
            database="healthy" if db_healthy else "unhealthy",
        )
    )


@router.get("/ping", summary="Simple ping")
async def ping() -> JSONResponse:
    """Simple ping endpoint."""
    return success_response({"message": "pong"})
