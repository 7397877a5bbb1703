"""API router configuration."""

from fastapi import APIRouter

from authgate.api.endpoints import (
    accounts,
    applications,
    auth,
    devices,
    health,
    proxy,
    tasks,
    users,
)
from authgate.schemas.common import ErrorEnvelope

api_router = APIRouter(
    responses={
        400: {"model": ErrorEnvelope},
        401: {"model": ErrorEnvelope},
        500: {"model": ErrorEnvelope},
    }
)

# Include routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(proxy.router, prefix="/proxy", tags=["Proxy"])
api_router.include_router(users.router)
api_router.include_router(accounts.router)
api_router.include_router(devices.router)
api_router.include_router(applications.router)
api_router.include_router(tasks.router)
