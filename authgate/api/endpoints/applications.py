"""Application (tenant) endpoints."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from authgate.core.responses import success_response
from authgate.dependencies import AdminPrincipal, DatabaseSession
from authgate.services.application_service import ApplicationService

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.get("")
async def list_applications(db: DatabaseSession, _admin: AdminPrincipal) -> JSONResponse:
    """List registered tenant applications (admin only)."""
    return success_response(await ApplicationService().get_all(db))
