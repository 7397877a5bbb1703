"""Device endpoints."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from authgate.config import settings
from authgate.core.exceptions import NotFoundException
from authgate.core.responses import success_response
from authgate.core.serialization import sanitize_for_response
from authgate.dependencies import AdminPrincipal, CurrentPrincipal, DatabaseSession
from authgate.schemas.devices import DeviceLoginType
from authgate.services.device_service import DeviceService

router = APIRouter(prefix="/devices", tags=["Devices"])


@router.get("/{number}/accounts")
async def get_device_accounts(
    number: str,
    db: DatabaseSession,
    _principal: CurrentPrincipal,
) -> JSONResponse:
    """List the accounts that have signed in on a device, most recent first."""
    device_service = DeviceService()
    if not await device_service.find_by_number(db, number):
        raise NotFoundException("device not found")

    linked = await device_service.accounts_for_device(db, number)
    return success_response(sanitize_for_response(linked, settings.response_utc_offset_hours))


@router.put("/{device_id}/login-type")
async def set_device_login_type(
    device_id: int,
    payload: DeviceLoginType,
    db: DatabaseSession,
    _admin: AdminPrincipal,
) -> JSONResponse:
    """Set the login provider of a device (admin only)."""
    device_service = DeviceService()
    if not await device_service.update_login_type(db, device_id, payload.login_type):
        raise NotFoundException("device not found")

    device = await device_service.find_by_id(db, device_id)
    return success_response(sanitize_for_response(device, settings.response_utc_offset_hours))
