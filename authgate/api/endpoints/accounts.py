"""Account endpoints."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from authgate.config import settings
from authgate.core.exceptions import NotFoundException, UnauthorizedException
from authgate.core.responses import success_response
from authgate.core.serialization import sanitize_for_response
from authgate.dependencies import AdminPrincipal, CurrentPrincipal, DatabaseSession
from authgate.schemas.accounts import AccountUserLink
from authgate.schemas.devices import LinkedDevice
from authgate.services.account_service import AccountService
from authgate.services.device_service import DeviceService
from authgate.services.user_service import UserService

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.get("/me")
async def get_my_account(db: DatabaseSession, principal: CurrentPrincipal) -> JSONResponse:
    """Get the caller's account and the devices linked to it."""
    if not principal.is_external_user:
        raise UnauthorizedException("account information unavailable, check authorization")

    account = await AccountService().find_by_id(db, principal.id)
    if not account:
        raise NotFoundException("account not found")

    linked = await DeviceService().devices_for_account(db, account["id"])
    account["devices"] = [LinkedDevice.model_validate(device).model_dump() for device in linked]

    return success_response(sanitize_for_response(account, settings.response_utc_offset_hours))


@router.put("/{account_id}/user")
async def link_account_to_user(
    account_id: int,
    link: AccountUserLink,
    db: DatabaseSession,
    _admin: AdminPrincipal,
) -> JSONResponse:
    """Attach an account to an existing local user (admin only)."""
    if not await UserService().get_by_id(db, link.user_id):
        raise NotFoundException("User not found")

    account_service = AccountService()
    if not await account_service.link_account_to_user(db, account_id, link.user_id):
        raise NotFoundException("account not found")

    account = await account_service.find_by_id(db, account_id)
    return success_response(
        sanitize_for_response(account, settings.response_utc_offset_hours),
        message="account linked",
    )


@router.delete("/{account_id}")
async def delete_account(
    account_id: int,
    db: DatabaseSession,
    _admin: AdminPrincipal,
) -> JSONResponse:
    """Delete an account and its device links (admin only)."""
    if not await AccountService().delete_account_by_id(db, account_id):
        raise NotFoundException("account not found")
    return success_response({"id": account_id}, message="account deleted")
