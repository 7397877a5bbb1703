"""User endpoints."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from authgate.core.exceptions import ForbiddenException, NotFoundException
from authgate.core.responses import success_response
from authgate.dependencies import AdminPrincipal, CurrentPrincipal, DatabaseSession
from authgate.schemas.users import UserCreate, UserResponse
from authgate.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me")
async def get_current_user_profile(principal: CurrentPrincipal) -> JSONResponse:
    """Get the authenticated caller."""
    return success_response(principal.model_dump())


@router.get("")
async def list_users(db: DatabaseSession, _admin: AdminPrincipal) -> JSONResponse:
    """List all local users (admin only)."""
    users = await UserService().get_all(db)
    return success_response([UserResponse.model_validate(user) for user in users])


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    db: DatabaseSession,
    principal: CurrentPrincipal,
) -> JSONResponse:
    """Get a local user; callers other than admins may only read themselves."""
    if not principal.is_admin and (principal.is_external_user or principal.id != user_id):
        raise ForbiddenException("not allowed to read this user")

    user = await UserService().get_by_id(db, user_id)
    if not user:
        raise NotFoundException("User not found")

    return success_response(UserResponse.model_validate(user))


@router.post("")
async def create_user(
    user_data: UserCreate,
    db: DatabaseSession,
    _admin: AdminPrincipal,
) -> JSONResponse:
    """Create a local user (admin only)."""
    user = await UserService().create_user(db, user_data)
    return success_response(UserResponse.model_validate(user), message="user created")
