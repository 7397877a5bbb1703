"""Authentication endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, RedirectResponse

from authgate.core.responses import success_response
from authgate.dependencies import (
    DatabaseSession,
    get_auth0_client,
    get_auth_service,
    get_device_headers,
)
from authgate.schemas.auth import Auth0VerifyRequest, DeviceHeaders, LoginRequest
from authgate.services.auth0_client import Auth0Client
from authgate.services.auth_service import AuthService

router = APIRouter()

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


@router.post("/login", summary="Username/password login")
async def login(
    request: LoginRequest,
    db: DatabaseSession,
    auth_service: AuthServiceDep,
) -> JSONResponse:
    """
    Authenticate a local user.

    Returns:
        Signed token and user summary

    Raises:
        UnauthorizedException: If the credentials do not match
    """
    data = await auth_service.login(db, request.username, request.password)
    return success_response(data, message="login successful")


@router.get("/auth0", summary="Start the Auth0 login flow")
async def auth0_login(
    auth0_client: Annotated[Auth0Client, Depends(get_auth0_client)],
) -> RedirectResponse:
    """Redirect to the Auth0 universal login page."""
    return RedirectResponse(auth0_client.build_authorize_url(), status_code=302)


@router.get("/callback", summary="Auth0 authorization code callback")
async def auth0_callback(
    auth_service: AuthServiceDep,
    code: Annotated[str, Query(min_length=1)],
) -> JSONResponse:
    """
    Exchange the authorization code returned by Auth0.

    Returns:
        Auth0 tokens and the user profile
    """
    data = await auth_service.handle_callback(code)
    return success_response(data)


@router.post("/verify", summary="Verify an Auth0 access token")
async def verify(
    request: Auth0VerifyRequest,
    db: DatabaseSession,
    auth_service: AuthServiceDep,
    device: Annotated[DeviceHeaders, Depends(get_device_headers)],
) -> JSONResponse:
    """
    Verify an Auth0 access token from a mobile client.

    The token is checked against the Auth0 tenant of ``appId``; the caller's
    account is created or refreshed and the device in the ``deviceNumber``
    header linked to it.

    Returns:
        Signed session token, Auth0 profile and the account record

    Raises:
        BadRequestException: If ``appId`` is missing or unknown
        UpstreamException: If Auth0 rejects the token
    """
    data = await auth_service.verify_auth0(db, request, device)
    return success_response(data, message="verification successful")
