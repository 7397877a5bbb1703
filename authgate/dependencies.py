"""FastAPI dependencies."""

from typing import Annotated, Any

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.config import Settings, get_settings
from authgate.core.exceptions import ForbiddenException, UnauthorizedException
from authgate.database import get_db
from authgate.schemas.auth import DeviceHeaders, Principal
from authgate.schemas.proxy import UpstreamHeaders
from authgate.services.auth0_client import Auth0Client
from authgate.services.auth_service import AuthService
from authgate.services.proxy_service import ProxyService

AppSettings = Annotated[Settings, Depends(get_settings)]
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]


def get_auth0_client(settings: AppSettings) -> Auth0Client:
    """Get the Auth0 client."""
    return Auth0Client(settings)


def get_auth_service(
    settings: AppSettings,
    auth0_client: Annotated[Auth0Client, Depends(get_auth0_client)],
) -> AuthService:
    """Get the authentication service."""
    return AuthService(settings, auth0_client)


def get_proxy_service(settings: AppSettings) -> ProxyService:
    """Get the upstream proxy service."""
    return ProxyService(settings)


def get_device_headers(
    device_number: Annotated[str | None, Header(alias="deviceNumber")] = None,
    phone_model: Annotated[str | None, Header(alias="phoneModel")] = None,
    country_code: Annotated[str | None, Header(alias="countryCode")] = None,
    version: Annotated[str | None, Header(alias="version")] = None,
) -> DeviceHeaders:
    """Collect device metadata from request headers."""
    return DeviceHeaders(
        device_number=device_number,
        phone_model=phone_model,
        country_code=country_code,
        version=version,
    )


def get_upstream_headers(
    device_number: Annotated[str | None, Header(alias="deviceNumber")] = None,
    phone_model: Annotated[str | None, Header(alias="phoneModel")] = None,
    version: Annotated[str | None, Header(alias="version")] = None,
    app_name: Annotated[str | None, Header(alias="appName")] = None,
    auth: Annotated[str | None, Header(alias="Auth")] = None,
) -> UpstreamHeaders:
    """Collect the client headers forwarded to tenant upstreams."""
    return UpstreamHeaders(
        device_number=device_number,
        phone_model=phone_model,
        version=version,
        app_name=app_name,
        auth=auth,
    )


def get_current_claims(request: Request) -> dict[str, Any]:
    """
    Get the token claims verified by the auth middleware.

    Raises:
        UnauthorizedException: If the request carries no verified token
    """
    claims = getattr(request.state, "claims", None)
    if not claims:
        raise UnauthorizedException("no authorization")
    return claims


async def get_current_principal(
    claims: Annotated[dict[str, Any], Depends(get_current_claims)],
    db: DatabaseSession,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    device: Annotated[DeviceHeaders, Depends(get_device_headers)],
) -> Principal:
    """
    Resolve the caller behind the verified token.

    Returns:
        Principal for the account or local user named by the token

    Raises:
        UnauthorizedException: If the record was deleted
    """
    return await auth_service.resolve_principal(db, claims, device.device_number)


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


async def require_admin(principal: CurrentPrincipal) -> Principal:
    """
    Require the admin role.

    Raises:
        ForbiddenException: If the caller is not an admin
    """
    if not principal.is_admin:
        raise ForbiddenException("admin role required")
    return principal


AdminPrincipal = Annotated[Principal, Depends(require_admin)]
