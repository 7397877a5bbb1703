"""Tenant upstream proxy endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from authgate.core.exceptions import UpstreamException
from authgate.core.responses import ResponseCode, error_response
from authgate.dependencies import (
    CurrentPrincipal,
    DatabaseSession,
    get_proxy_service,
    get_upstream_headers,
)
from authgate.schemas.proxy import CommonProxyRequest, UpstreamHeaders
from authgate.services.proxy_service import ProxyService

router = APIRouter()

ProxyServiceDep = Annotated[ProxyService, Depends(get_proxy_service)]
UpstreamHeadersDep = Annotated[UpstreamHeaders, Depends(get_upstream_headers)]


@router.get("/find-subscribe", summary="Look up a device subscription")
async def find_subscribe(
    proxy_service: ProxyServiceDep,
    headers: UpstreamHeadersDep,
    app_name: Annotated[str | None, Query(alias="appName")] = None,
) -> JSONResponse:
    """
    Forward a subscription lookup to the tenant upstream.

    The HTTP status mirrors the upstream response.
    """
    status_code, envelope = await proxy_service.find_subscribe(app_name, headers)
    return JSONResponse(status_code=status_code, content=envelope)


@router.post("/common", summary="Generic upstream passthrough")
async def common(
    request: CommonProxyRequest,
    proxy_service: ProxyServiceDep,
    headers: UpstreamHeadersDep,
) -> JSONResponse:
    """
    Forward a GET or POST to the tenant base URL.

    Always answers HTTP 200; the outcome is carried in the envelope code.
    """
    if not headers.device_number:
        return error_response(
            "deviceNumber header is required",
            code=ResponseCode.BAD_REQUEST,
            status_code=200,
        )

    try:
        envelope = await proxy_service.common(request, headers)
    except UpstreamException as e:
        return error_response(e.message, code=ResponseCode.INTERNAL_ERROR, status_code=200)

    return JSONResponse(status_code=200, content=envelope)


@router.get("/logoff", summary="Log off the caller's account")
async def logoff(
    principal: CurrentPrincipal,
    db: DatabaseSession,
    proxy_service: ProxyServiceDep,
    headers: UpstreamHeadersDep,
) -> JSONResponse:
    """
    Forward a logoff to the tenant upstream and delete the caller's account.

    If the upstream times out the account is still deleted locally.

    Raises:
        UnauthorizedException: If the caller is not an Auth0-backed account
        UpstreamException: If the upstream fails for any reason but a timeout
    """
    status_code, envelope = await proxy_service.logoff(db, principal, headers)
    return JSONResponse(status_code=status_code, content=envelope)
