"""Per-tenant upstream proxy service."""

import asyncio
from dataclasses import dataclass
from typing import Any

import httpx
import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.config import Settings
from authgate.core.exceptions import UnauthorizedException, UpstreamException
from authgate.core.responses import ResponseCode
from authgate.schemas.auth import Principal
from authgate.schemas.proxy import CommonProxyRequest, UpstreamHeaders
from authgate.services.account_service import AccountService

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TenantEndpoints:
    """Upstream URLs of one tenant in one environment."""

    base_url: str
    find_subscribe_url: str
    logoff_url: str


ALGENIUS_NEXT = "AlgeniusNext"
PICCHAT_BOX = "PicchatBox"
TRADE_TUTOR_VIDEO = "TradeTutorVideo"
AI_META_AID = "AIMetaAid"
WALLET_BACKSTAGE = "Wallet-Backstage"

DEFAULT_APP_NAME = ALGENIUS_NEXT

_PROD = "https://ljsdstage.com"

TENANT_UPSTREAMS: dict[str, dict[str, TenantEndpoints]] = {
    ALGENIUS_NEXT: {
        "development": TenantEndpoints(
            base_url="http://192.168.31.100:8080",
            find_subscribe_url="http://192.168.31.100:8080/adware/subscribe/find",
            logoff_url="http://192.168.31.103:8080/adware/subscribe/delete",
        ),
        "production": TenantEndpoints(
            base_url=_PROD,
            find_subscribe_url=f"{_PROD}/adware/subscribe/find",
            logoff_url=f"{_PROD}/adware/subscribe/delete",
        ),
    },
    PICCHAT_BOX: {
        "development": TenantEndpoints(
            base_url="http://192.168.31.100:8081",
            find_subscribe_url="http://192.168.31.100:8081/system/image/subscribe/find",
            logoff_url="http://192.168.31.103:8081/system/image/subscribe/delete",
        ),
        "production": TenantEndpoints(
            base_url=_PROD,
            find_subscribe_url=f"{_PROD}/api/system/image/subscribe/find",
            logoff_url=f"{_PROD}/api/system/image/subscribe/delete",
        ),
    },
    TRADE_TUTOR_VIDEO: {
        "development": TenantEndpoints(
            base_url="http://192.168.31.100:8083",
            find_subscribe_url="http://192.168.31.100:8083/system/image/subscribe/find",
            logoff_url="http://192.168.31.103:8083/system/image/subscribe/delete",
        ),
        "production": TenantEndpoints(
            base_url=_PROD,
            find_subscribe_url=f"{_PROD}/video/system/image/subscribe/find",
            logoff_url=f"{_PROD}/video/system/image/subscribe/delete",
        ),
    },
    AI_META_AID: {
        "development": TenantEndpoints(
            base_url="http://192.168.31.100:8084",
            find_subscribe_url="http://192.168.31.100:8084/system/image/subscribe/find",
            logoff_url="http://192.168.31.103:8084/system/image/subscribe/delete",
        ),
        "production": TenantEndpoints(
            base_url=_PROD,
            find_subscribe_url=f"{_PROD}/aiMetaMid/system/image/subscribe/find",
            logoff_url=f"{_PROD}/aiMetaMid/system/image/subscribe/delete",
        ),
    },
    WALLET_BACKSTAGE: {
        "development": TenantEndpoints(
            base_url="http://localhost:8085",
            find_subscribe_url="http://192.168.31.100:8085/system/image/subscribe/find",
            logoff_url="http://192.168.31.103:8085/system/image/subscribe/delete",
        ),
        "production": TenantEndpoints(
            base_url=_PROD,
            find_subscribe_url=f"{_PROD}/wallet/system/image/subscribe/find",
            logoff_url=f"{_PROD}/wallet/system/image/subscribe/delete",
        ),
    },
}


def reshape_envelope(payload: Any, status_code: int) -> dict[str, Any]:
    """Map an upstream ``{code, msg, data}`` body onto ``{code, message, data}``."""
    if not isinstance(payload, dict):
        return {"code": status_code, "message": "ok", "data": payload}

    return {
        "code": payload.get("code") or status_code,
        "message": payload.get("msg") or payload.get("message") or "ok",
        "data": payload["data"] if "data" in payload else payload,
    }


def _json_or_empty(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {}


def _passthrough_status(status_code: int) -> int:
    return status_code if 200 <= status_code < 600 else 500


class ProxyService:
    """Forward client requests to the tenant upstream APIs."""

    def __init__(
        self,
        settings: Settings,
        account_service: AccountService | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize service with settings and an optional transport."""
        self.settings = settings
        self.accounts = account_service or AccountService()
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.upstream_timeout_seconds,
            transport=self.transport,
        )

    def endpoints_for(self, app_name: str | None) -> TenantEndpoints:
        """Get the upstream URLs of a tenant; unknown names fall back to the default tenant."""
        tenant = TENANT_UPSTREAMS.get(app_name or DEFAULT_APP_NAME)
        if tenant is None:
            logger.info("unknown_tenant_fallback", app_name=app_name)
            tenant = TENANT_UPSTREAMS[DEFAULT_APP_NAME]
        return tenant["production" if self.settings.is_production else "development"]

    @staticmethod
    def forward_headers(headers: UpstreamHeaders, include_auth: bool = False) -> dict[str, str]:
        """Build the header set sent upstream."""
        forwarded = {
            "phoneModel": headers.phone_model or "ios",
            "version": headers.version or "",
        }
        if headers.device_number:
            forwarded["deviceNumber"] = headers.device_number
        if include_auth and headers.auth:
            forwarded["Auth"] = headers.auth
        return forwarded

    async def find_subscribe(self, app_name: str | None, headers: UpstreamHeaders) -> tuple[int, dict]:
        """
        Forward a subscription lookup.

        Returns:
            Upstream HTTP status and the reshaped envelope
        """
        url = self.endpoints_for(app_name).find_subscribe_url
        forwarded = self.forward_headers(headers)
        forwarded.setdefault("deviceNumber", "")

        async with self._client() as client:
            try:
                response = await client.get(url, headers=forwarded)
            except httpx.HTTPError as e:
                logger.error("find_subscribe_failed", app_name=app_name, url=url, error=str(e))
                raise UpstreamException(f"find subscribe failed: {e!s}") from e

        envelope = reshape_envelope(_json_or_empty(response), response.status_code)
        return _passthrough_status(response.status_code), envelope

    async def common(self, request: CommonProxyRequest, headers: UpstreamHeaders) -> dict:
        """
        Forward a generic GET or POST to the tenant base URL.

        GET sends ``proxy_data`` as query parameters, POST as a JSON body.
        """
        base_url = self.endpoints_for(headers.app_name).base_url
        url = f"{base_url}/{request.url.lstrip('/')}"
        forwarded = self.forward_headers(headers, include_auth=True)

        async with self._client() as client:
            try:
                if request.method == "get":
                    params = {key: str(value) for key, value in (request.proxy_data or {}).items()}
                    response = await client.get(url, params=params, headers=forwarded)
                else:
                    response = await client.post(url, json=request.proxy_data, headers=forwarded)
            except httpx.HTTPError as e:
                logger.error("common_proxy_failed", url=url, method=request.method, error=str(e))
                raise UpstreamException(f"proxy request failed: {e!s}") from e

        return reshape_envelope(_json_or_empty(response), response.status_code)

    async def logoff(
        self,
        db: AsyncSession,
        principal: Principal,
        headers: UpstreamHeaders,
    ) -> tuple[int, dict]:
        """
        Forward a logoff to the tenant upstream, then delete the caller's account.

        If the upstream does not answer within the deadline the account is
        deleted locally anyway and the envelope says so. Other upstream
        failures leave the account untouched.

        Returns:
            HTTP status and the response envelope
        """
        if not principal.is_external_user or not principal.external_subject_id:
            raise UnauthorizedException("account information unavailable, check authorization")

        url = self.endpoints_for(headers.app_name).logoff_url
        forwarded = self.forward_headers(headers)

        try:
            async with asyncio.timeout(self.settings.upstream_timeout_seconds):
                async with self._client() as client:
                    response = await client.get(url, headers=forwarded)
        except (TimeoutError, httpx.TimeoutException):
            logger.warning(
                "upstream_timeout",
                url=url,
                account_id=principal.id,
                timeout=self.settings.upstream_timeout_seconds,
            )
            result = await self.accounts.unbind_device_and_delete_account(
                db, principal.external_subject_id, app_id=principal.app_id
            )
            if not result.success:
                return ResponseCode.NOT_FOUND, {
                    "code": ResponseCode.NOT_FOUND,
                    "message": result.reason or "account not found",
                }
            return ResponseCode.SUCCESS, {
                "code": ResponseCode.SUCCESS,
                "message": "local account deleted (upstream timed out)",
                "data": {"account_deleted": True, "local_only": True},
            }
        except httpx.HTTPError as e:
            logger.error("logoff_upstream_failed", url=url, error=str(e))
            raise UpstreamException(f"upstream request failed: {e!s}") from e

        payload = _json_or_empty(response)
        envelope = reshape_envelope(payload, response.status_code)
        account_deleted = False

        if response.is_success:
            result = await self.accounts.unbind_device_and_delete_account(
                db, principal.external_subject_id, app_id=principal.app_id
            )
            account_deleted = result.success
            if not result.success:
                logger.info("logoff_no_local_account", account_id=principal.id, reason=result.reason)

        envelope["data"] = {"account_deleted": account_deleted, "local_only": False}
        return _passthrough_status(response.status_code), envelope
