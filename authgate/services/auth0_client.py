"""Auth0 HTTP client."""

import secrets
from typing import Any
from urllib.parse import urlencode

import httpx
import structlog

from authgate.config import Settings
from authgate.core.exceptions import UpstreamException
from authgate.schemas.auth import Auth0UserInfo

logger = structlog.get_logger(__name__)


def normalize_domain(domain: str) -> str:
    """Strip scheme and trailing slashes from an Auth0 domain."""
    for prefix in ("https://", "http://"):
        if domain.startswith(prefix):
            domain = domain[len(prefix) :]
    return domain.rstrip("/")


class Auth0Client:
    """Client for the Auth0 authorization, token and userinfo endpoints."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        """Initialize client with settings and an optional transport."""
        self.settings = settings
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.auth0_timeout_seconds,
            transport=self.transport,
        )

    def build_authorize_url(self, state: str | None = None) -> str:
        """Build the Auth0 universal login URL."""
        params = {
            "response_type": "code",
            "client_id": self.settings.auth0_client_id,
            "redirect_uri": self.settings.auth0_redirect_uri,
            "scope": "openid profile email",
            "state": state or secrets.token_urlsafe(16),
        }
        domain = normalize_domain(self.settings.auth0_domain)
        return f"https://{domain}/authorize?{urlencode(params)}"

    async def exchange_code(self, code: str) -> dict[str, Any]:
        """
        Exchange an authorization code for tokens.

        Raises:
            UpstreamException: If Auth0 rejects the code or cannot be reached
        """
        domain = normalize_domain(self.settings.auth0_domain)
        payload = {
            "grant_type": "authorization_code",
            "client_id": self.settings.auth0_client_id,
            "client_secret": self.settings.auth0_client_secret,
            "code": code,
            "redirect_uri": self.settings.auth0_redirect_uri,
        }

        async with self._client() as client:
            try:
                response = await client.post(f"https://{domain}/oauth/token", json=payload)
            except httpx.HTTPError as e:
                logger.error("auth0_token_exchange_failed", error=str(e))
                raise UpstreamException(f"upstream auth failed: {e!s}", status_code=401) from e

        if not response.is_success:
            logger.warning(
                "auth0_token_exchange_rejected",
                status_code=response.status_code,
                body=response.text[:200],
            )
            raise UpstreamException("authorization code rejected", status_code=401)

        return response.json()

    async def get_userinfo(self, domain: str, access_token: str) -> Auth0UserInfo:
        """
        Fetch the profile behind an access token from a tenant's userinfo endpoint.

        Not retried: the client is expected to retry on failure.

        Raises:
            UpstreamException: If the token is rejected or Auth0 cannot be reached
        """
        url = f"https://{normalize_domain(domain)}/userinfo"

        async with self._client() as client:
            try:
                response = await client.get(
                    url, headers={"Authorization": f"Bearer {access_token}"}
                )
            except httpx.HTTPError as e:
                logger.error("auth0_userinfo_failed", domain=domain, error=str(e))
                raise UpstreamException(f"upstream auth failed: {e!s}", status_code=401) from e

        if not response.is_success:
            logger.info(
                "auth0_userinfo_rejected",
                domain=domain,
                status_code=response.status_code,
            )
            raise UpstreamException(
                f"upstream auth failed: {response.text[:200] or response.status_code}",
                status_code=401,
            )

        try:
            return Auth0UserInfo.model_validate(response.json())
        except ValueError as e:
            raise UpstreamException(
                "upstream auth failed: malformed userinfo response", status_code=401
            ) from e
