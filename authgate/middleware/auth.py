"""Bearer token authentication middleware."""

import re
from collections.abc import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from authgate.config import Settings
from authgate.core.exceptions import UnauthorizedException
from authgate.core.responses import ResponseCode, error_response
from authgate.core.security import decode_access_token

logger = structlog.get_logger(__name__)

PUBLIC_PATTERNS = (
    re.compile(r"^/assets/"),
    re.compile(r"^/public/"),
)


def build_whitelist(api_prefix: str) -> tuple[set[str], tuple[re.Pattern, ...]]:
    """
    Build the paths that skip authentication.

    Returns:
        Exact paths and compiled prefix patterns
    """
    exact = {
        "/",
        "/docs",
        "/redoc",
        "/metrics",
        "/.well-known/apple-app-site-association",
        f"{api_prefix}/doc",
        f"{api_prefix}/health",
        f"{api_prefix}/health/detailed",
        f"{api_prefix}/ping",
        f"{api_prefix}/auth/login",
        f"{api_prefix}/auth/auth0",
        f"{api_prefix}/auth/callback",
        f"{api_prefix}/auth/verify",
        f"{api_prefix}/proxy/find-subscribe",
        f"{api_prefix}/proxy/common",
    }
    patterns = PUBLIC_PATTERNS + (re.compile(f"^{re.escape(api_prefix)}/public/"),)
    return exact, patterns


def extract_bearer_token(request: Request) -> str | None:
    """Get the bearer token from the ``Auth`` or ``Authorization`` header.

    The first header that carries a Bearer credential wins.
    """
    for name in ("auth", "authorization"):
        scheme, _, token = request.headers.get(name, "").partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    return None


class AuthMiddleware(BaseHTTPMiddleware):
    """Verify the bearer token of every non-public request.

    Verified claims are stored on ``request.state.claims``; loading the
    record they name is left to the ``get_current_principal`` dependency.
    """

    def __init__(self, app: ASGIApp, settings: Settings):
        """Initialize middleware with settings."""
        super().__init__(app)
        self.settings = settings
        self.exact_paths, self.patterns = build_whitelist(settings.api_prefix)

    def is_public(self, path: str) -> bool:
        """Check whether a path skips authentication."""
        if path in self.exact_paths:
            return True
        return any(pattern.match(path) for pattern in self.patterns)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        """
        Reject requests without a valid token.

        Args:
            request: Request object
            call_next: Next middleware in chain

        Returns:
            Response object
        """
        if request.method == "OPTIONS" or self.is_public(request.url.path):
            return await call_next(request)

        token = extract_bearer_token(request)
        if not token:
            return error_response("no authorization", code=ResponseCode.UNAUTHORIZED)

        try:
            request.state.claims = decode_access_token(token, self.settings)
        except UnauthorizedException as e:
            logger.info("token_rejected", path=request.url.path, reason=e.message)
            return error_response(e.message, code=ResponseCode.UNAUTHORIZED)

        return await call_next(request)
