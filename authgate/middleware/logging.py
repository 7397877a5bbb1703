"""Logging middleware and configuration."""

import json
import logging
import sys
import time
from collections.abc import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from authgate.config import Settings, settings

MASKED_HEADERS = {"auth", "authorization"}
MAX_LOGGED_BODY = 1000


def configure_logging(app_settings: Settings = settings) -> None:
    """Configure structured logging."""
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if app_settings.log_format == "json":
        processors = shared_processors + [
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure standard logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, app_settings.log_level.upper()),
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        """
        Log request and response details.

        Args:
            request: Request object
            call_next: Next middleware in chain

        Returns:
            Response object
        """
        logger = structlog.get_logger()

        # Start timer
        start_time = time.time()

        # Log request
        logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else None,
        )

        # Process request
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
                duration=time.time() - start_time,
            )
            raise

        duration = time.time() - start_time

        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=duration,
        )

        response.headers["X-Process-Time"] = str(duration)

        return response


def mask_headers(headers: dict[str, str]) -> dict[str, str]:
    """Mask credential headers down to their first 10 characters."""
    return {
        name: f"{value[:10]}..." if name.lower() in MASKED_HEADERS and value else value
        for name, value in headers.items()
    }


def path_matches(path: str, patterns: list[str]) -> bool:
    """Match a path against ``*``, exact and ``prefix/*`` patterns."""
    for pattern in patterns:
        if pattern == "*" or pattern == path:
            return True
        if pattern.endswith("/*") and path.startswith(pattern[:-1]):
            return True
    return False


class RequestMonitorMiddleware(BaseHTTPMiddleware):
    """Log request headers and bodies for debugging client integrations."""

    def __init__(self, app: ASGIApp, settings: Settings):
        """Initialize middleware with settings."""
        super().__init__(app)
        self.settings = settings

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        """Log the request when monitoring is enabled for its path."""
        if not self.settings.request_monitor_enabled or not path_matches(
            request.url.path, self.settings.request_monitor_path_patterns
        ):
            return await call_next(request)

        logger = structlog.get_logger("request_monitor")
        fields: dict = {
            "method": request.method,
            "path": request.url.path,
            "query": str(request.query_params),
            "headers": mask_headers(dict(request.headers)),
        }

        if self.settings.request_monitor_log_body and request.method in ("POST", "PUT", "PATCH"):
            raw = (await request.body()).decode("utf-8", errors="replace")
            fields["body"] = raw[:MAX_LOGGED_BODY]
            if self.settings.request_monitor_parse_json and raw:
                try:
                    fields["json"] = json.loads(raw)
                except ValueError:
                    fields["json_error"] = "body is not valid JSON"

        logger.info("request_monitored", **fields)
        return await call_next(request)
