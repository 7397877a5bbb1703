"""Uniform response envelope builders.

Every endpoint answers with ``{code, data, message}`` on success and
``{code, message}`` on failure. Handlers call these builders directly.
"""

from enum import IntEnum
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


class ResponseCode(IntEnum):
    """Envelope codes."""

    SUCCESS = 200
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    INTERNAL_ERROR = 500


def envelope_code(status_code: int) -> ResponseCode:
    """Map an arbitrary HTTP status onto the closest envelope code."""
    try:
        return ResponseCode(status_code)
    except ValueError:
        if 200 <= status_code < 300:
            return ResponseCode.SUCCESS
        if 400 <= status_code < 500:
            return ResponseCode.BAD_REQUEST
        return ResponseCode.INTERNAL_ERROR


def success_response(
    data: Any = None,
    message: str = "success",
    code: int = ResponseCode.SUCCESS,
    status_code: int | None = None,
) -> JSONResponse:
    """Build a success envelope."""
    return JSONResponse(
        status_code=status_code or int(code),
        content={"code": int(code), "data": jsonable_encoder(data), "message": message},
    )


def error_response(
    message: str,
    code: int = ResponseCode.INTERNAL_ERROR,
    status_code: int | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build an error envelope.

    ``status_code`` defaults to ``code``; pass it explicitly only for endpoints
    that keep the transport status at 200 for client compatibility.
    """
    return JSONResponse(
        status_code=status_code or int(code),
        content={"code": int(code), "message": message},
        headers=headers,
    )
