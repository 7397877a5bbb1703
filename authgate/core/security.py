"""Security utilities for JWT and password handling."""

import re
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from authgate.config import Settings
from authgate.core.exceptions import UnauthorizedException

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a bcrypt hash.

    Malformed or unknown hashes never match.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def parse_expires_in(value: str) -> timedelta:
    """
    Parse a duration such as ``24h``, ``30d``, ``15m`` or ``3600``.

    Args:
        value: Duration string, a bare number means seconds

    Returns:
        Parsed duration

    Raises:
        ValueError: If the value is not a recognised duration
    """
    match = _DURATION_RE.match(value)
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


def create_access_token(
    data: dict[str, Any],
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Payload data to encode
        settings: Application settings holding the signing secret
        expires_delta: Optional expiration time delta

    Returns:
        Encoded JWT token
    """
    to_encode = data.copy()

    if expires_delta is None:
        expires_delta = parse_expires_in(settings.jwt_expires_in)

    now = datetime.now(UTC)
    to_encode.update(
        {
            "exp": now + expires_delta,
            "iat": now,
            "type": "access",
        }
    )

    return jwt.encode(
        to_encode,
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


def decode_access_token(token: str, settings: Settings) -> dict[str, Any]:
    """
    Decode and validate a JWT access token.

    Args:
        token: JWT token to decode
        settings: Application settings holding the signing secret

    Returns:
        Decoded payload

    Raises:
        UnauthorizedException: "token expired" or "invalid token"
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except ExpiredSignatureError:
        raise UnauthorizedException("token expired")
    except JWTError:
        raise UnauthorizedException("invalid token")

    # Verify token type
    if payload.get("type") != "access" or not payload.get("sub"):
        raise UnauthorizedException("invalid token")

    return payload
