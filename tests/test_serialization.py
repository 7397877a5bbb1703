"""Tests for response shaping and token helpers."""

from datetime import UTC, datetime, timedelta

import pytest

from authgate.config import settings
from authgate.core.exceptions import UnauthorizedException
from authgate.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    parse_expires_in,
    verify_password,
)
from authgate.core.serialization import sanitize_for_response, to_fixed_offset


def test_sanitize_replaces_none_recursively() -> None:
    """Nulls become empty strings at any depth; other scalars are kept."""
    shaped = sanitize_for_response(
        {"name": None, "count": 0, "flag": False, "devices": [{"version": None}]}
    )

    assert shaped == {"name": "", "count": 0, "flag": False, "devices": [{"version": ""}]}


def test_sanitize_shifts_datetimes_to_fixed_offset() -> None:
    """Aware, naive and ISO-string timestamps are rendered at +08:00."""
    shaped = sanitize_for_response(
        {
            "aware": datetime(2024, 1, 1, 0, 0, tzinfo=UTC),
            "naive": datetime(2024, 1, 1, 0, 0),
            "created_at": "2024-01-01T00:00:00Z",
            "devices": [{"last_login": "2024-01-01 00:00:00"}],
            "plain": "not a date",
        }
    )

    assert shaped["aware"] == "2024-01-01T08:00:00+08:00"
    assert shaped["naive"] == "2024-01-01T08:00:00+08:00"
    assert shaped["created_at"] == "2024-01-01T08:00:00+08:00"
    assert shaped["devices"][0]["last_login"] == "2024-01-01T08:00:00+08:00"
    assert shaped["plain"] == "not a date"


def test_sanitize_leaves_timestamp_like_text_alone() -> None:
    """Free-text fields that happen to look like timestamps are not rewritten."""
    shaped = sanitize_for_response(
        {"nickname": "2024-01-01T00:00:00Z", "names": ["2024-01-01T00:00:00Z"]}
    )

    assert shaped == {"nickname": "2024-01-01T00:00:00Z", "names": ["2024-01-01T00:00:00Z"]}


def test_to_fixed_offset_other_offset() -> None:
    """The offset is configurable."""
    assert to_fixed_offset(datetime(2024, 1, 1, 12, tzinfo=UTC), -5) == "2024-01-01T07:00:00-05:00"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("24h", timedelta(hours=24)),
        ("30d", timedelta(days=30)),
        ("15m", timedelta(minutes=15)),
        ("45s", timedelta(seconds=45)),
        ("3600", timedelta(seconds=3600)),
    ],
)
def test_parse_expires_in(value: str, expected: timedelta) -> None:
    """Durations accept a unit suffix or plain seconds."""
    assert parse_expires_in(value) == expected


def test_parse_expires_in_rejects_garbage() -> None:
    """Unknown units are an error."""
    with pytest.raises(ValueError):
        parse_expires_in("1w")


def test_token_round_trip_and_tampering() -> None:
    """Tokens decode with their claims; a wrong secret is an invalid token."""
    token = create_access_token({"sub": "5", "role": "admin"}, settings)

    claims = decode_access_token(token, settings)
    assert claims["sub"] == "5"
    assert claims["type"] == "access"

    other = settings.model_copy(update={"jwt_secret": "another-secret"})
    with pytest.raises(UnauthorizedException, match="invalid token"):
        decode_access_token(token, other)


def test_token_without_subject_is_invalid() -> None:
    """A token must name a subject."""
    token = create_access_token({"username": "nobody"}, settings)

    with pytest.raises(UnauthorizedException, match="invalid token"):
        decode_access_token(token, settings)


def test_password_hashing() -> None:
    """Hashes verify only the original password; malformed hashes never match."""
    hashed = get_password_hash("secret123")

    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)
    assert not verify_password("secret123", "secret123")
