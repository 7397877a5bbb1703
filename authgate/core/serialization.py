"""Response shaping for records returned by the auth endpoints.

Mobile clients expect no nulls and timestamps in one fixed offset, so
records are rewritten before they are serialized: ``None`` becomes ``""``,
datetimes and ISO-8601 strings held under timestamp keys are shifted to the
configured UTC offset.
"""

import re
from datetime import UTC, datetime, timedelta, timezone
from typing import Any

TIMESTAMP_KEYS = frozenset({"last_login"})

_ISO_DATETIME_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})?$"
)


def to_fixed_offset(value: datetime, offset_hours: int) -> str:
    """Render a datetime as ISO-8601 in a fixed UTC offset.

    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(timezone(timedelta(hours=offset_hours))).isoformat()


def _parse_iso(value: str) -> datetime | None:
    if not _ISO_DATETIME_RE.match(value):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def is_timestamp_key(key: Any) -> bool:
    """Whether a record field holds a timestamp, judged by its name."""
    return isinstance(key, str) and (key.endswith("_at") or key in TIMESTAMP_KEYS)


def sanitize_for_response(obj: Any, offset_hours: int = 8) -> Any:
    """
    Replace nulls with empty strings and normalize timestamps, recursively.

    ISO-8601 strings are only rewritten under timestamp keys, so free text
    such as a nickname is returned untouched.

    Args:
        obj: Mapping, sequence or scalar to shape
        offset_hours: Output UTC offset for timestamps

    Returns:
        Shaped copy of ``obj``
    """
    if obj is None:
        return ""
    if isinstance(obj, datetime):
        return to_fixed_offset(obj, offset_hours)
    if isinstance(obj, dict):
        shaped = {}
        for key, value in obj.items():
            parsed = None
            if isinstance(value, str) and is_timestamp_key(key):
                parsed = _parse_iso(value)
            shaped[key] = (
                to_fixed_offset(parsed, offset_hours)
                if parsed
                else sanitize_for_response(value, offset_hours)
            )
        return shaped
    if isinstance(obj, (list, tuple)):
        return [sanitize_for_response(item, offset_hours) for item in obj]
    return obj
