"""
Time and date helpers.

All timestamps stored in the history log are timezone-aware UTC and
serialised as ISO-8601 strings.  Naive datetimes read back from storage are
assumed to be UTC.
"""

from __future__ import annotations

from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to a naive datetime; convert an aware one to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso(value: datetime) -> str:
    """Serialise a datetime as an ISO-8601 UTC string."""
    return ensure_utc(value).isoformat()


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 string into an aware UTC datetime.

    Accepts a trailing ``Z`` as well as explicit offsets.

    Raises:
        ValueError: If ``value`` is not a valid ISO-8601 timestamp.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))


def format_day_month(value: date | datetime) -> str:
    """Return a short ``day/month`` chart label without zero padding (``"7/3"``)."""
    return f"{value.day}/{value.month}"
