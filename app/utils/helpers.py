"""Shared helpers."""
from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC; convert aware ones to UTC.

    SQLite hands back naive values even for timezone-aware columns.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def tomorrow_at_noon(now: datetime | None = None) -> datetime:
    """Default schedule slot: tomorrow at 12:00 in the caller's local time."""
    now = now or datetime.now().astimezone()
    return (now + timedelta(days=1)).replace(hour=12, minute=0, second=0, microsecond=0)


def build_data_url(mime_type: str, payload_b64: str) -> str:
    return f"data:{mime_type};base64,{payload_b64}"
