"""Timestamp utilities for UTC handling and ISO 8601 parsing."""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Example:
        >>> utc_now().tzinfo == timezone.utc
        True
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Return dt as an aware UTC datetime; naive values are treated as UTC."""
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def parse_iso_datetime(iso_string: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 string (as returned by the YouTube API) to UTC.

    Supports a trailing 'Z', fractional seconds and explicit offsets.

    Args:
        iso_string: ISO 8601 formatted datetime string

    Returns:
        Timezone-aware datetime in UTC, or None if the value is empty or invalid

    Example:
        >>> parse_iso_datetime("2024-05-01T12:30:00Z").hour
        12
    """
    if not iso_string or not iso_string.strip():
        return None

    normalized = iso_string.strip()
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(normalized))
    except ValueError:
        return None


def epoch_millis(dt: Optional[datetime] = None) -> int:
    """Milliseconds since the UNIX epoch for dt (default: now)."""
    moment = ensure_utc(dt) if dt is not None else utc_now()
    return int(moment.timestamp() * 1000)
