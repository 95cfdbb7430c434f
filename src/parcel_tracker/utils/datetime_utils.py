"""Datetime utilities for timezone-aware UTC timestamps.

Registry records carry timestamps as integer Unix seconds. Callers may
supply their own clock value; otherwise the current UTC time is used.

Usage:
    from parcel_tracker.utils.datetime_utils import resolve_timestamp

    now = resolve_timestamp(now)
"""

from datetime import datetime, timezone
from typing import Optional

from .constants import MAX_TIMESTAMP


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def utc_timestamp() -> int:
    """Return current UTC time as integer Unix seconds."""
    return int(utc_now().timestamp())


def resolve_timestamp(now: Optional[int] = None) -> int:
    """
    Resolve the timestamp for an operation.

    Args:
        now: Caller-supplied Unix seconds, or None to use the current time

    Returns:
        Unix seconds as an int

    Raises:
        ValueError: If now is negative or past MAX_TIMESTAMP
    """
    if now is None:
        return utc_timestamp()
    now = int(now)
    if now < 0:
        raise ValueError(f"Timestamp must be non-negative, got {now}")
    if now > MAX_TIMESTAMP:
        raise ValueError(f"Timestamp must be at most {MAX_TIMESTAMP}, got {now}")
    return now


def to_iso(timestamp: Optional[int]) -> Optional[str]:
    """Format Unix seconds as an ISO-8601 UTC string (None passes through)."""
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()
