"""
Time Keying

Derives the UTC hour bucket (``YYYYMMDDHH``) that keys the hourly word,
and the countdown until the next bucket starts.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

BUCKET_SPAN_MS = 60 * 60 * 1000
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def _as_utc(instant: Optional[datetime]) -> datetime:
    # Naive datetimes are taken to already be UTC
    if instant is None:
        return datetime.now(timezone.utc)
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def bucket_id(instant: Optional[datetime] = None) -> str:
    """
    Fixed-width UTC hour key for ``instant`` (defaults to now).

    Example:
        >>> bucket_id(datetime(2024, 2, 29, 12, tzinfo=timezone.utc))
        '2024022912'
    """
    utc = _as_utc(instant)
    return f"{utc.year:04d}{utc.month:02d}{utc.day:02d}{utc.hour:02d}"


def milliseconds_until_next_bucket(instant: Optional[datetime] = None) -> int:
    """
    Milliseconds until the bucket changes.

    Exactly on an hour boundary this is the full span (3 600 000), one
    millisecond before a boundary it is 1. Never zero.
    """
    elapsed_ms = (_as_utc(instant) - _EPOCH) // _ONE_MS
    return BUCKET_SPAN_MS - (elapsed_ms % BUCKET_SPAN_MS)


def same_bucket(a: datetime, b: datetime) -> bool:
    """True when both instants fall in the same UTC hour."""
    return bucket_id(a) == bucket_id(b)


def format_time_remaining(milliseconds: int) -> str:
    """Format a countdown as ``MM:SS``."""
    total_seconds = max(milliseconds, 0) // 1000
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


def bucket_start(hour_id: str) -> datetime:
    """Inverse of :func:`bucket_id`: the UTC instant a bucket begins."""
    if len(hour_id) != 10 or not hour_id.isdigit():
        raise ValueError(f"hour id must be 10 digits YYYYMMDDHH, got: {hour_id!r}")
    return datetime.strptime(hour_id, "%Y%m%d%H").replace(tzinfo=timezone.utc)
