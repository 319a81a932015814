"""Time helpers shared by the updater, tracker and scheduler.

All datetimes inside the engine are timezone-aware UTC. Naive values,
whether passed in by a caller or read back from storage, are taken to be UTC.
"""

import math
from datetime import datetime, timezone
from typing import Optional

SECONDS_PER_DAY = 86400


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to a naive datetime; aware ones are converted to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def resolve_now(now: Optional[datetime] = None) -> datetime:
    """Event time for an operation: the given `now` in UTC, else the current time."""
    return as_utc(now) if now is not None else utcnow()


def days_between(earlier: datetime, now: datetime) -> int:
    """Whole days elapsed from `earlier` to `now` (floored, may be negative)."""
    delta = as_utc(now) - as_utc(earlier)
    return math.floor(delta.total_seconds() / SECONDS_PER_DAY)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def from_iso(value) -> Optional[datetime]:
    """Accept ISO strings or datetimes (as read back from a document store)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    # fromisoformat() only accepts a "Z" suffix from Python 3.11
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(value))
