"""Timestamp helpers shared by the store-backed components.

Timestamps are persisted as millisecond-precision ISO-8601 strings with a
``Z`` suffix so records stay readable by other clients of the same store.
"""

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def to_iso(value: datetime) -> str:
    """Serialize a datetime, e.g. ``2025-01-31T09:30:00.000Z``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str | None) -> datetime | None:
    """Parse a stored timestamp. Empty values parse to None."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def epoch_millis(value: datetime) -> int:
    """Milliseconds since the epoch, used as sorted-set scores."""
    return int(value.timestamp() * 1000)
