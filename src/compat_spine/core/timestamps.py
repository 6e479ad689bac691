"""
UTC timestamp utilities (stdlib-only).

Snapshots are keyed by ``(name, observed_at)``, so observation times must
round-trip through storage exactly and sort correctly as text.

Manifesto:
    - **utc_now():** Timezone-aware UTC datetime
    - **to_storage() / from_storage():** Fixed-width text that sorts by time
    - **to_iso8601():** Display form for logs and escalations

Tags:
    timestamps, utc, datetime, compat-spine, stdlib-only, serialization

STDLIB ONLY - NO PYDANTIC.
"""

from datetime import UTC, datetime

# Always emits microseconds, unlike datetime.isoformat()
_STORAGE_FORMAT = "%Y-%m-%dT%H:%M:%S.%f+00:00"


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """Return *dt* as an aware UTC datetime (naive values are taken as UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_storage(dt: datetime) -> str:
    """Convert datetime to fixed-width, lexically sortable UTC text."""
    return ensure_utc(dt).strftime(_STORAGE_FORMAT)


def from_storage(s: str) -> datetime:
    """Parse text written by :func:`to_storage`."""
    return ensure_utc(datetime.fromisoformat(s))


def to_iso8601(dt: datetime | None) -> str | None:
    """Convert datetime to ISO 8601 string."""
    if dt is None:
        return None
    return dt.isoformat()
