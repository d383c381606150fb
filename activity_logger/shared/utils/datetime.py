"""UTC helpers for activity log timestamps.

Rows are stamped in Python (not by a server default) so every backend stores
the same timezone-aware value; some drivers hand back naive datetimes on read,
which ensure_utc normalizes at the repository boundary.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Return dt as UTC-aware.

    Naive values are assumed to already be UTC (SQLite drops tzinfo);
    aware values are converted. None passes through.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
