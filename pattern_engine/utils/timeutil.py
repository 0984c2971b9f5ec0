"""Time helpers.

All timestamps are stored as naive UTC datetimes so SQLite and
PostgreSQL round-trip them identically.
"""

from datetime import date, datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def week_start(d: date) -> date:
    """Monday of the ISO week containing ``d``."""
    return d - timedelta(days=d.weekday())


def days_between(earlier: date | datetime, now: datetime) -> float:
    """Elapsed days from ``earlier`` to ``now`` (dates count from midnight)."""
    if not isinstance(earlier, datetime):
        earlier = datetime(earlier.year, earlier.month, earlier.day)
    return (now - earlier).total_seconds() / 86400.0
