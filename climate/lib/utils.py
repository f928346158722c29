"""Shared utility functions."""
import sqlite3
from datetime import UTC, datetime

# SQLite datetime format (space separator, not T)
_SQLITE_DATETIME_FMT = "%Y-%m-%d %H:%M:%S"


def utcnow() -> datetime:
    """Return current UTC time as a naive datetime.

    Uses datetime.now(UTC) internally for correctness, but returns a naive
    datetime for SQLite compatibility (which stores timestamps without timezone).
    """
    return datetime.now(UTC).replace(tzinfo=None)


def floor_to_minute(dt: datetime) -> datetime:
    """Round a timestamp down to the minute (seconds and microseconds zeroed)."""
    return dt.replace(second=0, microsecond=0)


def to_naive_utc(dt: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive input is assumed UTC."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(UTC).replace(tzinfo=None)


def parse_db_timestamp(value: str | datetime) -> datetime:
    """Parse a timestamp read back from SQLite."""
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _adapt_datetime(dt: datetime) -> str:
    """Adapt datetime to SQLite string format."""
    return dt.strftime(_SQLITE_DATETIME_FMT)


def register_sqlite_adapters() -> None:
    """Register sqlite3 adapters for datetime handling.

    Python 3.12+ deprecated the default datetime adapters, so we register
    them explicitly. Safe to call more than once.
    """
    sqlite3.register_adapter(datetime, _adapt_datetime)
