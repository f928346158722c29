"""Database query functions."""

from __future__ import annotations

import calendar
from datetime import datetime, time
from typing import cast

import aiosqlite

from climate.lib.config import TimeRange
from climate.lib.db.connection import get_db, load_template
from climate.lib.db.types import ReadingRow, ReadingsPage
from climate.lib.exceptions import (
    DatabaseNotConnectedError,
    InvalidQueryError,
    QueryError,
)

_DB_ERRORS = (aiosqlite.Error, OSError, DatabaseNotConnectedError)

# sqlite3 cannot bind integers beyond a signed 64-bit value
_SQLITE_MAX_INT = 2**63 - 1

# Stored timestamps carry no seconds, so 23:59:59 closes a day
_END_OF_DAY = time(23, 59, 59)


def period_bounds(
    time_range: TimeRange, reference: datetime
) -> tuple[datetime, datetime]:
    """Return the inclusive [start, end] of the period containing reference.

    DAY covers the calendar day, MONTH the calendar month and YEAR the
    calendar year.
    """
    day = reference.date()
    match time_range:
        case TimeRange.DAY:
            first, last = day, day
        case TimeRange.MONTH:
            days_in_month = calendar.monthrange(day.year, day.month)[1]
            first = day.replace(day=1)
            last = day.replace(day=days_in_month)
        case TimeRange.YEAR:
            first = day.replace(month=1, day=1)
            last = day.replace(month=12, day=31)
        case _:
            raise InvalidQueryError(f"Unknown range: {time_range!r}")
    return datetime.combine(first, time.min), datetime.combine(last, _END_OF_DAY)


async def get_readings_page(page: int, limit: int) -> ReadingsPage:
    """Return one page of readings, newest first.

    Raises:
        InvalidQueryError: If page or limit is below 1, or the page lies
            beyond what SQLite can address. The store is not touched in
            that case.
        QueryError: If the store cannot be read.
    """
    if page < 1 or limit < 1:
        raise InvalidQueryError("Invalid pagination parameters")

    offset = (page - 1) * limit
    if limit > _SQLITE_MAX_INT or offset > _SQLITE_MAX_INT:
        raise InvalidQueryError("Page is out of range")

    try:
        async with get_db() as db:
            count = await db.fetchone(load_template("readings_count.sql"))
            rows = await db.fetchall(
                load_template("readings_page.sql"), (limit, offset)
            )
    except _DB_ERRORS as err:
        raise QueryError(f"Could not list readings: {err}") from err

    total = count["total"] if count else 0
    return {
        "items": cast(list[ReadingRow], rows),
        "total": total,
        "has_more": offset + len(rows) < total,
    }


async def get_readings_in_range(
    start: datetime, end: datetime, time_range: TimeRange
) -> list[ReadingRow]:
    """Return readings with start <= created_at <= end, oldest first.

    The day view keeps only the latest reading of each hour; month and
    year views return every reading so that they can be averaged.

    Raises:
        InvalidQueryError: If end is before start.
        QueryError: If the store cannot be read.
    """
    if end < start:
        raise InvalidQueryError("Range end is before its start")

    template = (
        "readings_hourly_latest.sql"
        if time_range == TimeRange.DAY
        else "readings_in_range.sql"
    )
    try:
        async with get_db() as db:
            rows = await db.fetchall(load_template(template), (start, end))
    except _DB_ERRORS as err:
        raise QueryError(f"Could not load readings: {err}") from err
    return cast(list[ReadingRow], rows)


async def get_latest_reading() -> ReadingRow | None:
    """Return the most recent reading, if any."""
    try:
        async with get_db() as db:
            row = await db.fetchone(load_template("reading_latest.sql"))
    except _DB_ERRORS as err:
        raise QueryError(f"Could not load latest reading: {err}") from err
    return cast(ReadingRow | None, row)

