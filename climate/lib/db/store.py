"""Write path for readings.

Inserts are unconditional: the unique index on ``created_at`` decides
whether a reading for that minute already exists. This closes the race
between two overlapping ingestion attempts that a read-then-write check
would leave open.
"""

from __future__ import annotations

import sqlite3

import aiosqlite

from climate.lib.db.connection import get_db, load_template
from climate.lib.db.types import InsertOutcome
from climate.lib.exceptions import DatabaseNotConnectedError, PersistenceError
from climate.lib.reading import Reading
from climate.logging import get_logger

logger = get_logger("lib.db.store")


def is_unique_violation(error: sqlite3.IntegrityError) -> bool:
    """Tell a unique constraint violation apart from other integrity errors."""
    if getattr(error, "sqlite_errorname", None) == "SQLITE_CONSTRAINT_UNIQUE":
        return True
    return "UNIQUE constraint failed" in str(error)


async def insert_reading(reading: Reading) -> InsertOutcome:
    """Persist a reading.

    Returns:
        InsertOutcome.OK when the row was written, InsertOutcome.DUPLICATE
        when a reading for the same minute already exists.

    Raises:
        PersistenceError: For any other database failure.
    """
    try:
        async with get_db() as db:
            await db.execute(
                load_template("insert_reading.sql"),
                (reading.temperature, reading.humidity, reading.created_at),
            )
    except sqlite3.IntegrityError as err:
        if is_unique_violation(err):
            logger.info(
                "Reading for %s already stored, skipping",
                reading.created_at.isoformat(),
            )
            return InsertOutcome.DUPLICATE
        raise PersistenceError(f"Could not store reading: {err}") from err
    except (aiosqlite.Error, OSError, DatabaseNotConnectedError) as err:
        raise PersistenceError(f"Could not store reading: {err}") from err
    return InsertOutcome.OK
