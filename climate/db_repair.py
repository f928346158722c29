"""Duplicate repair script for stores populated before the unique index.

Groups every reading by its minute, keeps the oldest row of each minute
and deletes the rest in one transaction. Timestamps are rewritten to the
minute so that the unique index on created_at can be created afterwards.

Stores created by this application never need it: the unique index makes
duplicates impossible.

Run manually: python -m climate.db_repair
"""

import asyncio
import sys
from pathlib import Path
from typing import Any

from climate.lib.config import get_settings
from climate.lib.db import Database, create_schema
from climate.lib.utils import floor_to_minute, parse_db_timestamp
from climate.logging import configure, get_logger

logger = get_logger("db_repair")


def find_duplicates(
    rows: list[dict[str, Any]],
) -> tuple[list[int], list[tuple[str, int]]]:
    """Split rows into ids to delete and (minute, id) pairs to normalize.

    Rows must be ordered oldest first; the first row of each minute wins.
    """
    seen: set[str] = set()
    duplicates: list[int] = []
    keep: list[tuple[str, int]] = []
    for row in rows:
        minute = floor_to_minute(parse_db_timestamp(row["created_at"]))
        key = minute.strftime("%Y-%m-%d %H:%M:%S")
        if key in seen:
            duplicates.append(row["id"])
        else:
            seen.add(key)
            keep.append((key, row["id"]))
    return duplicates, keep


async def repair() -> int:
    """Remove duplicate readings. Returns the number of deleted rows."""
    settings = get_settings()
    db_path = Path(settings.db_path)

    if not db_path.exists():
        logger.info("Database does not exist, skipping repair")
        return 0

    async with Database() as db:
        rows = await db.fetchall(
            "SELECT id, created_at FROM reading ORDER BY created_at ASC, id ASC"
        )
        logger.info("Total records before repair: %d", len(rows))

        duplicates, keep = find_duplicates(rows)
        logger.info("Found %d duplicate records", len(duplicates))

        async with db.transaction():
            if duplicates:
                await db.executemany(
                    "DELETE FROM reading WHERE id = ?",
                    [(reading_id,) for reading_id in duplicates],
                )
            await db.executemany(
                "UPDATE reading SET created_at = ? WHERE id = ?", keep
            )
        await create_schema(db)

        remaining = await db.fetchone("SELECT COUNT(*) AS count FROM reading")
        count = remaining["count"] if remaining else 0
        if count == len(keep):
            logger.info(
                "Repair complete: deleted %d records, %d remaining",
                len(duplicates),
                count,
            )
        else:
            logger.warning(
                "Remaining count %d does not match unique minutes %d",
                count,
                len(keep),
            )
    return len(duplicates)


def main() -> int:
    """Entry point for the repair script."""
    configure()
    try:
        asyncio.run(repair())
        return 0
    except Exception as e:
        logger.error("Repair failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
