#!/usr/bin/env python3
"""Seed the database with dummy readings for development."""

import argparse
import asyncio
import random
from datetime import datetime, timedelta

from climate.lib.db import close_db, get_db, init_db
from climate.lib.mock import random_walk
from climate.lib.utils import floor_to_minute, utcnow


def generate_readings(
    num_records: int, interval: timedelta
) -> list[tuple[float, float, datetime]]:
    """Generate realistic readings using random walk, oldest first."""
    now = floor_to_minute(utcnow())
    data = []

    temperature = random.uniform(20.0, 23.0)
    humidity = random.uniform(45.0, 55.0)

    for i in range(num_records):
        created_at = now - (interval * (num_records - 1 - i))
        temperature = random_walk(
            temperature, drift=0.15, min_val=15.0, max_val=30.0
        )
        humidity = random_walk(humidity, drift=0.3, min_val=30.0, max_val=70.0)
        data.append((round(temperature, 1), round(humidity), created_at))

    return data


async def seed_data(days: int = 7, clear: bool = False) -> None:
    """Insert dummy readings for the past N days, one every 5 minutes."""
    await init_db()

    interval = timedelta(minutes=5)
    num_records = (days * 24 * 60) // 5

    print(f"Generating {num_records} readings...")
    readings = generate_readings(num_records, interval)

    async with get_db() as db, db.transaction():
        if clear:
            print("Clearing existing data...")
            await db.execute("DELETE FROM reading")

        print("Inserting readings...")
        await db.executemany(
            "INSERT OR IGNORE INTO reading (temperature, humidity, created_at) "
            "VALUES (?, ?, ?)",
            readings,
        )

    await close_db()
    print("Done!")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Seed database with dummy readings"
    )
    parser.add_argument(
        "-days",
        type=int,
        default=7,
        help="Days of data to generate (default: 7, use 365 for the year view)",
    )
    parser.add_argument(
        "-clear",
        action="store_true",
        help="Clear existing data before seeding",
    )
    args = parser.parse_args()

    asyncio.run(seed_data(days=args.days, clear=args.clear))
