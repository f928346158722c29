"""Tests for the read path: paging, range queries and period bounds."""

import sqlite3
from contextlib import asynccontextmanager
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from climate.lib.config import TimeRange
from climate.lib.db import (
    get_latest_reading,
    get_readings_in_range,
    get_readings_page,
    period_bounds,
)
from climate.lib.exceptions import InvalidQueryError, QueryError


def _minutes(count: int, hour: int = 10) -> list[tuple[float, float, str]]:
    return [
        (20.0 + i / 10, 40.0 + i, f"2024-03-01 {hour:02d}:{i:02d}:00")
        for i in range(count)
    ]


class TestPeriodBounds:
    def test_day(self):
        start, end = period_bounds(TimeRange.DAY, datetime(2024, 3, 1, 15, 45))

        assert start == datetime(2024, 3, 1, 0, 0, 0)
        assert end == datetime(2024, 3, 1, 23, 59, 59)

    def test_month_in_leap_february(self):
        start, end = period_bounds(TimeRange.MONTH, datetime(2024, 2, 10))

        assert start == datetime(2024, 2, 1)
        assert end == datetime(2024, 2, 29, 23, 59, 59)

    def test_year(self):
        start, end = period_bounds(TimeRange.YEAR, datetime(2023, 7, 4))

        assert start == datetime(2023, 1, 1)
        assert end == datetime(2023, 12, 31, 23, 59, 59)


class TestGetReadingsPage:
    async def test_newest_first(self, db, insert_rows):
        insert_rows(*_minutes(5))

        page = await get_readings_page(1, 3)

        assert [row["created_at"] for row in page["items"]] == [
            "2024-03-01 10:04:00",
            "2024-03-01 10:03:00",
            "2024-03-01 10:02:00",
        ]
        assert page["total"] == 5
        assert page["has_more"] is True

    async def test_last_page(self, db, insert_rows):
        insert_rows(*_minutes(5))

        page = await get_readings_page(2, 3)

        assert len(page["items"]) == 2
        assert page["has_more"] is False

    async def test_page_past_end_is_empty(self, db, insert_rows):
        insert_rows(*_minutes(2))

        page = await get_readings_page(5, 10)

        assert page["items"] == []
        assert page["total"] == 2
        assert page["has_more"] is False

    @pytest.mark.parametrize("limit", [1, 2, 3, 7, 20])
    async def test_pages_are_disjoint_and_cover_everything(
        self, db, insert_rows, limit
    ):
        insert_rows(*_minutes(7))

        seen: list[str] = []
        page_number = 1
        while True:
            page = await get_readings_page(page_number, limit)
            seen.extend(row["created_at"] for row in page["items"])
            if not page["has_more"]:
                break
            page_number += 1

        assert len(seen) == len(set(seen)) == 7
        assert seen == sorted(seen, reverse=True)

    @pytest.mark.parametrize(("page", "limit"), [(0, 10), (1, 0), (-1, 5)])
    async def test_invalid_parameters_do_not_touch_store(self, page, limit):
        mock_get_db = MagicMock()

        with patch("climate.lib.db.queries.get_db", mock_get_db):
            with pytest.raises(InvalidQueryError):
                await get_readings_page(page, limit)

        mock_get_db.assert_not_called()

    @pytest.mark.parametrize(
        ("page", "limit"), [(10**20, 120), (1, 10**20), (2**62, 4)]
    )
    async def test_page_beyond_sqlite_integers_is_invalid(self, page, limit):
        mock_get_db = MagicMock()

        with patch("climate.lib.db.queries.get_db", mock_get_db):
            with pytest.raises(InvalidQueryError, match="out of range"):
                await get_readings_page(page, limit)

        mock_get_db.assert_not_called()

    async def test_largest_request_page_reads_as_empty(self, db, insert_rows):
        insert_rows(*_minutes(2))

        page = await get_readings_page(2**31 - 1, 2**31 - 1)

        assert page["items"] == []
        assert page["total"] == 2
        assert page["has_more"] is False

    async def test_store_failure_raises_query_error(self):
        mock_db = AsyncMock()
        mock_db.fetchone.side_effect = sqlite3.OperationalError("disk I/O error")

        @asynccontextmanager
        async def mock_get_db():
            yield mock_db

        with patch("climate.lib.db.queries.get_db", mock_get_db):
            with pytest.raises(QueryError):
                await get_readings_page(1, 10)


class TestGetReadingsInRange:
    async def test_day_keeps_latest_reading_per_hour(self, db, insert_rows):
        insert_rows(
            (20.0, 40.0, "2024-03-01 09:05:00"),
            (21.0, 41.0, "2024-03-01 09:55:00"),
            (22.0, 42.0, "2024-03-01 13:00:00"),
            (23.0, 43.0, "2024-03-01 13:30:00"),
            (24.0, 44.0, "2024-03-01 13:10:00"),
        )
        start, end = period_bounds(TimeRange.DAY, datetime(2024, 3, 1))

        rows = await get_readings_in_range(start, end, TimeRange.DAY)

        assert [(r["temperature"], r["created_at"]) for r in rows] == [
            (21.0, "2024-03-01 09:55:00"),
            (23.0, "2024-03-01 13:30:00"),
        ]

    async def test_day_excludes_other_days(self, db, insert_rows):
        insert_rows(
            (20.0, 40.0, "2024-02-29 23:59:00"),
            (21.0, 41.0, "2024-03-01 00:00:00"),
            (22.0, 42.0, "2024-03-01 23:59:00"),
            (23.0, 43.0, "2024-03-02 00:00:00"),
        )
        start, end = period_bounds(TimeRange.DAY, datetime(2024, 3, 1))

        rows = await get_readings_in_range(start, end, TimeRange.DAY)

        assert [r["temperature"] for r in rows] == [21.0, 22.0]

    async def test_month_returns_all_readings_oldest_first(self, db, insert_rows):
        insert_rows(
            (22.0, 42.0, "2024-03-02 13:30:00"),
            (20.0, 40.0, "2024-03-02 13:05:00"),
            (21.0, 41.0, "2024-03-01 08:00:00"),
            (25.0, 45.0, "2024-04-01 00:00:00"),
        )
        start, end = period_bounds(TimeRange.MONTH, datetime(2024, 3, 15))

        rows = await get_readings_in_range(start, end, TimeRange.MONTH)

        assert [r["temperature"] for r in rows] == [21.0, 20.0, 22.0]

    async def test_year_returns_all_readings(self, db, insert_rows):
        insert_rows(*_minutes(4), (30.0, 50.0, "2024-11-20 12:00:00"))
        start, end = period_bounds(TimeRange.YEAR, datetime(2024, 6, 1))

        rows = await get_readings_in_range(start, end, TimeRange.YEAR)

        assert len(rows) == 5

    async def test_end_before_start_is_invalid(self):
        with pytest.raises(InvalidQueryError):
            await get_readings_in_range(
                datetime(2024, 3, 2), datetime(2024, 3, 1), TimeRange.DAY
            )


class TestGetLatestReading:
    async def test_returns_newest(self, db, insert_rows):
        insert_rows(*_minutes(3))

        latest = await get_latest_reading()

        assert latest is not None
        assert latest["created_at"] == "2024-03-01 10:02:00"

    async def test_empty_store(self, db):
        assert await get_latest_reading() is None
