"""Shared pytest fixtures for the test suite."""

import logging
import sqlite3
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from climate.ingest.polling import reset_scheduler
from climate.lib.config import Settings, StatusCode
from climate.lib.config.testing import set_settings
from climate.lib.db import close_db
from climate.lib.reading import Reading

SQL_DIR = Path(__file__).parent.parent / "climate" / "lib" / "sql"


@pytest.fixture(autouse=True)
def configure_caplog(caplog):
    """Ensure caplog captures logs from the climate namespace."""
    caplog.set_level(logging.INFO, logger="climate")


@pytest.fixture(autouse=True)
def reset_settings():
    """Reset global settings after each test to avoid cross-test pollution."""
    yield
    set_settings(None)


@pytest.fixture(autouse=True)
def reset_process_scheduler():
    """Forget the process-wide scheduler between tests."""
    reset_scheduler()
    yield
    reset_scheduler()


@pytest.fixture(autouse=True)
def db_file(tmp_path) -> Path:
    """Use a temporary SQLite database for tests.

    This creates a fresh database with the full schema for each test,
    providing isolation while allowing real database operations.
    """
    path = tmp_path / "test.sqlite3"
    set_settings(Settings(db_path=str(path), mock_sensors=True))

    # Initialize the schema using sync sqlite3 (simpler for setup)
    conn = sqlite3.connect(str(path))
    conn.executescript((SQL_DIR / "init_reading_table.sql").read_text())
    conn.executescript((SQL_DIR / "idx_reading.sql").read_text())
    conn.close()

    return path


@pytest.fixture
async def db():
    """Close pooled connections opened by a test that hits the real database."""
    yield
    await close_db()


@pytest.fixture
def insert_rows(db_file) -> Callable[..., None]:
    """Insert (temperature, humidity, created_at) rows synchronously."""

    def _insert(*rows: tuple[float, float, str]) -> None:
        conn = sqlite3.connect(str(db_file))
        conn.executemany(
            "INSERT INTO reading (temperature, humidity, created_at) VALUES (?, ?, ?)",
            rows,
        )
        conn.commit()
        conn.close()

    return _insert


@pytest.fixture
def frozen_time() -> datetime:
    """Return a fixed naive UTC datetime for deterministic tests."""
    return datetime(2024, 3, 1, 10, 2, 37)


@pytest.fixture
def sample_reading(frozen_time) -> Reading:
    return Reading(
        temperature=21.5,
        humidity=48.0,
        created_at=frozen_time.replace(second=0),
    )


@pytest.fixture
def device_status() -> list[dict[str, object]]:
    """A Tuya status payload for a sensor reading 21.5°C and 48%."""
    return [
        {"code": StatusCode.TEMPERATURE.value, "value": 215},
        {"code": StatusCode.HUMIDITY.value, "value": 48},
        {"code": "battery_percentage", "value": 80},
    ]


@pytest.fixture
def mock_source(device_status):
    """Create a reading source that returns device_status."""
    source = AsyncMock()
    source.fetch_status = AsyncMock(return_value=device_status)
    return source
