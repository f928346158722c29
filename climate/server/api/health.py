"""Health check endpoint for monitoring service status."""

import asyncio
from datetime import UTC, datetime

import aiosqlite
from starlette.requests import Request
from starlette.responses import JSONResponse

from climate.ingest.polling import scheduler_running
from climate.lib.config import get_settings
from climate.lib.db import get_db, get_latest_reading
from climate.lib.exceptions import DatabaseError
from climate.logging import get_logger

logger = get_logger("server.api.health")

_DB_ERRORS = (DatabaseError, aiosqlite.Error, OSError)


async def _check_database() -> tuple[bool, str]:
    """Check if database is accessible."""
    try:
        async with get_db() as db:
            await db.fetchone("SELECT 1")
        return True, "ok"
    except _DB_ERRORS as e:
        logger.error("Database health check failed: %s", e)
        return False, str(e)


async def _check_ingestion() -> tuple[bool, str | None]:
    """Check if any reading has been stored."""
    try:
        latest = await get_latest_reading()
    except DatabaseError as e:
        logger.error("Ingestion health check failed: %s", e)
        return False, str(e)
    if latest is None:
        return False, "no data"
    return True, latest["created_at"]


async def health_check(request: Request) -> JSONResponse:
    """Return health status of the application and its dependencies."""
    (db_ok, db_status), (ingest_ok, last_reading) = await asyncio.gather(
        _check_database(),
        _check_ingestion(),
    )

    # An empty store is not unhealthy: the first tick may not have run yet
    is_healthy = db_ok

    return JSONResponse(
        {
            "status": "healthy" if is_healthy else "unhealthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "checks": {
                "database": {"ok": db_ok, "status": db_status},
                "ingestion": {"ok": ingest_ok, "last_reading": last_reading},
                "scheduler": {
                    "embedded": get_settings().polling.embedded,
                    "running": scheduler_running(),
                },
            },
        },
        status_code=200 if is_healthy else 503,
    )
