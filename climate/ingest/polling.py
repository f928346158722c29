"""Poll the device for the current reading and persist it in SQLite.

One cycle every POLL_INTERVAL_SEC (5 minutes by default): fetch the device
status once, build a minute-rounded reading, insert it. A failing cycle is
logged and skipped; the next tick runs regardless. There is no retry within
a cycle.

Only one scheduler runs per process. get_scheduler() hands out the
process-wide instance and start_scheduler() is safe to call repeatedly.
"""

import asyncio
from typing import override

from climate.lib.config import NOMINAL_BOUNDS, MeasureName, get_settings
from climate.lib.db import (
    InsertOutcome,
    close_db,
    create_schema,
    get_db,
    init_db,
    insert_reading,
)
from climate.lib.exceptions import (
    MalformedReadingError,
    PersistenceError,
    SourceUnavailableError,
)
from climate.lib.polling import PollingService
from climate.lib.reading import Reading
from climate.lib.utils import utcnow
from climate.logging import configure, get_logger
from climate.source import ReadingSource, create_source

logger = get_logger("ingest.polling")


class IngestionService(PollingService[Reading]):
    """Polling service that stores one device reading per cycle."""

    def __init__(
        self,
        source: ReadingSource,
        *,
        frequency_sec: int | None = None,
        timeout_sec: float | None = None,
        persistent_db: bool = True,
    ) -> None:
        super().__init__(name="ingest", frequency_sec=frequency_sec)
        self._source = source
        self._timeout_sec = (
            timeout_sec or get_settings().polling.source_timeout_sec
        )
        self._persistent_db = persistent_db
        self.last_outcome: InsertOutcome | None = None

    @override
    async def initialize(self) -> None:
        """Open the persistent connection (or use the pool) and create the schema."""
        if self._persistent_db:
            await init_db()
        else:
            async with get_db() as db:
                await create_schema(db)

    @override
    async def cleanup(self) -> None:
        if self._persistent_db:
            await close_db()

    @override
    async def poll(self) -> Reading | None:
        """Fetch the device status and build a reading from it.

        Raises:
            SourceUnavailableError: If the source fails or does not answer
                within the timeout.
        """
        try:
            async with asyncio.timeout(self._timeout_sec):
                status = await self._source.fetch_status()
        except TimeoutError as err:
            raise SourceUnavailableError(
                f"No answer from source within {self._timeout_sec}s"
            ) from err

        try:
            reading = Reading.from_status(status, utcnow())
        except MalformedReadingError as err:
            logger.warning("Skipping cycle, incomplete device status: %s", err)
            return None

        logger.info(
            "Read temperature=%.1f humidity=%s at %s",
            reading.temperature,
            reading.humidity,
            reading.created_at.isoformat(),
        )
        return reading

    @override
    async def audit(self, reading: Reading) -> bool:
        """Flag readings outside the nominal range; they are stored as-is."""
        for name in MeasureName:
            value = getattr(reading, name)
            bmin, bmax = NOMINAL_BOUNDS[name]
            if not bmin <= value <= bmax:
                logger.warning(
                    "%s reading outside nominal range %s-%s: %s",
                    name.capitalize(),
                    bmin,
                    bmax,
                    value,
                )
        return True

    @override
    async def persist(self, reading: Reading) -> None:
        """Insert the reading; a duplicate minute is a no-op."""
        self.last_outcome = await insert_reading(reading)
        if self.last_outcome is InsertOutcome.OK:
            logger.info("Saved reading for %s", reading.created_at.isoformat())

    @override
    def on_poll_error(self, error: Exception) -> None:
        """Log by failure kind; the next tick runs regardless."""
        if isinstance(error, SourceUnavailableError):
            logger.warning("Skipping cycle, source unavailable: %s", error)
        elif isinstance(error, PersistenceError):
            logger.error("Could not persist reading: %s", error)
        else:
            logger.error(
                "Unexpected error during ingestion cycle", exc_info=error
            )


# Process-wide scheduler, created on first use
_scheduler: IngestionService | None = None


def get_scheduler(source: ReadingSource | None = None) -> IngestionService:
    """Return the process-wide ingestion service, creating it once.

    Args:
        source: Reading source to use when the service does not exist yet.
            Ignored afterwards.
    """
    global _scheduler
    if _scheduler is None:
        _scheduler = IngestionService(
            source or create_source(),
            persistent_db=not get_settings().polling.embedded,
        )
    return _scheduler


def start_scheduler(source: ReadingSource | None = None) -> IngestionService:
    """Start the process-wide scheduler in the running event loop.

    Idempotent: calling it again while the scheduler runs does not create a
    second timer.
    """
    scheduler = get_scheduler(source)
    if scheduler.is_running:
        logger.info("Ingestion scheduler already running")
    else:
        scheduler.start()
    return scheduler


def scheduler_running() -> bool:
    """Whether the process-wide scheduler runs as a background task."""
    return _scheduler is not None and _scheduler.is_running


async def stop_scheduler() -> None:
    """Stop the process-wide scheduler if it runs."""
    if _scheduler is not None:
        await _scheduler.stop()


def reset_scheduler() -> None:
    """Forget the process-wide scheduler. Only meant for tests."""
    global _scheduler
    _scheduler = None


def main() -> None:
    """Main entry point for the standalone ingestion service."""
    configure()
    get_scheduler().run()


if __name__ == "__main__":
    main()
