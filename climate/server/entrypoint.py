"""Application factory for the web server."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from starlette.applications import Starlette
from starlette.routing import Route

from climate.ingest.polling import start_scheduler, stop_scheduler
from climate.lib.config import get_settings
from climate.lib.db import close_db, create_schema, get_db
from climate.logging import configure, get_logger

from .api.health import health_check
from .api.readings import get_graph, get_readings

_logger = get_logger("server.entrypoint")


@asynccontextmanager
async def lifespan(app: Starlette) -> AsyncIterator[None]:
    """Application lifespan manager for startup/shutdown tasks."""
    async with get_db() as db:
        await create_schema(db)

    embedded = get_settings().polling.embedded
    if embedded:
        start_scheduler()
        _logger.info("Embedded ingestion scheduler started")

    try:
        yield
    finally:
        if embedded:
            await stop_scheduler()
            _logger.info("Embedded ingestion scheduler stopped")
        await close_db()


def create_app() -> Starlette:
    """Create and configure the Starlette application.

    Database connections are taken from the pool per request via get_db().
    With EMBED_SCHEDULER=1 the ingestion scheduler runs inside the server
    process; otherwise run it separately with ``python -m climate.ingest``.

    Returns:
        Configured Starlette application instance.
    """
    configure()

    routes = [
        Route("/health", health_check),
        Route("/api/readings", get_readings),
        Route("/api/readings/graph", get_graph),
    ]

    return Starlette(routes=routes, lifespan=lifespan)
