"""Logging configuration for the climate monitor.

Log lines are stamped in UTC so they can be matched against the stored
``created_at`` values, which are naive UTC minutes.
"""

import logging
import sys
import time

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s - %(message)s"

_configured = False


class UTCFormatter(logging.Formatter):
    """Formatter rendering ``asctime`` as UTC with a trailing Z."""

    converter = time.gmtime
    default_time_format = "%Y-%m-%d %H:%M:%S"
    default_msec_format = "%s.%03dZ"


def configure(level: int | str | None = None) -> None:
    """Attach a stderr handler to the ``climate`` and ``uvicorn`` loggers.

    Only the first call has an effect. Without a level, LOG_LEVEL from the
    settings is used.
    """
    global _configured
    if _configured:
        return

    if level is None:
        from climate.lib.config import get_settings

        level = get_settings().log_level

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(UTCFormatter(LOG_FORMAT))

    app_logger = logging.getLogger("climate")
    app_logger.setLevel(level)
    app_logger.addHandler(handler)

    uvicorn_logger = logging.getLogger("uvicorn")
    uvicorn_logger.handlers.clear()
    uvicorn_logger.addHandler(handler)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return the ``climate.<name>`` logger."""
    return logging.getLogger(f"climate.{name}")
