"""Reading sources: where device status comes from.

The ingestion service only depends on the ReadingSource protocol. The Tuya
cloud client is used in production, the mock source when MOCK_SENSORS=1.
"""

from typing import Any, Protocol, TypedDict


class StatusItem(TypedDict):
    """One data point of a device status, e.g. {"code": "va_humidity", "value": 48}."""

    code: str
    value: Any


class ReadingSource(Protocol):
    """Protocol for anything that can report the current device status."""

    async def fetch_status(self) -> list[StatusItem]:
        """Return the current status items.

        Raises:
            SourceUnavailableError: If the status cannot be fetched.
        """
        ...


def create_source() -> ReadingSource:
    """Create the reading source based on configuration."""
    from climate.lib.config import get_settings
    from climate.logging import get_logger

    if get_settings().mock_sensors:
        from climate.lib.mock import MockReadingSource

        get_logger("source").info("Using mock reading source")
        return MockReadingSource()

    from climate.source.tuya import TuyaCloudSource

    return TuyaCloudSource()


__all__ = ["ReadingSource", "StatusItem", "create_source"]
