"""Domain model for climate readings."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from climate.lib.config import StatusCode
from climate.lib.exceptions import MalformedReadingError
from climate.lib.utils import floor_to_minute, parse_db_timestamp

# The device reports temperature in tenths of a degree
TEMPERATURE_SCALE = 10


def _numeric_value(values: Mapping[Any, Any], code: StatusCode) -> float:
    value = values.get(code)
    if value is None:
        raise MalformedReadingError(code)
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise MalformedReadingError(code, f"is not a number: {value!r}")
    return float(value)


@dataclass(slots=True, frozen=True)
class Reading:
    """A temperature/humidity reading keyed by its minute."""

    temperature: float
    humidity: float
    created_at: datetime
    id: int | None = None

    @classmethod
    def from_status(
        cls,
        status: Iterable[Mapping[str, Any]],
        observed_at: datetime,
    ) -> Reading:
        """Build a reading from a device status payload.

        Args:
            status: Status items, each with a ``code`` and a ``value``.
            observed_at: When the status was fetched; floored to the minute.

        Raises:
            MalformedReadingError: If a required code is missing or not numeric.
        """
        values = {item.get("code"): item.get("value") for item in status}
        temperature = _numeric_value(values, StatusCode.TEMPERATURE)
        humidity = _numeric_value(values, StatusCode.HUMIDITY)
        return cls(
            temperature=temperature / TEMPERATURE_SCALE,
            humidity=humidity,
            created_at=floor_to_minute(observed_at),
        )

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Reading:
        """Build a reading from a database row."""
        return cls(
            id=row["id"],
            temperature=row["temperature"],
            humidity=row["humidity"],
            created_at=parse_db_timestamp(row["created_at"]),
        )

    def to_json(self) -> dict[str, Any]:
        """Serialize for the dashboard API."""
        return {
            "id": self.id,
            "temperature": self.temperature,
            "humidity": self.humidity,
            "createdAt": self.created_at.isoformat(),
        }
