"""Mock reading source for development.

Provides a mock implementation of the reading source that generates
realistic device status without cloud credentials. Used by the ingestion
service when MOCK_SENSORS=1 is set.
"""

import random

from climate.lib.config import StatusCode
from climate.source import StatusItem


def random_walk(
    current: float, drift: float, min_val: float, max_val: float
) -> float:
    """Generate next value using random walk with bounds."""
    change = random.gauss(0, drift)
    new_val = current + change
    return max(min_val, min(max_val, new_val))


class MockReadingSource:
    """Mock device that reports a slowly drifting temperature and humidity.

    - Temperature: drift=0.15, bounds 15-30 (reported in tenths)
    - Humidity: drift=0.3, bounds 30-70 (reported as an integer percentage)
    """

    def __init__(self) -> None:
        self._temperature = random.uniform(20.0, 23.0)
        self._humidity = random.uniform(45.0, 55.0)

    async def fetch_status(self) -> list[StatusItem]:
        self._temperature = random_walk(
            self._temperature, drift=0.15, min_val=15.0, max_val=30.0
        )
        self._humidity = random_walk(
            self._humidity, drift=0.3, min_val=30.0, max_val=70.0
        )
        return [
            {"code": StatusCode.TEMPERATURE, "value": round(self._temperature * 10)},
            {"code": StatusCode.HUMIDITY, "value": round(self._humidity)},
            {"code": "battery_percentage", "value": 100},
        ]
