"""Time-bucketed aggregation of readings for the dashboard charts.

Turns the readings of a period into a fixed-length series with one bucket
per hour (day view), per day (month view) or per month (year view). Every
expected bucket is present; buckets without readings carry None so the
chart can leave a gap instead of drawing through missing data.
"""

from __future__ import annotations

import calendar
from collections.abc import Callable, Hashable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, TypedDict

from climate.lib.config import TimeRange
from climate.lib.reading import Reading

HOURS_PER_DAY = 24

MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


class Bucket(TypedDict):
    """One point of a chart series."""

    label: str
    temperature: float | None
    humidity: float | None


@dataclass(slots=True)
class _Accumulator:
    temperature: float = 0.0
    humidity: float = 0.0
    count: int = 0

    def add(self, reading: Reading) -> None:
        self.temperature += reading.temperature
        self.humidity += reading.humidity
        self.count += 1

    def bucket(self, label: str) -> Bucket:
        return {
            "label": label,
            "temperature": self.temperature / self.count,
            "humidity": self.humidity / self.count,
        }


def _empty_bucket(label: str) -> Bucket:
    return {"label": label, "temperature": None, "humidity": None}


def _hourly(readings: Iterable[Reading]) -> list[Bucket]:
    buckets = [_empty_bucket(f"{hour:02d}:00") for hour in range(HOURS_PER_DAY)]
    for reading in readings:
        hour = reading.created_at.hour
        # Last write wins when the query did not collapse to one per hour
        buckets[hour] = {
            "label": buckets[hour]["label"],
            "temperature": reading.temperature,
            "humidity": reading.humidity,
        }
    return buckets


def _averaged(
    readings: Iterable[Reading],
    keys: Sequence[Hashable],
    labels: Sequence[str],
    key_of: Callable[[Reading], Hashable],
) -> list[Bucket]:
    """Average readings per key; keys not in ``keys`` are ignored."""
    totals: dict[Hashable, _Accumulator] = {key: _Accumulator() for key in keys}
    for reading in readings:
        acc = totals.get(key_of(reading))
        if acc is not None:
            acc.add(reading)
    return [
        totals[key].bucket(label) if totals[key].count else _empty_bucket(label)
        for key, label in zip(keys, labels, strict=True)
    ]


def _daily(readings: Iterable[Reading], reference: datetime) -> list[Bucket]:
    year, month = reference.year, reference.month
    days = range(1, calendar.monthrange(year, month)[1] + 1)
    return _averaged(
        readings,
        keys=[(year, month, day) for day in days],
        labels=[f"{day:02d}" for day in days],
        key_of=lambda r: (r.created_at.year, r.created_at.month, r.created_at.day),
    )


def _monthly(readings: Iterable[Reading]) -> list[Bucket]:
    # Keyed on the month only: labels carry no year
    return _averaged(
        readings,
        keys=list(range(1, 13)),
        labels=MONTH_LABELS,
        key_of=lambda r: r.created_at.month,
    )


def aggregate(
    readings: Sequence[Reading],
    time_range: TimeRange,
    reference: datetime,
) -> list[Bucket]:
    """Bucket readings into the series for a chart view.

    Args:
        readings: Readings of the period, oldest first.
        time_range: The chart view, which decides the bucket size.
        reference: Date the period was selected by; decides the number of
            days in the month view.

    Returns:
        24 hourly buckets, one bucket per day of the reference month, or 12
        monthly buckets. An empty list when there are no readings at all.
    """
    if not readings:
        return []
    match time_range:
        case TimeRange.DAY:
            return _hourly(readings)
        case TimeRange.MONTH:
            return _daily(readings, reference)
        case TimeRange.YEAR:
            return _monthly(readings)
    raise ValueError(f"Unknown range: {time_range!r}")


def aggregate_rows(
    rows: Iterable[Mapping[str, Any]],
    time_range: TimeRange,
    reference: datetime,
) -> list[Bucket]:
    """Aggregate database rows, see aggregate()."""
    return aggregate([Reading.from_row(row) for row in rows], time_range, reference)
