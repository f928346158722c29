"""Enumerations for the climate monitor."""

from enum import StrEnum


class MeasureName(StrEnum):
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"


class StatusCode(StrEnum):
    """Device status codes reported by the Tuya cloud API."""

    TEMPERATURE = "va_temperature"
    HUMIDITY = "va_humidity"


class TimeRange(StrEnum):
    """Dashboard chart views.

    Each view maps to a bucket size: hours of a day, days of a month,
    months of a year.
    """

    DAY = "day"
    MONTH = "month"
    YEAR = "year"
