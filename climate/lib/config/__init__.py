"""Centralized configuration for the climate monitor.

This package provides:
- Enums for measures, device status codes and chart views
- Pydantic settings models for configuration
"""

from .enums import MeasureName, StatusCode, TimeRange
from .settings import (
    NOMINAL_BOUNDS,
    ConfigurationError,
    PaginationSettings,
    PollingSettings,
    Settings,
    TuyaSettings,
    get_settings,
)

__all__ = [
    # Enums
    "MeasureName",
    "StatusCode",
    "TimeRange",
    # Settings models
    "PaginationSettings",
    "PollingSettings",
    "Settings",
    "TuyaSettings",
    # Constants
    "NOMINAL_BOUNDS",
    # Errors
    "ConfigurationError",
    # Functions
    "get_settings",
]
