"""Type definitions for database operations."""

from enum import StrEnum
from typing import Any, TypedDict

type SQLParams = tuple[Any, ...] | dict[str, Any]
"""SQL parameter types: positional tuple or named dict for query binding."""


class ReadingRow(TypedDict):
    """Reading row as returned by the database."""

    id: int
    temperature: float
    humidity: float
    created_at: str


class ReadingsPage(TypedDict):
    """One page of readings, newest first."""

    items: list[ReadingRow]
    total: int
    has_more: bool


class InsertOutcome(StrEnum):
    """Result of an insert attempt.

    A duplicate is a normal outcome, not an error: another reading already
    holds the same minute.
    """

    OK = "ok"
    DUPLICATE = "duplicate"
