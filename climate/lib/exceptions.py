"""Custom exceptions for the climate monitor.

Provides a hierarchy of domain-specific exceptions so that the ingestion
loop and the HTTP layer can branch on the kind of failure instead of
inspecting driver error codes.
"""


class ClimateError(Exception):
    """Base exception for all application errors."""


class SourceError(ClimateError):
    """Base exception for reading source failures."""


class SourceUnavailableError(SourceError):
    """Raised when the reading source cannot be reached or refuses the call.

    Covers network errors, authentication failures, timeouts and responses
    that cannot be decoded.
    """


class MalformedReadingError(SourceError):
    """Raised when a required field is missing or unusable in the source response."""

    def __init__(
        self, code: str, reason: str = "missing from device status"
    ) -> None:
        super().__init__(f"Field {str(code)!r} {reason}")
        self.code = code


class DatabaseError(ClimateError):
    """Base exception for database-related errors."""


class DatabaseNotConnectedError(DatabaseError):
    """Raised when attempting database operations without a connection."""

    def __init__(self, message: str = "Database not connected") -> None:
        super().__init__(message)


class PersistenceError(DatabaseError):
    """Raised when a reading cannot be written for a reason other than a duplicate."""


class QueryError(DatabaseError):
    """Raised when the store cannot be read."""


class InvalidQueryError(ClimateError, ValueError):
    """Raised when paging or range parameters are invalid."""
