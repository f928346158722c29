"""Query parameter validation for the API endpoints."""

from datetime import datetime
from typing import Any, Self

from pydantic import BaseModel, Field, ValidationError, field_validator

from climate.lib.config import TimeRange, get_settings
from climate.lib.utils import to_naive_utc, utcnow


class InvalidParameter(Exception):
    """Raised when a query parameter is invalid."""


def _first_error(err: ValidationError) -> str:
    error = err.errors()[0]
    field = ".".join(str(part) for part in error["loc"])
    return f"{field}: {error['msg']}" if field else error["msg"]


# Largest page or limit accepted from a request
MAX_PAGE_VALUE = 2**31 - 1


class PageQuery(BaseModel):
    """Validated paging parameters."""

    page: int = Field(default=1, ge=1, le=MAX_PAGE_VALUE)
    limit: int = Field(default=120, ge=1, le=MAX_PAGE_VALUE)

    @classmethod
    def from_params(cls, params: Any) -> Self:
        """Build from request query parameters.

        Raises:
            InvalidParameter: If page or limit is not an integer >= 1.
        """
        data: dict[str, Any] = {
            "limit": params.get("limit") or get_settings().pagination.default_limit,
        }
        if params.get("page"):
            data["page"] = params.get("page")
        try:
            return cls.model_validate(data)
        except ValidationError as err:
            raise InvalidParameter(
                f"Invalid pagination parameters ({_first_error(err)})"
            ) from None


class GraphQuery(BaseModel):
    """Validated chart parameters: a view and the date selecting the period."""

    range: TimeRange = TimeRange.DAY
    date: datetime = Field(default_factory=utcnow)

    @field_validator("date")
    @classmethod
    def _normalize_date(cls, v: datetime) -> datetime:
        return to_naive_utc(v)

    @classmethod
    def from_params(cls, params: Any) -> Self:
        """Build from request query parameters.

        Raises:
            InvalidParameter: If range is unknown or date is not ISO 8601.
        """
        data = {
            key: params.get(key)
            for key in ("range", "date")
            if params.get(key)
        }
        try:
            return cls.model_validate(data)
        except ValidationError as err:
            raise InvalidParameter(_first_error(err)) from None
