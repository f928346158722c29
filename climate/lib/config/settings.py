"""Settings models and configuration loading for the climate monitor."""

from functools import cached_property, lru_cache
from typing import Annotated, Any, Self

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    HttpUrl,
    SecretStr,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from climate.lib.config.enums import MeasureName

# Nominal sensor ranges. Readings outside them are logged but still stored.
NOMINAL_BOUNDS = {
    MeasureName.TEMPERATURE: (-40, 80),
    MeasureName.HUMIDITY: (0, 100),
}

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing for the requested feature."""


def _parse_bool(v: Any) -> bool:
    """Parse boolean from string '1'/'0' or actual bool."""
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        return v == "1"
    return bool(v)


def _validate_log_level(v: str) -> str:
    level = v.strip().upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
    return level


def _validate_http_url(v: str) -> str:
    HttpUrl(v)
    return v.rstrip("/")


_BoolFromStr = Annotated[bool, BeforeValidator(_parse_bool)]
_LogLevel = Annotated[str, AfterValidator(_validate_log_level)]
_HttpUrlStr = Annotated[str, AfterValidator(_validate_http_url)]


class PollingSettings(BaseModel):
    """Ingestion scheduler settings."""

    model_config = ConfigDict(frozen=True)

    frequency_sec: int = 300
    source_timeout_sec: float = 10.0
    embedded: bool = False


class TuyaSettings(BaseModel):
    """Tuya cloud API credentials."""

    model_config = ConfigDict(frozen=True)

    host: str = "https://openapi.tuyaeu.com"
    access_key: str = ""
    secret_key: SecretStr = SecretStr("")
    device_id: str = ""


class PaginationSettings(BaseModel):
    """Paged listing settings."""

    model_config = ConfigDict(frozen=True)

    default_limit: int = 120


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    db_path: str = "climate.sqlite3"
    db_timeout_sec: float = Field(default=30.0, gt=0)
    db_pool_size: int = Field(default=5, ge=1)

    # Sensors
    mock_sensors: _BoolFromStr = False

    # Scheduler
    poll_interval_sec: int = Field(default=300, ge=1)
    source_timeout_sec: float = Field(default=10.0, gt=0)
    embed_scheduler: _BoolFromStr = False

    # Tuya cloud
    tuya_host: _HttpUrlStr = "https://openapi.tuyaeu.com"
    tuya_access_key: str = ""
    tuya_secret_key: SecretStr = SecretStr("")
    tuya_device_id: str = ""

    # API
    page_default_limit: int = Field(default=120, ge=1)

    # Logging
    log_level: _LogLevel = "INFO"

    @cached_property
    def polling(self) -> PollingSettings:
        """Get scheduler settings."""
        return PollingSettings(
            frequency_sec=self.poll_interval_sec,
            source_timeout_sec=self.source_timeout_sec,
            embedded=self.embed_scheduler,
        )

    @cached_property
    def tuya(self) -> TuyaSettings:
        """Get Tuya credentials.

        Raises:
            ConfigurationError: If credentials are missing and mock sensors
                are not enabled.
        """
        if not self.mock_sensors:
            missing = [
                name
                for name, value in (
                    ("TUYA_ACCESS_KEY", self.tuya_access_key),
                    ("TUYA_SECRET_KEY", self.tuya_secret_key.get_secret_value()),
                    ("TUYA_DEVICE_ID", self.tuya_device_id),
                )
                if not value
            ]
            if missing:
                raise ConfigurationError(
                    f"Tuya source enabled but missing: {', '.join(missing)}"
                )
        return TuyaSettings(
            host=self.tuya_host,
            access_key=self.tuya_access_key,
            secret_key=self.tuya_secret_key,
            device_id=self.tuya_device_id,
        )

    @cached_property
    def pagination(self) -> PaginationSettings:
        """Get paged listing settings."""
        return PaginationSettings(default_limit=self.page_default_limit)

    @model_validator(mode="after")
    def validate_settings(self) -> Self:
        """Validate cross-field configuration constraints."""
        if self.source_timeout_sec >= self.poll_interval_sec:
            raise ValueError(
                f"SOURCE_TIMEOUT_SEC ({self.source_timeout_sec}) must be less "
                f"than POLL_INTERVAL_SEC ({self.poll_interval_sec})"
            )
        return self


# Settings override for testing - allows injecting custom Settings without
# modifying environment variables or clearing the lru_cache.
_settings_override: Settings | None = None


@lru_cache(maxsize=1)
def _load_settings() -> Settings:
    """Load settings from environment (cached)."""
    return Settings()


def get_settings() -> Settings:
    """Get the global settings instance.

    Returns the test override if set, otherwise loads from environment
    variables (cached after first load). For testing, use set_settings()
    from climate.lib.config.testing to override.
    """
    if _settings_override is not None:
        return _settings_override
    return _load_settings()
