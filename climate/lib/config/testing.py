"""Settings overrides for the test suite. Not for production code."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import climate.lib.config.settings as _settings_module
from climate.lib.config.settings import Settings, _load_settings, get_settings


def set_settings(settings: Settings | None) -> None:
    """Install settings returned by get_settings(), or None to read the environment again."""
    _settings_module._settings_override = settings
    _load_settings.cache_clear()


@contextmanager
def override_settings(**fields: Any) -> Iterator[Settings]:
    """Use the current settings with some fields replaced, for one block.

    The previous override (or the environment) is restored on exit.
    """
    previous = _settings_module._settings_override
    settings = Settings(**{**get_settings().model_dump(), **fields})
    set_settings(settings)
    try:
        yield settings
    finally:
        set_settings(previous)
