"""
Driver settings.

:class:`DriverSettings` resolves the database path, engine timeout and
logging options from ``SPINE_SQLITE_*`` environment variables or a ``.env``
file. :func:`get_settings` returns one validated, cached instance.

Example::

    export SPINE_SQLITE_PATH=./data/app.sqlite
    export SPINE_SQLITE_TIMEOUT=10

    driver = SQLiteDriver.from_settings()

Tags:
    configuration, settings, pydantic, caching, validation
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from spine_sqlite.types import MEMORY


class DriverSettings(BaseSettings):
    """SQLite driver configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SPINE_SQLITE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    path: str = Field(default=MEMORY, description="Database file path, or ':memory:'")
    timeout: float = Field(default=5.0, gt=0, description="Seconds to wait on a locked database")

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console", "auto"] = Field(default="auto")

    @field_validator("path")
    @classmethod
    def _path_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("path must not be blank")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value}")
        return level

    @property
    def is_memory(self) -> bool:
        return self.path == MEMORY

    @property
    def json_logs(self) -> bool | None:
        """``configure_logging`` json flag; ``None`` lets it auto-detect."""
        if self.log_format == "auto":
            return None
        return self.log_format == "json"


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, DriverSettings] = {}


def get_settings(*, _force_reload: bool = False) -> DriverSettings:
    """Load, validate, and cache a :class:`DriverSettings` instance.

    Raises:
        pydantic.ValidationError: An environment value is invalid.
    """
    if _force_reload or "default" not in _settings_cache:
        _settings_cache["default"] = DriverSettings()
    return _settings_cache["default"]


def clear_settings_cache() -> None:
    """Drop the cached settings (tests, reconfiguration)."""
    _settings_cache.clear()


__all__ = [
    "DriverSettings",
    "get_settings",
    "clear_settings_cache",
]
