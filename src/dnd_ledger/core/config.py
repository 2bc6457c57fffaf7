"""Configuration management for the D&D 5E character ledger.

Settings are loaded with pydantic-settings from environment variables
and an optional ``.env`` file. The reconstruction engine never reads
settings on its own; callers resolve them here and pass values in.

Example:
    >>> from dnd_ledger.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.rules.default_ruleset)
    'srd52'

Environment Variables:
    DND_LEDGER_DATABASE_PATH: Path to the SQLite event store
    DND_LEDGER_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    DND_LEDGER_JSON_LOGS: Emit JSON log lines instead of console output
    DND_LEDGER_LOG_FILE: Optional file mirroring stdlib log records
    DND_LEDGER_RULES_DEFAULT_RULESET: Ruleset for characters without one (srd51, srd52)
    DND_LEDGER_RULES_CLAMP_HIT_POINTS: Clamp current HP to [0, max]
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dnd_ledger.core.exceptions import ConfigurationError


class StorageSettings(BaseSettings):
    """Configuration for the event store.

    Attributes:
        database_path: Path to the SQLite database file.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_path: Path = Field(
        default=Path("data/dnd_ledger.db"),
        description="Path to SQLite database",
    )

    @field_validator("database_path", mode="after")
    @classmethod
    def ensure_parent_exists(cls, value: Path) -> Path:
        """Ensure the database directory exists, creating it if necessary.

        Args:
            value: The database path to validate.

        Returns:
            The validated path.
        """
        value.parent.mkdir(parents=True, exist_ok=True)
        return value


class RulesSettings(BaseSettings):
    """Configuration for rules resolution.

    Attributes:
        default_ruleset: Ruleset applied to characters that do not name one.
        clamp_hit_points: Clamp current hit points into [0, max].
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_LEDGER_RULES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_ruleset: Literal["srd51", "srd52"] = Field(
        default="srd52",
        description="Default SRD ruleset",
    )
    clamp_hit_points: bool = Field(
        default=True,
        description="Clamp current HP between 0 and max HP",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        json_logs: Render log entries as JSON.
        log_file: File that stdlib log records are mirrored to.
        storage: Event store settings.
        rules: Rules resolution settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="D&D 5E Character Ledger",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(
        default=False,
        description="Render logs as JSON",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional file mirroring stdlib log records",
    )

    storage: StorageSettings = Field(default_factory=StorageSettings)
    rules: RulesSettings = Field(default_factory=RulesSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode.

        Returns:
            True if not in debug mode.
        """
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the cached application settings.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access.

    Example:
        >>> clear_settings_cache()
        >>> settings = get_settings()  # Reloads from environment
    """
    get_settings.cache_clear()


__all__ = [
    "StorageSettings",
    "RulesSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
