"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        LedgerError: Base exception for all ledger errors.
        MalformedEventError: Persisted event row failed validation.
        CharacterNotFoundError: No character record for an identity.
        ReferenceDataError: Ruleset or class definition cannot be resolved.
        StorageError: Event store failure.
        ConfigurationError: Configuration-related errors.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the cached settings.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
"""

from __future__ import annotations

from dnd_ledger.core.config import (
    RulesSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from dnd_ledger.core.exceptions import (
    CharacterNotFoundError,
    ConfigurationError,
    EventDataError,
    LedgerError,
    MalformedEventError,
    ReferenceDataError,
    StorageError,
)
from dnd_ledger.core.logging import configure_logging, get_logger


__all__ = [
    # Exceptions
    "LedgerError",
    "EventDataError",
    "MalformedEventError",
    "CharacterNotFoundError",
    "ReferenceDataError",
    "StorageError",
    "ConfigurationError",
    # Configuration
    "Settings",
    "StorageSettings",
    "RulesSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
]
