"""Custom exception hierarchy for the D&D 5E character ledger.

All exceptions inherit from LedgerError so callers can handle every
ledger fault at one boundary while keeping domain-specific context in
the ``details`` mapping.

Unknown spell or item references are deliberately absent from this
module: they are data-quality issues recovered during composition, not
errors.

Example:
    >>> from dnd_ledger.core.exceptions import MalformedEventError
    >>> raise MalformedEventError("Bad row", domain="abilities", event_id="42")
"""

from __future__ import annotations

from typing import Any


class LedgerError(Exception):
    """Base exception for all character ledger errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception.

        Returns:
            String representation suitable for debugging.
        """
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Event Data Exceptions
# =============================================================================


class EventDataError(LedgerError):
    """Base exception for data-integrity faults in persisted event logs.

    These are never recovered from inside the reconstruction engine; the
    caller receives the fault instead of a partial snapshot.
    """


class MalformedEventError(EventDataError):
    """Raised when a persisted event row fails schema validation.

    This is raised at the fetch boundary, before any reducer runs, for
    rows with out-of-range values or unrecognized enum members.
    """

    def __init__(
        self,
        message: str,
        *,
        domain: str | None = None,
        event_id: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize malformed event error with row context.

        Args:
            message: Human-readable error description.
            domain: Event domain the row belongs to.
            event_id: Identity of the offending row, when it could be read.
            errors: Validation error entries describing each failed field.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if domain:
            combined_details["domain"] = domain
        if event_id:
            combined_details["event_id"] = event_id
        if errors:
            combined_details["errors"] = errors
        super().__init__(message, details=combined_details)
        self.domain = domain
        self.event_id = event_id


# =============================================================================
# Lookup Exceptions
# =============================================================================


class CharacterNotFoundError(LedgerError):
    """Raised when a snapshot is requested for a character with no record."""

    def __init__(
        self,
        message: str,
        *,
        character_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize not-found error with the requested identity.

        Args:
            message: Human-readable error description.
            character_id: The character identity that was requested.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if character_id:
            combined_details["character_id"] = character_id
        super().__init__(message, details=combined_details)


class ReferenceDataError(LedgerError):
    """Raised when the static reference dataset itself cannot be resolved.

    This covers an unknown ruleset name or a required class definition
    that does not exist. Individual spell or item ids missing from the
    dataset do not raise this.
    """

    def __init__(
        self,
        message: str,
        *,
        reference_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize reference data error.

        Args:
            message: Human-readable error description.
            reference_id: The identifier that could not be resolved.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if reference_id:
            combined_details["reference_id"] = reference_id
        super().__init__(message, details=combined_details)


# =============================================================================
# Storage & Configuration Exceptions
# =============================================================================


class StorageError(LedgerError):
    """Raised when the event store cannot be read or written."""


class ConfigurationError(LedgerError):
    """Raised when application configuration is invalid.

    This includes missing required settings, invalid values, or
    incompatible configuration combinations.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


__all__ = [
    # Base exception
    "LedgerError",
    # Event data exceptions
    "EventDataError",
    "MalformedEventError",
    # Lookup exceptions
    "CharacterNotFoundError",
    "ReferenceDataError",
    # Storage & configuration exceptions
    "StorageError",
    "ConfigurationError",
]
