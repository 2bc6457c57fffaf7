"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the character ledger test suite. Event factories stamp explicit,
increasing timestamps so that replay order never depends on the clock.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from itertools import count
from typing import TYPE_CHECKING, Any

import pytest

from dnd_ledger.models.enums import EventDomain
from dnd_ledger.models.events import EVENT_TYPES, CharacterRecord, LedgerEvent
from dnd_ledger.rules.reference import Ruleset
from dnd_ledger.rules.srd import build_srd51, build_srd52


if TYPE_CHECKING:
    from collections.abc import Callable, Generator
    from pathlib import Path

    from dnd_ledger.storage.database import Database


CHARACTER_ID = "char-1"
BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from dnd_ledger.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "DND_LEDGER_DEBUG": "true",
        "DND_LEDGER_LOG_LEVEL": "DEBUG",
        "DND_LEDGER_RULES_DEFAULT_RULESET": "srd51",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Event Fixtures
# =============================================================================


@pytest.fixture
def make_event() -> Callable[..., Any]:
    """Provide a factory for typed events with increasing timestamps.

    Each call is one minute after the previous one unless ``at`` (minutes
    after the base time) is given. Ids follow the call order.

    Returns:
        ``make_event(domain, *, at=None, event_id=None, **fields)``.
    """
    sequence = count(1)

    def factory(
        domain: EventDomain,
        *,
        at: int | None = None,
        event_id: str | None = None,
        **fields: Any,
    ) -> LedgerEvent:
        index = next(sequence)
        minutes = at if at is not None else index
        data: dict[str, Any] = {
            "id": event_id or f"evt-{index:04d}",
            "created_at": BASE_TIME + timedelta(minutes=minutes),
            **fields,
        }
        if domain is not EventDomain.ITEM_CHARGES:
            data.setdefault("character_id", CHARACTER_ID)
        return EVENT_TYPES[domain].model_validate(data)

    return factory


@pytest.fixture
def character_record() -> CharacterRecord:
    """Provide a character identity record.

    Returns:
        A dwarf character on the SRD 5.2 ruleset.
    """
    return CharacterRecord(id=CHARACTER_ID, name="Thorin", ruleset="srd52", species="dwarf")


# =============================================================================
# Ruleset Fixtures
# =============================================================================


@pytest.fixture
def srd51() -> Ruleset:
    """Provide the SRD 5.1 ruleset."""
    return build_srd51()


@pytest.fixture
def srd52() -> Ruleset:
    """Provide the SRD 5.2 ruleset."""
    return build_srd52()


# =============================================================================
# Storage Fixtures
# =============================================================================


@pytest.fixture
def database(tmp_path: Path) -> Database:
    """Provide an empty event store in a temporary directory.

    Returns:
        A Database backed by a fresh SQLite file.
    """
    from dnd_ledger.storage.database import Database

    return Database(tmp_path / "ledger.db")
