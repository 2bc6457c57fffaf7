"""D&D 5E Character Ledger - event-sourced character state.

Every change to a character is an append-only event. The current
character is never stored: it is reconstructed on demand by replaying
the event logs through generic reducers, then joined with a ruleset's
reference data to derive the numbers a character sheet shows.

Example:
    >>> from dnd_ledger import CharacterComposer, Database, EventDomain
    >>>
    >>> db = Database("ledger.db")
    >>> hero = db.add_character("Thorin", ruleset="srd52", species="dwarf")
    >>> db.append(EventDomain.CLASS_LEVELS, hero.id, class_name="fighter", level=1, hit_die_roll=10)
    >>> db.append(EventDomain.HIT_POINTS, hero.id, delta=-4)
    >>>
    >>> snapshot = CharacterComposer(db).compose(hero.id)
    >>> print(snapshot.current_hit_points)

Modules:
    core: Configuration, logging, and base exceptions.
    models: Event records, reduced state and the computed snapshot.
    rules: Reference data, progression tables and derived numbers.
    engine: Reducers, projections and snapshot composition.
    storage: SQLite event store.
"""

from __future__ import annotations

# Core
from dnd_ledger.core.config import Settings, get_settings
from dnd_ledger.core.exceptions import LedgerError
from dnd_ledger.core.logging import configure_logging, get_logger

# Models
from dnd_ledger.models.enums import EventDomain
from dnd_ledger.models.events import CharacterHistory, CharacterRecord
from dnd_ledger.models.snapshot import ComputedCharacter

# Rules
from dnd_ledger.rules.reference import Ruleset
from dnd_ledger.rules.srd import get_ruleset

# Engine
from dnd_ledger.engine.composer import CharacterComposer, compose_character

# Storage
from dnd_ledger.storage.database import Database


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "LedgerError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "EventDomain",
    "CharacterHistory",
    "CharacterRecord",
    "ComputedCharacter",
    # Rules
    "Ruleset",
    "get_ruleset",
    # Engine
    "CharacterComposer",
    "compose_character",
    # Storage
    "Database",
]
