"""Reconstruction engine: reducers, projections and snapshot composition.

Exports:
    Reducers:
        latest_wins, cumulative_sum, membership_count: Generic folds.

    Composition:
        compose_character: Pure snapshot construction from a history.
        CharacterComposer: Snapshot construction from an event source.
"""

from __future__ import annotations

from dnd_ledger.engine.composer import CharacterComposer, EventSource, compose_character
from dnd_ledger.engine.reducers import (
    Membership,
    cumulative_sum,
    latest_wins,
    members,
    membership_count,
)
from dnd_ledger.engine.spells import fill_slots, known_spells, prepared_spells


__all__ = [
    # Reducers
    "latest_wins",
    "cumulative_sum",
    "Membership",
    "membership_count",
    "members",
    # Spells
    "known_spells",
    "prepared_spells",
    "fill_slots",
    # Composition
    "EventSource",
    "compose_character",
    "CharacterComposer",
]
