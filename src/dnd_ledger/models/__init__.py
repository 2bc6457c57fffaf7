"""Pydantic models for the character ledger.

Exports:
    Events:
        One frozen record type per event domain, plus CharacterRecord
        and CharacterHistory.

    Snapshot:
        ComputedCharacter: The reconstructed character.
"""

from __future__ import annotations

from dnd_ledger.models.enums import (
    Ability,
    CasterKind,
    ClassName,
    EventDomain,
    HitDieAction,
    PreparationAction,
    ProficiencyLevel,
    Skill,
    SpellbookAction,
    SpellSlotAction,
    TraitSource,
)
from dnd_ledger.models.events import (
    AbilityEvent,
    CharacterHistory,
    CharacterRecord,
    ClassLevelEvent,
    CoinEvent,
    HitDieEvent,
    HitPointEvent,
    ItemChargeEvent,
    ItemEvent,
    LedgerEvent,
    NoteEvent,
    PreparedSpellEvent,
    SkillEvent,
    SpellbookEvent,
    SpellSlotEvent,
    TraitEvent,
    parse_character,
    parse_events,
)
from dnd_ledger.models.snapshot import ClassSpellcasting, ComputedCharacter
from dnd_ledger.models.state import CoinPurse


__all__ = [
    # Enums
    "Ability",
    "CasterKind",
    "ClassName",
    "EventDomain",
    "HitDieAction",
    "PreparationAction",
    "ProficiencyLevel",
    "Skill",
    "SpellbookAction",
    "SpellSlotAction",
    "TraitSource",
    # Events
    "LedgerEvent",
    "AbilityEvent",
    "SkillEvent",
    "CoinEvent",
    "HitPointEvent",
    "HitDieEvent",
    "SpellSlotEvent",
    "ItemEvent",
    "ItemChargeEvent",
    "SpellbookEvent",
    "PreparedSpellEvent",
    "ClassLevelEvent",
    "TraitEvent",
    "NoteEvent",
    "CharacterRecord",
    "CharacterHistory",
    "parse_events",
    "parse_character",
    # Snapshot
    "ClassSpellcasting",
    "ComputedCharacter",
    "CoinPurse",
]
