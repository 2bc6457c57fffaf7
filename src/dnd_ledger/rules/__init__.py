"""Game rules: reference data, progression tables and derived numbers."""

from __future__ import annotations

from dnd_ledger.rules.derived import ability_modifier
from dnd_ledger.rules.progression import get_proficiency_bonus
from dnd_ledger.rules.reference import (
    ClassDef,
    ItemDamage,
    ItemDef,
    ItemEffect,
    Ruleset,
    SpeciesDef,
    SpellcastingInfo,
    SpellDef,
    SpellProgression,
)
from dnd_ledger.rules.srd import RULESET_NAMES, build_srd51, build_srd52, get_ruleset


__all__ = [
    "ability_modifier",
    "get_proficiency_bonus",
    "ClassDef",
    "ItemDamage",
    "ItemDef",
    "ItemEffect",
    "Ruleset",
    "SpeciesDef",
    "SpellcastingInfo",
    "SpellDef",
    "SpellProgression",
    "RULESET_NAMES",
    "build_srd51",
    "build_srd52",
    "get_ruleset",
]
