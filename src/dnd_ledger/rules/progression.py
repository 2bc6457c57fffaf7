"""D&D 5E spellcasting and level progression tables.

This module holds the static numbers behind the rules engine:
- Proficiency bonus by total level
- Spell slots by caster kind and level
- Warlock pact magic
- Cantrip and prepared/known spell capacities per class

The tables are keyed by class and level only. Which table applies to a
class is decided by the ruleset in ``dnd_ledger.rules.srd``; the rules
engine never reads these tables directly.
"""

from __future__ import annotations

from dnd_ledger.models.enums import ClassName


# =============================================================================
# Proficiency Bonus by Level (PHB p.15)
# =============================================================================


def get_proficiency_bonus(total_level: int) -> int:
    """Get proficiency bonus for a total character level."""
    if total_level < 1:
        return 2
    return (min(total_level, 20) - 1) // 4 + 2


# =============================================================================
# Spell Slots by Level
# =============================================================================

# Full casters: Bard, Cleric, Druid, Sorcerer, Wizard, and multiclass casters
FULL_CASTER_SLOTS: dict[int, dict[int, int]] = {
    1:  {1: 2},
    2:  {1: 3},
    3:  {1: 4, 2: 2},
    4:  {1: 4, 2: 3},
    5:  {1: 4, 2: 3, 3: 2},
    6:  {1: 4, 2: 3, 3: 3},
    7:  {1: 4, 2: 3, 3: 3, 4: 1},
    8:  {1: 4, 2: 3, 3: 3, 4: 2},
    9:  {1: 4, 2: 3, 3: 3, 4: 3, 5: 1},
    10: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2},
    11: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1},
    12: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1},
    13: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1},
    14: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1},
    15: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1, 8: 1},
    16: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1, 8: 1},
    17: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1, 8: 1, 9: 1},
    18: {1: 4, 2: 3, 3: 3, 4: 3, 5: 3, 6: 1, 7: 1, 8: 1, 9: 1},
    19: {1: 4, 2: 3, 3: 3, 4: 3, 5: 3, 6: 2, 7: 1, 8: 1, 9: 1},
    20: {1: 4, 2: 3, 3: 3, 4: 3, 5: 3, 6: 2, 7: 2, 8: 1, 9: 1},
}

# Half casters: Paladin, Ranger (SRD 5.1 starts at level 2)
HALF_CASTER_SLOTS: dict[int, dict[int, int]] = {
    1:  {},
    2:  {1: 2},
    3:  {1: 3},
    4:  {1: 3},
    5:  {1: 4, 2: 2},
    6:  {1: 4, 2: 2},
    7:  {1: 4, 2: 3},
    8:  {1: 4, 2: 3},
    9:  {1: 4, 2: 3, 3: 2},
    10: {1: 4, 2: 3, 3: 2},
    11: {1: 4, 2: 3, 3: 3},
    12: {1: 4, 2: 3, 3: 3},
    13: {1: 4, 2: 3, 3: 3, 4: 1},
    14: {1: 4, 2: 3, 3: 3, 4: 1},
    15: {1: 4, 2: 3, 3: 3, 4: 2},
    16: {1: 4, 2: 3, 3: 3, 4: 2},
    17: {1: 4, 2: 3, 3: 3, 4: 3, 5: 1},
    18: {1: 4, 2: 3, 3: 3, 4: 3, 5: 1},
    19: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2},
    20: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2},
}

# SRD 5.2 half casters cast from level 1
HALF_CASTER_SLOTS_2024: dict[int, dict[int, int]] = {**HALF_CASTER_SLOTS, 1: {1: 2}}

# Third casters: Eldritch Knight, Arcane Trickster (start at level 3)
THIRD_CASTER_SLOTS: dict[int, dict[int, int]] = {
    1:  {},
    2:  {},
    3:  {1: 2},
    4:  {1: 3},
    5:  {1: 3},
    6:  {1: 3},
    7:  {1: 4, 2: 2},
    8:  {1: 4, 2: 2},
    9:  {1: 4, 2: 2},
    10: {1: 4, 2: 3},
    11: {1: 4, 2: 3},
    12: {1: 4, 2: 3},
    13: {1: 4, 2: 3, 3: 2},
    14: {1: 4, 2: 3, 3: 2},
    15: {1: 4, 2: 3, 3: 2},
    16: {1: 4, 2: 3, 3: 3},
    17: {1: 4, 2: 3, 3: 3},
    18: {1: 4, 2: 3, 3: 3},
    19: {1: 4, 2: 3, 3: 3, 4: 1},
    20: {1: 4, 2: 3, 3: 3, 4: 1},
}

# Warlock pact magic
WARLOCK_PACT_SLOTS: dict[int, tuple[int, int]] = {
    # level: (num_slots, slot_level)
    1:  (1, 1),
    2:  (2, 1),
    3:  (2, 2),
    4:  (2, 2),
    5:  (2, 3),
    6:  (2, 3),
    7:  (2, 4),
    8:  (2, 4),
    9:  (2, 5),
    10: (2, 5),
    11: (3, 5),
    12: (3, 5),
    13: (3, 5),
    14: (3, 5),
    15: (3, 5),
    16: (3, 5),
    17: (4, 5),
    18: (4, 5),
    19: (4, 5),
    20: (4, 5),
}


def slot_counts(table: dict[int, dict[int, int]], level: int) -> dict[int, int]:
    """Get {tier: count} from a slot table, empty outside levels 1-20."""
    return dict(table.get(level, {}))


def slots_as_tiers(counts: dict[int, int]) -> list[int]:
    """Expand {tier: count} into one entry per slot.

    Example:
        >>> slots_as_tiers({1: 2, 2: 1})
        [1, 1, 2]
    """
    return [tier for tier in sorted(counts) for _ in range(counts[tier])]


# =============================================================================
# Cantrips Known
# =============================================================================

CANTRIPS_KNOWN: dict[ClassName, dict[int, int]] = {
    ClassName.BARD: {1: 2, 4: 3, 10: 4},
    ClassName.CLERIC: {1: 3, 4: 4, 10: 5},
    ClassName.DRUID: {1: 2, 4: 3, 10: 4},
    ClassName.SORCERER: {1: 4, 4: 5, 10: 6},
    ClassName.WARLOCK: {1: 2, 4: 3, 10: 4},
    ClassName.WIZARD: {1: 3, 4: 4, 10: 5},
}

THIRD_CASTER_CANTRIPS: dict[int, int] = {3: 2, 10: 3}


def stepped_value(progression: dict[int, int], level: int) -> int:
    """Read a progression that only lists the levels where it increases."""
    value = 0
    for threshold, amount in sorted(progression.items()):
        if level >= threshold:
            value = amount
    return value


# =============================================================================
# Spells Known (SRD 5.1 known casters)
# =============================================================================

SPELLS_KNOWN: dict[ClassName, dict[int, int]] = {
    ClassName.BARD: {
        1: 4, 2: 5, 3: 6, 4: 7, 5: 8, 6: 9, 7: 10, 8: 11,
        9: 12, 10: 14, 11: 15, 12: 15, 13: 16, 14: 18,
        15: 19, 16: 19, 17: 20, 18: 22, 19: 22, 20: 22,
    },
    ClassName.RANGER: {
        1: 0, 2: 2, 3: 3, 4: 3, 5: 4, 6: 4, 7: 5, 8: 5,
        9: 6, 10: 6, 11: 7, 12: 7, 13: 8, 14: 8,
        15: 9, 16: 9, 17: 10, 18: 10, 19: 11, 20: 11,
    },
    ClassName.SORCERER: {
        1: 2, 2: 3, 3: 4, 4: 5, 5: 6, 6: 7, 7: 8, 8: 9,
        9: 10, 10: 11, 11: 12, 12: 12, 13: 13, 14: 13,
        15: 14, 16: 14, 17: 15, 18: 15, 19: 15, 20: 15,
    },
    ClassName.WARLOCK: {
        1: 2, 2: 3, 3: 4, 4: 5, 5: 6, 6: 7, 7: 8, 8: 9,
        9: 10, 10: 10, 11: 11, 12: 11, 13: 12, 14: 12,
        15: 13, 16: 13, 17: 14, 18: 14, 19: 15, 20: 15,
    },
}

# Eldritch Knight and Arcane Trickster
THIRD_CASTER_SPELLS: dict[int, int] = {
    3: 3, 4: 4, 5: 4, 6: 4, 7: 5, 8: 6, 9: 6, 10: 7,
    11: 8, 12: 8, 13: 9, 14: 10, 15: 10, 16: 11, 17: 11, 18: 11, 19: 12, 20: 13,
}


# =============================================================================
# Prepared Spells (SRD 5.2)
# =============================================================================

FULL_CASTER_PREPARED: dict[int, int] = {
    1: 4, 2: 5, 3: 6, 4: 7, 5: 9, 6: 10, 7: 11, 8: 12,
    9: 14, 10: 15, 11: 16, 12: 16, 13: 17, 14: 17,
    15: 18, 16: 18, 17: 19, 18: 20, 19: 21, 20: 22,
}

HALF_CASTER_PREPARED: dict[int, int] = {
    1: 2, 2: 3, 3: 4, 4: 5, 5: 6, 6: 6, 7: 7, 8: 7,
    9: 9, 10: 9, 11: 10, 12: 10, 13: 11, 14: 11,
    15: 12, 16: 12, 17: 14, 18: 14, 19: 15, 20: 15,
}

WARLOCK_PREPARED: dict[int, int] = {
    1: 2, 2: 3, 3: 4, 4: 5, 5: 6, 6: 7, 7: 8, 8: 9,
    9: 10, 10: 10, 11: 11, 12: 11, 13: 12, 14: 12,
    15: 13, 16: 13, 17: 14, 18: 14, 19: 15, 20: 15,
}


__all__ = [
    "get_proficiency_bonus",
    "FULL_CASTER_SLOTS",
    "HALF_CASTER_SLOTS",
    "HALF_CASTER_SLOTS_2024",
    "THIRD_CASTER_SLOTS",
    "WARLOCK_PACT_SLOTS",
    "slot_counts",
    "slots_as_tiers",
    "CANTRIPS_KNOWN",
    "THIRD_CASTER_CANTRIPS",
    "stepped_value",
    "SPELLS_KNOWN",
    "THIRD_CASTER_SPELLS",
    "FULL_CASTER_PREPARED",
    "HALF_CASTER_PREPARED",
    "WARLOCK_PREPARED",
]
