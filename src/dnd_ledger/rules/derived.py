"""Derived game numbers computed from reduced character state.

Everything here is a pure function of reduced state and a ruleset: no
I/O, no logging, no hidden tables. Rule differences between editions
are reached only through the ruleset's lookups, so the formulas below
are shared by every edition.

Formulas:
    modifier          = floor((score - 10) / 2)
    saving throw      = modifier + proficiency bonus if proficient
    skill bonus       = modifier + proficiency multiple (0, pb // 2, pb, 2 * pb)
    spell attack      = proficiency bonus + casting modifier
    spell save DC     = 8 + proficiency bonus + casting modifier
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from dnd_ledger.models.enums import Ability, CasterKind, ProficiencyLevel, Skill
from dnd_ledger.models.state import AbilityState, ClassLevelState, ItemState
from dnd_ledger.rules.progression import slots_as_tiers
from dnd_ledger.rules.reference import ClassDef, Ruleset, SpellcastingInfo


# =============================================================================
# Abilities & Skills
# =============================================================================


def ability_modifier(score: int) -> int:
    """Calculate the ability modifier from an ability score.

    Args:
        score: The ability score (1-30).

    Returns:
        The ability modifier (-5 to +10).

    Example:
        >>> ability_modifier(10)
        0
        >>> ability_modifier(18)
        4
        >>> ability_modifier(7)
        -2
    """
    return (score - 10) // 2


def modifier_for(abilities: Mapping[Ability, AbilityState], ability: Ability) -> int:
    """Get an ability's modifier, treating an unrecorded ability as 0."""
    state = abilities.get(ability)
    return ability_modifier(state.score) if state is not None else 0


def saving_throw(state: AbilityState, proficiency_bonus: int) -> int:
    """Get the saving throw bonus of one ability."""
    bonus = ability_modifier(state.score)
    if state.proficient:
        bonus += proficiency_bonus
    return bonus


def skill_bonus(
    skill: Skill,
    proficiency: ProficiencyLevel,
    abilities: Mapping[Ability, AbilityState],
    proficiency_bonus: int,
) -> int:
    """Get the check bonus of a skill.

    Example:
        With DEX 16 and a proficiency bonus of 3, an expert Stealth
        check gets 3 + 6 = 9.
    """
    return modifier_for(abilities, skill.ability) + proficiency.multiplier_of(proficiency_bonus)


def passive_perception(
    skills: Mapping[Skill, ProficiencyLevel],
    abilities: Mapping[Ability, AbilityState],
    proficiency_bonus: int,
) -> int:
    """Get passive Wisdom (Perception)."""
    proficiency = skills.get(Skill.PERCEPTION, ProficiencyLevel.NONE)
    return 10 + skill_bonus(Skill.PERCEPTION, proficiency, abilities, proficiency_bonus)


def initiative(abilities: Mapping[Ability, AbilityState]) -> int:
    """Get the initiative bonus."""
    return modifier_for(abilities, Ability.DEX)


# =============================================================================
# Armor Class
# =============================================================================


def armor_class(
    inventory: Mapping[str, ItemState],
    abilities: Mapping[Ability, AbilityState],
    ruleset: Ruleset,
) -> int:
    """Compute armor class from worn armor and wielded shields.

    Unarmored AC is 10 + DEX. Worn armor replaces the base with its own
    value, adding DEX only if the armor allows it (up to its cap). Each
    wielded item with an armor modifier adds it. Items missing from the
    catalog contribute nothing. If several armors are worn the best one
    counts.
    """
    dex = modifier_for(abilities, Ability.DEX)
    armored: list[int] = []
    bonus = 0
    for item_id, state in inventory.items():
        item = ruleset.find_item(item_id)
        if item is None:
            continue
        if state.worn and item.armor_class is not None:
            value = item.armor_class
            if item.armor_class_dex:
                cap = item.armor_class_dex_max
                value += dex if cap is None else min(dex, cap)
            armored.append(value)
        if state.wielded and item.armor_modifier:
            bonus += item.armor_modifier
    base = max(armored) if armored else 10 + dex
    return base + bonus


# =============================================================================
# Spellcasting
# =============================================================================


@dataclass(frozen=True)
class CastingClass:
    """A class level the character actually casts with."""

    state: ClassLevelState
    definition: ClassDef
    spellcasting: SpellcastingInfo


def casting_classes(classes: Iterable[ClassLevelState], ruleset: Ruleset) -> list[CastingClass]:
    """Select the classes that grant spellcasting to this character.

    Non-casting classes and classes whose spellcasting is gated on a
    subclass the character does not have are left out entirely.

    Raises:
        ReferenceDataError: If a class is not defined in the ruleset.
    """
    casting: list[CastingClass] = []
    for state in classes:
        class_def = ruleset.require_class(state.class_name)
        if class_def.spellcasting is None:
            continue
        if not class_def.spellcasting.grants_to(state.subclass):
            continue
        casting.append(CastingClass(state, class_def, class_def.spellcasting))
    return casting


def spell_attack_bonus(proficiency_bonus: int, casting_modifier: int) -> int:
    """Get the spell attack bonus."""
    return proficiency_bonus + casting_modifier


def spell_save_dc(proficiency_bonus: int, casting_modifier: int) -> int:
    """Get the spell save DC."""
    return 8 + proficiency_bonus + casting_modifier


def max_spell_level(info: SpellcastingInfo, class_level: int, ruleset: Ruleset) -> int:
    """Get the highest spell tier a class can cast at a class level.

    Pact magic casts at its pact slot tier. Other casters use the
    highest tier with at least one slot in their own progression; 0
    means no leveled spells yet.
    """
    if info.kind is CasterKind.PACT:
        count, tier = ruleset.pact_slots(class_level)
        return tier if count else 0
    counts = ruleset.slot_counts(info.kind, class_level)
    return max((tier for tier, count in counts.items() if count > 0), default=0)


def multiclass_caster_level(casting: Iterable[CastingClass]) -> int:
    """Combine slot-casting class levels into one caster level.

    Full casters count fully; half and third casters are summed per kind
    and then divided, rounding down. Pact magic does not count.
    """
    totals: dict[CasterKind, int] = {}
    for entry in casting:
        kind = entry.spellcasting.kind
        totals[kind] = totals.get(kind, 0) + entry.state.level
    return sum(
        level // kind.multiclass_divisor
        for kind, level in totals.items()
        if kind.multiclass_divisor
    )


def character_spell_slots(casting: Iterable[CastingClass], ruleset: Ruleset) -> list[int]:
    """Get the character's spell slots as one tier per slot.

    A single slot-casting class uses its own progression. Several use
    the combined caster level on the full-caster progression. Pact
    magic slots are reported separately.

    Example:
        A level 1 wizard has [1, 1].
    """
    slot_casters = [c for c in casting if c.spellcasting.kind is not CasterKind.PACT]
    if not slot_casters:
        return []
    if len(slot_casters) == 1:
        only = slot_casters[0]
        return slots_as_tiers(ruleset.slot_counts(only.spellcasting.kind, only.state.level))
    level = multiclass_caster_level(slot_casters)
    return slots_as_tiers(ruleset.slot_counts(CasterKind.FULL, level))


def pact_magic_slots(casting: Iterable[CastingClass], ruleset: Ruleset) -> list[int]:
    """Get pact magic slots as one tier per slot.

    Example:
        A level 5 warlock has [3, 3].
    """
    slots: list[int] = []
    for entry in casting:
        if entry.spellcasting.kind is CasterKind.PACT:
            slots.extend(slots_as_tiers(ruleset.slot_counts(CasterKind.PACT, entry.state.level)))
    return sorted(slots)


__all__ = [
    "ability_modifier",
    "modifier_for",
    "saving_throw",
    "skill_bonus",
    "passive_perception",
    "initiative",
    "armor_class",
    "CastingClass",
    "casting_classes",
    "spell_attack_bonus",
    "spell_save_dc",
    "max_spell_level",
    "multiclass_caster_level",
    "character_spell_slots",
    "pact_magic_slots",
]
