"""Enumeration types for the D&D 5E character ledger.

These enums are the vocabulary of persisted events and of the static
reference dataset. Event rows carrying a value outside these members are
rejected when the rows are read.
"""

from __future__ import annotations

from enum import StrEnum


class Ability(StrEnum):
    """D&D 5E ability scores."""

    STR = "strength"
    DEX = "dexterity"
    CON = "constitution"
    INT = "intelligence"
    WIS = "wisdom"
    CHA = "charisma"

    @property
    def full_name(self) -> str:
        """Get the full name of the ability.

        Returns:
            Full ability name (e.g., 'Strength' for STR).
        """
        return self.value.capitalize()

    @property
    def abbreviation(self) -> str:
        """Get the three-letter abbreviation.

        Returns:
            Three-letter abbreviation (e.g., 'STR').
        """
        return self.name


class Skill(StrEnum):
    """D&D 5E skills and their associated abilities."""

    # Strength skills
    ATHLETICS = "athletics"

    # Dexterity skills
    ACROBATICS = "acrobatics"
    SLEIGHT_OF_HAND = "sleight_of_hand"
    STEALTH = "stealth"

    # Intelligence skills
    ARCANA = "arcana"
    HISTORY = "history"
    INVESTIGATION = "investigation"
    NATURE = "nature"
    RELIGION = "religion"

    # Wisdom skills
    ANIMAL_HANDLING = "animal_handling"
    INSIGHT = "insight"
    MEDICINE = "medicine"
    PERCEPTION = "perception"
    SURVIVAL = "survival"

    # Charisma skills
    DECEPTION = "deception"
    INTIMIDATION = "intimidation"
    PERFORMANCE = "performance"
    PERSUASION = "persuasion"

    @property
    def ability(self) -> Ability:
        """Get the ability score used for checks with this skill.

        Returns:
            The Ability enum value associated with this skill.
        """
        return _SKILL_ABILITIES[self]


_SKILL_ABILITIES: dict[Skill, Ability] = {
    Skill.ATHLETICS: Ability.STR,
    Skill.ACROBATICS: Ability.DEX,
    Skill.SLEIGHT_OF_HAND: Ability.DEX,
    Skill.STEALTH: Ability.DEX,
    Skill.ARCANA: Ability.INT,
    Skill.HISTORY: Ability.INT,
    Skill.INVESTIGATION: Ability.INT,
    Skill.NATURE: Ability.INT,
    Skill.RELIGION: Ability.INT,
    Skill.ANIMAL_HANDLING: Ability.WIS,
    Skill.INSIGHT: Ability.WIS,
    Skill.MEDICINE: Ability.WIS,
    Skill.PERCEPTION: Ability.WIS,
    Skill.SURVIVAL: Ability.WIS,
    Skill.DECEPTION: Ability.CHA,
    Skill.INTIMIDATION: Ability.CHA,
    Skill.PERFORMANCE: Ability.CHA,
    Skill.PERSUASION: Ability.CHA,
}


class ProficiencyLevel(StrEnum):
    """How strongly a character is trained in a skill."""

    NONE = "none"
    HALF = "half"
    PROFICIENT = "proficient"
    EXPERT = "expert"

    def multiplier_of(self, proficiency_bonus: int) -> int:
        """Get the share of the proficiency bonus this level grants.

        Args:
            proficiency_bonus: The character's proficiency bonus.

        Returns:
            0, half (rounded down), the full bonus, or double the bonus.

        Example:
            >>> ProficiencyLevel.HALF.multiplier_of(3)
            1
            >>> ProficiencyLevel.EXPERT.multiplier_of(3)
            6
        """
        if self is ProficiencyLevel.HALF:
            return proficiency_bonus // 2
        if self is ProficiencyLevel.PROFICIENT:
            return proficiency_bonus
        if self is ProficiencyLevel.EXPERT:
            return proficiency_bonus * 2
        return 0


# =============================================================================
# Event Actions
# =============================================================================


class HitDieAction(StrEnum):
    """Hit die spending and recovery."""

    USE = "use"
    RESTORE = "restore"


class SpellSlotAction(StrEnum):
    """Spell slot expenditure and recovery."""

    USE = "use"
    RESTORE = "restore"


class SpellbookAction(StrEnum):
    """Adding or removing a spell from a spellbook."""

    LEARN = "learn"
    FORGET = "forget"


class PreparationAction(StrEnum):
    """Preparing or unpreparing a spell for a class."""

    PREPARE = "prepare"
    UNPREPARE = "unprepare"


class EventDomain(StrEnum):
    """Append-only event logs kept per character.

    Each value doubles as the storage table name for the domain.
    """

    ABILITIES = "char_abilities"
    SKILLS = "char_skills"
    COINS = "char_coins"
    HIT_POINTS = "char_hp"
    HIT_DICE = "char_hit_dice"
    SPELL_SLOTS = "char_spell_slots"
    ITEMS = "char_items"
    ITEM_CHARGES = "item_charges"
    SPELLBOOK = "char_spellbook"
    PREPARED_SPELLS = "char_prepared_spells"
    CLASS_LEVELS = "char_levels"
    TRAITS = "char_traits"
    NOTES = "char_notes"


# =============================================================================
# Reference Data Vocabulary
# =============================================================================


class ClassName(StrEnum):
    """The twelve SRD character classes."""

    BARBARIAN = "barbarian"
    BARD = "bard"
    CLERIC = "cleric"
    DRUID = "druid"
    FIGHTER = "fighter"
    MONK = "monk"
    PALADIN = "paladin"
    RANGER = "ranger"
    ROGUE = "rogue"
    SORCERER = "sorcerer"
    WARLOCK = "warlock"
    WIZARD = "wizard"


class CasterKind(StrEnum):
    """Spell slot progression a spellcasting class follows."""

    FULL = "full"
    HALF = "half"
    THIRD = "third"
    PACT = "pact"

    @property
    def multiclass_divisor(self) -> int:
        """Get the divisor applied to class levels for multiclass slots.

        Returns:
            1 for full casters, 2 for half, 3 for third, 0 for pact
            magic which does not contribute.
        """
        divisors = {
            CasterKind.FULL: 1,
            CasterKind.HALF: 2,
            CasterKind.THIRD: 3,
            CasterKind.PACT: 0,
        }
        return divisors[self]


class PreparationChange(StrEnum):
    """When a class may swap its prepared spells."""

    LEVEL_UP = "levelup"
    LONG_REST = "longrest"


class ItemCategory(StrEnum):
    """Item categories used by the reference catalog."""

    WEAPON = "weapon"
    ARMOR = "armor"
    SHIELD = "shield"
    CLOTHING = "clothing"
    JEWELRY = "jewelry"
    POTION = "potion"
    SCROLL = "scroll"
    GEAR = "gear"
    TOOL = "tool"
    CONTAINER = "container"
    WAND = "wand"
    MISC = "misc"

    @property
    def wearable(self) -> bool:
        """Whether items of this category can be worn."""
        return self in (ItemCategory.CLOTHING, ItemCategory.JEWELRY, ItemCategory.ARMOR)

    @property
    def wieldable(self) -> bool:
        """Whether items of this category can be wielded."""
        return self in (ItemCategory.WEAPON, ItemCategory.SHIELD, ItemCategory.WAND)


class ArmorType(StrEnum):
    """Armor weight classes."""

    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"


class Size(StrEnum):
    """D&D 5E creature sizes."""

    TINY = "tiny"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    HUGE = "huge"
    GARGANTUAN = "gargantuan"


class SpellSchool(StrEnum):
    """Schools of magic."""

    ABJURATION = "abjuration"
    CONJURATION = "conjuration"
    DIVINATION = "divination"
    ENCHANTMENT = "enchantment"
    EVOCATION = "evocation"
    ILLUSION = "illusion"
    NECROMANCY = "necromancy"
    TRANSMUTATION = "transmutation"


class DamageType(StrEnum):
    """Damage types dealt by weapons and effects."""

    SLASHING = "slashing"
    PIERCING = "piercing"
    BLUDGEONING = "bludgeoning"
    FIRE = "fire"
    COLD = "cold"
    LIGHTNING = "lightning"
    THUNDER = "thunder"
    ACID = "acid"
    RADIANT = "radiant"
    NECROTIC = "necrotic"
    FORCE = "force"
    POISON = "poison"
    PSYCHIC = "psychic"


class WeaponMastery(StrEnum):
    """Weapon mastery properties."""

    CLEAVE = "cleave"
    GRAZE = "graze"
    NICK = "nick"
    PUSH = "push"
    SAP = "sap"
    SLOW = "slow"
    TOPPLE = "topple"
    VEX = "vex"


class EffectOp(StrEnum):
    """How an item effect changes its target."""

    ADD = "add"
    SET = "set"
    ADVANTAGE = "advantage"
    DISADVANTAGE = "disadvantage"
    PROFICIENCY = "proficiency"
    EXPERTISE = "expertise"


class EffectApplies(StrEnum):
    """Item state an effect needs to be active."""

    WORN = "worn"
    WIELDED = "wielded"


class EffectTarget(StrEnum):
    """Statistics an item effect can change.

    Skill and ability members share their values with ``Skill`` and
    ``Ability``.
    """

    ATHLETICS = "athletics"
    ACROBATICS = "acrobatics"
    SLEIGHT_OF_HAND = "sleight_of_hand"
    STEALTH = "stealth"
    ARCANA = "arcana"
    HISTORY = "history"
    INVESTIGATION = "investigation"
    NATURE = "nature"
    RELIGION = "religion"
    ANIMAL_HANDLING = "animal_handling"
    INSIGHT = "insight"
    MEDICINE = "medicine"
    PERCEPTION = "perception"
    SURVIVAL = "survival"
    DECEPTION = "deception"
    INTIMIDATION = "intimidation"
    PERFORMANCE = "performance"
    PERSUASION = "persuasion"
    STRENGTH = "strength"
    DEXTERITY = "dexterity"
    CONSTITUTION = "constitution"
    INTELLIGENCE = "intelligence"
    WISDOM = "wisdom"
    CHARISMA = "charisma"
    AC = "ac"
    SPEED = "speed"
    ATTACK = "attack"
    DAMAGE = "damage"
    INITIATIVE = "initiative"
    PASSIVE_PERCEPTION = "passive_perception"


class TraitSource(StrEnum):
    """Where a character trait came from."""

    SPECIES = "species"
    LINEAGE = "lineage"
    BACKGROUND = "background"
    CLASS = "class"
    SUBCLASS = "subclass"
    CUSTOM = "custom"


class Denomination(StrEnum):
    """Coin denominations, with their worth in copper pieces."""

    PP = "pp"
    GP = "gp"
    EP = "ep"
    SP = "sp"
    CP = "cp"

    @property
    def copper_value(self) -> int:
        """Get the number of copper pieces one coin is worth.

        Returns:
            Copper value (e.g., 100 for a gold piece).
        """
        values = {
            Denomination.PP: 1000,
            Denomination.GP: 100,
            Denomination.EP: 50,
            Denomination.SP: 10,
            Denomination.CP: 1,
        }
        return values[self]


__all__ = [
    "Ability",
    "Skill",
    "ProficiencyLevel",
    "HitDieAction",
    "SpellSlotAction",
    "SpellbookAction",
    "PreparationAction",
    "EventDomain",
    "ClassName",
    "CasterKind",
    "PreparationChange",
    "ItemCategory",
    "ArmorType",
    "Size",
    "SpellSchool",
    "DamageType",
    "WeaponMastery",
    "EffectOp",
    "EffectApplies",
    "EffectTarget",
    "TraitSource",
    "Denomination",
]
