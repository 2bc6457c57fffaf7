"""Read-only reference dataset: classes, species, spells and items.

Events reference static game content by stable string id. Lookups here
return ``None`` for ids that are not in the dataset so that every caller
must decide what an unknown reference means for it; historical events
may name content that has since been removed.

Progression numbers (slots, cantrips, prepared spells) are reached only
through a ruleset's ``SpellProgression`` so that differences between
rule editions live in the tables, not in the rules engine.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Literal, Protocol

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from dnd_ledger.core.exceptions import ReferenceDataError
from dnd_ledger.models.enums import (
    Ability,
    ArmorType,
    CasterKind,
    ClassName,
    DamageType,
    EffectApplies,
    EffectOp,
    EffectTarget,
    ItemCategory,
    PreparationChange,
    Size,
    SpellSchool,
    WeaponMastery,
)
from dnd_ledger.rules.progression import get_proficiency_bonus


# =============================================================================
# Definitions
# =============================================================================


class SpellDef(BaseModel):
    """A spell in the reference catalog."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    name: str
    level: int = Field(ge=0, le=9)
    school: SpellSchool
    classes: frozenset[ClassName] = frozenset()

    @property
    def is_cantrip(self) -> bool:
        """Whether the spell is a cantrip (level 0)."""
        return self.level == 0


class ItemDamage(BaseModel):
    """One damage roll of a weapon.

    ``dice`` lists die sizes, so ``(6, 6)`` is 2d6. A versatile roll is
    used when the weapon is wielded in two hands.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    dice: tuple[int, ...] = Field(min_length=1)
    type: DamageType
    versatile: bool = False

    @field_validator("dice")
    @classmethod
    def positive_dice(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        if any(die <= 0 for die in value):
            raise ValueError("die sizes must be positive")
        return value

    @property
    def notation(self) -> str:
        """Dice in NdX form, e.g. ``1d8`` or ``1d6+1d4``."""
        counts: dict[int, int] = {}
        for die in self.dice:
            counts[die] = counts.get(die, 0) + 1
        return "+".join(f"{count}d{die}" for die, count in counts.items())


class ItemEffect(BaseModel):
    """A change an item makes to a statistic while active.

    Effects with ``applies`` set are active only while the item is worn
    or wielded; the rest are always active.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    target: EffectTarget
    op: EffectOp
    value: int | None = None
    applies: EffectApplies | None = None

    def is_active(self, *, worn: bool, wielded: bool) -> bool:
        """Whether the effect applies given the item's state."""
        if self.applies is EffectApplies.WORN:
            return worn
        if self.applies is EffectApplies.WIELDED:
            return wielded
        return True


class ItemDef(BaseModel):
    """An item in the reference catalog.

    Armor fields apply to worn armor, ``armor_modifier`` to wielded
    shields, and range, damage and mastery fields to weapons.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    name: str
    category: ItemCategory
    armor_type: ArmorType | None = None
    armor_class: int | None = Field(default=None, ge=0)
    armor_class_dex: bool = False
    armor_class_dex_max: int | None = Field(default=None, ge=0)
    armor_modifier: int | None = None
    normal_range: int | None = Field(default=None, gt=0)
    long_range: int | None = Field(default=None, gt=0)
    thrown: bool = False
    finesse: bool = False
    martial: bool = False
    mastery: WeaponMastery | None = None
    damage: tuple[ItemDamage, ...] = ()
    effects: tuple[ItemEffect, ...] = ()
    max_charges: int | None = Field(default=None, ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def wearable(self) -> bool:
        """Whether the item can be worn."""
        return self.category.wearable

    @computed_field  # type: ignore[prop-decorator]
    @property
    def wieldable(self) -> bool:
        """Whether the item can be wielded."""
        return self.category.wieldable

    @computed_field  # type: ignore[prop-decorator]
    @property
    def use_verb(self) -> str:
        """The verb a player uses to consume or activate the item."""
        if self.category is ItemCategory.POTION:
            return "drink"
        if self.category is ItemCategory.SCROLL:
            return "read"
        if self.category is ItemCategory.WEAPON and self.thrown:
            return "throw"
        return "use"

    @property
    def uses_ammunition(self) -> bool:
        """Whether charges on this item count ammunition.

        Ranged weapons that are not thrown track their ammunition as
        item charges.
        """
        return (
            self.category is ItemCategory.WEAPON
            and self.normal_range is not None
            and not self.thrown
        )


class SpellcastingInfo(BaseModel):
    """How a class casts spells.

    Attributes:
        kind: Slot progression the class follows.
        ability: Spellcasting ability.
        change_prepared: When prepared spells may be swapped.
        subclasses: If non-empty, only these subclasses gain spellcasting.
        spellbook: Whether the class keeps a spellbook of known spells.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: CasterKind
    ability: Ability
    change_prepared: PreparationChange = PreparationChange.LEVEL_UP
    subclasses: frozenset[str] = frozenset()
    spellbook: bool = False

    def grants_to(self, subclass: str | None) -> bool:
        """Whether a member of this class with ``subclass`` can cast.

        Args:
            subclass: The character's current subclass, if any.

        Returns:
            True if spellcasting is not gated, or the subclass is one of
            the gated subclasses (compared case-insensitively).
        """
        if not self.subclasses:
            return True
        if subclass is None:
            return False
        return subclass.strip().lower() in {s.lower() for s in self.subclasses}


class ClassDef(BaseModel):
    """A character class in the reference dataset."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: ClassName
    hit_die: Literal[6, 8, 10, 12]
    subclasses: tuple[str, ...] = ()
    spellcasting: SpellcastingInfo | None = None


class SpeciesDef(BaseModel):
    """A playable species in the reference dataset."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    size: Size = Size.MEDIUM
    speed: int = 30
    lineages: tuple[str, ...] = ()

    def has_lineage(self, lineage: str) -> bool:
        """Whether ``lineage`` is one of this species' lineages (case-insensitive)."""
        return lineage.strip().lower() in self.lineages


# =============================================================================
# Progression Capability
# =============================================================================


class SpellProgression(Protocol):
    """Capacity tables of one rules edition, keyed by class and level."""

    def cantrip_capacity(self, class_name: ClassName, level: int) -> int:
        """Number of cantrips a class knows at a class level."""
        ...

    def prepared_capacity(self, class_name: ClassName, level: int, ability_modifier: int) -> int:
        """Number of leveled spells a class may have prepared."""
        ...

    def slot_counts(self, kind: CasterKind, level: int) -> dict[int, int]:
        """Spell slots per tier for a caster kind at a level."""
        ...

    def pact_slots(self, level: int) -> tuple[int, int]:
        """Pact magic (count, tier) at a warlock level; (0, 0) if none."""
        ...


# =============================================================================
# Ruleset
# =============================================================================


@dataclass(frozen=True)
class Ruleset:
    """One edition's reference dataset and progression tables.

    Attributes:
        name: Ruleset identifier (e.g., 'srd52').
        classes: Class definitions keyed by class name.
        species: Species definitions keyed by lowercase name.
        spells: Spell catalog keyed by spell id.
        items: Item catalog keyed by item id.
        progression: Capacity tables for this edition.
    """

    name: str
    progression: SpellProgression
    classes: Mapping[ClassName, ClassDef] = field(default_factory=dict)
    species: Mapping[str, SpeciesDef] = field(default_factory=dict)
    spells: Mapping[str, SpellDef] = field(default_factory=dict)
    items: Mapping[str, ItemDef] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        name: str,
        progression: SpellProgression,
        *,
        classes: Iterable[ClassDef] = (),
        species: Iterable[SpeciesDef] = (),
        spells: Iterable[SpellDef] = (),
        items: Iterable[ItemDef] = (),
    ) -> Ruleset:
        """Index definition lists by their identifiers."""
        return cls(
            name=name,
            progression=progression,
            classes={c.name: c for c in classes},
            species={s.name.lower(): s for s in species},
            spells={s.id: s for s in spells},
            items={i.id: i for i in items},
        )

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def find_spell(self, spell_id: str) -> SpellDef | None:
        """Look up a spell by id."""
        return self.spells.get(spell_id)

    def find_item(self, item_id: str) -> ItemDef | None:
        """Look up an item by id."""
        return self.items.get(item_id)

    def find_class(self, class_name: ClassName | str) -> ClassDef | None:
        """Look up a class by name."""
        try:
            return self.classes.get(ClassName(class_name))
        except ValueError:
            return None

    def find_species(self, name: str | None) -> SpeciesDef | None:
        """Look up a species by name (case-insensitive)."""
        if not name:
            return None
        return self.species.get(name.strip().lower())

    def require_class(self, class_name: ClassName | str) -> ClassDef:
        """Look up a class that must exist in this ruleset.

        Raises:
            ReferenceDataError: If the class is not defined.
        """
        class_def = self.find_class(class_name)
        if class_def is None:
            raise ReferenceDataError(
                f"Class not defined in ruleset {self.name}",
                reference_id=str(class_name),
            )
        return class_def

    # -------------------------------------------------------------------------
    # Progression
    # -------------------------------------------------------------------------

    def proficiency_bonus(self, total_level: int) -> int:
        """Proficiency bonus for a total character level."""
        return get_proficiency_bonus(total_level)

    def cantrip_capacity(self, class_name: ClassName, level: int) -> int:
        """Cantrips known by a class at a class level."""
        return self.progression.cantrip_capacity(class_name, level)

    def prepared_capacity(self, class_name: ClassName, level: int, ability_modifier: int) -> int:
        """Leveled spells a class may have prepared, never negative."""
        return max(0, self.progression.prepared_capacity(class_name, level, ability_modifier))

    def slot_counts(self, kind: CasterKind, level: int) -> dict[int, int]:
        """Spell slots per tier for a caster kind at a level."""
        return self.progression.slot_counts(kind, level)

    def pact_slots(self, level: int) -> tuple[int, int]:
        """Pact magic (count, tier) at a warlock level."""
        return self.progression.pact_slots(level)


__all__ = [
    "SpellDef",
    "ItemDamage",
    "ItemEffect",
    "ItemDef",
    "SpellcastingInfo",
    "ClassDef",
    "SpeciesDef",
    "SpellProgression",
    "Ruleset",
]
