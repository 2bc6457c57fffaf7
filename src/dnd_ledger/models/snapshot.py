"""The computed character snapshot.

A ``ComputedCharacter`` is the single read model produced by replaying a
character's event logs. It is frozen and uses tuples for every
collection; consumers that need to change a character append events
and compose a fresh snapshot instead of editing this one.

``model_dump(mode="json")`` gives the plain structure handed to tool
layers and renderers.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from dnd_ledger.models.enums import (
    Ability,
    ClassName,
    DamageType,
    EffectApplies,
    EffectOp,
    EffectTarget,
    ItemCategory,
    PreparationChange,
    ProficiencyLevel,
    Size,
    Skill,
    WeaponMastery,
)
from dnd_ledger.models.events import CharacterHistory, TraitEvent
from dnd_ledger.models.state import ClassLevelState, CoinPurse


class _View(BaseModel):
    model_config = ConfigDict(frozen=True)


# =============================================================================
# Abilities & Skills
# =============================================================================


class AbilityView(_View):
    """Current state of one ability score."""

    ability: Ability
    score: int
    modifier: int
    proficient: bool
    save: int = Field(description="Saving throw bonus")


class SkillView(_View):
    """Current proficiency and check bonus of one skill."""

    skill: Skill
    ability: Ability
    proficiency: ProficiencyLevel
    bonus: int


# =============================================================================
# Inventory
# =============================================================================


class DamageView(_View):
    """One damage roll of a weapon, in dice notation."""

    dice: str
    type: DamageType
    versatile: bool = False


class ItemEffectView(_View):
    """An item effect and whether the item's state activates it."""

    target: EffectTarget
    op: EffectOp
    value: int | None = None
    applies: EffectApplies | None = None
    active: bool = False


class InventoryItemView(_View):
    """An item in the inventory, joined with its catalog entry.

    Items missing from the catalog keep their id as ``name`` and have
    ``known_reference`` set to False.
    """

    item_id: str
    name: str
    known_reference: bool
    category: ItemCategory | None = None
    worn: bool = False
    wielded: bool = False
    charges: int = 0
    max_charges: int | None = None
    wearable: bool = False
    wieldable: bool = False
    use_verb: str = "use"
    uses_ammunition: bool = False
    finesse: bool = False
    martial: bool = False
    mastery: WeaponMastery | None = None
    damage: tuple[DamageView, ...] = ()
    effects: tuple[ItemEffectView, ...] = ()


# =============================================================================
# Spellcasting
# =============================================================================


class SpellView(_View):
    """A spell reference resolved against the catalog.

    Unknown spells keep their id as ``name`` and have no ``level``.
    """

    spell_id: str
    name: str
    level: int | None = None
    known_reference: bool = True


class SpellSlotView(_View):
    """One cantrip or prepared-spell slot; ``spell`` is None when empty."""

    spell: SpellView | None = None
    always_prepared: bool = False

    @property
    def is_empty(self) -> bool:
        """Whether no spell occupies the slot."""
        return self.spell is None


class ClassSpellcasting(_View):
    """Spellcasting of one class the character can cast with.

    Slot tuples always hold the capacity plus the always-prepared spells
    of that kind, always-prepared first. Chosen spells beyond capacity
    are left out of the slots, listed in ``overflow`` and flagged with
    ``over_capacity``. ``change_prepared`` tells when chosen spells may
    be swapped out.
    """

    class_name: ClassName
    level: int
    subclass: str | None = None
    ability: Ability
    spell_attack_bonus: int
    spell_save_dc: int
    max_spell_level: int
    cantrip_capacity: int
    prepared_capacity: int
    change_prepared: PreparationChange = PreparationChange.LEVEL_UP
    cantrip_slots: tuple[SpellSlotView, ...] = ()
    prepared_slots: tuple[SpellSlotView, ...] = ()
    spellbook: tuple[SpellView, ...] | None = None
    over_capacity: bool = False
    overflow: tuple[SpellView, ...] = ()


# =============================================================================
# Snapshot
# =============================================================================


class UnknownReference(_View):
    """An id in the event history that the reference dataset lacks."""

    kind: str
    reference_id: str


class ComputedCharacter(_View):
    """Point-in-time state of a character reconstructed from its events."""

    # Identity
    id: str
    name: str
    ruleset: str
    species: str | None = None
    lineage: str | None = None
    background: str | None = None
    alignment: str | None = None
    as_of: datetime | None = None

    # Classes
    classes: tuple[ClassLevelState, ...] = ()
    total_level: int = 0
    proficiency_bonus: int = 2
    size: Size | None = None
    speed: int | None = None

    # Abilities & skills
    abilities: tuple[AbilityView, ...] = ()
    skills: tuple[SkillView, ...] = ()

    # Health
    max_hit_points: int = 0
    current_hit_points: int = 0
    hit_point_offset: int = 0
    hit_dice: tuple[int, ...] = ()
    available_hit_dice: tuple[int, ...] = ()

    # Combat
    armor_class: int = 10
    initiative: int = 0
    passive_perception: int = 10

    # Possessions
    coins: CoinPurse = Field(default_factory=CoinPurse)
    inventory: tuple[InventoryItemView, ...] = ()

    # Spellcasting
    spell_slots: tuple[int, ...] = ()
    pact_magic_slots: tuple[int, ...] = ()
    available_spell_slots: tuple[int, ...] = ()
    spells: tuple[ClassSpellcasting, ...] = ()

    # Notes & traits
    traits: tuple[TraitEvent, ...] = ()
    notes: str = ""

    unknown_references: tuple[UnknownReference, ...] = ()
    history: CharacterHistory = Field(default_factory=CharacterHistory)

    def ability(self, ability: Ability) -> AbilityView | None:
        """Get the view of one ability, if it has been recorded."""
        return next((view for view in self.abilities if view.ability is ability), None)

    def skill(self, skill: Skill) -> SkillView:
        """Get the view of one skill."""
        return next(view for view in self.skills if view.skill is skill)

    def spellcasting(self, class_name: ClassName) -> ClassSpellcasting | None:
        """Get the spellcasting of one class, if the class casts."""
        return next((entry for entry in self.spells if entry.class_name is class_name), None)

    def item(self, item_id: str) -> InventoryItemView | None:
        """Get an inventory item by id."""
        return next((view for view in self.inventory if view.item_id == item_id), None)


__all__ = [
    "AbilityView",
    "SkillView",
    "DamageView",
    "ItemEffectView",
    "InventoryItemView",
    "SpellView",
    "SpellSlotView",
    "ClassSpellcasting",
    "UnknownReference",
    "ComputedCharacter",
]
