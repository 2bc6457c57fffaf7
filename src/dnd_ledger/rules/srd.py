"""SRD 5.1 and SRD 5.2 rulesets.

Both editions share slot tables and the spell/item catalogs; they differ
in how many spells a class may prepare, in half-caster slots at level 1,
and in which subclasses grant spellcasting.

Example:
    >>> ruleset = get_ruleset("srd52")
    >>> ruleset.find_spell("fireball").level
    3
"""

from __future__ import annotations

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
from dnd_ledger.rules.progression import (
    CANTRIPS_KNOWN,
    FULL_CASTER_PREPARED,
    FULL_CASTER_SLOTS,
    HALF_CASTER_PREPARED,
    HALF_CASTER_SLOTS,
    HALF_CASTER_SLOTS_2024,
    SPELLS_KNOWN,
    THIRD_CASTER_CANTRIPS,
    THIRD_CASTER_SLOTS,
    THIRD_CASTER_SPELLS,
    WARLOCK_PACT_SLOTS,
    WARLOCK_PREPARED,
    slot_counts,
    stepped_value,
)
from dnd_ledger.rules.reference import (
    ClassDef,
    ItemDamage,
    ItemDef,
    ItemEffect,
    Ruleset,
    SpeciesDef,
    SpellcastingInfo,
    SpellDef,
)


RULESET_NAMES = ("srd51", "srd52")

THIRD_CASTER_CLASSES = frozenset({ClassName.FIGHTER, ClassName.ROGUE})


# =============================================================================
# Progression
# =============================================================================


class Srd51Progression:
    """SRD 5.1 capacities: known casters use tables, prepared casters use
    ability modifier plus level."""

    half_caster_slots: dict[int, dict[int, int]] = HALF_CASTER_SLOTS

    def cantrip_capacity(self, class_name: ClassName, level: int) -> int:
        """Cantrips known by a class at a class level."""
        if class_name in CANTRIPS_KNOWN:
            return stepped_value(CANTRIPS_KNOWN[class_name], level)
        if class_name in THIRD_CASTER_CLASSES:
            return stepped_value(THIRD_CASTER_CANTRIPS, level)
        return 0

    def prepared_capacity(self, class_name: ClassName, level: int, ability_modifier: int) -> int:
        """Spells known or prepared by a class at a class level."""
        if class_name in SPELLS_KNOWN:
            return SPELLS_KNOWN[class_name].get(level, 0)
        if class_name in THIRD_CASTER_CLASSES:
            return THIRD_CASTER_SPELLS.get(level, 0)
        if class_name is ClassName.PALADIN:
            return max(1, ability_modifier + level // 2) if level >= 2 else 0
        if class_name in (ClassName.CLERIC, ClassName.DRUID, ClassName.WIZARD):
            return max(1, ability_modifier + level)
        return 0

    def slot_counts(self, kind: CasterKind, level: int) -> dict[int, int]:
        """Spell slots per tier for a caster kind at a level."""
        if kind is CasterKind.PACT:
            count, tier = self.pact_slots(level)
            return {tier: count} if count else {}
        tables = {
            CasterKind.FULL: FULL_CASTER_SLOTS,
            CasterKind.HALF: self.half_caster_slots,
            CasterKind.THIRD: THIRD_CASTER_SLOTS,
        }
        return slot_counts(tables[kind], level)

    def pact_slots(self, level: int) -> tuple[int, int]:
        """Pact magic (count, tier) at a warlock level."""
        return WARLOCK_PACT_SLOTS.get(level, (0, 0))


class Srd52Progression(Srd51Progression):
    """SRD 5.2 capacities: every caster reads a prepared-spells column."""

    half_caster_slots = HALF_CASTER_SLOTS_2024

    def prepared_capacity(self, class_name: ClassName, level: int, ability_modifier: int) -> int:
        """Spells a class may have prepared at a class level."""
        if class_name in (
            ClassName.BARD,
            ClassName.CLERIC,
            ClassName.DRUID,
            ClassName.SORCERER,
            ClassName.WIZARD,
        ):
            return FULL_CASTER_PREPARED.get(level, 0)
        if class_name in (ClassName.PALADIN, ClassName.RANGER):
            return HALF_CASTER_PREPARED.get(level, 0)
        if class_name is ClassName.WARLOCK:
            return WARLOCK_PREPARED.get(level, 0)
        return 0


# =============================================================================
# Classes
# =============================================================================


def _casting(
    kind: CasterKind,
    ability: Ability,
    change: PreparationChange = PreparationChange.LEVEL_UP,
    *,
    subclasses: tuple[str, ...] = (),
    spellbook: bool = False,
) -> SpellcastingInfo:
    return SpellcastingInfo(
        kind=kind,
        ability=ability,
        change_prepared=change,
        subclasses=frozenset(subclasses),
        spellbook=spellbook,
    )


def _classes(*, third_casters: bool) -> list[ClassDef]:
    longrest = PreparationChange.LONG_REST
    fighter_casting = (
        _casting(CasterKind.THIRD, Ability.INT, subclasses=("eldritch knight",))
        if third_casters
        else None
    )
    rogue_casting = (
        _casting(CasterKind.THIRD, Ability.INT, subclasses=("arcane trickster",))
        if third_casters
        else None
    )
    return [
        ClassDef(name=ClassName.BARBARIAN, hit_die=12, subclasses=("path of the berserker",)),
        ClassDef(
            name=ClassName.BARD,
            hit_die=8,
            subclasses=("college of lore",),
            spellcasting=_casting(CasterKind.FULL, Ability.CHA),
        ),
        ClassDef(
            name=ClassName.CLERIC,
            hit_die=8,
            subclasses=("life domain",),
            spellcasting=_casting(CasterKind.FULL, Ability.WIS, longrest),
        ),
        ClassDef(
            name=ClassName.DRUID,
            hit_die=8,
            subclasses=("circle of the land",),
            spellcasting=_casting(CasterKind.FULL, Ability.WIS, longrest),
        ),
        ClassDef(
            name=ClassName.FIGHTER,
            hit_die=10,
            subclasses=("champion", "eldritch knight") if third_casters else ("champion",),
            spellcasting=fighter_casting,
        ),
        ClassDef(name=ClassName.MONK, hit_die=8, subclasses=("warrior of the open hand",)),
        ClassDef(
            name=ClassName.PALADIN,
            hit_die=10,
            subclasses=("oath of devotion",),
            spellcasting=_casting(CasterKind.HALF, Ability.CHA, longrest),
        ),
        ClassDef(
            name=ClassName.RANGER,
            hit_die=10,
            subclasses=("hunter",),
            spellcasting=_casting(CasterKind.HALF, Ability.WIS),
        ),
        ClassDef(
            name=ClassName.ROGUE,
            hit_die=8,
            subclasses=("thief", "arcane trickster") if third_casters else ("thief",),
            spellcasting=rogue_casting,
        ),
        ClassDef(
            name=ClassName.SORCERER,
            hit_die=6,
            subclasses=("draconic sorcery",),
            spellcasting=_casting(CasterKind.FULL, Ability.CHA),
        ),
        ClassDef(
            name=ClassName.WARLOCK,
            hit_die=8,
            subclasses=("fiend patron",),
            spellcasting=_casting(CasterKind.PACT, Ability.CHA),
        ),
        ClassDef(
            name=ClassName.WIZARD,
            hit_die=6,
            subclasses=("evoker",),
            spellcasting=_casting(CasterKind.FULL, Ability.INT, longrest, spellbook=True),
        ),
    ]


# =============================================================================
# Species
# =============================================================================


SPECIES_51: list[SpeciesDef] = [
    SpeciesDef(name="dwarf", speed=25, lineages=("hill dwarf",)),
    SpeciesDef(name="elf", lineages=("high elf",)),
    SpeciesDef(name="halfling", size=Size.SMALL, speed=25, lineages=("lightfoot",)),
    SpeciesDef(name="human"),
    SpeciesDef(name="dragonborn"),
    SpeciesDef(name="gnome", size=Size.SMALL, speed=25, lineages=("rock gnome",)),
    SpeciesDef(name="half-elf"),
    SpeciesDef(name="half-orc"),
    SpeciesDef(name="tiefling"),
]

SPECIES_52: list[SpeciesDef] = [
    SpeciesDef(name="dragonborn"),
    SpeciesDef(name="dwarf"),
    SpeciesDef(name="elf", lineages=("drow", "high elf", "wood elf")),
    SpeciesDef(name="gnome", size=Size.SMALL, lineages=("forest gnome", "rock gnome")),
    SpeciesDef(name="goliath", speed=35),
    SpeciesDef(name="halfling", size=Size.SMALL),
    SpeciesDef(name="human"),
    SpeciesDef(name="orc"),
    SpeciesDef(name="tiefling", lineages=("abyssal", "chthonic", "infernal")),
]


# =============================================================================
# Spells
# =============================================================================

_B, _C, _D, _P, _R, _S, _K, _W = (
    ClassName.BARD,
    ClassName.CLERIC,
    ClassName.DRUID,
    ClassName.PALADIN,
    ClassName.RANGER,
    ClassName.SORCERER,
    ClassName.WARLOCK,
    ClassName.WIZARD,
)


def _spell(spell_id: str, name: str, level: int, school: SpellSchool, *classes: ClassName) -> SpellDef:
    return SpellDef(id=spell_id, name=name, level=level, school=school, classes=frozenset(classes))


SPELLS: list[SpellDef] = [
    # Cantrips
    _spell("druidcraft", "Druidcraft", 0, SpellSchool.TRANSMUTATION, _D),
    _spell("eldritch-blast", "Eldritch Blast", 0, SpellSchool.EVOCATION, _K),
    _spell("fire-bolt", "Fire Bolt", 0, SpellSchool.EVOCATION, _S, _W),
    _spell("guidance", "Guidance", 0, SpellSchool.DIVINATION, _C, _D),
    _spell("light", "Light", 0, SpellSchool.EVOCATION, _B, _C, _S, _W),
    _spell("mage-hand", "Mage Hand", 0, SpellSchool.CONJURATION, _B, _S, _K, _W),
    _spell("minor-illusion", "Minor Illusion", 0, SpellSchool.ILLUSION, _B, _S, _K, _W),
    _spell("prestidigitation", "Prestidigitation", 0, SpellSchool.TRANSMUTATION, _B, _S, _K, _W),
    _spell("ray-of-frost", "Ray of Frost", 0, SpellSchool.EVOCATION, _S, _W),
    _spell("sacred-flame", "Sacred Flame", 0, SpellSchool.EVOCATION, _C),
    _spell("vicious-mockery", "Vicious Mockery", 0, SpellSchool.ENCHANTMENT, _B),
    # 1st level
    _spell("bless", "Bless", 1, SpellSchool.ENCHANTMENT, _C, _P),
    _spell("charm-person", "Charm Person", 1, SpellSchool.ENCHANTMENT, _B, _D, _S, _K, _W),
    _spell("cure-wounds", "Cure Wounds", 1, SpellSchool.ABJURATION, _B, _C, _D, _P, _R),
    _spell("detect-magic", "Detect Magic", 1, SpellSchool.DIVINATION, _B, _C, _D, _P, _R, _S, _W),
    _spell("healing-word", "Healing Word", 1, SpellSchool.ABJURATION, _B, _C, _D),
    _spell("hex", "Hex", 1, SpellSchool.ENCHANTMENT, _K),
    _spell("hunters-mark", "Hunter's Mark", 1, SpellSchool.DIVINATION, _R),
    _spell("mage-armor", "Mage Armor", 1, SpellSchool.ABJURATION, _S, _W),
    _spell("magic-missile", "Magic Missile", 1, SpellSchool.EVOCATION, _S, _W),
    _spell("shield", "Shield", 1, SpellSchool.ABJURATION, _S, _W),
    _spell("sleep", "Sleep", 1, SpellSchool.ENCHANTMENT, _B, _S, _W),
    _spell("thunderwave", "Thunderwave", 1, SpellSchool.EVOCATION, _B, _D, _S, _W),
    # 2nd level
    _spell("hold-person", "Hold Person", 2, SpellSchool.ENCHANTMENT, _B, _C, _D, _S, _K, _W),
    _spell("invisibility", "Invisibility", 2, SpellSchool.ILLUSION, _B, _S, _K, _W),
    _spell("misty-step", "Misty Step", 2, SpellSchool.CONJURATION, _S, _K, _W),
    _spell("spiritual-weapon", "Spiritual Weapon", 2, SpellSchool.EVOCATION, _C),
    # 3rd level and up
    _spell("counterspell", "Counterspell", 3, SpellSchool.ABJURATION, _S, _K, _W),
    _spell("fireball", "Fireball", 3, SpellSchool.EVOCATION, _S, _W),
    _spell("revivify", "Revivify", 3, SpellSchool.NECROMANCY, _C, _P),
    _spell("polymorph", "Polymorph", 4, SpellSchool.TRANSMUTATION, _B, _D, _S, _W),
    _spell("cone-of-cold", "Cone of Cold", 5, SpellSchool.EVOCATION, _S, _W),
    _spell("wish", "Wish", 9, SpellSchool.CONJURATION, _S, _W),
]


# =============================================================================
# Items
# =============================================================================

def _damage(kind: DamageType, *dice: int, versatile: bool = False) -> ItemDamage:
    return ItemDamage(dice=dice, type=kind, versatile=versatile)


_SLASHING = DamageType.SLASHING
_PIERCING = DamageType.PIERCING
_BLUDGEONING = DamageType.BLUDGEONING

ITEMS: list[ItemDef] = [
    # Weapons
    ItemDef(id="dagger", name="Dagger", category=ItemCategory.WEAPON,
            normal_range=20, long_range=60, thrown=True, finesse=True,
            mastery=WeaponMastery.NICK, damage=(_damage(_PIERCING, 4),)),
    ItemDef(id="javelin", name="Javelin", category=ItemCategory.WEAPON,
            normal_range=30, long_range=120, thrown=True,
            mastery=WeaponMastery.SLOW, damage=(_damage(_PIERCING, 6),)),
    ItemDef(id="longsword", name="Longsword", category=ItemCategory.WEAPON,
            martial=True, mastery=WeaponMastery.SAP,
            damage=(_damage(_SLASHING, 8), _damage(_SLASHING, 10, versatile=True))),
    ItemDef(id="quarterstaff", name="Quarterstaff", category=ItemCategory.WEAPON,
            mastery=WeaponMastery.TOPPLE,
            damage=(_damage(_BLUDGEONING, 6), _damage(_BLUDGEONING, 8, versatile=True))),
    ItemDef(id="greatsword", name="Greatsword", category=ItemCategory.WEAPON,
            martial=True, mastery=WeaponMastery.GRAZE, damage=(_damage(_SLASHING, 6, 6),)),
    ItemDef(id="shortbow", name="Shortbow", category=ItemCategory.WEAPON,
            normal_range=80, long_range=320, mastery=WeaponMastery.VEX,
            damage=(_damage(_PIERCING, 6),)),
    ItemDef(id="longbow", name="Longbow", category=ItemCategory.WEAPON,
            normal_range=150, long_range=600, martial=True, mastery=WeaponMastery.SLOW,
            damage=(_damage(_PIERCING, 8),)),
    # Armor
    ItemDef(id="leather-armor", name="Leather Armor", category=ItemCategory.ARMOR,
            armor_type=ArmorType.LIGHT, armor_class=11, armor_class_dex=True),
    ItemDef(id="studded-leather", name="Studded Leather", category=ItemCategory.ARMOR,
            armor_type=ArmorType.LIGHT, armor_class=12, armor_class_dex=True),
    ItemDef(id="chain-shirt", name="Chain Shirt", category=ItemCategory.ARMOR,
            armor_type=ArmorType.MEDIUM, armor_class=13, armor_class_dex=True,
            armor_class_dex_max=2),
    ItemDef(id="chain-mail", name="Chain Mail", category=ItemCategory.ARMOR,
            armor_type=ArmorType.HEAVY, armor_class=16),
    ItemDef(id="plate-armor", name="Plate Armor", category=ItemCategory.ARMOR,
            armor_type=ArmorType.HEAVY, armor_class=18),
    ItemDef(id="shield", name="Shield", category=ItemCategory.SHIELD, armor_modifier=2),
    # Consumables and magic items
    ItemDef(id="potion-of-healing", name="Potion of Healing", category=ItemCategory.POTION),
    ItemDef(id="spell-scroll", name="Spell Scroll", category=ItemCategory.SCROLL),
    ItemDef(id="wand-of-magic-missiles", name="Wand of Magic Missiles",
            category=ItemCategory.WAND, max_charges=7),
    ItemDef(id="ring-of-protection", name="Ring of Protection", category=ItemCategory.JEWELRY,
            effects=(ItemEffect(target=EffectTarget.AC, op=EffectOp.ADD, value=1,
                                applies=EffectApplies.WORN),)),
    ItemDef(id="gauntlets-of-ogre-power", name="Gauntlets of Ogre Power",
            category=ItemCategory.CLOTHING,
            effects=(ItemEffect(target=EffectTarget.STRENGTH, op=EffectOp.SET, value=19,
                                applies=EffectApplies.WORN),)),
    ItemDef(id="sun-blade", name="Sun Blade", category=ItemCategory.WEAPON,
            finesse=True, martial=True, mastery=WeaponMastery.VEX,
            damage=(_damage(DamageType.RADIANT, 8), _damage(DamageType.RADIANT, 10, versatile=True)),
            effects=(ItemEffect(target=EffectTarget.ATTACK, op=EffectOp.ADD, value=2,
                                applies=EffectApplies.WIELDED),
                     ItemEffect(target=EffectTarget.DAMAGE, op=EffectOp.ADD, value=2,
                                applies=EffectApplies.WIELDED))),
    # Gear
    ItemDef(id="travelers-clothes", name="Traveler's Clothes", category=ItemCategory.CLOTHING),
    ItemDef(id="backpack", name="Backpack", category=ItemCategory.CONTAINER),
    ItemDef(id="rope", name="Rope (50 feet)", category=ItemCategory.GEAR),
    ItemDef(id="thieves-tools", name="Thieves' Tools", category=ItemCategory.TOOL),
]


# =============================================================================
# Ruleset Access
# =============================================================================


def build_srd51() -> Ruleset:
    """Build the SRD 5.1 ruleset."""
    return Ruleset.build(
        "srd51",
        Srd51Progression(),
        classes=_classes(third_casters=True),
        species=SPECIES_51,
        spells=SPELLS,
        items=ITEMS,
    )


def build_srd52() -> Ruleset:
    """Build the SRD 5.2 ruleset."""
    return Ruleset.build(
        "srd52",
        Srd52Progression(),
        classes=_classes(third_casters=False),
        species=SPECIES_52,
        spells=SPELLS,
        items=ITEMS,
    )


def get_ruleset(name: str) -> Ruleset:
    """Get a ruleset by name.

    Args:
        name: 'srd51' or 'srd52'.

    Returns:
        A freshly built ruleset.

    Raises:
        ReferenceDataError: If no ruleset has that name.
    """
    if name == "srd51":
        return build_srd51()
    if name == "srd52":
        return build_srd52()
    raise ReferenceDataError(
        f"Unknown ruleset: {name}",
        reference_id=name,
        details={"available": list(RULESET_NAMES)},
    )


__all__ = [
    "RULESET_NAMES",
    "Srd51Progression",
    "Srd52Progression",
    "SPELLS",
    "ITEMS",
    "build_srd51",
    "build_srd52",
    "get_ruleset",
]
