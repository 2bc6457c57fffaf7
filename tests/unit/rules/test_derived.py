"""Tests for derived game numbers."""

from __future__ import annotations

import pytest

from dnd_ledger.core.exceptions import ReferenceDataError
from dnd_ledger.models.enums import Ability, ClassName, ProficiencyLevel, Skill
from dnd_ledger.models.state import AbilityState, ClassLevelState, ItemState
from dnd_ledger.rules.derived import (
    ability_modifier,
    armor_class,
    casting_classes,
    character_spell_slots,
    initiative,
    max_spell_level,
    multiclass_caster_level,
    pact_magic_slots,
    passive_perception,
    saving_throw,
    skill_bonus,
    spell_attack_bonus,
    spell_save_dc,
)
from dnd_ledger.rules.progression import get_proficiency_bonus
from dnd_ledger.rules.reference import Ruleset


def _classes(*levels: tuple[ClassName, int]) -> list[ClassLevelState]:
    return [ClassLevelState(class_name=name, level=level) for name, level in levels]


class TestAbilityModifier:
    """Tests for ability modifiers."""

    @pytest.mark.parametrize(
        ("score", "expected"),
        [(1, -5), (7, -2), (8, -1), (9, -1), (10, 0), (11, 0), (18, 4), (30, 10)],
    )
    def test_modifier(self, score: int, expected: int) -> None:
        """Test modifier rounds down for odd and low scores."""
        assert ability_modifier(score) == expected


class TestProficiencyBonus:
    """Tests for proficiency bonus by total level."""

    @pytest.mark.parametrize(
        ("level", "expected"),
        [(0, 2), (1, 2), (4, 2), (5, 3), (9, 4), (10, 4), (13, 5), (17, 6), (20, 6), (25, 6)],
    )
    def test_bonus(self, level: int, expected: int) -> None:
        """Test proficiency bonus steps every four levels."""
        assert get_proficiency_bonus(level) == expected


class TestChecksAndSaves:
    """Tests for saving throws, skills, initiative and passive perception."""

    def test_saving_throw(self) -> None:
        """Test that proficiency adds the bonus to a save."""
        assert saving_throw(AbilityState(score=14), 3) == 2
        assert saving_throw(AbilityState(score=14, proficient=True), 3) == 5

    @pytest.mark.parametrize(
        ("proficiency", "expected"),
        [
            (ProficiencyLevel.NONE, 3),
            (ProficiencyLevel.HALF, 4),
            (ProficiencyLevel.PROFICIENT, 6),
            (ProficiencyLevel.EXPERT, 9),
        ],
    )
    def test_skill_bonus(self, proficiency: ProficiencyLevel, expected: int) -> None:
        """Test skill bonus per proficiency level with DEX 16 and PB 3."""
        abilities = {Ability.DEX: AbilityState(score=16)}
        assert skill_bonus(Skill.STEALTH, proficiency, abilities, 3) == expected

    def test_missing_ability_counts_as_zero(self) -> None:
        """Test that an unrecorded ability contributes nothing."""
        assert skill_bonus(Skill.ARCANA, ProficiencyLevel.PROFICIENT, {}, 2) == 2
        assert initiative({}) == 0

    def test_passive_perception(self) -> None:
        """Test passive perception is 10 plus the Perception bonus."""
        abilities = {Ability.WIS: AbilityState(score=14)}
        skills = {Skill.PERCEPTION: ProficiencyLevel.PROFICIENT}
        assert passive_perception(skills, abilities, 2) == 14
        assert passive_perception({}, abilities, 2) == 12

    def test_initiative(self) -> None:
        """Test initiative uses the DEX modifier."""
        assert initiative({Ability.DEX: AbilityState(score=15)}) == 2


class TestArmorClass:
    """Tests for armor class."""

    def test_unarmored(self, srd52: Ruleset) -> None:
        """Test unarmored AC is 10 plus DEX."""
        abilities = {Ability.DEX: AbilityState(score=14)}
        assert armor_class({}, abilities, srd52) == 12

    def test_light_armor_and_shield(self, srd52: Ruleset) -> None:
        """Test leather armor adds full DEX and a shield adds two."""
        abilities = {Ability.DEX: AbilityState(score=18)}
        inventory = {
            "leather-armor": ItemState(worn=True),
            "shield": ItemState(wielded=True),
        }
        assert armor_class(inventory, abilities, srd52) == 11 + 4 + 2

    def test_medium_armor_caps_dex(self, srd52: Ruleset) -> None:
        """Test a chain shirt adds at most two DEX."""
        abilities = {Ability.DEX: AbilityState(score=18)}
        assert armor_class({"chain-shirt": ItemState(worn=True)}, abilities, srd52) == 15

    def test_heavy_armor_ignores_dex(self, srd52: Ruleset) -> None:
        """Test chain mail ignores DEX entirely."""
        abilities = {Ability.DEX: AbilityState(score=8)}
        assert armor_class({"chain-mail": ItemState(worn=True)}, abilities, srd52) == 16

    def test_carried_armor_does_not_count(self, srd52: Ruleset) -> None:
        """Test armor in the pack gives no AC."""
        assert armor_class({"plate-armor": ItemState()}, {}, srd52) == 10

    def test_unknown_items_ignored(self, srd52: Ruleset) -> None:
        """Test items missing from the catalog contribute nothing."""
        assert armor_class({"mithral-vest": ItemState(worn=True)}, {}, srd52) == 10


class TestSpellcastingNumbers:
    """Tests for spell attack and save DC."""

    def test_attack_and_dc(self) -> None:
        """Test spell attack and save DC with PB 3 and modifier 4."""
        assert spell_attack_bonus(3, 4) == 7
        assert spell_save_dc(3, 4) == 15


class TestSpellSlots:
    """Tests for spell slots and pact magic."""

    def test_class_missing_from_ruleset(self, srd52: Ruleset) -> None:
        """Test a class absent from the ruleset is a reference data fault."""
        partial = Ruleset.build("partial", srd52.progression)
        with pytest.raises(ReferenceDataError) as exc_info:
            casting_classes(_classes((ClassName.WIZARD, 1)), partial)
        assert exc_info.value.details["reference_id"] == "wizard"

    def test_level_one_wizard(self, srd52: Ruleset) -> None:
        """Test a level 1 wizard has two first-level slots."""
        casting = casting_classes(_classes((ClassName.WIZARD, 1)), srd52)
        assert character_spell_slots(casting, srd52) == [1, 1]

    def test_single_half_caster_uses_own_table(self, srd51: Ruleset, srd52: Ruleset) -> None:
        """Test a lone paladin reads the half-caster table of its edition."""
        classes = _classes((ClassName.PALADIN, 1))
        assert character_spell_slots(casting_classes(classes, srd51), srd51) == []
        assert character_spell_slots(casting_classes(classes, srd52), srd52) == [1, 1]

        classes = _classes((ClassName.PALADIN, 5))
        assert character_spell_slots(casting_classes(classes, srd52), srd52) == [1, 1, 1, 1, 2, 2]

    def test_multiclass_caster_level(self, srd52: Ruleset) -> None:
        """Test wizard 3 / paladin 4 is caster level 5."""
        casting = casting_classes(
            _classes((ClassName.WIZARD, 3), (ClassName.PALADIN, 4)), srd52
        )

        assert multiclass_caster_level(casting) == 5
        assert character_spell_slots(casting, srd52) == [1, 1, 1, 1, 2, 2, 2, 3, 3]

    def test_half_casters_summed_before_division(self, srd52: Ruleset) -> None:
        """Test paladin 3 / ranger 3 rounds once, to caster level 3."""
        casting = casting_classes(
            _classes((ClassName.PALADIN, 3), (ClassName.RANGER, 3)), srd52
        )
        assert multiclass_caster_level(casting) == 3

    def test_warlock_pact_slots(self, srd52: Ruleset) -> None:
        """Test a level 5 warlock has two third-level pact slots."""
        casting = casting_classes(_classes((ClassName.WARLOCK, 5)), srd52)

        assert pact_magic_slots(casting, srd52) == [3, 3]
        assert character_spell_slots(casting, srd52) == []
        assert max_spell_level(casting[0].spellcasting, 5, srd52) == 3

    def test_pact_magic_kept_apart(self, srd52: Ruleset) -> None:
        """Test warlock levels do not add to a sorcerer's slots."""
        casting = casting_classes(
            _classes((ClassName.SORCERER, 1), (ClassName.WARLOCK, 2)), srd52
        )

        assert character_spell_slots(casting, srd52) == [1, 1]
        assert pact_magic_slots(casting, srd52) == [1, 1]

    def test_non_caster_has_no_slots(self, srd52: Ruleset) -> None:
        """Test fighters in SRD 5.2 never cast."""
        classes = [
            ClassLevelState(class_name=ClassName.FIGHTER, level=10, subclass="eldritch knight")
        ]
        casting = casting_classes(classes, srd52)
        assert casting == []
        assert character_spell_slots(casting, srd52) == []

    def test_max_spell_level(self, srd52: Ruleset) -> None:
        """Test the highest castable tier per class level."""
        casting = casting_classes(_classes((ClassName.WIZARD, 9)), srd52)
        assert max_spell_level(casting[0].spellcasting, 9, srd52) == 5
