"""Tests for snapshot composition."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from dnd_ledger.core.config import Settings
from dnd_ledger.core.exceptions import CharacterNotFoundError, ReferenceDataError
from dnd_ledger.engine.composer import CharacterComposer, compose_character
from dnd_ledger.models.enums import (
    Ability,
    ClassName,
    DamageType,
    EffectOp,
    EffectTarget,
    EventDomain,
    ProficiencyLevel,
    Size,
    Skill,
    WeaponMastery,
)
from dnd_ledger.models.events import CharacterHistory, CharacterRecord
from dnd_ledger.rules.reference import Ruleset
from dnd_ledger.rules.srd import build_srd51


BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


class FakeSource:
    """In-memory event source."""

    def __init__(self, records: dict[str, CharacterRecord], histories: dict[str, CharacterHistory]) -> None:
        self.records = records
        self.histories = histories
        self.fetches = 0

    def get_character(self, character_id: str) -> CharacterRecord | None:
        return self.records.get(character_id)

    def fetch_history(self, character_id: str) -> CharacterHistory:
        self.fetches += 1
        return self.histories.get(character_id, CharacterHistory())


@pytest.fixture
def fighter_history(make_event: Callable[..., Any]) -> CharacterHistory:
    """Provide the history of a level 2 dwarf fighter.

    Returns:
        A history with abilities, levels, damage, gear and coins.
    """
    return CharacterHistory(
        abilities=(
            make_event(EventDomain.ABILITIES, ability="strength", score=16, proficient=True),
            make_event(EventDomain.ABILITIES, ability="dexterity", score=12),
            make_event(EventDomain.ABILITIES, ability="constitution", score=14, proficient=True),
            make_event(EventDomain.ABILITIES, ability="wisdom", score=10),
        ),
        skills=(
            make_event(EventDomain.SKILLS, skill="athletics", proficiency="proficient"),
            make_event(EventDomain.SKILLS, skill="perception", proficiency="proficient"),
        ),
        class_levels=(
            make_event(EventDomain.CLASS_LEVELS, class_name="fighter", level=1, hit_die_roll=10),
            make_event(EventDomain.CLASS_LEVELS, class_name="fighter", level=2, hit_die_roll=6),
        ),
        hit_points=(
            make_event(EventDomain.HIT_POINTS, at=30, delta=-15),
            make_event(EventDomain.HIT_POINTS, at=40, delta=5),
        ),
        hit_dice=(make_event(EventDomain.HIT_DICE, at=41, die=10, action="use"),),
        items=(
            make_event(EventDomain.ITEMS, item_id="chain-mail", worn=True),
            make_event(EventDomain.ITEMS, item_id="shield", wielded=True),
            make_event(EventDomain.ITEMS, item_id="lucky-pebble"),
        ),
        coins=(
            make_event(EventDomain.COINS, gp=100),
            make_event(EventDomain.COINS, gp=-30, sp=10),
        ),
        notes=(make_event(EventDomain.NOTES, content="Owes the smith 5 gp."),),
    )


class TestComposeCharacter:
    """Tests for the pure composition function."""

    def test_empty_history(self, character_record: CharacterRecord, srd52: Ruleset) -> None:
        """Test that a character with no events has empty state."""
        snapshot = compose_character(character_record, CharacterHistory(), srd52)

        assert snapshot.abilities == ()
        assert snapshot.classes == ()
        assert snapshot.total_level == 0
        assert snapshot.proficiency_bonus == 2
        assert snapshot.max_hit_points == 0
        assert snapshot.spells == ()
        assert len(snapshot.skills) == len(Skill)
        assert snapshot.coins.to_copper() == 0

    def test_fighter_snapshot(
        self,
        character_record: CharacterRecord,
        fighter_history: CharacterHistory,
        srd52: Ruleset,
    ) -> None:
        """Test a full snapshot of a level 2 fighter."""
        snapshot = compose_character(character_record, fighter_history, srd52)

        assert snapshot.ruleset == "srd52"
        assert snapshot.total_level == 2
        assert snapshot.proficiency_bonus == 2
        assert snapshot.size is Size.MEDIUM
        assert snapshot.speed == 30

        strength = snapshot.ability(Ability.STR)
        assert strength is not None
        assert strength.modifier == 3
        assert strength.save == 5
        assert snapshot.ability(Ability.CHA) is None
        assert [view.ability for view in snapshot.abilities] == [
            Ability.STR, Ability.DEX, Ability.CON, Ability.WIS,
        ]

        assert snapshot.skill(Skill.ATHLETICS).bonus == 5
        assert snapshot.skill(Skill.STEALTH).proficiency is ProficiencyLevel.NONE
        assert snapshot.skill(Skill.STEALTH).bonus == 1
        assert snapshot.passive_perception == 12
        assert snapshot.initiative == 1

        # (10 + 2) + (6 + 2)
        assert snapshot.max_hit_points == 20
        assert snapshot.current_hit_points == 10
        assert snapshot.hit_point_offset == -10
        assert snapshot.hit_dice == (10, 10)
        assert snapshot.available_hit_dice == (10,)

        assert snapshot.armor_class == 18
        assert snapshot.coins.gp == 70
        assert snapshot.coins.sp == 10
        assert snapshot.notes == "Owes the smith 5 gp."
        assert snapshot.spell_slots == ()

    def test_unknown_items_reported(
        self,
        character_record: CharacterRecord,
        fighter_history: CharacterHistory,
        srd52: Ruleset,
    ) -> None:
        """Test that an uncatalogued item stays in inventory and is reported."""
        snapshot = compose_character(character_record, fighter_history, srd52)

        pebble = snapshot.item("lucky-pebble")
        assert pebble is not None
        assert pebble.name == "lucky-pebble"
        assert pebble.known_reference is False
        assert [(r.kind, r.reference_id) for r in snapshot.unknown_references] == [
            ("item", "lucky-pebble"),
        ]

        shield = snapshot.item("shield")
        assert shield is not None
        assert shield.name == "Shield"
        assert shield.wieldable

    def test_item_weapon_details_and_effects(
        self,
        character_record: CharacterRecord,
        make_event: Callable[..., Any],
        srd52: Ruleset,
    ) -> None:
        """Test inventory views carry damage and mark effects active by item state."""
        history = CharacterHistory(
            items=(
                make_event(EventDomain.ITEMS, item_id="sun-blade", wielded=True),
                make_event(EventDomain.ITEMS, item_id="ring-of-protection", worn=True),
                make_event(EventDomain.ITEMS, item_id="gauntlets-of-ogre-power"),
            ),
        )

        snapshot = compose_character(character_record, history, srd52)

        blade = snapshot.item("sun-blade")
        assert blade is not None
        assert blade.finesse
        assert blade.martial
        assert blade.mastery is WeaponMastery.VEX
        assert [(d.dice, d.type, d.versatile) for d in blade.damage] == [
            ("1d8", DamageType.RADIANT, False),
            ("1d10", DamageType.RADIANT, True),
        ]
        assert [(e.target, e.value, e.active) for e in blade.effects] == [
            (EffectTarget.ATTACK, 2, True),
            (EffectTarget.DAMAGE, 2, True),
        ]

        ring = snapshot.item("ring-of-protection")
        assert ring is not None
        assert ring.damage == ()
        assert [(e.target, e.active) for e in ring.effects] == [(EffectTarget.AC, True)]
        # Effects are carried, never folded into armor class
        assert snapshot.armor_class == 10

        gauntlets = snapshot.item("gauntlets-of-ogre-power")
        assert gauntlets is not None
        assert [(e.target, e.op, e.active) for e in gauntlets.effects] == [
            (EffectTarget.STRENGTH, EffectOp.SET, False),
        ]

    def test_unknown_lineage_reported(self, srd52: Ruleset) -> None:
        """Test a lineage its species does not list is reported."""
        known = CharacterRecord(id="a", name="Ilo", species="elf", lineage="Wood Elf")
        unknown = CharacterRecord(id="b", name="Nim", species="elf", lineage="sea elf")

        assert compose_character(known, CharacterHistory(), srd52).unknown_references == ()
        snapshot = compose_character(unknown, CharacterHistory(), srd52)
        assert [(r.kind, r.reference_id) for r in snapshot.unknown_references] == [
            ("lineage", "sea elf"),
        ]

    def test_unknown_species_reported(self, srd52: Ruleset) -> None:
        """Test that a species missing from the ruleset has no size or speed."""
        record = CharacterRecord(id="c", name="Zed", species="warforged")

        snapshot = compose_character(record, CharacterHistory(), srd52)

        assert snapshot.size is None
        assert snapshot.speed is None
        assert snapshot.unknown_references[0].kind == "species"

    def test_hit_points_unclamped(
        self,
        character_record: CharacterRecord,
        make_event: Callable[..., Any],
        srd52: Ruleset,
    ) -> None:
        """Test that clamping can be switched off."""
        history = CharacterHistory(
            class_levels=(
                make_event(EventDomain.CLASS_LEVELS, class_name="wizard", level=1, hit_die_roll=6),
            ),
            hit_points=(make_event(EventDomain.HIT_POINTS, delta=-10),),
        )

        clamped = compose_character(character_record, history, srd52)
        raw = compose_character(character_record, history, srd52, clamp_hit_points=False)

        assert clamped.current_hit_points == 0
        assert raw.current_hit_points == -4

    def test_spellcaster_snapshot(
        self,
        character_record: CharacterRecord,
        make_event: Callable[..., Any],
        srd52: Ruleset,
    ) -> None:
        """Test slots, spending and spells of a wizard/warlock."""
        history = CharacterHistory(
            abilities=(
                make_event(EventDomain.ABILITIES, ability="intelligence", score=16),
                make_event(EventDomain.ABILITIES, ability="charisma", score=14),
            ),
            class_levels=(
                make_event(EventDomain.CLASS_LEVELS, class_name="wizard", level=1, hit_die_roll=6),
                make_event(EventDomain.CLASS_LEVELS, class_name="warlock", level=1, hit_die_roll=8),
            ),
            spellbook=(
                make_event(EventDomain.SPELLBOOK, spell_id="magic-missile", action="learn"),
                make_event(EventDomain.SPELLBOOK, spell_id="lost-tome-spell", action="learn"),
            ),
            prepared_spells=(
                make_event(
                    EventDomain.PREPARED_SPELLS,
                    class_name="wizard", spell_id="magic-missile", action="prepare",
                ),
                make_event(
                    EventDomain.PREPARED_SPELLS,
                    class_name="warlock", spell_id="eldritch-blast", action="prepare",
                ),
            ),
            spell_slots=(make_event(EventDomain.SPELL_SLOTS, slot_level=1, action="use"),),
        )

        snapshot = compose_character(character_record, history, srd52)

        assert snapshot.spell_slots == (1, 1)
        assert snapshot.pact_magic_slots == (1,)
        assert snapshot.available_spell_slots == (1, 1)
        wizard = snapshot.spellcasting(ClassName.WIZARD)
        warlock = snapshot.spellcasting(ClassName.WARLOCK)
        assert wizard is not None
        assert warlock is not None
        assert wizard.spell_save_dc == 13
        assert warlock.spell_save_dc == 12
        assert warlock.spellbook is None
        assert warlock.cantrip_slots[0].spell is not None
        assert warlock.cantrip_slots[0].spell.name == "Eldritch Blast"
        assert ("spell", "lost-tome-spell") in [
            (r.kind, r.reference_id) for r in snapshot.unknown_references
        ]

    def test_snapshot_is_frozen(self, character_record: CharacterRecord, srd52: Ruleset) -> None:
        """Test that snapshots cannot be edited."""
        snapshot = compose_character(character_record, CharacterHistory(), srd52)
        with pytest.raises(ValueError):
            snapshot.current_hit_points = 99  # type: ignore[misc]

    def test_dump_is_plain_data(
        self,
        character_record: CharacterRecord,
        fighter_history: CharacterHistory,
        srd52: Ruleset,
    ) -> None:
        """Test that the snapshot dumps to JSON-ready data."""
        dumped = compose_character(character_record, fighter_history, srd52).model_dump(mode="json")
        assert dumped["coins"]["total_gp"] == 71.0
        assert dumped["classes"][0]["class_name"] == "fighter"


class TestCharacterComposer:
    """Tests for the composer service."""

    def test_compose(self, character_record: CharacterRecord, fighter_history: CharacterHistory) -> None:
        """Test composing a character read from a source."""
        source = FakeSource({character_record.id: character_record}, {character_record.id: fighter_history})

        snapshot = CharacterComposer(source).compose(character_record.id)

        assert snapshot.name == "Thorin"
        assert snapshot.current_hit_points == 10

    def test_missing_character(self) -> None:
        """Test that an unknown character id raises."""
        composer = CharacterComposer(FakeSource({}, {}))
        with pytest.raises(CharacterNotFoundError) as exc_info:
            composer.compose("ghost")
        assert exc_info.value.details["character_id"] == "ghost"

    def test_recomputes_every_call(
        self, character_record: CharacterRecord, fighter_history: CharacterHistory
    ) -> None:
        """Test that nothing is cached between calls."""
        source = FakeSource({character_record.id: character_record}, {character_record.id: fighter_history})
        composer = CharacterComposer(source)

        first = composer.compose(character_record.id)
        second = composer.compose(character_record.id)

        assert source.fetches == 2
        assert first == second

    def test_default_ruleset(self, fighter_history: CharacterHistory) -> None:
        """Test that characters without a ruleset use the default."""
        record = CharacterRecord(id="c", name="Old Timer", species="dwarf")
        source = FakeSource({"c": record}, {"c": fighter_history})

        snapshot = CharacterComposer(source, default_ruleset="srd51").compose("c")

        assert snapshot.ruleset == "srd51"
        assert snapshot.speed == 25

    def test_custom_resolver(self, character_record: CharacterRecord) -> None:
        """Test that the ruleset resolver is injectable."""
        requested: list[str] = []

        def resolver(name: str) -> Ruleset:
            requested.append(name)
            return build_srd51()

        source = FakeSource({character_record.id: character_record}, {})
        snapshot = CharacterComposer(source, ruleset_resolver=resolver).compose(character_record.id)

        assert requested == ["srd52"]
        assert snapshot.ruleset == "srd51"

    def test_unknown_ruleset_raises(self) -> None:
        """Test that an unresolvable ruleset name raises."""
        record = CharacterRecord(id="c", name="Nobody")
        composer = CharacterComposer(FakeSource({"c": record}, {}), default_ruleset="srd99")
        with pytest.raises(ReferenceDataError):
            composer.compose("c")

    def test_as_of(self, character_record: CharacterRecord, fighter_history: CharacterHistory) -> None:
        """Test composing the character as it stood before the damage."""
        source = FakeSource({character_record.id: character_record}, {character_record.id: fighter_history})
        moment = BASE_TIME + timedelta(minutes=35)

        snapshot = CharacterComposer(source).compose(character_record.id, as_of=moment)

        assert snapshot.as_of == moment
        assert snapshot.current_hit_points == 5
        assert snapshot.available_hit_dice == (10, 10)

    def test_from_settings(
        self,
        character_record: CharacterRecord,
        make_event: Callable[..., Any],
        tmp_path: Any,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test building a composer from rules settings."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DND_LEDGER_RULES_CLAMP_HIT_POINTS", "false")
        history = CharacterHistory(
            class_levels=(
                make_event(EventDomain.CLASS_LEVELS, class_name="wizard", level=1, hit_die_roll=6),
            ),
            hit_points=(make_event(EventDomain.HIT_POINTS, delta=-10),),
        )
        source = FakeSource({character_record.id: character_record}, {character_record.id: history})

        composer = CharacterComposer.from_settings(source, Settings())

        assert composer.clamp_hit_points is False
        assert composer.compose(character_record.id).current_hit_points == -4
