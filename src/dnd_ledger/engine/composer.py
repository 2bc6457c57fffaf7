"""Character snapshot composition.

``compose_character`` is the pure core: given a character record, its
event history and a ruleset, it runs every per-domain projection, the
spell projection and the derived rules, and returns one frozen
``ComputedCharacter``. It performs no I/O and never writes.

``CharacterComposer`` wraps it for callers that start from a character
id. Its event source and ruleset resolver are passed in explicitly; it
keeps no state between calls and recomputes everything each time.

Example:
    >>> composer = CharacterComposer(Database("ledger.db"))
    >>> snapshot = composer.compose("char-1")
    >>> snapshot.current_hit_points
    27
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from dnd_ledger.core.exceptions import CharacterNotFoundError
from dnd_ledger.core.logging import get_logger
from dnd_ledger.engine.projections import (
    current_abilities,
    current_charges,
    current_classes,
    current_coins,
    current_hit_dice,
    current_hit_points,
    current_inventory,
    current_note,
    current_skills,
    current_spell_slots,
    current_traits,
    granted_hit_dice,
    hit_point_offset,
    max_hit_points,
)
from dnd_ledger.engine.spells import known_spells, prepared_spells, project_spellcasting
from dnd_ledger.models.enums import Ability, ProficiencyLevel, Skill
from dnd_ledger.models.events import CharacterHistory, CharacterRecord
from dnd_ledger.models.snapshot import (
    AbilityView,
    ClassSpellcasting,
    ComputedCharacter,
    DamageView,
    InventoryItemView,
    ItemEffectView,
    SkillView,
    UnknownReference,
)
from dnd_ledger.models.state import ItemState
from dnd_ledger.rules.derived import (
    ability_modifier,
    armor_class,
    casting_classes,
    character_spell_slots,
    initiative,
    modifier_for,
    pact_magic_slots,
    passive_perception,
    saving_throw,
    skill_bonus,
)
from dnd_ledger.rules.reference import Ruleset
from dnd_ledger.rules.srd import get_ruleset


if TYPE_CHECKING:
    from dnd_ledger.core.config import Settings


logger = get_logger(__name__)


class EventSource(Protocol):
    """Read access to character records and their event logs."""

    def get_character(self, character_id: str) -> CharacterRecord | None:
        """Get the identity record of a character, or None."""
        ...

    def fetch_history(self, character_id: str) -> CharacterHistory:
        """Get every validated event log of a character."""
        ...


# =============================================================================
# Pure Composition
# =============================================================================


def _inventory_views(
    inventory: dict[str, ItemState],
    charges: dict[str, int],
    ruleset: Ruleset,
) -> list[InventoryItemView]:
    views: list[InventoryItemView] = []
    for item_id, state in inventory.items():
        item = ruleset.find_item(item_id)
        if item is None:
            views.append(
                InventoryItemView(
                    item_id=item_id,
                    name=item_id,
                    known_reference=False,
                    worn=state.worn,
                    wielded=state.wielded,
                    charges=charges.get(item_id, 0),
                )
            )
            continue
        views.append(
            InventoryItemView(
                item_id=item_id,
                name=item.name,
                known_reference=True,
                category=item.category,
                worn=state.worn,
                wielded=state.wielded,
                charges=charges.get(item_id, 0),
                max_charges=item.max_charges,
                wearable=item.wearable,
                wieldable=item.wieldable,
                use_verb=item.use_verb,
                uses_ammunition=item.uses_ammunition,
                finesse=item.finesse,
                martial=item.martial,
                mastery=item.mastery,
                damage=tuple(
                    DamageView(dice=roll.notation, type=roll.type, versatile=roll.versatile)
                    for roll in item.damage
                ),
                effects=tuple(
                    ItemEffectView(
                        target=effect.target,
                        op=effect.op,
                        value=effect.value,
                        applies=effect.applies,
                        active=effect.is_active(worn=state.worn, wielded=state.wielded),
                    )
                    for effect in item.effects
                ),
            )
        )
    return views


def _unknown_references(
    record: CharacterRecord,
    inventory: list[InventoryItemView],
    spells: list[ClassSpellcasting],
    ruleset: Ruleset,
) -> list[UnknownReference]:
    found: dict[tuple[str, str], UnknownReference] = {}

    def note(kind: str, reference_id: str) -> None:
        found.setdefault((kind, reference_id), UnknownReference(kind=kind, reference_id=reference_id))

    species = ruleset.find_species(record.species) if record.species else None
    if record.species and species is None:
        note("species", record.species)
    if species is not None and record.lineage and not species.has_lineage(record.lineage):
        note("lineage", record.lineage)
    for item in inventory:
        if not item.known_reference:
            note("item", item.item_id)
    for entry in spells:
        views = [
            *(slot.spell for slot in (*entry.cantrip_slots, *entry.prepared_slots) if slot.spell),
            *(entry.spellbook or ()),
            *entry.overflow,
        ]
        for view in views:
            if not view.known_reference:
                note("spell", view.spell_id)
    return list(found.values())


def compose_character(
    record: CharacterRecord,
    history: CharacterHistory,
    ruleset: Ruleset,
    *,
    clamp_hit_points: bool = True,
    as_of: datetime | None = None,
) -> ComputedCharacter:
    """Reconstruct a character's current state from its event history.

    Args:
        record: The character's identity record.
        history: The character's event logs.
        ruleset: Reference dataset and progression tables.
        clamp_hit_points: Keep current HP between 0 and max HP.
        as_of: Point in time the history was cut at, for display.

    Returns:
        The frozen computed snapshot.
    """
    abilities = current_abilities(history.abilities)
    skills = current_skills(history.skills)
    classes = current_classes(history.class_levels)
    total_level = sum(state.level for state in classes)
    proficiency_bonus = ruleset.proficiency_bonus(total_level)

    ability_views = [
        AbilityView(
            ability=ability,
            score=state.score,
            modifier=ability_modifier(state.score),
            proficient=state.proficient,
            save=saving_throw(state, proficiency_bonus),
        )
        for ability, state in sorted(abilities.items(), key=lambda item: list(Ability).index(item[0]))
    ]
    skill_views = [
        SkillView(
            skill=skill,
            ability=skill.ability,
            proficiency=skills.get(skill, ProficiencyLevel.NONE),
            bonus=skill_bonus(
                skill, skills.get(skill, ProficiencyLevel.NONE), abilities, proficiency_bonus
            ),
        )
        for skill in Skill
    ]

    max_hp = max_hit_points(
        history.class_levels, classes, modifier_for(abilities, Ability.CON), ruleset
    )
    hit_dice = granted_hit_dice(classes, ruleset)

    inventory = current_inventory(history.items)
    inventory_views = _inventory_views(inventory, current_charges(history.item_charges), ruleset)

    casting = casting_classes(classes, ruleset)
    spell_slots = character_spell_slots(casting, ruleset)
    pact_slots = pact_magic_slots(casting, ruleset)
    spells = project_spellcasting(
        classes,
        abilities,
        proficiency_bonus,
        known_spells(history.spellbook),
        prepared_spells(history.prepared_spells),
        ruleset,
    )

    species = ruleset.find_species(record.species)

    return ComputedCharacter(
        id=record.id,
        name=record.name,
        ruleset=ruleset.name,
        species=record.species,
        lineage=record.lineage,
        background=record.background,
        alignment=record.alignment,
        as_of=as_of,
        classes=tuple(classes),
        total_level=total_level,
        proficiency_bonus=proficiency_bonus,
        size=species.size if species is not None else None,
        speed=species.speed if species is not None else None,
        abilities=tuple(ability_views),
        skills=tuple(skill_views),
        max_hit_points=max_hp,
        current_hit_points=current_hit_points(max_hp, history.hit_points, clamp=clamp_hit_points),
        hit_point_offset=hit_point_offset(history.hit_points),
        hit_dice=tuple(hit_dice),
        available_hit_dice=tuple(current_hit_dice(hit_dice, history.hit_dice)),
        armor_class=armor_class(inventory, abilities, ruleset),
        initiative=initiative(abilities),
        passive_perception=passive_perception(skills, abilities, proficiency_bonus),
        coins=current_coins(history.coins),
        inventory=tuple(inventory_views),
        spell_slots=tuple(spell_slots),
        pact_magic_slots=tuple(pact_slots),
        available_spell_slots=tuple(
            current_spell_slots([*spell_slots, *pact_slots], history.spell_slots)
        ),
        spells=tuple(spells),
        traits=tuple(current_traits(history.traits)),
        notes=current_note(history.notes),
        unknown_references=tuple(_unknown_references(record, inventory_views, spells, ruleset)),
        history=history,
    )


# =============================================================================
# Composer Service
# =============================================================================


class CharacterComposer:
    """Composes snapshots for characters read from an event source.

    Attributes:
        source: Where character records and event logs are read from.
        ruleset_resolver: Maps a ruleset name to a Ruleset.
        default_ruleset: Ruleset for characters that do not name one.
        clamp_hit_points: Keep current HP between 0 and max HP.
    """

    def __init__(
        self,
        source: EventSource,
        *,
        ruleset_resolver: Callable[[str], Ruleset] = get_ruleset,
        default_ruleset: str = "srd52",
        clamp_hit_points: bool = True,
    ) -> None:
        """Initialize the composer with its collaborators.

        Args:
            source: Event source to read from.
            ruleset_resolver: Resolves ruleset names.
            default_ruleset: Ruleset for characters without one.
            clamp_hit_points: Keep current HP between 0 and max HP.
        """
        self.source = source
        self.ruleset_resolver = ruleset_resolver
        self.default_ruleset = default_ruleset
        self.clamp_hit_points = clamp_hit_points

    @classmethod
    def from_settings(cls, source: EventSource, settings: Settings) -> CharacterComposer:
        """Build a composer using the rules settings."""
        return cls(
            source,
            default_ruleset=settings.rules.default_ruleset,
            clamp_hit_points=settings.rules.clamp_hit_points,
        )

    def compose(self, character_id: str, *, as_of: datetime | None = None) -> ComputedCharacter:
        """Compose the snapshot of one character.

        Args:
            character_id: The character to compose.
            as_of: Optional point in time; only events created at or
                before it are replayed.

        Returns:
            The computed snapshot.

        Raises:
            CharacterNotFoundError: If the source has no such character.
            MalformedEventError: If a stored event fails validation.
            ReferenceDataError: If the character's ruleset is unknown.
        """
        log = logger.bind(character_id=character_id)

        record = self.source.get_character(character_id)
        if record is None:
            raise CharacterNotFoundError(
                "Character not found",
                character_id=character_id,
            )

        history = self.source.fetch_history(character_id)
        if as_of is not None:
            history = history.as_of(as_of)

        ruleset = self.ruleset_resolver(record.ruleset or self.default_ruleset)
        snapshot = compose_character(
            record,
            history,
            ruleset,
            clamp_hit_points=self.clamp_hit_points,
            as_of=as_of,
        )

        for reference in snapshot.unknown_references:
            log.warning(
                "Unknown reference in event history",
                kind=reference.kind,
                reference_id=reference.reference_id,
                ruleset=ruleset.name,
            )
        for entry in snapshot.spells:
            if entry.over_capacity:
                log.warning(
                    "Prepared spells exceed capacity",
                    class_name=entry.class_name.value,
                    overflow=[view.spell_id for view in entry.overflow],
                )
        log.debug(
            "Character composed",
            ruleset=ruleset.name,
            total_level=snapshot.total_level,
            event_counts=history.event_counts(),
        )
        return snapshot


__all__ = [
    "EventSource",
    "compose_character",
    "CharacterComposer",
]
