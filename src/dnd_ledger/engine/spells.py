"""Spellbook and prepared-spell projection.

Two independent signed-membership reductions feed this module:

- The spellbook: learn/forget per spell id, with no class key. Only
  classes that keep a spellbook (wizards) expose it, and it is never
  limited by capacity here.
- Prepared spells: prepare/unprepare per (class, spell id). The same
  spell prepared for two classes is two separate memberships. A spell
  whose latest event is flagged always-prepared stays prepared whatever
  its count.

Slots are then filled per class, separately for cantrips and leveled
spells: always-prepared spells first (outside capacity), then chosen
spells in latest-prepared order up to capacity, then empty slots.
Chosen spells beyond capacity are cut from the slots and reported as
overflow.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from dnd_ledger.engine.reducers import latest_wins, members, membership_count
from dnd_ledger.models.enums import Ability, ClassName, PreparationAction, SpellbookAction
from dnd_ledger.models.events import PreparedSpellEvent, SpellbookEvent
from dnd_ledger.models.snapshot import ClassSpellcasting, SpellSlotView, SpellView
from dnd_ledger.models.state import AbilityState, ClassLevelState, PreparedEntry
from dnd_ledger.rules.derived import (
    casting_classes,
    max_spell_level,
    modifier_for,
    spell_attack_bonus,
    spell_save_dc,
)
from dnd_ledger.rules.reference import Ruleset


# =============================================================================
# Membership Reductions
# =============================================================================


def known_spells(events: Iterable[SpellbookEvent]) -> list[str]:
    """Get the spell ids currently in the spellbook, in first-learned order.

    Example:
        learn A, learn A, forget A leaves A known (net 1);
        learn A, forget A, forget A does not (net -1).
    """
    counts = membership_count(
        events,
        key=lambda e: e.spell_id,
        sign=lambda e: 1 if e.action is SpellbookAction.LEARN else -1,
    )
    return members(counts)


def prepared_spells(events: Iterable[PreparedSpellEvent]) -> dict[ClassName, list[PreparedEntry]]:
    """Get the prepared spells of each class, in latest-prepared order.

    A spell unprepared and prepared again moves behind spells prepared
    in between, so it is the first chosen spell cut on overflow.
    """
    log = list(events)
    counts = membership_count(
        log,
        key=lambda e: (e.class_name, e.spell_id),
        sign=lambda e: 1 if e.action is PreparationAction.PREPARE else -1,
        sticky=lambda e: e.always_prepared,
    )
    latest = latest_wins(log, key=lambda e: (e.class_name, e.spell_id))
    latest.update(
        latest_wins(
            (e for e in log if e.action is PreparationAction.PREPARE),
            key=lambda e: (e.class_name, e.spell_id),
        )
    )
    prepared: dict[ClassName, list[PreparedEntry]] = {}
    for group in sorted(
        (group for group, membership in counts.items() if membership.member),
        key=lambda group: latest[group].ordering_key,
    ):
        class_name, spell_id = group
        prepared.setdefault(class_name, []).append(
            PreparedEntry(spell_id=spell_id, always_prepared=counts[group].sticky)
        )
    return prepared


# =============================================================================
# Slot Filling
# =============================================================================


@dataclass(frozen=True)
class SlotFill:
    """Result of filling one slot list.

    Attributes:
        slots: Always-prepared entries, then chosen entries, then None
            for each empty slot.
        overflow: Chosen entries that did not fit.
    """

    slots: list[PreparedEntry | None]
    overflow: list[PreparedEntry]


def fill_slots(entries: Sequence[PreparedEntry], capacity: int) -> SlotFill:
    """Lay prepared entries out into a fixed-length slot list.

    The list is always ``capacity`` plus the number of always-prepared
    entries long.

    Example:
        >>> fill = fill_slots([PreparedEntry(spell_id="bless")], 2)
        >>> [slot.spell_id if slot else None for slot in fill.slots]
        ['bless', None]
    """
    capacity = max(0, capacity)
    always = [entry for entry in entries if entry.always_prepared]
    chosen = [entry for entry in entries if not entry.always_prepared]
    kept = chosen[:capacity]
    slots: list[PreparedEntry | None] = [*always, *kept]
    slots.extend([None] * (capacity - len(kept)))
    return SlotFill(slots=slots, overflow=chosen[capacity:])


def resolve_spell(spell_id: str, ruleset: Ruleset) -> SpellView:
    """Join a spell id with its catalog entry, falling back to the id."""
    spell = ruleset.find_spell(spell_id)
    if spell is None:
        return SpellView(spell_id=spell_id, name=spell_id, known_reference=False)
    return SpellView(spell_id=spell_id, name=spell.name, level=spell.level)


def _slot_views(fill: SlotFill, ruleset: Ruleset) -> tuple[SpellSlotView, ...]:
    return tuple(
        SpellSlotView(
            spell=resolve_spell(entry.spell_id, ruleset),
            always_prepared=entry.always_prepared,
        )
        if entry is not None
        else SpellSlotView()
        for entry in fill.slots
    )


def _spellbook_views(
    class_name: ClassName, known: Sequence[str], ruleset: Ruleset
) -> tuple[SpellView, ...]:
    """Resolve the leveled spells of a class's spellbook.

    Catalog cantrips and spells of other classes are left out; ids
    missing from the catalog are kept.
    """
    views: list[SpellView] = []
    for spell_id in known:
        spell = ruleset.find_spell(spell_id)
        if spell is not None and (spell.is_cantrip or class_name not in spell.classes):
            continue
        views.append(resolve_spell(spell_id, ruleset))
    return tuple(views)


# =============================================================================
# Per-Class Spellcasting
# =============================================================================


def project_spellcasting(
    classes: Iterable[ClassLevelState],
    abilities: Mapping[Ability, AbilityState],
    proficiency_bonus: int,
    known: Sequence[str],
    prepared: Mapping[ClassName, Sequence[PreparedEntry]],
    ruleset: Ruleset,
) -> list[ClassSpellcasting]:
    """Build the spellcasting entry of each class the character casts with.

    Classes that do not cast, and subclass-gated casters without the
    granting subclass, get no entry at all. Prepared spells are split
    into cantrips and leveled spells by catalog level; spells missing
    from the catalog count as leveled.

    Args:
        classes: Current class levels.
        abilities: Current ability scores.
        proficiency_bonus: Proficiency bonus for the total level.
        known: Spell ids in the spellbook.
        prepared: Prepared entries per class.
        ruleset: Reference dataset and capacity tables.

    Returns:
        One entry per casting class, in class order.
    """
    results: list[ClassSpellcasting] = []
    for casting in casting_classes(classes, ruleset):
        state = casting.state
        info = casting.spellcasting
        modifier = modifier_for(abilities, info.ability)

        cantrips: list[PreparedEntry] = []
        leveled: list[PreparedEntry] = []
        for entry in prepared.get(state.class_name, ()):
            spell = ruleset.find_spell(entry.spell_id)
            if spell is not None and spell.is_cantrip:
                cantrips.append(entry)
            else:
                leveled.append(entry)

        cantrip_capacity = ruleset.cantrip_capacity(state.class_name, state.level)
        prepared_capacity = ruleset.prepared_capacity(state.class_name, state.level, modifier)
        cantrip_fill = fill_slots(cantrips, cantrip_capacity)
        leveled_fill = fill_slots(leveled, prepared_capacity)
        overflow = [*cantrip_fill.overflow, *leveled_fill.overflow]

        results.append(
            ClassSpellcasting(
                class_name=state.class_name,
                level=state.level,
                subclass=state.subclass,
                ability=info.ability,
                spell_attack_bonus=spell_attack_bonus(proficiency_bonus, modifier),
                spell_save_dc=spell_save_dc(proficiency_bonus, modifier),
                max_spell_level=max_spell_level(info, state.level, ruleset),
                cantrip_capacity=cantrip_capacity,
                prepared_capacity=prepared_capacity,
                change_prepared=info.change_prepared,
                cantrip_slots=_slot_views(cantrip_fill, ruleset),
                prepared_slots=_slot_views(leveled_fill, ruleset),
                spellbook=(
                    _spellbook_views(state.class_name, known, ruleset)
                    if info.spellbook
                    else None
                ),
                over_capacity=bool(overflow),
                overflow=tuple(resolve_spell(entry.spell_id, ruleset) for entry in overflow),
            )
        )
    return results


__all__ = [
    "known_spells",
    "prepared_spells",
    "SlotFill",
    "fill_slots",
    "resolve_spell",
    "project_spellcasting",
]
