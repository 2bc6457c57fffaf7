"""Per-domain projections of character event logs.

Each projection turns one domain's log into its current value using one
of the generic strategies in ``dnd_ledger.engine.reducers``:

- Abilities, skills, items, class levels, notes: latest-wins per key
- Coins, hit points, item charges: signed cumulative sum
- Hit dice, spell slots: granted pool adjusted by use/restore sums

Projections are independent of each other and of the rules tables,
except for the granted pools (hit dice, slots), whose size comes from
class levels and is passed in.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence

from dnd_ledger.engine.reducers import cumulative_sum, latest_wins
from dnd_ledger.models.enums import (
    Ability,
    ClassName,
    Denomination,
    HitDieAction,
    ProficiencyLevel,
    Skill,
    SpellSlotAction,
)
from dnd_ledger.models.events import (
    AbilityEvent,
    ClassLevelEvent,
    CoinEvent,
    HitDieEvent,
    HitPointEvent,
    ItemChargeEvent,
    ItemEvent,
    NoteEvent,
    SkillEvent,
    SpellSlotEvent,
    TraitEvent,
    sort_events,
)
from dnd_ledger.models.state import AbilityState, ClassLevelState, CoinPurse, ItemState
from dnd_ledger.rules.reference import Ruleset


# =============================================================================
# Latest-Wins Domains
# =============================================================================


def current_abilities(events: Iterable[AbilityEvent]) -> dict[Ability, AbilityState]:
    """Get the current score and save proficiency of each recorded ability.

    Abilities without any event are absent from the result.
    """
    latest = latest_wins(events, key=lambda e: e.ability)
    return {
        ability: AbilityState(score=event.score, proficient=event.proficient)
        for ability, event in latest.items()
    }


def current_skills(events: Iterable[SkillEvent]) -> dict[Skill, ProficiencyLevel]:
    """Get the current proficiency level of each recorded skill."""
    latest = latest_wins(events, key=lambda e: e.skill)
    return {skill: event.proficiency for skill, event in latest.items()}


def current_inventory(events: Iterable[ItemEvent]) -> dict[str, ItemState]:
    """Get the equip state of every item still in the inventory.

    An item is in the inventory iff its latest event has no
    ``dropped_at``. Item ids are kept as recorded, whether or not the
    reference catalog knows them.
    """
    latest = latest_wins(events, key=lambda e: e.item_id)
    return {
        item_id: ItemState(worn=event.worn, wielded=event.wielded)
        for item_id, event in latest.items()
        if event.dropped_at is None
    }


def current_classes(events: Iterable[ClassLevelEvent]) -> list[ClassLevelState]:
    """Get the current level and subclass in each class.

    The latest entry per class sets the level. The subclass is the latest
    non-null subclass recorded for that class, since level-ups that do
    not touch the subclass record none.

    Returns:
        One state per class, in the order the classes were first taken.
    """
    ordered = sort_events(events)
    latest = latest_wins(ordered, key=lambda e: e.class_name)
    subclasses: dict[ClassName, str] = {}
    for event in ordered:
        if event.subclass:
            subclasses[event.class_name] = event.subclass
    return [
        ClassLevelState(
            class_name=class_name,
            level=event.level,
            subclass=subclasses.get(class_name),
        )
        for class_name, event in latest.items()
    ]


def current_note(events: Iterable[NoteEvent]) -> str:
    """Get the latest revision of the session notes, or an empty string."""
    ordered = sort_events(events)
    return ordered[-1].content if ordered else ""


def current_traits(events: Iterable[TraitEvent]) -> list[TraitEvent]:
    """Get every granted trait in the order it was granted."""
    return sort_events(events)


# =============================================================================
# Cumulative Domains
# =============================================================================


def current_coins(events: Iterable[CoinEvent]) -> CoinPurse:
    """Sum every coin delta, field by field.

    Example:
        +100 gp then (-30 gp, +10 sp) gives gp=70, sp=10.
    """
    ordered = sort_events(events)
    return CoinPurse(
        **{
            d.value: cumulative_sum(ordered, value=lambda e, d=d: getattr(e, d.value))
            for d in Denomination
        }
    )


def hit_point_offset(events: Iterable[HitPointEvent]) -> int:
    """Get the signed offset of current hit points from maximum."""
    return cumulative_sum(events, value=lambda e: e.delta)


def current_hit_points(max_hp: int, events: Iterable[HitPointEvent], *, clamp: bool = True) -> int:
    """Get current hit points from maximum and the recorded deltas.

    Args:
        max_hp: Maximum hit points.
        events: Damage and healing events.
        clamp: Keep the result between 0 and ``max_hp``.

    Example:
        Deltas -15 and +5 against a maximum of 30 give 20.
    """
    current = max_hp + hit_point_offset(events)
    if clamp:
        current = min(max(current, 0), max_hp)
    return current


def current_charges(events: Iterable[ItemChargeEvent]) -> dict[str, int]:
    """Get the charge count of each item, floored at zero."""
    totals = cumulative_sum(events, value=lambda e: e.delta, key=lambda e: e.item_id)
    return {item_id: max(0, total) for item_id, total in totals.items()}


# =============================================================================
# Granted Pools
# =============================================================================


def _available_pool(granted: Sequence[int], adjustments: dict[int, int]) -> list[int]:
    """Apply per-size adjustments to a granted multiset.

    Each size ends between zero and the number granted of that size.
    """
    granted_counts = Counter(granted)
    available: list[int] = []
    for size, count in granted_counts.items():
        remaining = min(count, max(0, count + adjustments.get(size, 0)))
        available.extend([size] * remaining)
    return sorted(available)


def current_hit_dice(granted: Sequence[int], events: Iterable[HitDieEvent]) -> list[int]:
    """Get the hit dice still available to spend.

    Args:
        granted: Every hit die the character's levels grant.
        events: Hit die use/restore events.

    Returns:
        Sorted die sizes; one occurrence removed per use and added back
        per restore, per size.

    Example:
        Granted [8, 8, 8] with one use of an 8 leaves [8, 8].
    """
    adjustments = cumulative_sum(
        events,
        value=lambda e: -1 if e.action is HitDieAction.USE else 1,
        key=lambda e: e.die,
    )
    return _available_pool(granted, adjustments)


def current_spell_slots(granted: Sequence[int], events: Iterable[SpellSlotEvent]) -> list[int]:
    """Get the spell slots still available, as one tier per slot."""
    adjustments = cumulative_sum(
        events,
        value=lambda e: -1 if e.action is SpellSlotAction.USE else 1,
        key=lambda e: e.slot_level,
    )
    return _available_pool(granted, adjustments)


def granted_hit_dice(classes: Iterable[ClassLevelState], ruleset: Ruleset) -> list[int]:
    """Get one hit die per class level, sorted by size.

    Raises:
        ReferenceDataError: If a class is not defined in the ruleset.
    """
    dice: list[int] = []
    for state in classes:
        dice.extend([ruleset.require_class(state.class_name).hit_die] * state.level)
    return sorted(dice)


def max_hit_points(
    level_events: Iterable[ClassLevelEvent],
    classes: Iterable[ClassLevelState],
    con_modifier: int,
    ruleset: Ruleset,
) -> int:
    """Compute maximum hit points from recorded hit die rolls.

    Every class level contributes its recorded roll plus the Constitution
    modifier, minimum 1. When a level was recorded more than once the
    latest roll counts; a level with no recorded roll counts the die
    average (rounded up).
    """
    rolls = latest_wins(level_events, key=lambda e: (e.class_name, e.level))
    total = 0
    for state in classes:
        average = ruleset.require_class(state.class_name).hit_die // 2 + 1
        for level in range(1, state.level + 1):
            event = rolls.get((state.class_name, level))
            roll = event.hit_die_roll if event is not None else average
            total += max(1, roll + con_modifier)
    return total


__all__ = [
    "current_abilities",
    "current_skills",
    "current_inventory",
    "current_classes",
    "current_note",
    "current_traits",
    "current_coins",
    "hit_point_offset",
    "current_hit_points",
    "current_charges",
    "current_hit_dice",
    "current_spell_slots",
    "granted_hit_dice",
    "max_hit_points",
]
