"""Typed event records for every append-only character log.

Persisted rows are never handed to a reducer as raw mappings. They are
validated here into frozen pydantic records, one record type per
domain, and any row that fails validation stops the read with a
MalformedEventError.

Every record carries an identity, an owner, a creation timestamp and an
optional note. Within a domain events are totally ordered by
``(created_at, id)``: identities are assigned monotonically by the store
so that events sharing a timestamp still replay in arrival order.

Example:
    >>> rows = [{"id": "1", "character_id": "c", "created_at": "2024-01-01T00:00:00",
    ...          "delta": -15}]
    >>> parse_events(EventDomain.HIT_POINTS, rows)[0].delta
    -15
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import UTC, datetime
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dnd_ledger.core.exceptions import MalformedEventError
from dnd_ledger.models.enums import (
    Ability,
    ClassName,
    EventDomain,
    HitDieAction,
    PreparationAction,
    ProficiencyLevel,
    Skill,
    SpellbookAction,
    SpellSlotAction,
    TraitSource,
)


# =============================================================================
# Base Records
# =============================================================================


class LedgerEvent(BaseModel):
    """Fields shared by every persisted event.

    Attributes:
        id: Monotonic identity, used as the ordering tie-breaker.
        created_at: When the event was recorded (normalized to UTC).
        note: Optional free-text note entered with the change.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1, description="Event identity")
    created_at: datetime = Field(description="Creation timestamp")
    note: str | None = Field(default=None, description="Free-text note")

    @field_validator("created_at", mode="after")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        """Treat naive timestamps as UTC so every log compares consistently."""
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    @property
    def ordering_key(self) -> tuple[datetime, str]:
        """Sort key giving the total order of events within a domain."""
        return (self.created_at, self.id)


class CharacterEvent(LedgerEvent):
    """An event owned by a character."""

    character_id: str = Field(min_length=1, description="Owning character")


# =============================================================================
# Domain Records
# =============================================================================


class AbilityEvent(CharacterEvent):
    """An ability score was set."""

    ability: Ability
    score: int = Field(ge=1, le=30)
    proficient: bool = False


class SkillEvent(CharacterEvent):
    """A skill proficiency level was set."""

    skill: Skill
    proficiency: ProficiencyLevel


class CoinEvent(CharacterEvent):
    """A signed change to the character's purse, per denomination."""

    pp: int = 0
    gp: int = 0
    ep: int = 0
    sp: int = 0
    cp: int = 0


class HitPointEvent(CharacterEvent):
    """Damage taken (negative) or healing received (positive)."""

    delta: int


class HitDieEvent(CharacterEvent):
    """A hit die was spent or regained."""

    die: Literal[6, 8, 10, 12]
    action: HitDieAction


class SpellSlotEvent(CharacterEvent):
    """A spell slot of a given tier was expended or regained."""

    slot_level: int = Field(ge=1, le=9)
    action: SpellSlotAction


class ItemEvent(CharacterEvent):
    """The possession state of an item changed.

    The latest event per item decides the state; a non-null
    ``dropped_at`` removes the item from inventory.
    """

    item_id: str = Field(min_length=1)
    worn: bool = False
    wielded: bool = False
    dropped_at: datetime | None = None


class ItemChargeEvent(LedgerEvent):
    """Charges or ammunition were added to or removed from an item."""

    item_id: str = Field(min_length=1)
    delta: int


class SpellbookEvent(CharacterEvent):
    """A spell was copied into or removed from the spellbook."""

    spell_id: str = Field(min_length=1)
    action: SpellbookAction


class PreparedSpellEvent(CharacterEvent):
    """A spell was prepared or unprepared for one of the character's classes."""

    class_name: ClassName
    spell_id: str = Field(min_length=1)
    action: PreparationAction
    always_prepared: bool = False


class ClassLevelEvent(CharacterEvent):
    """A level was gained in a class."""

    class_name: ClassName
    level: int = Field(ge=1, le=20)
    subclass: str | None = None
    hit_die_roll: int = Field(ge=1, le=12)


class TraitEvent(CharacterEvent):
    """A trait or feature was granted."""

    name: str = Field(min_length=1)
    description: str = ""
    source: TraitSource
    source_detail: str | None = None
    level: int | None = Field(default=None, ge=1, le=20)


class NoteEvent(CharacterEvent):
    """A revision of the character's session notes."""

    content: str = ""


EVENT_TYPES: dict[EventDomain, type[LedgerEvent]] = {
    EventDomain.ABILITIES: AbilityEvent,
    EventDomain.SKILLS: SkillEvent,
    EventDomain.COINS: CoinEvent,
    EventDomain.HIT_POINTS: HitPointEvent,
    EventDomain.HIT_DICE: HitDieEvent,
    EventDomain.SPELL_SLOTS: SpellSlotEvent,
    EventDomain.ITEMS: ItemEvent,
    EventDomain.ITEM_CHARGES: ItemChargeEvent,
    EventDomain.SPELLBOOK: SpellbookEvent,
    EventDomain.PREPARED_SPELLS: PreparedSpellEvent,
    EventDomain.CLASS_LEVELS: ClassLevelEvent,
    EventDomain.TRAITS: TraitEvent,
    EventDomain.NOTES: NoteEvent,
}


# =============================================================================
# Ordering & Validation
# =============================================================================

E = TypeVar("E", bound=LedgerEvent)


def sort_events(events: Iterable[E]) -> list[E]:
    """Return events in replay order: creation time, then identity."""
    return sorted(events, key=lambda event: event.ordering_key)


def parse_events(domain: EventDomain, rows: Iterable[Mapping[str, Any]]) -> list[LedgerEvent]:
    """Validate raw rows into typed records for a domain.

    Args:
        domain: The event log the rows were read from.
        rows: Raw row mappings, in any order.

    Returns:
        Typed records in replay order.

    Raises:
        MalformedEventError: On the first row that fails validation.
    """
    record_type = EVENT_TYPES[domain]
    events: list[LedgerEvent] = []
    for row in rows:
        try:
            events.append(record_type.model_validate(dict(row)))
        except ValidationError as exc:
            raw_id = row.get("id")
            raise MalformedEventError(
                f"Invalid {domain.value} event",
                domain=domain.value,
                event_id=str(raw_id) if raw_id is not None else None,
                errors=exc.errors(include_url=False, include_input=False),
            ) from exc
    return sort_events(events)


# =============================================================================
# Character Identity & History
# =============================================================================


class CharacterRecord(BaseModel):
    """The non-event identity row of a character."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    ruleset: Literal["srd51", "srd52"] | None = None
    species: str | None = None
    lineage: str | None = None
    background: str | None = None
    alignment: str | None = None
    created_at: datetime | None = None


def parse_character(row: Mapping[str, Any]) -> CharacterRecord:
    """Validate a raw ``characters`` row.

    Raises:
        MalformedEventError: If the row fails validation.
    """
    try:
        return CharacterRecord.model_validate(dict(row))
    except ValidationError as exc:
        raw_id = row.get("id")
        raise MalformedEventError(
            "Invalid characters row",
            domain="characters",
            event_id=str(raw_id) if raw_id is not None else None,
            errors=exc.errors(include_url=False, include_input=False),
        ) from exc


class CharacterHistory(BaseModel):
    """Every event log of one character, each held in replay order.

    Histories are read-only views: the chronological event lists exposed
    here are what history displays render verbatim.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    abilities: tuple[AbilityEvent, ...] = ()
    skills: tuple[SkillEvent, ...] = ()
    coins: tuple[CoinEvent, ...] = ()
    hit_points: tuple[HitPointEvent, ...] = ()
    hit_dice: tuple[HitDieEvent, ...] = ()
    spell_slots: tuple[SpellSlotEvent, ...] = ()
    items: tuple[ItemEvent, ...] = ()
    item_charges: tuple[ItemChargeEvent, ...] = ()
    spellbook: tuple[SpellbookEvent, ...] = ()
    prepared_spells: tuple[PreparedSpellEvent, ...] = ()
    class_levels: tuple[ClassLevelEvent, ...] = ()
    traits: tuple[TraitEvent, ...] = ()
    notes: tuple[NoteEvent, ...] = ()

    @field_validator("*", mode="after")
    @classmethod
    def order_log(cls, value: tuple[LedgerEvent, ...]) -> tuple[LedgerEvent, ...]:
        """Put each log into replay order once its rows are validated."""
        return tuple(sort_events(value))

    @classmethod
    def from_domains(cls, logs: Mapping[EventDomain, Sequence[LedgerEvent]]) -> CharacterHistory:
        """Build a history from logs keyed by domain."""
        return cls(**{_DOMAIN_FIELDS[domain]: tuple(events) for domain, events in logs.items()})

    def for_domain(self, domain: EventDomain) -> tuple[LedgerEvent, ...]:
        """Get the chronological log of one domain."""
        return getattr(self, _DOMAIN_FIELDS[domain])

    def as_of(self, moment: datetime) -> CharacterHistory:
        """Get the history as it stood at ``moment`` (inclusive).

        Each log is cut to its prefix of events created at or before
        ``moment``, so reducing the result yields the historical state.
        """
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=UTC)
        return self.model_copy(
            update={
                name: tuple(e for e in getattr(self, name) if e.created_at <= moment)
                for name in _DOMAIN_FIELDS.values()
            }
        )

    def event_counts(self) -> dict[str, int]:
        """Get the number of events per domain."""
        return {name: len(getattr(self, name)) for name in _DOMAIN_FIELDS.values()}

    @property
    def is_empty(self) -> bool:
        """Whether no events were recorded in any domain."""
        return not any(self.event_counts().values())


_DOMAIN_FIELDS: dict[EventDomain, str] = {
    EventDomain.ABILITIES: "abilities",
    EventDomain.SKILLS: "skills",
    EventDomain.COINS: "coins",
    EventDomain.HIT_POINTS: "hit_points",
    EventDomain.HIT_DICE: "hit_dice",
    EventDomain.SPELL_SLOTS: "spell_slots",
    EventDomain.ITEMS: "items",
    EventDomain.ITEM_CHARGES: "item_charges",
    EventDomain.SPELLBOOK: "spellbook",
    EventDomain.PREPARED_SPELLS: "prepared_spells",
    EventDomain.CLASS_LEVELS: "class_levels",
    EventDomain.TRAITS: "traits",
    EventDomain.NOTES: "notes",
}


__all__ = [
    "LedgerEvent",
    "CharacterEvent",
    "AbilityEvent",
    "SkillEvent",
    "CoinEvent",
    "HitPointEvent",
    "HitDieEvent",
    "SpellSlotEvent",
    "ItemEvent",
    "ItemChargeEvent",
    "SpellbookEvent",
    "PreparedSpellEvent",
    "ClassLevelEvent",
    "TraitEvent",
    "NoteEvent",
    "EVENT_TYPES",
    "sort_events",
    "parse_events",
    "parse_character",
    "CharacterRecord",
    "CharacterHistory",
]
