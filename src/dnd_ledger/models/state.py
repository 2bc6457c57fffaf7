"""Reduced per-domain state.

These are the values the per-domain projections produce from event logs
and the inputs the rules engine consumes. They carry no derived game
numbers; modifiers, bonuses and slots are computed from them later.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field

from dnd_ledger.models.enums import ClassName, Denomination


class AbilityState(BaseModel):
    """Current score and save proficiency of one ability."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=1, le=30)
    proficient: bool = False


class ItemState(BaseModel):
    """Equip state of an item currently in the inventory."""

    model_config = ConfigDict(frozen=True)

    worn: bool = False
    wielded: bool = False


class ClassLevelState(BaseModel):
    """Current level and subclass in one class."""

    model_config = ConfigDict(frozen=True)

    class_name: ClassName
    level: int = Field(ge=1, le=20)
    subclass: str | None = None


class CoinPurse(BaseModel):
    """Coin totals per denomination.

    Totals are the sum of recorded deltas. Non-negative balances are a
    write-time rule and are not re-checked here.
    """

    model_config = ConfigDict(frozen=True)

    pp: int = 0
    gp: int = 0
    ep: int = 0
    sp: int = 0
    cp: int = 0

    def to_copper(self) -> int:
        """Get the worth of the whole purse in copper pieces.

        Example:
            >>> CoinPurse(gp=1, sp=2, cp=3).to_copper()
            123
        """
        return sum(getattr(self, d.value) * d.copper_value for d in Denomination)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_gp(self) -> float:
        """Purse worth expressed in gold pieces."""
        return self.to_copper() / Denomination.GP.copper_value


class PreparedEntry(BaseModel):
    """A spell currently prepared for a class."""

    model_config = ConfigDict(frozen=True)

    spell_id: str
    always_prepared: bool = False


__all__ = [
    "AbilityState",
    "ItemState",
    "ClassLevelState",
    "CoinPurse",
    "PreparedEntry",
]
