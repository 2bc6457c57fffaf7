"""Generic event reduction strategies.

Every per-domain projection is one of three folds over a domain's event
log:

- ``latest_wins``: keep the last event per key.
- ``cumulative_sum``: add up a signed value, per key or as a scalar.
- ``membership_count``: count +1/-1 actions per key, with an optional
  sticky flag read from the latest event that forces membership.

All three are pure. They replay events in ``(created_at, id)`` order no
matter what order they are handed in, so reducing a log twice, or a log
with nothing appended, gives the same answer, and reducing a prefix of a
log gives the state as of the end of that prefix. An empty log reduces
to the strategy's zero value.

Example:
    >>> totals = cumulative_sum(events, value=lambda e: e.delta)
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
from typing import TypeVar, overload

from dnd_ledger.models.events import LedgerEvent, sort_events


E = TypeVar("E", bound=LedgerEvent)
K = TypeVar("K", bound=Hashable)


def latest_wins(events: Iterable[E], key: Callable[[E], K]) -> dict[K, E]:
    """Keep the chronologically last event for each key.

    Args:
        events: A domain's events, in any order.
        key: Extracts the grouping key from an event.

    Returns:
        Latest event per key, ordered by each key's first appearance.
    """
    latest: dict[K, E] = {}
    for event in sort_events(events):
        latest[key(event)] = event
    return latest


@overload
def cumulative_sum(events: Iterable[E], value: Callable[[E], int], key: None = None) -> int: ...


@overload
def cumulative_sum(events: Iterable[E], value: Callable[[E], int], key: Callable[[E], K]) -> dict[K, int]: ...


def cumulative_sum(
    events: Iterable[E],
    value: Callable[[E], int],
    key: Callable[[E], K] | None = None,
) -> int | dict[K, int]:
    """Sum a signed value across events.

    Args:
        events: A domain's events, in any order.
        value: Extracts the signed delta from an event.
        key: Optional grouping key. Without one the sum is a scalar.

    Returns:
        The scalar total, or totals per key ordered by first appearance.
    """
    ordered = sort_events(events)
    if key is None:
        return sum(value(event) for event in ordered)
    totals: dict[K, int] = {}
    for event in ordered:
        group = key(event)
        totals[group] = totals.get(group, 0) + value(event)
    return totals


@dataclass(frozen=True)
class Membership:
    """Signed membership count for one key.

    Attributes:
        net: Sum of +1/-1 actions.
        sticky: Sticky flag carried by the key's latest event.
    """

    net: int
    sticky: bool = False

    @property
    def member(self) -> bool:
        """Whether the key is currently a member of the set."""
        return self.net > 0 or self.sticky


def membership_count(
    events: Iterable[E],
    key: Callable[[E], K],
    sign: Callable[[E], int],
    sticky: Callable[[E], bool] | None = None,
) -> dict[K, Membership]:
    """Count signed membership actions per key.

    Args:
        events: A domain's events, in any order.
        key: Extracts the member key from an event (may be composite).
        sign: Returns +1 for an adding action and -1 for a removing one.
        sticky: Reads the override flag from an event. Only the latest
            event for a key decides whether the key is sticky.

    Returns:
        Membership per key for every key seen, members or not, ordered
        by first appearance.
    """
    counts: dict[K, Membership] = {}
    for event in sort_events(events):
        group = key(event)
        previous = counts.get(group, Membership(net=0))
        counts[group] = Membership(
            net=previous.net + sign(event),
            sticky=sticky(event) if sticky is not None else False,
        )
    return counts


def members(counts: dict[K, Membership]) -> list[K]:
    """List the keys that are currently members, in first-appearance order."""
    return [group for group, membership in counts.items() if membership.member]


__all__ = [
    "latest_wins",
    "cumulative_sum",
    "Membership",
    "membership_count",
    "members",
]
