"""
Core dataclasses for the head-to-head ranking system.

Defines pairs, ledger entries, phases, progress and assignment batches used by
the engine, plus the Item/TierList shapes the caller side exchanges with it.
"""

import time
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum

from .exceptions import ValidationError

# Catch-all tier that the tier mapper never assigns to.
UNRANKED_TIER_ID = "unranked"


class Phase(str, Enum):
    """Lifecycle phase of a head-to-head session."""

    IDLE = "idle"
    QUICK_PASS = "quick_pass"
    REFINEMENT = "refinement"
    REVIEWING_SKIPPED = "reviewing_skipped"
    COMPLETE = "complete"


@dataclass(frozen=True, eq=False)
class Pair:
    """Unordered comparison between two pool items.

    ``first`` is the item that comes earlier in the pool; equality and hashing
    ignore the order so ``Pair("a", "b") == Pair("b", "a")``.
    """

    first: str
    second: str

    def __post_init__(self) -> None:
        if not self.first or not self.second:
            raise ValidationError("pair ids cannot be empty")
        if self.first == self.second:
            raise ValidationError(f"pair needs two distinct ids, got {self.first!r} twice")

    def key(self) -> frozenset[str]:
        return frozenset((self.first, self.second))

    def contains(self, item_id: str) -> bool:
        return item_id == self.first or item_id == self.second

    def other(self, item_id: str) -> str:
        """Return the opponent of ``item_id`` in this pair."""
        if item_id == self.first:
            return self.second
        if item_id == self.second:
            return self.first
        raise ValidationError(f"{item_id!r} is not part of pair {self.as_tuple()}")

    def as_tuple(self) -> tuple[str, str]:
        return (self.first, self.second)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pair):
            return NotImplemented
        return self.key() == other.key()

    def __hash__(self) -> int:
        return hash(self.key())


@dataclass(frozen=True)
class LedgerEntry:
    """Win/loss counters for one item."""

    wins: int = 0
    losses: int = 0

    @property
    def total(self) -> int:
        return self.wins + self.losses

    @property
    def win_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return self.wins / self.total


@dataclass(frozen=True)
class Progress:
    """Derived progress of a session, recomputed on every query."""

    remaining: int
    skipped: int
    decided: int
    percentage: float
    phase: Phase


@dataclass(frozen=True)
class AssignmentBatch:
    """Result of finishing a session: item id -> destination tier id.

    Iteration order follows the ranking, best item first.
    """

    assignments: dict[str, str] = field(default_factory=dict)
    ranking: list[str] = field(default_factory=list)
    scores: dict[str, float] = field(default_factory=dict)
    tier_ids: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.assignments)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self.assignments

    def __getitem__(self, item_id: str) -> str:
        return self.assignments[item_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self.ranking)

    def items(self) -> list[tuple[str, str]]:
        return [(item_id, self.assignments[item_id]) for item_id in self.ranking]

    def tiers(self) -> dict[str, list[str]]:
        """Group assigned ids by tier, keeping every destination tier (possibly empty)."""
        grouped: dict[str, list[str]] = {tier_id: [] for tier_id in self.tier_ids}
        for item_id in self.ranking:
            grouped.setdefault(self.assignments[item_id], []).append(item_id)
        return grouped

    def moves(self, current: Mapping[str, str]) -> dict[str, str]:
        """Return only the assignments that change an item's current tier."""
        return {
            item_id: tier_id
            for item_id, tier_id in self.items()
            if current.get(item_id) != tier_id
        }


@dataclass
class Item:
    """Tier-list item. The engine only ever reads ``item_id``."""

    item_id: str
    name: str | None = None
    image: str | None = None

    def __post_init__(self) -> None:
        if not self.item_id:
            raise ValidationError("item_id cannot be empty")

    @property
    def label(self) -> str:
        return self.name or self.item_id


@dataclass
class TierList:
    """Snapshot of a tier list as supplied by the external store."""

    tier_order: list[str]
    tiers: dict[str, list[Item]] = field(default_factory=dict)
    locked: set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        if UNRANKED_TIER_ID in self.tier_order:
            raise ValidationError(f"tier_order must not contain the {UNRANKED_TIER_ID!r} tier")
        if len(set(self.tier_order)) != len(self.tier_order):
            raise ValidationError(f"tier_order contains duplicates: {self.tier_order}")
        unknown = [name for name in self.tiers if name != UNRANKED_TIER_ID and name not in self.tier_order]
        if unknown:
            raise ValidationError(f"tiers not listed in tier_order: {unknown}")

        self.tiers.setdefault(UNRANKED_TIER_ID, [])
        for name in self.tier_order:
            self.tiers.setdefault(name, [])

        seen = set[str]()
        for item in self.all_items():
            if item.item_id in seen:
                raise ValidationError(f"item {item.item_id!r} appears in more than one place")
            seen.add(item.item_id)

    def _ordered_tier_names(self) -> list[str]:
        return [UNRANKED_TIER_ID, *self.tier_order]

    def all_items(self) -> Iterable[Item]:
        for name in self._ordered_tier_names():
            yield from self.tiers.get(name, [])

    def get_item(self, item_id: str) -> Item:
        for item in self.all_items():
            if item.item_id == item_id:
                return item
        raise KeyError(f"Item not found: {item_id}")

    def item_tiers(self) -> dict[str, str]:
        """Map every item id to the tier it currently sits in."""
        return {
            item.item_id: name
            for name in self._ordered_tier_names()
            for item in self.tiers.get(name, [])
        }

    def comparison_pool(self) -> list[str]:
        """Ids to compare: unranked items first, then each tier top to bottom, minus locked ones."""
        return [item.item_id for item in self.all_items() if item.item_id not in self.locked]

    def apply(self, batch: AssignmentBatch) -> "TierList":
        """Return a new tier list with ``batch`` applied.

        Items outside the batch stay where they are; moved items are appended
        to their destination tier in ranking order.
        """
        missing = [tier_id for tier_id in batch.tiers() if tier_id not in self.tiers]
        if missing:
            raise ValidationError(f"batch targets unknown tiers: {missing}")

        by_id = {item.item_id: item for item in self.all_items()}
        new_tiers = {
            name: [item for item in items if item.item_id not in batch]
            for name, items in self.tiers.items()
        }
        for item_id, tier_id in batch.items():
            if item_id in by_id:
                new_tiers[tier_id].append(by_id[item_id])

        return TierList(
            tier_order=list(self.tier_order),
            tiers=new_tiers,
            locked=set(self.locked),
        )


@dataclass
class PairResult:
    """A judge's decision on one pair. ``winner_id`` of None means skip."""

    pair: Pair
    winner_id: str | None
    judge_id: str = "unknown"
    rationale: str = ""
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        if self.winner_id is not None and not self.pair.contains(self.winner_id):
            raise ValidationError(
                f"winner {self.winner_id!r} is not part of pair {self.pair.as_tuple()}"
            )

    @property
    def is_skip(self) -> bool:
        return self.winner_id is None
