"""
Abstract base classes defining the interfaces for the head-to-head system.

All interfaces are synchronous; the engine never blocks or performs I/O.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TypedDict

from .models import Item, LedgerEntry, PairResult, TierList


class LedgerCounts(TypedDict):
    """TypedDict for per-item counters."""
    wins: int
    losses: int


class LedgerState(TypedDict):
    """TypedDict for vote ledger snapshot state."""
    pool: list[str]
    entries: dict[str, LedgerCounts]
    votes: list[list[str]]  # [winner_id, loser_id] in the order they were cast


class TierListSnapshot(TypedDict):
    """TypedDict for an undo snapshot captured before a batch is applied."""
    label: str
    timestamp: float
    tier_order: list[str]
    tiers: dict[str, list[str]]


class Scorer(ABC):
    """Interface for turning ledger entries into confidence scores."""

    @abstractmethod
    def score(self, entry: LedgerEntry) -> float:
        """Point score in [0, 1] used for ordering."""
        pass

    @abstractmethod
    def interval(self, entry: LedgerEntry) -> tuple[float, float]:
        """Confidence interval (lower, upper) used to detect ambiguous orderings."""
        pass


class Judge(ABC):
    """Interface for deciding head-to-head comparisons."""

    @abstractmethod
    def evaluate_pair(self, first: Item, second: Item) -> PairResult:
        """
        Decide which of two items is better.

        Args:
            first: Item on the left of the comparison
            second: Item on the right of the comparison

        Returns:
            PairResult naming the winner, or with winner_id None to skip

        Raises:
            FinishRequested: if the judge wants to stop and apply results now
        """
        pass


class TierListStore(ABC):
    """Interface for the external tier-list store and its undo history."""

    @abstractmethod
    def load(self) -> TierList:
        """Load the current tier list."""
        pass

    @abstractmethod
    def save(self, tier_list: TierList) -> None:
        """Persist the tier list."""
        pass

    @abstractmethod
    def capture_snapshot(self, tier_list: TierList, label: str) -> None:
        """Record the tier list so a following batch can be undone as one unit."""
        pass

    @abstractmethod
    def load_snapshots(self) -> Iterable[TierListSnapshot]:
        """Load all captured snapshots, oldest first."""
        pass
