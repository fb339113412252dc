"""
Session controller for head-to-head ranking.

Owns the comparison pool, pair scheduler and vote ledger for one session and
exposes start/vote/skip/finish plus derived progress.
"""

import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loguru import Logger

from .exceptions import ConfigurationError, InsufficientItemsError, InvalidVoteError, NoActiveComparisonError
from .interfaces import Scorer
from .ledger import VoteLedger
from .logging_config import get_logger
from .mappers.tier_mapper import map_to_tiers
from .models import AssignmentBatch, Pair, Phase, Progress
from .schedulers.pair_scheduler import PairScheduler
from .scoring.wilson_scorer import DEFAULT_Z, WilsonScorer


@dataclass
class SessionConfig:
    """Configuration for a head-to-head session."""

    z: float = DEFAULT_Z  # normal quantile for Wilson bounds (1.96 = 95%)
    refinement: bool = True  # re-ask ambiguous pairs after QuickPass
    shuffle_seed: int | None = None  # shuffle QuickPass order reproducibly

    def __post_init__(self):
        """Validate configuration."""
        if self.z <= 0:
            raise ConfigurationError(f"z must be positive, got {self.z}")


class Session:
    """
    Head-to-head state machine.

    Idle -> QuickPass -> [ReviewingSkipped] -> Refinement -> [ReviewingSkipped] -> Complete

    Not thread-safe: callers must serialise access to a session.
    """

    def __init__(self, config: SessionConfig | None = None, scorer: Scorer | None = None):
        self.config: SessionConfig = config or SessionConfig()
        self.scorer: Scorer = scorer or WilsonScorer(z=self.config.z)

        self._pool: tuple[str, ...] = ()
        self._ledger: VoteLedger | None = None
        self._scheduler: PairScheduler | None = None
        self._current_pair: Pair | None = None

        self.logger: Logger = get_logger("session")

    @property
    def phase(self) -> Phase:
        if self._scheduler is None:
            return Phase.IDLE
        return self._scheduler.phase

    @property
    def is_active(self) -> bool:
        return self._scheduler is not None

    @property
    def pool(self) -> tuple[str, ...]:
        return self._pool

    @property
    def ledger(self) -> VoteLedger | None:
        return self._ledger

    @property
    def current_pair(self) -> Pair | None:
        return self._current_pair

    def start(self, pool: Iterable[str]) -> None:
        """
        Begin a new session over ``pool``, discarding any previous one.

        Duplicate ids are dropped, keeping the first occurrence.

        Raises:
            InsufficientItemsError: if fewer than two distinct ids are given
        """
        unique = tuple(dict.fromkeys(pool))
        if len(unique) < 2:
            raise InsufficientItemsError(f"need at least 2 items to compare, got {len(unique)}")

        if self.is_active:
            self.logger.info("Restarting active session")
            self._reset()

        rng = random.Random(self.config.shuffle_seed) if self.config.shuffle_seed is not None else None
        ledger = VoteLedger(unique)
        scheduler = PairScheduler(
            unique,
            ledger,
            self.scorer,
            refinement=self.config.refinement,
            rng=rng,
        )
        scheduler.start()

        self._pool = unique
        self._ledger = ledger
        self._scheduler = scheduler
        self._current_pair = scheduler.dequeue()
        self.logger.info(f"Session started with {len(unique)} items")

    def _require_current_pair(self) -> tuple[PairScheduler, Pair]:
        if self._scheduler is None or self._current_pair is None:
            raise NoActiveComparisonError(f"no comparison in progress (phase: {self.phase.value})")
        return self._scheduler, self._current_pair

    def vote(self, winner_id: str) -> None:
        """
        Record ``winner_id`` as the winner of the current pair and advance.

        Raises:
            NoActiveComparisonError: if no pair is on offer
            InvalidVoteError: if ``winner_id`` is not in the current pair
        """
        scheduler, pair = self._require_current_pair()
        if not pair.contains(winner_id):
            self.logger.warning(f"Rejected vote for {winner_id!r}; current pair is {pair.as_tuple()}")
            raise InvalidVoteError(f"{winner_id!r} is not part of current pair {pair.as_tuple()}")

        self._current_pair = scheduler.vote(pair, winner_id)
        self.logger.debug(f"Vote {winner_id} > {pair.other(winner_id)}; next: {self._describe_current()}")

    def skip(self) -> None:
        """
        Defer the current pair and advance.

        Raises:
            NoActiveComparisonError: if no pair is on offer
        """
        scheduler, pair = self._require_current_pair()
        scheduler.skip(pair)
        self._current_pair = scheduler.dequeue()
        self.logger.debug(f"Skipped {pair.as_tuple()}; next: {self._describe_current()}")

    def scores(self) -> dict[str, float]:
        """Current score of every pool item, in pool order."""
        if self._ledger is None:
            return {}
        return {item_id: self.scorer.score(entry) for item_id, entry in self._ledger.entries().items()}

    def finish(self, tier_ids: Sequence[str]) -> AssignmentBatch:
        """
        Score the pool from the votes so far, map it onto ``tier_ids`` and reset to Idle.

        Works in any phase, so a user can stop early. Items never compared
        score 0.5. An idle session yields an empty batch.

        Args:
            tier_ids: Destination tiers, topmost first

        Returns:
            AssignmentBatch for the caller to apply under one undo snapshot
        """
        if not self.is_active:
            self.logger.warning("finish() called on an idle session; nothing to assign")
            return AssignmentBatch(tier_ids=list(tier_ids))

        batch = map_to_tiers(self._pool, self.scores(), tier_ids)
        progress = self.progress()
        self.logger.info(
            f"Session finished in phase {progress.phase.value}: "
            f"{progress.decided} votes, {progress.remaining} comparisons left, {progress.skipped} skips"
        )
        self._reset()
        return batch

    def progress(self) -> Progress:
        """Derived progress. ``remaining`` counts queued pairs, not the one on offer."""
        if self._scheduler is None or self._ledger is None:
            return Progress(remaining=0, skipped=0, decided=0, percentage=0.0, phase=Phase.IDLE)

        remaining = self._scheduler.remaining
        decided = self._ledger.decided_count
        total = decided + remaining
        return Progress(
            remaining=remaining,
            skipped=self._scheduler.skipped_count,
            decided=decided,
            percentage=decided / total if total else 0.0,
            phase=self._scheduler.phase,
        )

    def _describe_current(self) -> str:
        if self._current_pair is None:
            return f"none ({self.phase.value})"
        return str(self._current_pair.as_tuple())

    def _reset(self) -> None:
        self._pool = ()
        self._ledger = None
        self._scheduler = None
        self._current_pair = None
