"""
Pair scheduler implementation.

Generates the comparison queue for each phase and manages deferred (skipped)
pairs. QuickPass compares every pair once; Refinement re-asks only the pairs
whose ordering the current evidence leaves ambiguous.
"""

import random
from collections import deque
from collections.abc import Sequence

from ..exceptions import InvalidVoteError
from ..interfaces import Scorer
from ..ledger import VoteLedger
from ..logging_config import get_logger
from ..models import Pair, Phase
from ..scoring.wilson_scorer import intervals_overlap

# Module-level logger
logger = get_logger("pair_scheduler")


def all_pairs(pool: Sequence[str]) -> list[Pair]:
    """Every unordered pair of the pool, in lexicographic pool-index order."""
    return [
        Pair(pool[i], pool[j])
        for i in range(len(pool) - 1)
        for j in range(i + 1, len(pool))
    ]


def _is_settled(ledger: VoteLedger, scorer: Scorer, item_a: str, item_b: str) -> bool:
    """Scores differ and the direct head-to-head result agrees with them."""
    score_a = scorer.score(ledger.get(item_a))
    score_b = scorer.score(ledger.get(item_b))
    if score_a == score_b:
        return False
    net = ledger.head_to_head(item_a, item_b)
    return (net > 0 and score_a > score_b) or (net < 0 and score_a < score_b)


def ambiguous_pairs(pool: Sequence[str], ledger: VoteLedger, scorer: Scorer) -> list[Pair]:
    """
    Pairs whose relative order is still in doubt.

    A pair is ambiguous when the two items' confidence intervals overlap and
    the evidence does not already settle it (equal scores, no direct vote, or a
    direct vote that contradicts the score order).

    Args:
        pool: Item ids in pool order
        ledger: Current vote ledger
        scorer: Scorer providing point scores and intervals

    Returns:
        Ambiguous pairs in pool-index order
    """
    intervals = {item_id: scorer.interval(ledger.get(item_id)) for item_id in pool}
    pairs = list[Pair]()
    for pair in all_pairs(pool):
        if not intervals_overlap(intervals[pair.first], intervals[pair.second]):
            continue
        if _is_settled(ledger, scorer, pair.first, pair.second):
            continue
        pairs.append(pair)
    return pairs


class PairScheduler:
    """
    Queue of pending comparisons for the current phase plus the deferred queue.

    Owned by a single session; not safe for concurrent use.
    """

    def __init__(
        self,
        pool: Sequence[str],
        ledger: VoteLedger,
        scorer: Scorer,
        refinement: bool = True,
        rng: random.Random | None = None,
    ):
        """
        Initialize pair scheduler.

        Args:
            pool: Deduplicated item ids, in pool order
            ledger: Ledger that votes are recorded into
            scorer: Scorer used to find ambiguous pairs for refinement
            refinement: Run a refinement phase after QuickPass
            rng: If given, shuffles the QuickPass queue (deterministic per seed)
        """
        self.pool: tuple[str, ...] = tuple(pool)
        self.ledger: VoteLedger = ledger
        self.scorer: Scorer = scorer
        self.refinement_enabled: bool = refinement
        self.rng: random.Random | None = rng

        self.pending: deque[Pair] = deque()
        self.deferred: list[Pair] = []
        self.phase: Phase = Phase.IDLE
        # QUICK_PASS or REFINEMENT while running; REVIEWING_SKIPPED is tracked in phase only
        self._main_phase: Phase = Phase.IDLE
        self.skipped_count: int = 0

    def start(self) -> None:
        """Load the QuickPass queue."""
        pairs = all_pairs(self.pool)
        if self.rng is not None:
            self.rng.shuffle(pairs)

        self.pending = deque(pairs)
        self.deferred = []
        self.skipped_count = 0
        self.phase = self._main_phase = Phase.QUICK_PASS
        logger.info(f"QuickPass started: {len(pairs)} pairs for {len(self.pool)} items")

    @property
    def remaining(self) -> int:
        return len(self.pending) + len(self.deferred)

    def dequeue(self) -> Pair | None:
        """
        Pop the next pair to compare, advancing the phase as queues run dry.

        Returns:
            The next pair, or None once the session is complete
        """
        if self.phase in (Phase.IDLE, Phase.COMPLETE):
            return None

        while True:
            if self.pending:
                return self.pending.popleft()

            if self.deferred:
                logger.info(f"Reviewing {len(self.deferred)} skipped pairs")
                self.pending.extend(self.deferred)
                self.deferred.clear()
                self.phase = Phase.REVIEWING_SKIPPED
                continue

            if self._main_phase is Phase.QUICK_PASS and self.refinement_enabled:
                self._main_phase = Phase.REFINEMENT
                pairs = ambiguous_pairs(self.pool, self.ledger, self.scorer)
                if pairs:
                    logger.info(f"Refinement started: {len(pairs)} ambiguous pairs")
                    self.phase = Phase.REFINEMENT
                    self.pending.extend(pairs)
                    continue
                logger.info("No ambiguous pairs left after QuickPass")

            self.phase = self._main_phase = Phase.COMPLETE
            logger.info(f"Comparisons complete after {self.ledger.decided_count} votes")
            return None

    def skip(self, pair: Pair) -> None:
        """Defer ``pair`` until the pending queue of this phase is exhausted."""
        self.deferred.append(pair)
        self.skipped_count += 1
        logger.debug(f"Deferred {pair.as_tuple()}, {self.skipped_count} skipped so far")

    def vote(self, pair: Pair, winner_id: str) -> Pair | None:
        """Record ``winner_id`` as the winner of ``pair`` and return the next pair."""
        if not pair.contains(winner_id):
            raise InvalidVoteError(f"{winner_id!r} is not part of pair {pair.as_tuple()}")
        self.ledger.record_win(winner_id, pair.other(winner_id))
        return self.dequeue()
