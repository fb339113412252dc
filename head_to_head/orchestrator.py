"""
Orchestrator for head-to-head ranking runs.

Coordinates store, judge and session: loads the tier list, feeds pairs to the
judge until the session completes (or the budget runs out), then applies the
resulting batch under a single undo snapshot.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loguru import Logger

from .exceptions import ConfigurationError, FinishRequested, JudgeError
from .interfaces import Judge, TierListStore
from .logging_config import get_logger
from .models import AssignmentBatch, Item, PairResult
from .session import Session, SessionConfig

# Constants for failure threshold logic
EARLY_ABORT_THRESHOLD = 4      # Abort if 100% of first 4 judge calls fail
LATE_ABORT_THRESHOLD = 50      # Only check failure rate after 50+ judge calls
FAILURE_RATE_LIMIT = 0.2       # Abort if >20% failure rate after threshold

SNAPSHOT_LABEL = "Apply Head-to-Head Results"


@dataclass
class RunConfig:
    """Configuration for a head-to-head run."""

    budget: int | None = None  # max judge calls (votes + skips), None = until complete
    progress_every: int = 10  # log progress every N judge calls

    def __post_init__(self):
        """Validate configuration."""
        if self.budget is not None and self.budget <= 0:
            raise ConfigurationError(f"budget must be positive, got {self.budget}")
        if self.progress_every <= 0:
            raise ConfigurationError(f"progress_every must be positive, got {self.progress_every}")


class Orchestrator:
    """Drives one head-to-head session against a tier-list store."""

    def __init__(
        self,
        store: TierListStore,
        judge: Judge,
        config: RunConfig | None = None,
        session_config: SessionConfig | None = None,
    ):
        """Initialize orchestrator with all components."""
        self.store: TierListStore = store
        self.judge: Judge = judge
        self.config: RunConfig = config or RunConfig()
        self.session: Session = Session(session_config)

        # Runtime state
        self.judge_calls: int = 0
        self.failed_calls: int = 0
        self.failure_log = list[tuple[tuple[str, str], str, str]]()  # (pair, exception_type, exception_msg)

        self.logger: Logger = get_logger("orchestrator")

    def run(self) -> AssignmentBatch:
        """Run one session and apply its result to the store."""
        self.logger.info(f"Starting head-to-head run with config: {self.config}")

        tier_list = self.store.load()
        pool = tier_list.comparison_pool()
        items = {item.item_id: item for item in tier_list.all_items()}
        self.logger.info(f"Comparison pool: {len(pool)} items ({len(tier_list.locked)} locked)")

        if not tier_list.tier_order:
            raise ConfigurationError("tier list has no destination tiers to rank into")

        self.session.start(pool)

        while self.session.current_pair is not None:
            if self.config.budget is not None and self.judge_calls >= self.config.budget:
                self.logger.info(f"Budget of {self.config.budget} judge calls spent, finishing early")
                break

            pair = self.session.current_pair
            try:
                result = self.judge.evaluate_pair(items[pair.first], items[pair.second])
            except FinishRequested as e:
                self.logger.info(f"Judge requested finish: {e}")
                break
            except JudgeError as e:
                self._record_failure(pair.as_tuple(), e)
                self.session.skip()
                continue

            self.judge_calls += 1
            self._apply_result(result)

            if self.judge_calls % self.config.progress_every == 0:
                self._log_progress()

        batch = self.session.finish(tier_list.tier_order)

        self.store.capture_snapshot(tier_list, SNAPSHOT_LABEL)
        self.store.save(tier_list.apply(batch))

        moved = batch.moves(tier_list.item_tiers())
        self.logger.info(f"Applied head-to-head results: {len(moved)} of {len(batch)} items changed tier")
        return batch

    def _apply_result(self, result: PairResult) -> None:
        pair = self.session.current_pair
        if pair is None or result.pair != pair:
            raise JudgeError(f"judge answered for {result.pair.as_tuple()}, expected {pair.as_tuple() if pair else None}")

        if result.winner_id is None:
            self.session.skip()
        else:
            self.session.vote(result.winner_id)

    def _record_failure(self, pair: tuple[str, str], error: Exception) -> None:
        self.logger.error(f"Judge failed on pair {pair}: {error}")
        self.judge_calls += 1
        self.failed_calls += 1
        self.failure_log.append((pair, type(error).__name__, str(error)))

        if self.judge_calls >= EARLY_ABORT_THRESHOLD and self.failed_calls == self.judge_calls:
            raise RuntimeError(f"100% failure rate in first {EARLY_ABORT_THRESHOLD} judge calls - aborting")

        if self.judge_calls >= LATE_ABORT_THRESHOLD:
            failure_rate = self.failed_calls / self.judge_calls
            if failure_rate > FAILURE_RATE_LIMIT:
                raise RuntimeError(f"Failure rate {failure_rate:.1%} exceeds {FAILURE_RATE_LIMIT:.0%} threshold - aborting")

    def _log_progress(self) -> None:
        progress = self.session.progress()
        self.logger.info(
            f"Progress: {progress.decided} decided, {progress.remaining} remaining "
            f"({progress.percentage:.1%}), {progress.skipped} skipped, phase {progress.phase.value}"
        )
