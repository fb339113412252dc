"""
Vote ledger.

Append-only win/loss counters per pool item, plus the direct head-to-head
tallies needed to tell whether a pairwise ordering is already settled.
"""

from collections.abc import Iterable, Sequence
from typing import cast

from .exceptions import InvalidVoteError
from .interfaces import LedgerCounts, LedgerState
from .logging_config import get_logger
from .models import LedgerEntry

# Module-level logger
logger = get_logger("vote_ledger")


class VoteLedger:
    """
    Per-item win/loss record for one comparison pool.

    Only ids in the pool can be recorded. Replaying the same vote sequence on a
    fresh ledger always yields identical counters.
    """

    def __init__(self, pool: Sequence[str]):
        """
        Initialize an empty ledger.

        Args:
            pool: Item ids allowed in votes
        """
        self.pool: tuple[str, ...] = tuple(pool)
        self._members = frozenset(self.pool)
        self._wins = dict[str, int]()
        self._losses = dict[str, int]()
        # (winner, loser) -> number of direct wins
        self._direct = dict[tuple[str, str], int]()
        self._votes = list[tuple[str, str]]()

    @classmethod
    def replay(cls, pool: Sequence[str], votes: Iterable[tuple[str, str]]) -> "VoteLedger":
        """Rebuild a ledger from a log of (winner, loser) votes."""
        ledger = cls(pool)
        for winner_id, loser_id in votes:
            ledger.record_win(winner_id, loser_id)
        return ledger

    def record_win(self, winner_id: str, loser_id: str) -> None:
        """Increment winner's wins and loser's losses by one."""
        if winner_id == loser_id:
            raise InvalidVoteError(f"winner and loser must differ, got {winner_id!r} twice")
        for item_id in (winner_id, loser_id):
            if item_id not in self._members:
                raise InvalidVoteError(f"{item_id!r} is not part of the comparison pool")

        self._wins[winner_id] = self._wins.get(winner_id, 0) + 1
        self._losses[loser_id] = self._losses.get(loser_id, 0) + 1
        self._direct[(winner_id, loser_id)] = self._direct.get((winner_id, loser_id), 0) + 1
        self._votes.append((winner_id, loser_id))
        logger.debug(f"Recorded {winner_id} > {loser_id}")

    def get(self, item_id: str) -> LedgerEntry:
        """Return counters for ``item_id``, zero for unseen ids."""
        return LedgerEntry(
            wins=self._wins.get(item_id, 0),
            losses=self._losses.get(item_id, 0),
        )

    def head_to_head(self, item_a: str, item_b: str) -> int:
        """Net direct wins of ``item_a`` over ``item_b`` (negative if b leads)."""
        return self._direct.get((item_a, item_b), 0) - self._direct.get((item_b, item_a), 0)

    def entries(self) -> dict[str, LedgerEntry]:
        """Counters for every pool item, in pool order."""
        return {item_id: self.get(item_id) for item_id in self.pool}

    @property
    def decided_count(self) -> int:
        return len(self._votes)

    @property
    def votes(self) -> list[tuple[str, str]]:
        return list(self._votes)

    def snapshot(self) -> LedgerState:
        """Export counters and vote log as a serializable dict."""
        return {
            "pool": list(self.pool),
            "entries": {
                item_id: LedgerCounts(wins=entry.wins, losses=entry.losses)
                for item_id, entry in self.entries().items()
            },
            "votes": [[winner_id, loser_id] for winner_id, loser_id in self._votes],
        }

    def load_snapshot(self, state: LedgerState) -> None:
        """Replace this ledger's contents with ``state``.

        Counters are re-derived from the vote log; mismatching totals are logged.
        """
        votes = [cast(tuple[str, str], tuple(vote)) for vote in state["votes"]]
        rebuilt = VoteLedger.replay(state["pool"], votes)

        for item_id, counts in state.get("entries", {}).items():
            entry = rebuilt.get(item_id)
            if (entry.wins, entry.losses) != (counts["wins"], counts["losses"]):
                logger.warning(
                    f"Snapshot counters for {item_id} ({counts['wins']}-{counts['losses']}) "
                    f"disagree with vote log ({entry.wins}-{entry.losses}); using vote log"
                )

        self.pool = rebuilt.pool
        self._members = rebuilt._members
        self._wins = rebuilt._wins
        self._losses = rebuilt._losses
        self._direct = rebuilt._direct
        self._votes = rebuilt._votes
