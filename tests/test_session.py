"""
Tests for the Session state machine.

Focus on the public start/vote/skip/finish contract, error handling and progress.
"""

import pytest

from head_to_head.exceptions import (
    ConfigurationError,
    InsufficientItemsError,
    InvalidVoteError,
    NoActiveComparisonError,
)
from head_to_head.models import LedgerEntry, Pair, Phase
from head_to_head.session import Session, SessionConfig


def vote_all(session: Session, winners: list[str]) -> None:
    for winner in winners:
        session.vote(winner)


class TestSessionStart:
    """Test session start-up."""

    def test_start_loads_first_pair(self) -> None:
        session = Session()

        session.start(["a", "b", "c"])

        assert session.phase is Phase.QUICK_PASS
        assert session.current_pair == Pair("a", "b")
        assert session.is_active

    def test_fewer_than_two_items_rejected(self) -> None:
        """Session stays idle when the pool is too small."""
        session = Session()

        with pytest.raises(InsufficientItemsError):
            session.start(["only"])
        with pytest.raises(InsufficientItemsError):
            session.start([])

        assert session.phase is Phase.IDLE
        assert session.current_pair is None

    def test_duplicate_ids_collapse(self) -> None:
        session = Session()

        with pytest.raises(InsufficientItemsError):
            session.start(["a", "a"])

        session.start(["a", "b", "a", "c"])
        assert session.pool == ("a", "b", "c")
        assert session.progress().remaining == 2

    def test_restart_discards_previous_votes(self) -> None:
        session = Session()
        session.start(["a", "b", "c"])
        session.vote("a")

        session.start(["a", "b", "c"])

        assert session.ledger is not None
        assert session.ledger.decided_count == 0
        assert session.current_pair == Pair("a", "b")

    def test_invalid_config_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            SessionConfig(z=0)


class TestSessionVoting:
    """Test vote and skip."""

    def test_vote_without_session_fails(self) -> None:
        session = Session()

        with pytest.raises(NoActiveComparisonError):
            session.vote("a")
        with pytest.raises(NoActiveComparisonError):
            session.skip()

    def test_vote_for_item_outside_pair_changes_nothing(self) -> None:
        # Arrange
        session = Session()
        session.start(["a", "b", "c"])
        before = session.progress()

        # Act
        with pytest.raises(InvalidVoteError):
            session.vote("c")

        # Assert
        assert session.current_pair == Pair("a", "b")
        assert session.progress() == before
        assert session.ledger is not None
        assert session.ledger.get("c") == LedgerEntry()

    def test_vote_advances_to_next_pair(self) -> None:
        session = Session()
        session.start(["a", "b", "c"])

        session.vote("b")

        assert session.current_pair == Pair("a", "c")
        assert session.ledger is not None
        assert session.ledger.get("b") == LedgerEntry(wins=1, losses=0)

    def test_vote_after_complete_fails(self) -> None:
        session = Session()
        session.start(["a", "b"])
        session.vote("a")

        with pytest.raises(NoActiveComparisonError):
            session.vote("a")
        with pytest.raises(NoActiveComparisonError):
            session.skip()

    def test_skipped_pair_is_decided_exactly_once(self) -> None:
        """A skipped pair comes back in ReviewingSkipped and is counted once when voted."""
        # Arrange
        session = Session()
        session.start(["a", "b", "c"])

        # Act
        session.skip()                       # (a, b) deferred
        assert session.current_pair == Pair("a", "c")
        session.vote("a")
        session.vote("b")                    # (b, c)
        assert session.phase is Phase.REVIEWING_SKIPPED
        assert session.current_pair == Pair("a", "b")
        session.vote("a")

        # Assert
        assert session.ledger is not None
        assert session.ledger.head_to_head("a", "b") == 1
        assert session.ledger.get("a") == LedgerEntry(wins=2, losses=0)
        assert session.ledger.decided_count == 3
        assert session.phase is Phase.COMPLETE
        assert session.progress().skipped == 1

    def test_skip_on_last_pair_offers_it_again(self) -> None:
        session = Session()
        session.start(["a", "b"])

        session.skip()

        assert session.current_pair == Pair("a", "b")
        assert session.phase is Phase.REVIEWING_SKIPPED
        progress = session.progress()
        assert progress.remaining == 0
        assert progress.skipped == 1
        assert progress.decided == 0

    def test_cycle_enters_refinement(self) -> None:
        session = Session()
        session.start(["a", "b", "c"])

        vote_all(session, ["a", "c", "b"])

        assert session.phase is Phase.REFINEMENT
        assert session.current_pair == Pair("a", "b")
        assert session.progress().remaining == 2

    def test_shuffle_seed_reproducible(self) -> None:
        pool = [f"item_{i}" for i in range(5)]
        first = Session(SessionConfig(shuffle_seed=3))
        second = Session(SessionConfig(shuffle_seed=3))

        first.start(pool)
        second.start(pool)
        seen_first = []
        seen_second = []
        while first.current_pair is not None and first.phase is Phase.QUICK_PASS:
            assert second.current_pair is not None
            seen_first.append(first.current_pair.as_tuple())
            seen_second.append(second.current_pair.as_tuple())
            first.vote(first.current_pair.first)
            second.vote(second.current_pair.first)

        assert seen_first == seen_second
        assert len(seen_first) == 10

    def test_replayed_sessions_agree(self) -> None:
        """Two sessions fed the same decisions end with identical ledgers."""
        decisions = ["a", "skip", "d", "c", "b", "a", "d", "b"]

        def run() -> Session:
            session = Session()
            session.start(["a", "b", "c", "d"])
            for decision in decisions:
                pair = session.current_pair
                assert pair is not None
                if decision == "skip" or not pair.contains(decision):
                    session.skip()
                else:
                    session.vote(decision)
            return session

        first = run()
        second = run()

        assert first.ledger is not None and second.ledger is not None
        assert first.ledger.snapshot() == second.ledger.snapshot()
        assert first.progress() == second.progress()


class TestSessionProgress:
    """Test derived progress."""

    def test_idle_progress(self) -> None:
        progress = Session().progress()

        assert progress.phase is Phase.IDLE
        assert progress.remaining == 0
        assert progress.percentage == 0.0

    def test_progress_tracks_votes(self) -> None:
        # Arrange
        session = Session()
        session.start(["a", "b", "c"])

        # Act / Assert
        start = session.progress()
        assert (start.remaining, start.decided, start.percentage) == (2, 0, 0.0)

        session.vote("a")
        after_one = session.progress()
        assert (after_one.remaining, after_one.decided) == (1, 1)
        assert after_one.percentage == 0.5

    def test_remaining_is_pending_plus_deferred(self) -> None:
        """The pair on offer has left the queue and is not counted."""
        session = Session()
        session.start(["a", "b", "c", "d"])

        assert session.current_pair == Pair("a", "b")
        assert session.progress().remaining == 5

        session.skip()

        assert session.current_pair == Pair("a", "c")
        assert session.progress().remaining == 5

    def test_skips_do_not_count_as_decided(self) -> None:
        session = Session()
        session.start(["a", "b", "c"])

        session.skip()

        progress = session.progress()
        assert progress.decided == 0
        assert progress.remaining == 2
        assert progress.skipped == 1

    def test_two_items_complete_after_one_vote(self) -> None:
        session = Session()
        session.start(["a", "b"])

        session.vote("b")

        progress = session.progress()
        assert progress.phase is Phase.COMPLETE
        assert progress.remaining == 0
        assert progress.percentage == 1.0
        assert session.current_pair is None


class TestSessionFinish:
    """Test finish and tier assignment."""

    def test_three_item_scenario(self) -> None:
        """A>B, A>C, B>C onto [S, A] puts A and B in S and C in A."""
        # Arrange
        session = Session()
        session.start(["A", "B", "C"])
        vote_all(session, ["A", "A", "B"])
        assert session.phase is Phase.COMPLETE

        # Act
        batch = session.finish(["S", "A"])

        # Assert
        assert batch.ranking == ["A", "B", "C"]
        assert batch.assignments == {"A": "S", "B": "S", "C": "A"}
        assert session.phase is Phase.IDLE

    def test_finish_without_votes_uses_pool_order(self) -> None:
        """All items score 0.5, so the pool order decides, every time."""
        pool = ["w", "x", "y", "z"]
        results = []
        for _ in range(2):
            session = Session()
            session.start(pool)
            results.append(session.finish(["S", "A"]))

        assert results[0].ranking == pool
        assert all(score == 0.5 for score in results[0].scores.values())
        assert results[0].assignments == {"w": "S", "x": "S", "y": "A", "z": "A"}
        assert results[1].assignments == results[0].assignments

    def test_finish_early_assigns_whole_pool_and_resets(self) -> None:
        # Arrange
        session = Session()
        session.start(["a", "b", "c", "d"])
        session.vote("b")
        session.skip()

        # Act
        batch = session.finish(["S", "A", "B"])

        # Assert
        assert sorted(batch.assignments) == ["a", "b", "c", "d"]
        assert session.phase is Phase.IDLE
        assert session.current_pair is None
        assert session.progress().remaining == 0
        with pytest.raises(NoActiveComparisonError):
            session.vote("a")

    def test_finish_when_idle_returns_empty_batch(self) -> None:
        batch = Session().finish(["S", "A"])

        assert len(batch) == 0
        assert batch.tiers() == {"S": [], "A": []}

    def test_bad_tier_list_keeps_session(self) -> None:
        session = Session()
        session.start(["a", "b"])

        with pytest.raises(ConfigurationError):
            session.finish([])

        assert session.is_active
        assert session.current_pair == Pair("a", "b")

    def test_scores_reflect_ledger(self) -> None:
        session = Session()
        session.start(["a", "b", "c"])
        session.vote("a")

        scores = session.scores()

        assert list(scores) == ["a", "b", "c"]
        assert scores["c"] == 0.5
        assert scores["a"] > scores["b"]
