"""
Tests for the tier mapper.

Focus on bucket sizes, stable tie-breaking and coverage of the pool.
"""

import pytest

from head_to_head.exceptions import ConfigurationError
from head_to_head.mappers.tier_mapper import map_to_tiers, rank_by_score, tier_sizes
from head_to_head.models import UNRANKED_TIER_ID


class TestTierSizes:
    """Test bucket size computation."""

    def test_even_split(self) -> None:
        assert tier_sizes(6, 3) == [2, 2, 2]

    def test_earlier_tiers_absorb_remainder(self) -> None:
        assert tier_sizes(3, 2) == [2, 1]
        assert tier_sizes(7, 3) == [3, 2, 2]
        assert tier_sizes(5, 4) == [2, 1, 1, 1]

    def test_fewer_items_than_tiers(self) -> None:
        assert tier_sizes(2, 4) == [1, 1, 0, 0]

    def test_no_tiers_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            tier_sizes(3, 0)


class TestMapToTiers:
    """Test map_to_tiers behavior through public interface."""

    def test_highest_scores_go_to_first_tier(self) -> None:
        # Arrange
        pool = ["low", "high", "mid"]
        scores = {"low": 0.1, "high": 0.9, "mid": 0.5}

        # Act
        batch = map_to_tiers(pool, scores, ["S", "A", "B"])

        # Assert
        assert batch.ranking == ["high", "mid", "low"]
        assert batch.assignments == {"high": "S", "mid": "A", "low": "B"}

    def test_every_item_in_exactly_one_balanced_tier(self) -> None:
        """For any pool and k >= 1 tiers, coverage is exact and sizes differ by <= 1."""
        for count in range(1, 14):
            pool = [f"item_{i}" for i in range(count)]
            scores = {item_id: (i * 7 % 5) / 5 for i, item_id in enumerate(pool)}
            for tier_count in range(1, 7):
                tier_ids = [f"T{i}" for i in range(tier_count)]

                batch = map_to_tiers(pool, scores, tier_ids)

                assert sorted(batch.assignments) == sorted(pool)
                sizes = [len(members) for members in batch.tiers().values()]
                assert sum(sizes) == count
                assert max(sizes) - min(sizes) <= 1, f"{count} items over {tier_count} tiers: {sizes}"

    def test_equal_scores_keep_pool_order(self) -> None:
        """All-neutral scores rank in pool order, deterministically."""
        pool = ["w", "x", "y", "z"]
        scores = {item_id: 0.5 for item_id in pool}

        first = map_to_tiers(pool, scores, ["S", "A"])
        second = map_to_tiers(pool, scores, ["S", "A"])

        assert first.ranking == pool
        assert first.assignments == {"w": "S", "x": "S", "y": "A", "z": "A"}
        assert second.assignments == first.assignments

    def test_ties_broken_by_pool_order_between_higher_scores(self) -> None:
        pool = ["b", "a", "c"]
        scores = {"a": 0.7, "b": 0.7, "c": 0.9}

        assert rank_by_score(pool, scores) == ["c", "b", "a"]

    def test_catch_all_tier_never_assigned(self) -> None:
        pool = ["a", "b"]
        scores = {"a": 0.8, "b": 0.2}

        batch = map_to_tiers(pool, scores, ["S", UNRANKED_TIER_ID, "A"])

        assert batch.assignments == {"a": "S", "b": "A"}
        assert batch.tier_ids == ["S", "A"]

    def test_empty_tier_list_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            map_to_tiers(["a", "b"], {"a": 0.5, "b": 0.5}, [])

    def test_duplicate_tiers_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            map_to_tiers(["a", "b"], {"a": 0.5, "b": 0.5}, ["S", "S"])

    def test_missing_score_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            map_to_tiers(["a", "b"], {"a": 0.5}, ["S"])

    def test_batch_groups_and_moves(self) -> None:
        """tiers() lists every destination and moves() drops unchanged items."""
        # Arrange
        pool = ["a", "b", "c"]
        scores = {"a": 0.9, "b": 0.5, "c": 0.1}

        # Act
        batch = map_to_tiers(pool, scores, ["S", "A", "B", "C"])

        # Assert
        assert batch.tiers() == {"S": ["a"], "A": ["b"], "B": ["c"], "C": []}
        assert batch.moves({"a": "S", "b": "unranked", "c": "C"}) == {"b": "A", "c": "B"}
        assert list(batch) == ["a", "b", "c"]
        assert batch["b"] == "A"
        assert batch.scores == scores
