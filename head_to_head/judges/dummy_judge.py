"""
Dummy judge implementation for testing.

Provides deterministic and random decisions for testing purposes.
"""

import random

from typing_extensions import override

from ..exceptions import ValidationError
from ..interfaces import Judge
from ..models import Item, Pair, PairResult

MODES = ("deterministic", "first", "random")


class DummyJudge(Judge):
    """
    Dummy judge for testing purposes.

    Modes:
        deterministic: the lexicographically smaller item id wins
        first: the item shown first wins
        random: seeded coin flip
    """

    def __init__(self, mode: str = "deterministic", seed: int = 42):
        """
        Initialize dummy judge.

        Args:
            mode: One of "deterministic", "first" or "random"
            seed: Random seed for reproducible results
        """
        if mode not in MODES:
            raise ValidationError(f"Unknown mode: {mode}")
        self.mode = mode
        self.seed = seed
        self.judge_id = f"dummy_{mode}"
        self._rng = random.Random(seed)

    @override
    def evaluate_pair(self, first: Item, second: Item) -> PairResult:
        if self.mode == "deterministic":
            winner = min(first.item_id, second.item_id)
        elif self.mode == "first":
            winner = first.item_id
        else:
            winner = self._rng.choice((first.item_id, second.item_id))

        return PairResult(
            pair=Pair(first.item_id, second.item_id),
            winner_id=winner,
            judge_id=self.judge_id,
            rationale=f"Dummy {self.mode} decision",
        )
