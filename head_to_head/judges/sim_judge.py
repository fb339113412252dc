"""
Simulated judge implementation.

Decides pairs from latent ground-truth scores with a noise parameter, for
testing and for exercising the engine without a human in the loop.
"""

import random

from typing_extensions import override

from ..interfaces import Judge
from ..models import Item, Pair, PairResult


class SimulatedJudge(Judge):
    """
    Votes from known item qualities.

    Picks the item with the higher noisy ground-truth score and optionally
    skips a fraction of the pairs it is shown.
    """

    def __init__(
        self,
        ground_truth: dict[str, float],
        noise: float = 0.1,
        skip_rate: float = 0.0,
        seed: int | None = None,
    ):
        """
        Create a judge over fixed item qualities.

        Args:
            ground_truth: Dict mapping item_id to its true quality score
            noise: Relative noise on each quality read (0 = always the truth, 1 = very noisy)
            skip_rate: Probability of skipping a pair instead of voting (0-1)
            seed: Random seed for reproducible decisions
        """
        self.ground_truth = ground_truth
        self.noise = max(0.0, min(1.0, noise))  # Clamp to [0, 1]
        self.skip_rate = max(0.0, min(1.0, skip_rate))
        self.judge_id = "simulated"
        self._rng = random.Random(seed)

    def _add_noise(self, score: float) -> float:
        """Perturb a quality score with Gaussian noise proportional to its size."""
        if self.noise == 0:
            return score

        # Scale noise by score magnitude
        noise_scale = abs(score) * self.noise
        return score + self._rng.gauss(0, noise_scale)

    @override
    def evaluate_pair(self, first: Item, second: Item) -> PairResult:
        """Pick the item with the higher noisy ground-truth score."""
        pair = Pair(first.item_id, second.item_id)

        if self.skip_rate and self._rng.random() < self.skip_rate:
            return PairResult(
                pair=pair,
                winner_id=None,
                judge_id=self.judge_id,
                rationale="Simulated skip",
            )

        first_score = self._add_noise(self.ground_truth.get(first.item_id, 0.0))
        second_score = self._add_noise(self.ground_truth.get(second.item_id, 0.0))
        winner = first if first_score >= second_score else second

        return PairResult(
            pair=pair,
            winner_id=winner.item_id,
            judge_id=self.judge_id,
            rationale=(
                f"Simulated evaluation: {first.item_id}={first_score:.3f}, "
                f"{second.item_id}={second_score:.3f}"
            ),
        )

