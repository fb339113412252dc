"""
Wilson score calculator.

Confidence-adjusted win proportions: the lower bound is the ranking score,
the full interval decides which orderings are still ambiguous.
"""

import math

from typing_extensions import override

from ..interfaces import Scorer
from ..models import LedgerEntry

DEFAULT_Z = 1.96  # 95% confidence
NEUTRAL_SCORE = 0.5


def _check_counts(wins: int, losses: int) -> None:
    if wins < 0 or losses < 0:
        raise ValueError(f"wins and losses must be non-negative, got {wins}/{losses}")


def _bounds(wins: int, losses: int, z: float) -> tuple[float, float]:
    n = wins + losses
    p = wins / n
    z2 = z * z
    denominator = 1 + z2 / n
    center = p + z2 / (2 * n)
    margin = z * math.sqrt((p * (1 - p) + z2 / (4 * n)) / n)
    lower = max(0.0, (center - margin) / denominator)
    upper = min(1.0, (center + margin) / denominator)
    return lower, upper


def wilson_lower_bound(wins: int, losses: int, z: float = DEFAULT_Z) -> float:
    """Wilson lower bound of the win proportion; 0.5 when there are no comparisons."""
    _check_counts(wins, losses)
    if wins + losses == 0:
        return NEUTRAL_SCORE
    return _bounds(wins, losses, z)[0]


def wilson_upper_bound(wins: int, losses: int, z: float = DEFAULT_Z) -> float:
    """Wilson upper bound of the win proportion; 1.0 when there are no comparisons."""
    _check_counts(wins, losses)
    if wins + losses == 0:
        return 1.0
    return _bounds(wins, losses, z)[1]


def wilson_interval(wins: int, losses: int, z: float = DEFAULT_Z) -> tuple[float, float]:
    """
    Return the Wilson score interval for a binomial win rate.

    An item with no comparisons carries no information, so its interval spans
    the whole [0, 1] range.

    Args:
        wins: Number of wins
        losses: Number of losses
        z: Normal quantile for the confidence level (1.96 = 95%)

    Returns:
        (lower_bound, upper_bound) as floats in [0, 1]
    """
    _check_counts(wins, losses)
    if wins + losses == 0:
        return (0.0, 1.0)
    return _bounds(wins, losses, z)


def intervals_overlap(a: tuple[float, float], b: tuple[float, float]) -> bool:
    """True when two closed intervals share at least one point."""
    return a[0] <= b[1] and b[0] <= a[1]


class WilsonScorer(Scorer):
    """Scorer using the Wilson lower bound as the point score."""

    def __init__(self, z: float = DEFAULT_Z):
        if z <= 0:
            raise ValueError(f"z must be positive, got {z}")
        self.z: float = z

    @override
    def score(self, entry: LedgerEntry) -> float:
        return wilson_lower_bound(entry.wins, entry.losses, self.z)

    @override
    def interval(self, entry: LedgerEntry) -> tuple[float, float]:
        return wilson_interval(entry.wins, entry.losses, self.z)

    def __repr__(self) -> str:
        return f"WilsonScorer(z={self.z})"
