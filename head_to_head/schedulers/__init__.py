"""
Pair scheduling.

Decides which head-to-head comparison comes next in each phase.
"""

from .pair_scheduler import PairScheduler, all_pairs, ambiguous_pairs

__all__ = ["PairScheduler", "all_pairs", "ambiguous_pairs"]
