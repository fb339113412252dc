"""
Head-to-Head - pairwise comparison tier ranking

Turns a sequence of binary "which is better?" judgments over a pool of items
into a full ordering using Wilson-score confidence bounds, then maps that
ordering onto tier buckets.
"""

from .exceptions import (
    HeadToHeadError,
    InsufficientItemsError,
    InvalidVoteError,
    NoActiveComparisonError,
)
from .models import AssignmentBatch, Item, Pair, Phase, Progress, TierList, UNRANKED_TIER_ID
from .ledger import VoteLedger
from .mappers.tier_mapper import map_to_tiers
from .scoring.wilson_scorer import WilsonScorer, wilson_interval, wilson_lower_bound
from .session import Session, SessionConfig

__version__ = "0.1.0"
__all__ = [
    "AssignmentBatch",
    "HeadToHeadError",
    "InsufficientItemsError",
    "InvalidVoteError",
    "Item",
    "NoActiveComparisonError",
    "Pair",
    "Phase",
    "Progress",
    "Session",
    "SessionConfig",
    "TierList",
    "UNRANKED_TIER_ID",
    "VoteLedger",
    "WilsonScorer",
    "map_to_tiers",
    "wilson_interval",
    "wilson_lower_bound",
]
