"""
Tier mapper.

Turns a score-ordered pool into contiguous tier buckets. Pure: the output
depends only on the scores, the pool order and the tier list.
"""

from collections.abc import Mapping, Sequence

from ..exceptions import ConfigurationError
from ..logging_config import get_logger
from ..models import UNRANKED_TIER_ID, AssignmentBatch

# Module-level logger
logger = get_logger("tier_mapper")


def tier_sizes(count: int, tier_count: int) -> list[int]:
    """
    Bucket sizes for ``count`` items over ``tier_count`` tiers.

    Earlier tiers absorb the remainder, so sizes never differ by more than one.
    """
    if tier_count < 1:
        raise ConfigurationError(f"need at least one destination tier, got {tier_count}")
    base, extra = divmod(count, tier_count)
    return [base + 1 if index < extra else base for index in range(tier_count)]


def rank_by_score(pool: Sequence[str], scores: Mapping[str, float]) -> list[str]:
    """Sort ids by score descending; equal scores keep pool order."""
    return sorted(pool, key=lambda item_id: -scores[item_id])


def map_to_tiers(
    pool: Sequence[str],
    scores: Mapping[str, float],
    tier_ids: Sequence[str],
) -> AssignmentBatch:
    """
    Assign every pool item to exactly one destination tier.

    Args:
        pool: Item ids in pool order (tie-break order)
        scores: Final score for every pool id
        tier_ids: Destination tiers, topmost first; the catch-all tier is ignored

    Returns:
        AssignmentBatch with the highest scores in the first tier
    """
    destinations = [tier_id for tier_id in tier_ids if tier_id != UNRANKED_TIER_ID]
    if len(destinations) != len(tier_ids):
        logger.debug(f"Ignoring catch-all tier {UNRANKED_TIER_ID!r} in destination list")
    if len(set(destinations)) != len(destinations):
        raise ConfigurationError(f"destination tiers contain duplicates: {destinations}")

    missing = [item_id for item_id in pool if item_id not in scores]
    if missing:
        raise ConfigurationError(f"no score for pool items: {missing}")

    sizes = tier_sizes(len(pool), len(destinations))
    ranking = rank_by_score(pool, scores)

    assignments = dict[str, str]()
    cursor = 0
    for tier_id, size in zip(destinations, sizes):
        for item_id in ranking[cursor:cursor + size]:
            assignments[item_id] = tier_id
        cursor += size

    logger.debug(f"Mapped {len(ranking)} items onto tiers with sizes {sizes}")
    return AssignmentBatch(
        assignments=assignments,
        ranking=ranking,
        scores={item_id: scores[item_id] for item_id in ranking},
        tier_ids=destinations,
    )
