"""
Tier mapping from ranked items to tier buckets.
"""

from .tier_mapper import map_to_tiers, tier_sizes

__all__ = ["map_to_tiers", "tier_sizes"]
