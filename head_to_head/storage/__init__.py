"""
Storage implementations.

Provides implementations of the TierListStore interface.
"""

from .json_tierlist_store import JSONTierListStore

__all__ = ["JSONTierListStore"]
