"""
Scorer implementations.

Provides implementations of the Scorer interface for turning win/loss
records into confidence scores.

Available implementations:
- WilsonScorer: Wilson score lower bound with interval-overlap ambiguity test
"""

from .wilson_scorer import WilsonScorer

__all__ = ["WilsonScorer"]
