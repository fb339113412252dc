"""
Exception classes for the head-to-head ranking system.

Centralized location for all custom exceptions to avoid circular imports.
"""


class HeadToHeadError(Exception):
    """Base exception for all head-to-head errors."""
    pass


class InsufficientItemsError(HeadToHeadError):
    """Raised when a session is started with fewer than two items."""
    pass


class NoActiveComparisonError(HeadToHeadError):
    """Raised when vote/skip is called while no pair is on offer."""
    pass


class InvalidVoteError(HeadToHeadError):
    """Raised when a vote names an item outside the pair or the pool."""
    pass


class ValidationError(HeadToHeadError):
    """Base exception for validation-related errors."""
    pass


class ConfigurationError(HeadToHeadError):
    """Base exception for configuration-related errors."""
    pass


class JudgeError(HeadToHeadError):
    """Base exception for all judge-related errors."""
    pass


class FinishRequested(Exception):
    """Raised by a judge to end the session early and apply what was decided."""
    pass
