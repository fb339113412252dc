"""
Judge implementations.
"""

from .console_judge import ConsoleJudge
from .dummy_judge import DummyJudge
from .sim_judge import SimulatedJudge

__all__ = [
    "ConsoleJudge",
    "DummyJudge",
    "SimulatedJudge",
]
