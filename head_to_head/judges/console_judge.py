"""
Console judge implementation.

Asks a human on the terminal which of two items is better.
"""

from collections.abc import Callable

from typing_extensions import override

from ..exceptions import FinishRequested
from ..interfaces import Judge
from ..logging_config import get_logger
from ..models import Item, Pair, PairResult

# Module-level logger
logger = get_logger("console_judge")

PROMPT = "[1] {first}   [2] {second}   [s]kip   [f]inish > "


class ConsoleJudge(Judge):
    """Interactive judge reading answers from ``input_fn``."""

    def __init__(
        self,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ):
        """
        Initialize console judge.

        Args:
            input_fn: Reads one answer given a prompt (default: builtin input)
            output_fn: Writes messages to the user (default: print)
        """
        self.input_fn = input_fn
        self.output_fn = output_fn
        self.judge_id = "console"

    @override
    def evaluate_pair(self, first: Item, second: Item) -> PairResult:
        """Prompt until the user votes, skips or asks to finish."""
        pair = Pair(first.item_id, second.item_id)
        prompt = PROMPT.format(first=first.label, second=second.label)

        while True:
            try:
                answer = self.input_fn(prompt).strip().lower()
            except EOFError as e:
                raise FinishRequested("input closed") from e

            if answer == "1":
                return PairResult(pair=pair, winner_id=first.item_id, judge_id=self.judge_id)
            if answer == "2":
                return PairResult(pair=pair, winner_id=second.item_id, judge_id=self.judge_id)
            if answer == "s":
                return PairResult(pair=pair, winner_id=None, judge_id=self.judge_id)
            if answer == "f":
                raise FinishRequested("finish requested at the console")

            logger.debug(f"Unrecognised answer: {answer!r}")
            self.output_fn("Please answer 1, 2, s or f.")
