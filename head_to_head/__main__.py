"""
CLI entry point for head-to-head ranking.

Parses arguments, validates config, and wires components.
"""

import argparse
import shutil
import sys
from argparse import Namespace
from pathlib import Path
from typing import TypedDict

from prettytable import PrettyTable

from .exceptions import HeadToHeadError
from .interfaces import Judge
from .judges.console_judge import ConsoleJudge
from .judges.dummy_judge import DummyJudge
from .judges.sim_judge import SimulatedJudge
from .logging_config import get_logger, setup_logging
from .models import AssignmentBatch, TierList
from .orchestrator import Orchestrator, RunConfig
from .session import SessionConfig
from .storage.json_tierlist_store import JSONTierListStore


class CLIArgs(TypedDict):
    """Typed representation of parsed CLI arguments."""
    tier_list: str
    output: str | None
    judge_type: str
    budget: int | None
    noise: float
    skip_rate: float
    seed: int | None
    shuffle: bool
    refinement: bool
    debug: bool
    log_level: str


def parse_args(argv: list[str] | None = None) -> Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Head-to-Head - pairwise comparison tier ranking"
    )

    # Required arguments
    _ = parser.add_argument(
        "--tier-list",
        required=True,
        help="Path to the tier-list JSON document"
    )

    # Optional arguments
    _ = parser.add_argument(
        "--output",
        help="Write the ranked tier list here instead of updating --tier-list in place"
    )
    _ = parser.add_argument(
        "--judge",
        dest="judge_type",
        choices=["console", "simulated", "dummy"],
        default="console",
        help="Who decides the comparisons (default: console)"
    )
    _ = parser.add_argument(
        "--budget",
        type=int,
        help="Stop after this many comparisons and apply what was decided"
    )
    _ = parser.add_argument(
        "--noise",
        type=float,
        default=0.1,
        help="Noise level for simulated judge (0-1, default: 0.1)"
    )
    _ = parser.add_argument(
        "--skip-rate",
        type=float,
        default=0.0,
        help="Fraction of pairs the simulated judge skips (0-1, default: 0)"
    )
    _ = parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for simulated/dummy judges and --shuffle"
    )
    _ = parser.add_argument(
        "--shuffle",
        action="store_true",
        help="Shuffle the order of the first pass (reproducible with --seed)"
    )
    _ = parser.add_argument(
        "--no-refinement",
        dest="refinement",
        action="store_false",
        help="Skip the refinement pass over ambiguous pairs"
    )
    _ = parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    _ = parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Set logging level (default: WARNING)"
    )

    return parser.parse_args(argv)


def args_to_typed(ns: Namespace) -> CLIArgs:
    """Convert argparse Namespace to typed CLIArgs."""
    return CLIArgs(
        tier_list=ns.tier_list,
        output=ns.output,
        judge_type=ns.judge_type,
        budget=ns.budget,
        noise=ns.noise,
        skip_rate=ns.skip_rate,
        seed=ns.seed,
        shuffle=ns.shuffle,
        refinement=ns.refinement,
        debug=ns.debug,
        log_level=ns.log_level,
    )


def validate_config(args: CLIArgs) -> None:
    """Validate configuration parameters."""
    logger = get_logger("validate_config")

    tier_list_path = Path(args["tier_list"])
    if not tier_list_path.is_file():
        logger.error(f"Tier list does not exist: {tier_list_path}")
        print(f"Error: tier list does not exist: {tier_list_path}")
        sys.exit(1)

    if args["budget"] is not None and args["budget"] <= 0:
        logger.error(f"budget must be positive, got {args['budget']}")
        print(f"Error: budget must be positive, got {args['budget']}")
        sys.exit(1)

    for name in ("noise", "skip_rate"):
        if not (0.0 <= args[name] <= 1.0):
            logger.error(f"{name} must be between 0 and 1, got {args[name]}")
            print(f"Error: {name} must be between 0 and 1, got {args[name]}")
            sys.exit(1)

    if args["skip_rate"] >= 1.0 and args["budget"] is None:
        logger.error("skip_rate of 1 never decides anything; set --budget")
        print("Error: --skip-rate 1 needs --budget")
        sys.exit(1)


def make_judge(args: CLIArgs, tier_list: TierList) -> Judge:
    """Create the judge selected on the command line."""
    logger = get_logger("make_judge")

    if args["judge_type"] == "console":
        return ConsoleJudge()

    if args["judge_type"] == "dummy":
        if args["seed"] is None:
            return DummyJudge(mode="deterministic")
        return DummyJudge(mode="random", seed=args["seed"])

    # Simple ground truth: earlier in the comparison pool = better
    pool = tier_list.comparison_pool()
    ground_truth = {item_id: 1.0 - i / len(pool) for i, item_id in enumerate(pool)} if pool else {}
    logger.info(f"Simulated judge created with {len(ground_truth)} items, noise={args['noise']}")
    return SimulatedJudge(ground_truth, noise=args["noise"], skip_rate=args["skip_rate"], seed=args["seed"])


def wire_components(args: CLIArgs) -> tuple[JSONTierListStore, Judge, RunConfig, SessionConfig]:
    """Wire dependency injection components."""
    logger = get_logger("wire_components")

    path = Path(args["tier_list"])
    if args["output"]:
        output = Path(args["output"])
        output.parent.mkdir(parents=True, exist_ok=True)
        _ = shutil.copyfile(path, output)
        logger.info(f"Copied {path} to {output}")
        path = output

    store = JSONTierListStore(path)
    judge = make_judge(args, store.load())

    run_config = RunConfig(budget=args["budget"])
    shuffle_seed = None
    if args["shuffle"]:
        shuffle_seed = args["seed"] if args["seed"] is not None else 0
    session_config = SessionConfig(refinement=args["refinement"], shuffle_seed=shuffle_seed)
    logger.info(f"Configuration: {run_config}, {session_config}")
    return store, judge, run_config, session_config


def print_results(batch: AssignmentBatch, tier_list: TierList) -> None:
    """Print the final ranking as a table."""
    table = PrettyTable()
    table.field_names = ["Rank", "Item", "Tier", "Score", "Was"]
    table.align["Rank"] = "r"
    table.align["Item"] = "l"
    table.align["Score"] = "r"

    previous = tier_list.item_tiers()
    for rank, (item_id, tier_id) in enumerate(batch.items(), 1):
        table.add_row([
            rank,
            tier_list.get_item(item_id).label,
            tier_id,
            f"{batch.scores[item_id]:.3f}",
            previous.get(item_id, "-"),
        ])

    print(table)


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = args_to_typed(parse_args(argv))
    setup_logging(level=args["log_level"], debug=args["debug"])
    logger = get_logger("main")

    try:
        validate_config(args)
        store, judge, run_config, session_config = wire_components(args)
        before = store.load()

        print("Head-to-Head")
        print("=" * 60)
        print(f"Tier list: {store.path}")
        print(f"Judge: {args['judge_type']}")
        print(f"Items to compare: {len(before.comparison_pool())}")
        print("=" * 60)

        orchestrator = Orchestrator(store, judge, config=run_config, session_config=session_config)
        batch = orchestrator.run()

        print("\nFinal Ranking:")
        print_results(batch, before)
        print(f"\nSaved to {store.path} (previous layout in {store.snapshots_path})")

    except HeadToHeadError as e:
        logger.error(f"Head-to-head failed: {e}")
        print(f"Error: {e}")
        sys.exit(1)
    except RuntimeError as e:
        logger.error(f"Head-to-head aborted: {e}")
        print(f"\nAborted: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        print("\nInterrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
