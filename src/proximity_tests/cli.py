"""Command line entrypoint: ``proximity-test LOOKUP_CSV OBSERVED_CSV``."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

from .core import proximity_permutation_test
from .display import print_results_table
from .exceptions import ProximityTestError
from .io import read_lookup_table, read_observed_pairs


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("Expected an integer value") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("Value must be a positive integer")
    return parsed


def _seed(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("Expected an integer value") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("Seed must be a non-negative integer")
    return parsed


def _n_jobs(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("Expected an integer value") from exc
    if parsed == 0:
        raise argparse.ArgumentTypeError(
            "n_jobs must be a positive worker count or negative (-1 = all cores)"
        )
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="proximity-test",
        description=(
            "Permutation test of whether genetically linked community pairs "
            "are closer by driving distance/time than random pairings."
        ),
    )
    parser.add_argument(
        "lookup",
        help=(
            "CSV of travel distance/time for every directed community pair, "
            "excluding self-pairs and the observed linked pairs."
        ),
    )
    parser.add_argument(
        "observed",
        help="CSV of observed linked pairs, one row per replicate.",
    )
    parser.add_argument(
        "-n",
        "--n-permutations",
        type=_positive_int,
        default=10_000,
        help="Number of permutation iterations (default: 10000).",
    )
    parser.add_argument(
        "--seed",
        type=_seed,
        default=None,
        help="Random seed for reproducible permutations.",
    )
    parser.add_argument(
        "--missing-pairs",
        choices=("raise", "drop"),
        default=None,
        help=(
            "What to do when a permuted pair is absent from the lookup table. "
            "Defaults to $PROXIMITY_TESTS_MISSING_PAIRS or 'raise'."
        ),
    )
    parser.add_argument(
        "--n-jobs",
        type=_n_jobs,
        default=1,
        help="Worker threads for the iteration loop (-1 = all cores).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON instead of a table.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug).",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        lookup = read_lookup_table(args.lookup)
        observed = read_observed_pairs(args.observed)
        result = proximity_permutation_test(
            lookup,
            observed,
            n_permutations=args.n_permutations,
            random_state=args.seed,
            missing_pairs=args.missing_pairs,
            n_jobs=args.n_jobs,
        )
    except (ProximityTestError, OSError) as exc:
        print(f"proximity-test: error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        payload = result.to_dict()
        # The null distribution is long; keep JSON output compact.
        payload.pop("permuted_mean_distance")
        payload.pop("permuted_mean_time")
        print(json.dumps(payload, indent=2))
    else:
        print_results_table(result)
    return 0


__all__ = ["build_parser", "main", "parse_args"]
