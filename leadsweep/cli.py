"""
Command Line Interface

Entry point for running a sweep from the command line.

Usage:
    python -m leadsweep
    python -m leadsweep --policy strict-content --limit 5
    python -m leadsweep --cities my_cities.json -k "med spa" -k "botox" --dry-run
"""

import argparse
import logging
import sys

from dotenv import load_dotenv

from .config import (
    DEFAULT_CITIES_FILE,
    DEFAULT_GRID_OFFSET,
    DEFAULT_MAX_RESULTS,
    DEFAULT_POLICY,
    LOG_LEVEL,
    NEW_RESULTS_LIMIT,
)
from .config_manager import SweepConfig
from .exceptions import LeadSweepError
from .qualification import POLICIES
from .sweeper import LeadSweeper


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Sweep cities for businesses that need a better web presence",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m leadsweep
  python -m leadsweep --policy strict-content --limit 5
  python -m leadsweep --cities cities.json -k "med spa" -k "botox"
  python -m leadsweep --rank-by-distance --max-results 20 --dry-run
        """
    )

    parser.add_argument(
        "--cities",
        default=DEFAULT_CITIES_FILE,
        help=f"JSON file with the cities to sweep (default: {DEFAULT_CITIES_FILE})"
    )
    parser.add_argument(
        "-k", "--keyword",
        action="append",
        dest="keywords",
        help="Search keyword; repeat for several (default: built-in list)"
    )
    parser.add_argument(
        "--policy",
        choices=sorted(POLICIES),
        default=DEFAULT_POLICY,
        help=f"Qualification policy (default: {DEFAULT_POLICY})"
    )
    parser.add_argument(
        "--min-reviews",
        type=int,
        help="Override the policy's minimum review count"
    )
    parser.add_argument(
        "--min-rating",
        type=float,
        help="Override the policy's minimum rating"
    )
    parser.add_argument(
        "-l", "--limit",
        type=int,
        default=NEW_RESULTS_LIMIT,
        help=f"Leads admitted per city/point/keyword before moving on (default: {NEW_RESULTS_LIMIT})"
    )
    parser.add_argument(
        "--max-results",
        type=int,
        default=DEFAULT_MAX_RESULTS,
        help=f"Search results per query (default: {DEFAULT_MAX_RESULTS})"
    )
    parser.add_argument(
        "--offset",
        type=float,
        default=DEFAULT_GRID_OFFSET,
        help=f"Sweep point offset in degrees (default: {DEFAULT_GRID_OFFSET})"
    )
    parser.add_argument(
        "--rank-by-distance",
        action="store_true",
        help="Rank search results by distance instead of searching a radius"
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Abort the run when a search fails instead of skipping that query"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Keep the search log and lead store in memory"
    )
    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        help=f"Logging level (default: {LOG_LEVEL})"
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress progress output"
    )
    return parser


def main(argv=None):
    """Main CLI entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    config = SweepConfig(
        policy_name=args.policy,
        min_reviews=args.min_reviews,
        min_rating=args.min_rating,
        new_results_limit=args.limit,
        max_results=args.max_results,
        grid_offset=args.offset,
        rank_by_distance=args.rank_by_distance,
        cities_file=args.cities,
        fail_fast=args.fail_fast,
        dry_run=args.dry_run,
        verbose=not args.quiet,
    )
    if args.keywords:
        config.keywords = args.keywords

    try:
        with LeadSweeper(config) as sweeper:
            result = sweeper.run()

        if not args.quiet:
            print(f"\nDone! Admitted {result.total_admitted} leads.")
        return 0

    except LeadSweepError as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n\nInterrupted by user.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
