#!/usr/bin/env python3
"""Print a text snapshot of the dashboard for a set of filters.

Fetches a live USGS summary feed, applies the filters and prints the
same aggregates the browser dashboard renders. Useful for checking the
pipeline against the live feed without running the HTTP server.

Usage:
    # Past day, everything
    python scripts/dashboard_snapshot.py

    # Past week, magnitude 4.5+, Japan only
    python scripts/dashboard_snapshot.py --time-range week --min-magnitude 4.5 --country japan

    # Custom date window (cut from the 30-day feed)
    python scripts/dashboard_snapshot.py --start 2024-01-10 --end 2024-01-12

Environment:
    CONFIG_PATH: Path to config file (default: config/config.yaml)
"""

import argparse
import logging
import os
import sys
from datetime import date

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from quakedash.core.feeds import TimeRange, parse_time_range
from quakedash.core.filters import FilterConfig
from quakedash.orchestrator import FetchOrchestrator
from quakedash.shell.config_loader import load_config

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def build_filters(args: argparse.Namespace) -> FilterConfig:
    """Build a FilterConfig from command-line arguments."""
    use_custom_date = args.start is not None or args.end is not None

    return FilterConfig(
        min_magnitude=args.min_magnitude,
        max_magnitude=args.max_magnitude,
        country=args.country,
        depth_range=(args.min_depth, args.max_depth),
        time_range=parse_time_range(args.time_range),
        use_custom_date=use_custom_date,
        custom_start_date=date.fromisoformat(args.start) if args.start else None,
        custom_end_date=date.fromisoformat(args.end) if args.end else None,
    )


def main():
    parser = argparse.ArgumentParser(
        description="Print dashboard aggregates for the live USGS feed",
    )
    parser.add_argument(
        "--time-range",
        choices=[r.value for r in TimeRange],
        default=TimeRange.DAY.value,
        help="Summary feed to fetch (default: day)",
    )
    parser.add_argument("--min-magnitude", type=float, default=0.0)
    parser.add_argument("--max-magnitude", type=float, default=10.0)
    parser.add_argument("--min-depth", type=float, default=0.0)
    parser.add_argument("--max-depth", type=float, default=1000.0)
    parser.add_argument(
        "--country",
        default="all",
        help="Country or free-text place filter (default: all)",
    )
    parser.add_argument("--start", help="Custom window start date (YYYY-MM-DD)")
    parser.add_argument("--end", help="Custom window end date (YYYY-MM-DD)")
    parser.add_argument(
        "--config",
        default=os.environ.get("CONFIG_PATH", "config/config.yaml"),
        help="Path to config file",
    )

    args = parser.parse_args()

    config = load_config(args.config)
    filters = build_filters(args)
    orchestrator = FetchOrchestrator(config)

    result = orchestrator.fetch(filters)
    if not result.success:
        logger.error("%s", result.summary)
        return 1

    view = orchestrator.view(filters)
    stats = view.stats

    print(f"\n{result.endpoint.label}: {stats.total} of {result.earthquakes_kept} earthquakes match")
    print(f"  M5+: {stats.significant}   max M{stats.max_magnitude:.1f}   "
          f"avg depth {stats.average_depth:.0f} km")

    print("\nMagnitude distribution:")
    for b in view.distribution:
        print(f"  {b.lower:>4.1f}-{b.upper:<4.1f} {b.count:>5}")

    print("\nTop countries:")
    for row in view.top_countries:
        print(f"  {row.label:<24} {row.count:>5}")

    print("\nMost recent:")
    for eq in view.recent:
        print(f"  M{eq.magnitude:.1f}  {eq.time}  {eq.place}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
