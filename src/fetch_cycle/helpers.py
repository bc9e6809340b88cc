"""Helper functions for fetch_cycle CLI."""

from __future__ import annotations

import argparse

from common.cli_helpers import positive_int


def parse_fetch_cycle_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for fetch_cycle."""

    parser = argparse.ArgumentParser(description="Fetch RSS sources, store new articles and classify them.")
    parser.add_argument("--config", default=None, help="Config name (default: $PULSE_CONFIG or prod)")
    parser.add_argument("--seed", action="store_true", help="Register the default feeds before fetching")
    parser.add_argument(
        "--until-done",
        action="store_true",
        help="Repeat cycles until no source is left waiting",
    )
    parser.add_argument(
        "--max-cycles",
        type=lambda v: positive_int(v, "max-cycles"),
        default=20,
        help="Upper bound on cycles with --until-done (default: 20)",
    )
    parser.add_argument(
        "--max-sources",
        type=lambda v: positive_int(v, "max-sources"),
        default=None,
        help="Override cycle.max_sources_per_run",
    )
    return parser.parse_args(argv)
