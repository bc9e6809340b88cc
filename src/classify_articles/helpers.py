"""Helper functions for classify_articles CLI."""

from __future__ import annotations

import argparse

from common.cli_helpers import positive_int


def parse_classify_articles_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for classify_articles."""

    parser = argparse.ArgumentParser(description="Classify articles that have no sentiment yet.")

    parser.add_argument(
        "--config",
        default=None,
        help="Config name (default: $PULSE_CONFIG or prod)",
    )
    parser.add_argument(
        "--limit",
        type=lambda v: positive_int(v, "limit"),
        default=50,
        help="Maximum number of unanalyzed articles to classify (default: 50)",
    )
    parser.add_argument(
        "--model",
        default=None,
        help="OpenRouter model id (default: from config or $OPENROUTER_MODEL)",
    )

    return parser.parse_args(argv)
