"""Helper functions for ingest_articles CLI."""

from __future__ import annotations

import argparse
import logging
import uuid

logger = logging.getLogger(__name__)


def parse_source_id(value: str) -> uuid.UUID:
    '''Parse a source id argument.'''
    try:
        return uuid.UUID(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid source id: {value}") from exc


def parse_ingest_articles_args(argv: list[str] | None = None) -> argparse.Namespace:
    '''Parse CLI arguments for managing feed sources.'''

    parser = argparse.ArgumentParser(description="Manage RSS sources.")
    parser.add_argument("--config", default=None, help="Config name (default: $PULSE_CONFIG or prod).")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("seed", help="Register the default feeds.")

    list_parser = subparsers.add_parser("list", help="List registered feeds.")
    list_parser.add_argument("--active-only", action="store_true")

    add_parser = subparsers.add_parser("add", help="Register a feed.")
    add_parser.add_argument("name")
    add_parser.add_argument("url")

    for command in ("activate", "deactivate", "delete"):
        command_parser = subparsers.add_parser(command, help=f"{command.capitalize()} a feed.")
        command_parser.add_argument("source_id", type=parse_source_id)

    return parser.parse_args(argv)
