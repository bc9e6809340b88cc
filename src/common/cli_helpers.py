"""Common CLI helper utilities."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict, is_dataclass
from typing import Any


def setup_logging() -> None:
    """Configure standard logging format for CLI tools."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def positive_int(value: str, field_name: str = "value") -> int:
    """Parse a positive integer for argparse arguments.

    Args:
        value: Raw argument string.
        field_name: Name of the field for error messages.

    Returns:
        Parsed integer.

    Raises:
        argparse.ArgumentTypeError: If the value is not a positive integer.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{field_name} must be an integer") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"{field_name} must be >= 1")
    return parsed


def format_summary(summary: Any) -> str:
    """Render a dataclass (or dict) summary as indented JSON for CLI output."""
    if is_dataclass(summary) and not isinstance(summary, type):
        summary = asdict(summary)
    return json.dumps(summary, default=str, ensure_ascii=False, indent=2)
