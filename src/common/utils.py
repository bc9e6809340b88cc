"""Common utility functions."""

import re

_WHITESPACE_RE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    """Replace runs of whitespace with a single space and strip the ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def truncate(text: str | None, max_length: int, suffix: str = "") -> str | None:
    """Cut text to max_length characters, appending suffix when cut."""
    if text is None or len(text) <= max_length:
        return text
    return text[:max_length] + suffix
