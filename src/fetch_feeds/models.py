"""Data models for fetch_feeds pipeline stage."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class FeedItem:
    """A single cleaned item parsed from an RSS or Atom feed."""
    title: str
    link: str
    description: Optional[str]
    publication_date: datetime


@dataclass
class FetchResult:
    """Outcome of fetching and parsing one feed URL."""
    success: bool
    items: list[FeedItem] = field(default_factory=list)
    error: Optional[str] = None
