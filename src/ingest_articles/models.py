"""Data models for ingest_articles pipeline stage."""

import uuid
from dataclasses import dataclass, field


@dataclass
class IngestResult:
    """Counts from writing one batch of feed items to storage."""
    created: int = 0
    duplicates_skipped: int = 0
    created_ids: list[uuid.UUID] = field(default_factory=list)
