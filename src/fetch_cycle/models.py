"""Data models for fetch_cycle pipeline stage."""

import uuid
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class SourceSummary:
    """What happened to one source during a cycle."""
    source_id: uuid.UUID
    source_name: str
    success: bool
    items_fetched: int = 0
    articles_created: int = 0
    duplicates_skipped: int = 0
    skipped_articles: int = 0
    error: Optional[str] = None


@dataclass
class CycleError:
    source_id: uuid.UUID
    source_name: str
    error: str


@dataclass
class AIAnalysisSummary:
    attempted: int = 0
    successful: int = 0
    failed: int = 0


@dataclass
class CycleSummary:
    """Totals for one fetch cycle."""
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    articles_created: int = 0
    duplicates_skipped: int = 0
    skipped_sources: int = 0
    total_subrequests: int = 0
    stopped_early: bool = False
    has_more_work: bool = False
    sources: list[SourceSummary] = field(default_factory=list)
    errors: list[CycleError] = field(default_factory=list)
    ai_analysis: AIAnalysisSummary = field(default_factory=AIAnalysisSummary)
