"""One scheduled pass: fetch feeds, store new articles, classify them."""

import logging
import time
import uuid
from typing import Callable, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from classify_articles.classify_articles import ArticleClassifier, build_classifier, load_unanalyzed_articles
from common.config import CycleConfig, PipelineConfig
from feed_db.models import Article, Source
from fetch_cycle.models import CycleError, CycleSummary, SourceSummary
from fetch_feeds.fetch_feed import FeedFetcher
from fetch_feeds.models import FetchResult
from ingest_articles.ingest_articles import ingest_items
from ingest_articles.sources import get_active_sources, mark_fetch_failed, mark_fetch_succeeded

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    def fetch(self, url: str) -> FetchResult: ...


class _Budget:
    """Counts outbound requests so one cycle stays under the host's subrequest cap."""

    def __init__(self, limit: int):
        self.remaining = limit
        self.used = 0

    def take(self, n: int = 1) -> bool:
        if self.remaining < n:
            return False
        self.remaining -= n
        self.used += n
        return True


def _fail_source(
    session: Session, summary: CycleSummary, source: Source, source_summary: SourceSummary, error: str
) -> None:
    mark_fetch_failed(session, source.id, error)
    source_summary.error = error
    summary.failed += 1
    summary.errors.append(CycleError(source_id=source.id, source_name=source.name, error=error))


def _classify(
    classifier: ArticleClassifier,
    articles: list[Article],
    budget: _Budget,
    summary: CycleSummary,
) -> None:
    budget.take(len(articles))
    results = classifier.classify_batch(articles)

    summary.ai_analysis.attempted += len(results)
    for result in results:
        if result.outcome.success:
            summary.ai_analysis.successful += 1
        else:
            summary.ai_analysis.failed += 1


def _load_articles(session: Session, article_ids: list[uuid.UUID]) -> list[Article]:
    by_id = {a.id: a for a in session.scalars(select(Article).where(Article.id.in_(article_ids)))}
    return [by_id[i] for i in article_ids if i in by_id]


def run_fetch_cycle(
    session: Session,
    fetcher: Fetcher,
    classifier: ArticleClassifier | None,
    config: CycleConfig,
    sleep: Callable[[float], None] = time.sleep,
) -> CycleSummary:
    """
    Process the least recently fetched active sources.

    Every feed fetch, ingest batch and classification call draws on a shared
    request budget. When it runs out the cycle stops and reports
    has_more_work so the scheduler can run again. Per-source failures are
    recorded on the source and in the summary; nothing propagates.
    Budget left after the sources goes to articles that earlier cycles left
    without a sentiment, so failed or cut-off analyses are retried.

    Args:
        session: Open database session
        fetcher: Feed fetcher
        classifier: Article classifier, or None to skip AI analysis
        config: Cycle limits
        sleep: Pause function used between sources

    Returns:
        CycleSummary with per-source results and totals
    """
    summary = CycleSummary()
    budget = _Budget(config.max_subrequests)
    sources = get_active_sources(session)
    to_process = sources[: config.max_sources_per_run]
    succeeded_ids = []
    attempted: set[uuid.UUID] = set()

    logger.info(
        "Starting fetch cycle: %d active sources, processing up to %d",
        len(sources), len(to_process),
    )

    for index, source in enumerate(to_process):
        if not budget.take():
            logger.warning("Subrequest budget exhausted before source %s", source.name)
            summary.stopped_early = True
            break

        if index > 0 and config.source_delay_seconds > 0:
            sleep(config.source_delay_seconds)

        summary.processed += 1
        source_summary = SourceSummary(source_id=source.id, source_name=source.name, success=False)
        summary.sources.append(source_summary)

        try:
            result = fetcher.fetch(source.url)
        except Exception as e:
            logger.exception("Unexpected error fetching %s", source.name)
            _fail_source(session, summary, source, source_summary, f"Unexpected fetch error: {e}")
            continue

        if not result.success:
            logger.error("Failed to fetch %s: %s", source.name, result.error)
            _fail_source(session, summary, source, source_summary, result.error or "Unknown fetch error")
            continue

        source_summary.items_fetched = len(result.items)
        created_ids: list[uuid.UUID] = []
        try:
            for start in range(0, len(result.items), config.batch_size):
                if not budget.take():
                    source_summary.skipped_articles = len(result.items) - start
                    summary.stopped_early = True
                    logger.warning(
                        "Subrequest budget exhausted; skipping %d items from %s",
                        source_summary.skipped_articles, source.name,
                    )
                    break
                ingest = ingest_items(session, source.id, result.items[start:start + config.batch_size])
                source_summary.articles_created += ingest.created
                source_summary.duplicates_skipped += ingest.duplicates_skipped
                created_ids.extend(ingest.created_ids)
        except Exception as e:
            session.rollback()
            logger.exception("Failed to store articles from %s", source.name)
            _fail_source(session, summary, source, source_summary, str(e))
            continue

        source_summary.success = True
        summary.succeeded += 1
        summary.articles_created += source_summary.articles_created
        summary.duplicates_skipped += source_summary.duplicates_skipped
        succeeded_ids.append(source.id)

        if classifier is not None and created_ids:
            allowed = created_ids[: budget.remaining]
            if allowed:
                _classify(classifier, _load_articles(session, allowed), budget, summary)
                attempted.update(allowed)
            if len(allowed) < len(created_ids):
                logger.warning("Subrequest budget exhausted; remaining new articles left unanalyzed")
                summary.stopped_early = True

    mark_fetch_succeeded(session, succeeded_ids)

    # Backlog from earlier cycles
    if classifier is not None and budget.remaining > 0:
        backlog = load_unanalyzed_articles(session, limit=budget.remaining, exclude_ids=attempted)
        if backlog:
            logger.info("Retrying analysis for %d unanalyzed articles", len(backlog))
            _classify(classifier, backlog, budget, summary)

    summary.skipped_sources = len(sources) - summary.processed
    summary.total_subrequests = budget.used
    summary.has_more_work = summary.skipped_sources > 0 or summary.stopped_early

    logger.info(
        "Fetch cycle done: processed=%d succeeded=%d failed=%d created=%d ai=%d/%d more=%s",
        summary.processed, summary.succeeded, summary.failed, summary.articles_created,
        summary.ai_analysis.successful, summary.ai_analysis.attempted, summary.has_more_work,
    )
    return summary


def run_configured_cycle(session: Session, config: PipelineConfig) -> CycleSummary:
    """Run one cycle with the live fetcher and classifier built from config."""
    fetcher = FeedFetcher(config.fetch)
    classifier = build_classifier(session, config.classification)
    return run_fetch_cycle(session, fetcher, classifier, config.cycle)
