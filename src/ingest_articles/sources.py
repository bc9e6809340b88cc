"""Feed source registry: default feeds, seeding and fetch bookkeeping."""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from feed_db.helpers import is_unique_violation
from feed_db.models import Source
from ingest_articles.errors import DuplicateSourceError, SourceNotFoundError

logger = logging.getLogger(__name__)

MAX_FETCH_ERROR_LENGTH = 1000

DEFAULT_FEEDS = {
    # BBC
    "BBC News - World": "https://feeds.bbci.co.uk/news/world/rss.xml",
    "BBC News - Technology": "https://feeds.bbci.co.uk/news/technology/rss.xml",
    # The Guardian
    "The Guardian - World": "https://www.theguardian.com/world/rss",
    "The Guardian - Technology": "https://www.theguardian.com/technology/rss",
    # NPR
    "NPR - News": "https://feeds.npr.org/1001/rss.xml",
    "NPR - Business": "https://feeds.npr.org/1006/rss.xml",
    # Sky News
    "Sky News - World": "https://feeds.skynews.com/feeds/rss/world.xml",
    # Tech
    "TechCrunch": "https://techcrunch.com/feed/",
    # Polish press
    "Rzeczpospolita - Główne": "https://www.rp.pl/rss_main",
    "Wyborcza - Najważniejsze": "https://rss.gazeta.pl/pub/rss/najnowsze_wyborcza.xml",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_source(session: Session, source_id: uuid.UUID) -> Source:
    source = session.get(Source, source_id)
    if source is None:
        raise SourceNotFoundError(source_id)
    return source


def list_sources(session: Session, active_only: bool = False) -> list[Source]:
    stmt = select(Source).order_by(Source.name, Source.id)
    if active_only:
        stmt = stmt.where(Source.is_active.is_(True))
    return list(session.scalars(stmt))


def get_active_sources(session: Session, limit: int | None = None) -> list[Source]:
    """Active sources, least recently fetched first (never-fetched sources lead)."""
    stmt = (
        select(Source)
        .where(Source.is_active.is_(True))
        .order_by(Source.last_fetched_at.asc().nulls_first(), Source.created_at, Source.id)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return list(session.scalars(stmt))


def create_source(session: Session, name: str, url: str, is_active: bool = True) -> Source:
    """Insert a new source.

    Raises:
        DuplicateSourceError: If a source with the same URL already exists.
    """
    source = Source(name=name.strip(), url=url.strip(), is_active=is_active)
    session.add(source)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        if is_unique_violation(e):
            raise DuplicateSourceError(url) from e
        raise
    logger.info("Created RSS source %s (%s)", source.name, source.url)
    return source


def set_source_active(session: Session, source_id: uuid.UUID, is_active: bool) -> Source:
    source = get_source(session, source_id)
    source.is_active = is_active
    session.commit()
    return source


def update_source(
    session: Session,
    source_id: uuid.UUID,
    name: str | None = None,
    url: str | None = None,
    is_active: bool | None = None,
) -> Source:
    """Change any of name, url or active flag.

    Raises:
        SourceNotFoundError: If the source does not exist.
        DuplicateSourceError: If another source already uses the new URL.
    """
    source = get_source(session, source_id)
    if name is not None:
        source.name = name.strip()
    if url is not None:
        source.url = url.strip()
    if is_active is not None:
        source.is_active = is_active
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        if is_unique_violation(e):
            raise DuplicateSourceError(url) from e
        raise
    logger.info("Updated RSS source %s", source_id)
    return source


def delete_source(session: Session, source_id: uuid.UUID) -> None:
    """Delete a source; its articles go with it."""
    source = get_source(session, source_id)
    session.delete(source)
    session.commit()
    logger.info("Deleted RSS source %s", source_id)


def mark_fetch_succeeded(session: Session, source_ids: list[uuid.UUID]) -> int:
    """Stamp last_fetched_at on every given source and clear its last error."""
    if not source_ids:
        return 0
    result = session.execute(
        update(Source)
        .where(Source.id.in_(source_ids))
        .values(last_fetched_at=_utcnow(), last_fetch_error=None)
    )
    session.commit()
    return result.rowcount


def mark_fetch_failed(session: Session, source_id: uuid.UUID, error: str) -> None:
    """Record a fetch failure.

    last_fetched_at still advances so a permanently broken feed rotates to
    the back of the queue instead of being retried first on every run.
    """
    session.execute(
        update(Source)
        .where(Source.id == source_id)
        .values(last_fetched_at=_utcnow(), last_fetch_error=error[:MAX_FETCH_ERROR_LENGTH])
    )
    session.commit()


def seed_sources(session: Session, feeds: dict[str, str] | None = None) -> int:
    """Create any feeds not already registered (matched by URL). Returns the number created."""
    feeds = DEFAULT_FEEDS if feeds is None else feeds
    existing = set(session.scalars(select(Source.url)))
    created = 0
    for name, url in feeds.items():
        if url in existing:
            logger.info("RSS source already exists: %s", name)
            continue
        try:
            create_source(session, name, url)
        except DuplicateSourceError:
            logger.info("RSS source already exists: %s", name)
            continue
        created += 1
    logger.info("Seeded %d RSS sources", created)
    return created
