"""Write fetched feed items to storage, skipping links that already exist."""

import logging
import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from common.utils import truncate
from feed_db.helpers import is_unique_violation
from feed_db.models import Article, ArticleTopic, Source, Topic
from fetch_feeds.helpers import MAX_DESCRIPTION_LENGTH
from fetch_feeds.models import FeedItem
from ingest_articles.errors import (
    ArticleExistsError,
    IngestError,
    InvalidTopicIdsError,
    SourceInactiveError,
    SourceNotFoundError,
)
from ingest_articles.models import IngestResult

logger = logging.getLogger(__name__)


def _validate_source(session: Session, source_id: uuid.UUID) -> Source:
    source = session.get(Source, source_id)
    if source is None:
        raise SourceNotFoundError(source_id)
    if not source.is_active:
        raise SourceInactiveError(source_id)
    return source


def ingest_items(session: Session, source_id: uuid.UUID, items: list[FeedItem]) -> IngestResult:
    """
    Insert feed items as articles for one source.

    Each item is committed on its own. A unique-link violation means the
    article already exists and is counted as a duplicate; any other database
    error aborts the rest of the batch. Articles committed before the error
    stay committed.

    Args:
        session: Open database session
        source_id: Source the items were fetched from
        items: Cleaned feed items

    Returns:
        IngestResult with created and duplicate counts

    Raises:
        SourceNotFoundError: If the source does not exist
        SourceInactiveError: If the source is deactivated
        IngestError: On a non-duplicate database failure
    """
    _validate_source(session, source_id)
    result = IngestResult()

    for item in items:
        article = Article(
            source_id=source_id,
            title=item.title,
            description=truncate(item.description, MAX_DESCRIPTION_LENGTH),
            link=item.link,
            publication_date=item.publication_date,
        )
        session.add(article)
        try:
            session.commit()
        except IntegrityError as e:
            session.rollback()
            if is_unique_violation(e):
                result.duplicates_skipped += 1
                continue
            logger.error("Failed to insert article %s: %s", item.link, e)
            raise IngestError(f"Failed to insert article {item.link}: {e.orig}") from e
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Failed to insert article %s: %s", item.link, e)
            raise IngestError(f"Failed to insert article {item.link}: {e}") from e

        result.created += 1
        result.created_ids.append(article.id)

    logger.info(
        "Ingested source %s: created=%d duplicates=%d",
        source_id, result.created, result.duplicates_skipped,
    )
    return result


def create_article(
    session: Session,
    source_id: uuid.UUID,
    title: str,
    link: str,
    publication_date: datetime,
    description: str | None = None,
    sentiment: str | None = None,
    topic_ids: list[uuid.UUID] | None = None,
) -> Article:
    """
    Insert one article with its topic links in a single transaction.

    Source and topics are checked before anything is written, so a bad
    reference leaves storage untouched.

    Raises:
        SourceNotFoundError: If the source does not exist
        InvalidTopicIdsError: If any topic id is unknown
        ArticleExistsError: If the link is already stored
        IngestError: On any other database failure
    """
    if session.get(Source, source_id) is None:
        raise SourceNotFoundError(source_id)

    topic_ids = list(dict.fromkeys(topic_ids or []))
    if topic_ids:
        found = set(session.scalars(select(Topic.id).where(Topic.id.in_(topic_ids))))
        missing = [topic_id for topic_id in topic_ids if topic_id not in found]
        if missing:
            raise InvalidTopicIdsError(missing)

    article = Article(
        source_id=source_id,
        title=title,
        description=truncate(description, MAX_DESCRIPTION_LENGTH),
        link=link,
        publication_date=publication_date,
        sentiment=sentiment,
    )
    try:
        session.add(article)
        session.flush()
        session.add_all(ArticleTopic(article_id=article.id, topic_id=topic_id) for topic_id in topic_ids)
        session.commit()
    except IntegrityError as e:
        session.rollback()
        if is_unique_violation(e):
            raise ArticleExistsError(link) from e
        logger.error("Failed to create article %s: %s", link, e)
        raise IngestError(f"Failed to create article {link}: {e.orig}") from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Failed to create article %s: %s", link, e)
        raise IngestError(f"Failed to create article {link}: {e}") from e

    logger.info("Created article %s with %d topics", article.id, len(topic_ids))
    return article
