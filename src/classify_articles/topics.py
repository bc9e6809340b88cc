"""Case-insensitive topic lookup and article/topic association."""

import logging
import uuid

from sqlalchemy import func, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from feed_db.helpers import is_unique_violation
from feed_db.models import ArticleTopic, Topic

logger = logging.getLogger(__name__)


def find_topic(session: Session, name: str) -> Topic | None:
    stmt = select(Topic).where(func.lower(Topic.name) == func.lower(name.strip()))
    return session.scalars(stmt).first()


def find_or_create_topic(session: Session, name: str) -> Topic:
    """Return the topic matching name (ignoring case), creating it if absent.

    A concurrent insert of the same name surfaces as a unique violation, in
    which case the winner's row is returned.
    """
    name = name.strip()
    if not name:
        raise ValueError("Topic name must not be blank")

    topic = find_topic(session, name)
    if topic is not None:
        return topic

    topic = Topic(name=name)
    session.add(topic)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        if not is_unique_violation(e):
            raise
        existing = find_topic(session, name)
        if existing is None:
            raise
        return existing

    logger.info("Created topic %s", name)
    return topic


def link_article_topic(session: Session, article_id: uuid.UUID, topic_id: uuid.UUID) -> bool:
    """Associate an article with a topic. Returns False if the link already existed."""
    try:
        session.execute(insert(ArticleTopic).values(article_id=article_id, topic_id=topic_id))
        session.commit()
    except IntegrityError as e:
        session.rollback()
        if is_unique_violation(e):
            return False
        raise
    return True


def delete_topic(session: Session, topic_id: uuid.UUID) -> bool:
    """Delete a topic and its article links. Returns False if it did not exist."""
    topic = session.get(Topic, topic_id)
    if topic is None:
        return False
    session.delete(topic)
    session.commit()
    logger.info("Deleted topic %s (%s)", topic.name, topic_id)
    return True
