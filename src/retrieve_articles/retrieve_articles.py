"""Paginated, per-reader filtered article listing."""

import logging
import uuid

from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from feed_db.models import Article, ArticleTopic, Topic
from retrieve_articles.errors import (
    ArticleNotFoundError,
    AuthenticationRequiredError,
    ProfileNotFoundError,
    TopicNotFoundError,
)
from retrieve_articles.models import (
    ArticleDto,
    ArticleListResponse,
    ArticleQuery,
    FiltersApplied,
    PaginationDto,
    ProfileDto,
    TopicDto,
    TopicListResponse,
)
from retrieve_articles.profiles import ProfileReader, SqlProfileReader
from retrieve_articles.query import ArticleFilterSpec, build_articles_statement, build_count_statement

logger = logging.getLogger(__name__)

# Over-fetch factor applied when a blocklist will drop rows after the query
BLOCKLIST_OVERFETCH = 2


def normalize_blocklist(terms: list[str] | None) -> list[str]:
    return [term.strip().lower() for term in terms or [] if term and term.strip()]


def is_blocked(article: Article, blocklist: list[str]) -> bool:
    """True if any term appears (case-insensitively) in the title, description or link."""
    haystacks = [
        (article.title or "").lower(),
        (article.description or "").lower(),
        (article.link or "").lower(),
    ]
    return any(term in text for term in blocklist for text in haystacks)


class ArticleRetrievalService:
    """Serves the article feed, optionally personalized by the reader's profile."""

    def __init__(self, session: Session, profile_reader: ProfileReader | None = None):
        self.session = session
        self.profile_reader = profile_reader or SqlProfileReader(session)

    def _load_profile(self, user_id: uuid.UUID | None) -> ProfileDto:
        if user_id is None:
            raise AuthenticationRequiredError()
        profile = self.profile_reader.get_profile(user_id)
        if profile is None:
            raise ProfileNotFoundError(user_id)
        return profile

    def _article_ids_for_topic(self, topic_id: uuid.UUID) -> tuple[uuid.UUID, ...]:
        stmt = select(ArticleTopic.article_id).where(ArticleTopic.topic_id == topic_id)
        return tuple(self.session.scalars(stmt))

    def get_articles(self, query: ArticleQuery, user_id: uuid.UUID | None = None) -> ArticleListResponse:
        """
        List articles for one page.

        With personalization, the profile's mood stands in for an unset
        sentiment filter and its blocklist is applied to the fetched rows.
        Because blocked rows are removed after the query, twice the page size
        is fetched and the survivors are trimmed back to the limit. A page can
        still come back short if more than half the fetched rows are blocked.

        Raises:
            AuthenticationRequiredError: Personalization requested without a user.
            ProfileNotFoundError: The user has no profile.
        """
        personalization = False
        blocklist: list[str] = []
        sentiment = query.sentiment

        if query.apply_personalization:
            profile = self._load_profile(user_id)
            if profile.personalization_enabled:
                personalization = True
                blocklist = normalize_blocklist(profile.blocklist)
                if sentiment is None:
                    sentiment = profile.mood

        filters = FiltersApplied(sentiment=sentiment, personalization=personalization)

        article_ids = None
        if query.topic_id is not None:
            article_ids = self._article_ids_for_topic(query.topic_id)
            if not article_ids:
                return ArticleListResponse(
                    data=[],
                    pagination=PaginationDto(limit=query.limit, offset=query.offset, total=0, has_more=False),
                    filters_applied=filters,
                )

        spec = ArticleFilterSpec(
            sentiment=sentiment,
            article_ids=article_ids,
            source_id=query.source_id,
            sort_by=query.sort_by,
            sort_order=query.sort_order,
            offset=query.offset,
            fetch_size=query.limit * BLOCKLIST_OVERFETCH if blocklist else query.limit,
        )

        total = self.session.scalar(build_count_statement(spec)) or 0
        rows = list(self.session.scalars(build_articles_statement(spec)))

        if blocklist:
            kept = [row for row in rows if not is_blocked(row, blocklist)]
            filters.blocked_items_count = len(rows) - len(kept)
            rows = kept[: query.limit]

        data = []
        for row in rows:
            try:
                data.append(ArticleDto.model_validate(row))
            except (ValidationError, AttributeError, TypeError, ValueError) as e:
                logger.error("Dropping article %s that failed to map: %s", getattr(row, "id", None), e)

        return ArticleListResponse(
            data=data,
            pagination=PaginationDto(
                limit=query.limit,
                offset=query.offset,
                total=total,
                has_more=query.offset + query.limit < total,
            ),
            filters_applied=filters,
        )

    def get_article(self, article_id: uuid.UUID) -> ArticleDto:
        stmt = (
            select(Article)
            .options(selectinload(Article.source), selectinload(Article.topics))
            .where(Article.id == article_id)
        )
        article = self.session.scalars(stmt).first()
        if article is None:
            raise ArticleNotFoundError(article_id)
        return ArticleDto.model_validate(article)

    def get_topic(self, topic_id: uuid.UUID) -> TopicDto:
        topic = self.session.get(Topic, topic_id)
        if topic is None:
            raise TopicNotFoundError(topic_id)
        return TopicDto.model_validate(topic)

    def list_topics(self, search: str | None = None, limit: int = 100, offset: int = 0) -> TopicListResponse:
        stmt = select(Topic)
        count_stmt = select(func.count(Topic.id))
        if search and search.strip():
            condition = func.lower(Topic.name).contains(search.strip().lower(), autoescape=True)
            stmt = stmt.where(condition)
            count_stmt = count_stmt.where(condition)

        total = self.session.scalar(count_stmt) or 0
        topics = self.session.scalars(stmt.order_by(Topic.name, Topic.id).offset(offset).limit(limit))
        return TopicListResponse(
            data=[TopicDto.model_validate(topic) for topic in topics],
            pagination=PaginationDto(limit=limit, offset=offset, total=total, has_more=offset + limit < total),
        )
