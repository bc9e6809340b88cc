"""Article API endpoints."""

import uuid
from typing import Annotated, Literal

from fastapi import APIRouter, Query

from ingest_articles.ingest_articles import create_article
from news_api.dependencies import RetrievalServiceDep, SessionDep, UserIdDep
from news_api.models import CreateArticleRequest
from retrieve_articles.models import ArticleDto, ArticleListResponse, ArticleQuery

router = APIRouter(prefix="/articles", tags=["articles"])


@router.get("", response_model=ArticleListResponse)
def list_articles(
    service: RetrievalServiceDep,
    user_id: UserIdDep,
    limit: Annotated[int, Query(ge=1, le=100, description="Max results")] = 20,
    offset: Annotated[int, Query(ge=0, description="Pagination offset")] = 0,
    sentiment: Annotated[Literal["positive", "neutral", "negative"] | None, Query()] = None,
    topic_id: Annotated[uuid.UUID | None, Query(alias="topicId")] = None,
    source_id: Annotated[uuid.UUID | None, Query(alias="sourceId")] = None,
    sort_by: Annotated[Literal["publication_date", "created_at"], Query(alias="sortBy")] = "publication_date",
    sort_order: Annotated[Literal["asc", "desc"], Query(alias="sortOrder")] = "desc",
    apply_personalization: Annotated[bool, Query(alias="applyPersonalization")] = False,
):
    """List articles, newest first by default.

    With applyPersonalization the reader's mood and blocklist (from the
    X-User-Id profile) are applied on top of the explicit filters.
    """
    query = ArticleQuery(
        limit=limit,
        offset=offset,
        sentiment=sentiment,
        topic_id=topic_id,
        source_id=source_id,
        sort_by=sort_by,
        sort_order=sort_order,
        apply_personalization=apply_personalization,
    )
    return service.get_articles(query, user_id=user_id)


@router.get("/{article_id}", response_model=ArticleDto)
def get_article(article_id: uuid.UUID, service: RetrievalServiceDep):
    """Get a single article by ID."""
    return service.get_article(article_id)


@router.post("", response_model=ArticleDto, status_code=201)
def add_article(body: CreateArticleRequest, session: SessionDep, service: RetrievalServiceDep):
    """Store one article by hand, validating its source and topic references."""
    article = create_article(
        session,
        source_id=body.source_id,
        title=body.title,
        link=str(body.link),
        publication_date=body.publication_date,
        description=body.description,
        sentiment=body.sentiment,
        topic_ids=body.topic_ids,
    )
    return service.get_article(article.id)
