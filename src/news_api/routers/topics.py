"""Topic API endpoints."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Query, Response

from classify_articles.topics import delete_topic, find_or_create_topic, find_topic
from news_api.dependencies import RetrievalServiceDep, SessionDep
from news_api.models import CreateTopicRequest
from retrieve_articles.errors import TopicNotFoundError
from retrieve_articles.models import TopicDto, TopicListResponse

router = APIRouter(prefix="/topics", tags=["topics"])


@router.get("", response_model=TopicListResponse)
def list_topics(
    service: RetrievalServiceDep,
    search: Annotated[str | None, Query(max_length=100, description="Case-insensitive name filter")] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    return service.list_topics(search=search, limit=limit, offset=offset)


@router.post("", response_model=TopicDto, status_code=201)
def create_topic(body: CreateTopicRequest, session: SessionDep, response: Response):
    """Create a topic, or return the existing one (200) if the name is taken in any case."""
    existing = find_topic(session, body.name)
    if existing is not None:
        response.status_code = 200
        return TopicDto.model_validate(existing)
    return TopicDto.model_validate(find_or_create_topic(session, body.name))


@router.get("/{topic_id}", response_model=TopicDto)
def get_topic(topic_id: uuid.UUID, service: RetrievalServiceDep):
    return service.get_topic(topic_id)


@router.delete("/{topic_id}", status_code=204)
def remove_topic(topic_id: uuid.UUID, session: SessionDep):
    """Delete a topic; its article links go with it."""
    if not delete_topic(session, topic_id):
        raise TopicNotFoundError(topic_id)
    return Response(status_code=204)
