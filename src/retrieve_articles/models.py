"""Request and response models for article retrieval."""

import uuid
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel

Sentiment = Literal["positive", "neutral", "negative"]
SortBy = Literal["publication_date", "created_at"]
SortOrder = Literal["asc", "desc"]


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ArticleQuery(CamelModel):
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)
    sentiment: Optional[Sentiment] = None
    topic_id: Optional[uuid.UUID] = None
    source_id: Optional[uuid.UUID] = None
    sort_by: SortBy = "publication_date"
    sort_order: SortOrder = "desc"
    apply_personalization: bool = False


class ProfileDto(CamelModel):
    user_id: uuid.UUID
    mood: Optional[Sentiment] = None
    blocklist: list[str] = Field(default_factory=list)
    personalization_enabled: bool = True


class SourceDto(CamelModel):
    id: uuid.UUID
    name: str
    url: str


class TopicDto(CamelModel):
    id: uuid.UUID
    name: str


class ArticleDto(CamelModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    link: str
    publication_date: datetime
    sentiment: Optional[Sentiment] = None
    source: SourceDto
    topics: list[TopicDto] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class PaginationDto(CamelModel):
    limit: int
    offset: int
    total: int
    has_more: bool


class FiltersApplied(CamelModel):
    sentiment: Optional[Sentiment] = None
    personalization: bool = False
    blocked_items_count: Optional[int] = None

    @model_serializer(mode="wrap")
    def _omit_zero_blocked(self, handler) -> dict[str, Any]:
        data = handler(self)
        for key in ("blocked_items_count", "blockedItemsCount"):
            if key in data and not data[key]:
                del data[key]
        return data


class ArticleListResponse(CamelModel):
    data: list[ArticleDto]
    pagination: PaginationDto
    filters_applied: FiltersApplied


class TopicListResponse(CamelModel):
    data: list[TopicDto]
    pagination: PaginationDto
