"""Request and response models for the write, source and cron endpoints."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field, HttpUrl, model_validator

from retrieve_articles.models import CamelModel, Sentiment


class SourceResponse(CamelModel):
    id: uuid.UUID
    name: str
    url: str
    is_active: bool
    last_fetched_at: Optional[datetime] = None
    last_fetch_error: Optional[str] = None


class SourceListResponse(CamelModel):
    data: list[SourceResponse]


class CreateSourceRequest(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    url: HttpUrl


class UpdateSourceRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    url: Optional[HttpUrl] = None
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def _require_one_field(self) -> "UpdateSourceRequest":
        if self.name is None and self.url is None and self.is_active is None:
            raise ValueError("At least one of name, url or isActive must be provided")
        return self


class CreateTopicRequest(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=500)


class CreateArticleRequest(CamelModel):
    source_id: uuid.UUID
    title: str = Field(min_length=1, max_length=1000)
    description: Optional[str] = Field(default=None, max_length=5000)
    link: HttpUrl
    publication_date: datetime
    sentiment: Optional[Sentiment] = None
    topic_ids: list[uuid.UUID] = Field(default_factory=list, max_length=20)


class SourceSummaryResponse(CamelModel):
    source_id: uuid.UUID
    source_name: str
    success: bool
    items_fetched: int = 0
    articles_created: int = 0
    duplicates_skipped: int = 0
    skipped_articles: int = 0
    error: Optional[str] = None


class CycleErrorResponse(CamelModel):
    source_id: uuid.UUID
    source_name: str
    error: str


class AIAnalysisResponse(CamelModel):
    attempted: int
    successful: int
    failed: int


class CycleSummaryResponse(CamelModel):
    processed: int
    succeeded: int
    failed: int
    articles_created: int
    duplicates_skipped: int
    skipped_sources: int
    total_subrequests: int
    stopped_early: bool
    has_more_work: bool
    sources: list[SourceSummaryResponse]
    errors: list[CycleErrorResponse]
    ai_analysis: AIAnalysisResponse
