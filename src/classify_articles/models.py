"""Data models for classify_articles pipeline stage."""

import uuid
from dataclasses import dataclass, field
from typing import Any, Literal, Optional

from pydantic import BaseModel, field_validator

Sentiment = Literal["positive", "neutral", "negative"]


class ClassificationResult(BaseModel):
    """Validated JSON payload returned by the classification model."""

    sentiment: Sentiment
    topics: list[str] = []

    @field_validator("topics", mode="before")
    @classmethod
    def _keep_string_topics(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [topic for topic in value if isinstance(topic, str)]
        return value


@dataclass
class ClassificationOutcome:
    """Result of classifying a single article. Never carries an exception."""
    success: bool
    sentiment_updated: bool = False
    topics_updated: bool = False
    sentiment: Optional[str] = None
    topic_names: list[str] = field(default_factory=list)
    error: Optional[str] = None
    error_code: Optional[str] = None


@dataclass
class BatchItemResult:
    article_id: uuid.UUID
    outcome: ClassificationOutcome
