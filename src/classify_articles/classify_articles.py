"""Core article classification logic: sentiment and topics via OpenRouter."""

import json
import logging
import time
import uuid
from typing import Callable, Collection

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from classify_articles.errors import (
    AIClientError,
    AIConfigurationError,
    AIInsufficientCreditsError,
    AIResponseError,
)
from classify_articles.instructions import CLASSIFY_ARTICLE_INSTRUCTIONS, build_article_prompt
from classify_articles.models import BatchItemResult, ClassificationOutcome, ClassificationResult
from classify_articles.openrouter_client import OpenRouterClient
from classify_articles.topics import find_or_create_topic, link_article_topic
from common.config import ClassificationConfig
from common.utils import collapse_whitespace, truncate
from feed_db.models import Article

logger = logging.getLogger(__name__)

MAX_INPUT_LENGTH = 1500
MIN_DELAY_SECONDS = 1.0


def prepare_analysis_input(title: str, description: str | None) -> str:
    """Combine title and description into the text sent for analysis.

    A substantial description is appended to the title; a short one replaces
    the title when it already repeats it. The result is cut to 1500
    characters before whitespace is collapsed.
    """
    combined = title
    if description and description.strip():
        if len(description) > len(title) * 2:
            combined = f"{title}\n\n{description}"
        elif title in description:
            combined = description
        else:
            combined = f"{title}\n\n{description}"

    combined = truncate(combined, MAX_INPUT_LENGTH, "...")
    return collapse_whitespace(combined)


def parse_classification(content: str) -> ClassificationResult:
    """Parse and validate the model's JSON answer.

    Raises:
        AIResponseError: If the content is not JSON or does not match the schema.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse AI response as JSON: %s", content[:500])
        raise AIResponseError(f"Invalid JSON in AI response: {e}", AIResponseError.INVALID_JSON) from e

    try:
        return ClassificationResult.model_validate(data)
    except ValidationError as e:
        raise AIResponseError(
            f"AI response failed validation: {e.error_count()} error(s)",
            AIResponseError.VALIDATION_FAILED,
        ) from e


class ArticleClassifier:
    """Classifies stored articles and writes sentiment and topics back."""

    def __init__(
        self,
        session: Session,
        client: OpenRouterClient,
        delay_seconds: float = MIN_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session = session
        self.client = client
        self.delay_seconds = delay_seconds
        self._sleep = sleep

    def analyze(self, title: str, description: str | None) -> ClassificationResult:
        """Call the model for one article. Raises AIClientError on any failure."""
        content = prepare_analysis_input(title, description)
        messages = [
            {"role": "system", "content": CLASSIFY_ARTICLE_INSTRUCTIONS},
            {"role": "user", "content": build_article_prompt(title.strip(), content)},
        ]
        return parse_classification(self.client.chat_completion(messages))

    def classify(self, article: Article) -> ClassificationOutcome:
        """
        Classify one article and persist the result.

        The sentiment is committed first. Topic writes follow, each on its
        own, so a topic failure leaves the sentiment in place. This method
        never raises: failures are reported on the returned outcome and the
        article stays unanalyzed.
        """
        article_id = article.id
        try:
            result = self.analyze(article.title, article.description)
        except AIClientError as e:
            logger.warning("AI analysis failed for article %s: %s (%s)", article_id, e.message, e.code)
            return ClassificationOutcome(success=False, error=e.message, error_code=e.code)
        except Exception as e:
            logger.exception("Unexpected error analyzing article %s", article_id)
            return ClassificationOutcome(success=False, error=str(e), error_code="AI_REQUEST_FAILED")

        try:
            article.sentiment = result.sentiment
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Failed to store sentiment for article %s: %s", article_id, e)
            return ClassificationOutcome(success=False, error=str(e), error_code="SENTIMENT_UPDATE_FAILED")

        try:
            topic_names = self._assign_topics(article_id, result.topics)
        except Exception as e:
            self.session.rollback()
            logger.warning(
                "Partial analysis for article %s: sentiment stored, topics failed: %s", article_id, e
            )
            return ClassificationOutcome(
                success=True,
                sentiment_updated=True,
                sentiment=result.sentiment,
                error=str(e),
                error_code="TOPIC_ASSIGNMENT_FAILED",
            )

        logger.info(
            "Classified article %s: sentiment=%s topics=%s", article_id, result.sentiment, topic_names
        )
        return ClassificationOutcome(
            success=True,
            sentiment_updated=True,
            topics_updated=bool(topic_names),
            sentiment=result.sentiment,
            topic_names=topic_names,
        )

    def _assign_topics(self, article_id: uuid.UUID, names: list[str]) -> list[str]:
        linked: dict[uuid.UUID, str] = {}
        for raw_name in names:
            name = raw_name.strip()
            if not name:
                continue
            try:
                topic = find_or_create_topic(self.session, name)
                if topic.id in linked:
                    continue
                link_article_topic(self.session, article_id, topic.id)
            except SQLAlchemyError as e:
                self.session.rollback()
                logger.warning("Skipping topic %r for article %s: %s", name, article_id, e)
                continue
            linked[topic.id] = topic.name
        return list(linked.values())

    def classify_batch(self, articles: list[Article]) -> list[BatchItemResult]:
        """
        Classify articles one at a time with a fixed pause between calls.

        One failure never stops the batch. Once the account is out of credits
        the remaining articles are reported as skipped without calling out.
        """
        results = []
        out_of_credits = False
        calls = 0

        for article in articles:
            if out_of_credits:
                results.append(BatchItemResult(
                    article_id=article.id,
                    outcome=ClassificationOutcome(
                        success=False,
                        error="Skipped: insufficient credits",
                        error_code=AIInsufficientCreditsError.code,
                    ),
                ))
                continue

            if calls > 0 and self.delay_seconds > 0:
                self._sleep(self.delay_seconds)
            calls += 1

            outcome = self.classify(article)
            results.append(BatchItemResult(article_id=article.id, outcome=outcome))

            if outcome.error_code == AIInsufficientCreditsError.code:
                logger.error("OpenRouter credits exhausted; skipping remaining articles")
                out_of_credits = True

        succeeded = sum(1 for r in results if r.outcome.success)
        logger.info("Classified batch: %d/%d succeeded", succeeded, len(results))
        return results


def build_classifier(session: Session, config: ClassificationConfig) -> ArticleClassifier | None:
    """Build a classifier for live runs, or None when no API key is configured."""
    try:
        client = OpenRouterClient(config)
    except AIConfigurationError as e:
        logger.warning("AI analysis disabled: %s", e.message)
        return None
    return ArticleClassifier(session, client, delay_seconds=max(MIN_DELAY_SECONDS, config.delay_seconds))


def load_unanalyzed_articles(
    session: Session, limit: int = 50, exclude_ids: Collection[uuid.UUID] = ()
) -> list[Article]:
    """Articles with no sentiment yet, oldest first."""
    stmt = select(Article).where(Article.sentiment.is_(None))
    if exclude_ids:
        stmt = stmt.where(Article.id.not_in(list(exclude_ids)))
    stmt = stmt.order_by(Article.created_at.asc(), Article.id).limit(limit)
    return list(session.scalars(stmt))
