"""CLI for classifying the backlog of unanalyzed articles."""

from __future__ import annotations

import logging
import sys

from dotenv import load_dotenv

from classify_articles.classify_articles import build_classifier, load_unanalyzed_articles
from classify_articles.helpers import parse_classify_articles_args
from common.cli_helpers import setup_logging
from common.config import load_config
from feed_db.connection import configure, get_session, init_db

load_dotenv()

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    args = parse_classify_articles_args(argv)

    config = load_config(args.config)
    if args.model:
        config.classification.model = args.model
    configure(config.database)
    init_db()

    with get_session() as session:
        classifier = build_classifier(session, config.classification)
        if classifier is None:
            logger.error("Cannot classify without OPENROUTER_API_KEY")
            return 1

        articles = load_unanalyzed_articles(session, limit=args.limit)
        if not articles:
            logger.warning("No articles to classify")
            return 0

        results = classifier.classify_batch(articles)

    for result in results:
        outcome = result.outcome
        logger.info(
            "  %s | success=%s | sentiment=%s | topics=%s | error=%s",
            result.article_id,
            outcome.success,
            outcome.sentiment,
            outcome.topic_names,
            outcome.error_code,
        )

    failed = sum(1 for r in results if not r.outcome.success)
    logger.info("Classified %d articles, %d failed", len(results) - failed, failed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
