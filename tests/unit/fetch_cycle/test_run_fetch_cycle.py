"""Tests for fetch_cycle.run_fetch_cycle module."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

from sqlalchemy import func, select

from classify_articles.models import BatchItemResult, ClassificationOutcome
from common.config import CycleConfig, PipelineConfig
from feed_db.models import Article, Source
from fetch_cycle.run_fetch_cycle import run_configured_cycle, run_fetch_cycle
from fetch_feeds.models import FeedItem, FetchResult
from ingest_articles.errors import IngestError

PUBLISHED = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeFetcher:
    def __init__(self, results: dict[str, FetchResult]):
        self.results = results
        self.calls = []

    def fetch(self, url: str) -> FetchResult:
        self.calls.append(url)
        return self.results[url]


def _items(prefix: str, count: int) -> list[FeedItem]:
    return [
        FeedItem(title=f"{prefix} {i}", link=f"https://{prefix}.example.com/{i}", description=None, publication_date=PUBLISHED)
        for i in range(count)
    ]


def _ok(prefix: str, count: int) -> FetchResult:
    return FetchResult(success=True, items=_items(prefix, count))


def _classifier(success: bool = True) -> MagicMock:
    classifier = MagicMock()
    classifier.classify_batch.side_effect = lambda articles: [
        BatchItemResult(article_id=a.id, outcome=ClassificationOutcome(success=success)) for a in articles
    ]
    return classifier


def _config(**kwargs) -> CycleConfig:
    values = {"max_sources_per_run": 10, "max_subrequests": 45, "batch_size": 20, "source_delay_seconds": 0}
    values.update(kwargs)
    return CycleConfig(**values)


class TestRunFetchCycle:
    def test_happy_path(self, session, make_source) -> None:
        source = make_source(url="https://feeds.example.com/a.xml")
        fetcher = FakeFetcher({source.url: _ok("a", 3)})
        classifier = _classifier()

        summary = run_fetch_cycle(session, fetcher, classifier, _config())

        assert summary.processed == 1
        assert summary.succeeded == 1
        assert summary.failed == 0
        assert summary.articles_created == 3
        assert summary.ai_analysis.attempted == 3
        assert summary.ai_analysis.successful == 3
        assert summary.has_more_work is False
        # one fetch, one ingest batch, three classification calls
        assert summary.total_subrequests == 5
        session.refresh(source)
        assert source.last_fetched_at is not None
        assert source.last_fetch_error is None

    def test_least_recently_fetched_first(self, session, make_source) -> None:
        fresh = make_source(url="https://f/fresh", last_fetched_at=datetime(2024, 5, 1, tzinfo=timezone.utc))
        stale = make_source(url="https://f/stale", last_fetched_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
        never = make_source(url="https://f/never")
        fetcher = FakeFetcher({s.url: _ok(s.url[-5:], 0) for s in (fresh, stale, never)})

        summary = run_fetch_cycle(session, fetcher, None, _config(max_sources_per_run=2))

        assert fetcher.calls == [never.url, stale.url]
        assert summary.skipped_sources == 1
        assert summary.has_more_work is True

    def test_fetch_failure_recorded(self, session, make_source) -> None:
        bad = make_source(url="https://f/bad")
        good = make_source(url="https://f/good")
        fetcher = FakeFetcher({
            bad.url: FetchResult(success=False, error="HTTP 503: Service Unavailable"),
            good.url: _ok("good", 2),
        })

        summary = run_fetch_cycle(session, fetcher, None, _config())

        assert summary.processed == 2
        assert summary.failed == 1
        assert summary.succeeded == 1
        assert summary.errors[0].source_id == bad.id
        assert summary.errors[0].error == "HTTP 503: Service Unavailable"
        session.refresh(bad)
        assert bad.last_fetch_error == "HTTP 503: Service Unavailable"

    def test_duplicates_counted_on_second_run(self, session, make_source) -> None:
        source = make_source(url="https://f/a")
        fetcher = FakeFetcher({source.url: _ok("a", 4)})
        run_fetch_cycle(session, fetcher, None, _config())
        summary = run_fetch_cycle(session, fetcher, None, _config())
        assert summary.articles_created == 0
        assert summary.duplicates_skipped == 4
        assert session.scalar(select(func.count()).select_from(Article)) == 4

    def test_ingest_error_does_not_propagate(self, session, make_source) -> None:
        source = make_source(url="https://f/a")
        fetcher = FakeFetcher({source.url: _ok("a", 1)})
        with patch("fetch_cycle.run_fetch_cycle.ingest_items", side_effect=IngestError("db down")):
            summary = run_fetch_cycle(session, fetcher, None, _config())
        assert summary.failed == 1
        assert summary.errors[0].error == "db down"

    def test_budget_limits_ingest_batches(self, session, make_source) -> None:
        source = make_source(url="https://f/a")
        fetcher = FakeFetcher({source.url: _ok("a", 50)})

        summary = run_fetch_cycle(session, fetcher, None, _config(max_subrequests=3, batch_size=20))

        # one fetch plus two batches of twenty
        assert summary.articles_created == 40
        assert summary.sources[0].skipped_articles == 10
        assert summary.stopped_early is True
        assert summary.has_more_work is True
        assert summary.total_subrequests == 3

    def test_budget_limits_classification(self, session, make_source) -> None:
        source = make_source(url="https://f/a")
        fetcher = FakeFetcher({source.url: _ok("a", 5)})
        classifier = _classifier()

        summary = run_fetch_cycle(session, fetcher, classifier, _config(max_subrequests=4))

        assert summary.ai_analysis.attempted == 2
        assert summary.stopped_early is True
        assert summary.total_subrequests == 4

    def test_budget_stops_before_next_source(self, session, make_source) -> None:
        first = make_source(url="https://f/1")
        second = make_source(url="https://f/2")
        fetcher = FakeFetcher({first.url: _ok("one", 1), second.url: _ok("two", 1)})

        summary = run_fetch_cycle(session, fetcher, None, _config(max_subrequests=2))

        assert fetcher.calls == [first.url]
        assert summary.processed == 1
        assert summary.skipped_sources == 1
        assert summary.has_more_work is True

    def test_without_classifier_articles_stay_unanalyzed(self, session, make_source) -> None:
        source = make_source(url="https://f/a")
        fetcher = FakeFetcher({source.url: _ok("a", 2)})
        summary = run_fetch_cycle(session, fetcher, None, _config())
        assert summary.ai_analysis.attempted == 0
        sentiments = session.scalars(select(Article.sentiment)).all()
        assert sentiments == [None, None]

    def test_classification_failures_counted(self, session, make_source) -> None:
        source = make_source(url="https://f/a")
        fetcher = FakeFetcher({source.url: _ok("a", 2)})
        summary = run_fetch_cycle(session, fetcher, _classifier(success=False), _config())
        assert summary.ai_analysis.failed == 2
        assert summary.succeeded == 1

    def test_inactive_sources_ignored(self, session, make_source) -> None:
        make_source(url="https://f/off", is_active=False)
        fetcher = FakeFetcher({})
        summary = run_fetch_cycle(session, fetcher, None, _config())
        assert summary.processed == 0
        assert summary.has_more_work is False

    def test_delay_between_sources(self, session, make_source) -> None:
        sources = [make_source(url=f"https://f/{i}") for i in range(3)]
        fetcher = FakeFetcher({s.url: _ok(str(i), 0) for i, s in enumerate(sources)})
        sleep = MagicMock()
        run_fetch_cycle(session, fetcher, None, _config(source_delay_seconds=0.5), sleep=sleep)
        assert sleep.call_count == 2
        sleep.assert_called_with(0.5)

    def test_unexpected_fetch_exception_recorded(self, session, make_source) -> None:
        broken = make_source(url="https://f/broken")
        good = make_source(url="https://f/good")

        class RaisingFetcher(FakeFetcher):
            def fetch(self, url: str) -> FetchResult:
                if url == broken.url:
                    raise LookupError("'hex' is not a text encoding")
                return super().fetch(url)

        fetcher = RaisingFetcher({good.url: _ok("good", 1)})
        summary = run_fetch_cycle(session, fetcher, None, _config())

        assert summary.processed == 2
        assert summary.failed == 1
        assert summary.succeeded == 1
        assert "not a text encoding" in summary.errors[0].error
        session.refresh(broken)
        session.refresh(good)
        assert "not a text encoding" in broken.last_fetch_error
        assert good.last_fetched_at is not None
        assert good.last_fetch_error is None

    def test_failed_analysis_retried_next_cycle(self, session, make_source) -> None:
        source = make_source(url="https://f/a")
        fetcher = FakeFetcher({source.url: _ok("a", 1)})

        first = run_fetch_cycle(session, fetcher, _classifier(success=False), _config())
        assert first.ai_analysis.failed == 1

        def _store_sentiment(articles):
            for article in articles:
                article.sentiment = "neutral"
            session.commit()
            return [
                BatchItemResult(article_id=a.id, outcome=ClassificationOutcome(success=True)) for a in articles
            ]

        classifier = MagicMock()
        classifier.classify_batch.side_effect = _store_sentiment
        second = run_fetch_cycle(session, fetcher, classifier, _config())

        assert second.articles_created == 0
        assert second.ai_analysis.attempted == 1
        assert second.ai_analysis.successful == 1
        assert session.scalars(select(Article.sentiment)).all() == ["neutral"]

    def test_budget_cut_off_articles_picked_up_later(self, session, make_source) -> None:
        source = make_source(url="https://f/a")
        fetcher = FakeFetcher({source.url: _ok("a", 5)})

        first = run_fetch_cycle(session, fetcher, _classifier(), _config(max_subrequests=4))
        assert first.ai_analysis.attempted == 2
        assert first.has_more_work is True

        second = run_fetch_cycle(session, fetcher, _classifier(), _config())
        # the mock classifier stores nothing, so all five are still unanalyzed
        assert second.ai_analysis.attempted == 5

    def test_backlog_limited_by_remaining_budget(self, session, make_source, make_article) -> None:
        retired = make_source(url="https://f/retired", is_active=False)
        for _ in range(6):
            make_article(source=retired)
        source = make_source(url="https://f/a")
        fetcher = FakeFetcher({source.url: _ok("a", 0)})

        summary = run_fetch_cycle(session, fetcher, _classifier(), _config(max_sources_per_run=1, max_subrequests=4))

        # one fetch leaves three calls for the backlog
        assert summary.ai_analysis.attempted == 3
        assert summary.total_subrequests == 4

    def test_backlog_skips_articles_classified_this_cycle(self, session, make_source) -> None:
        source = make_source(url="https://f/a")
        fetcher = FakeFetcher({source.url: _ok("a", 2)})
        classifier = _classifier(success=False)

        summary = run_fetch_cycle(session, fetcher, classifier, _config())

        assert summary.ai_analysis.attempted == 2
        assert classifier.classify_batch.call_count == 1


class TestRunConfiguredCycle:
    @patch("fetch_cycle.run_fetch_cycle.run_fetch_cycle")
    @patch("fetch_cycle.run_fetch_cycle.build_classifier")
    @patch("fetch_cycle.run_fetch_cycle.FeedFetcher")
    def test_wires_config(self, mock_fetcher, mock_build, mock_run, session) -> None:
        config = PipelineConfig()
        run_configured_cycle(session, config)
        mock_fetcher.assert_called_once_with(config.fetch)
        mock_build.assert_called_once_with(session, config.classification)
        mock_run.assert_called_once_with(session, mock_fetcher.return_value, mock_build.return_value, config.cycle)
