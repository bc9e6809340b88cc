"""Tests for ingest_articles.sources module."""

import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select

from feed_db.models import Article, Source
from ingest_articles.errors import DuplicateSourceError, SourceNotFoundError
from ingest_articles.sources import (
    MAX_FETCH_ERROR_LENGTH,
    create_source,
    delete_source,
    get_active_sources,
    list_sources,
    mark_fetch_failed,
    mark_fetch_succeeded,
    seed_sources,
    set_source_active,
    update_source,
)


class TestGetActiveSources:
    def test_never_fetched_first_then_oldest(self, session, make_source) -> None:
        recent = make_source(name="recent", last_fetched_at=datetime(2024, 3, 1, tzinfo=timezone.utc))
        old = make_source(name="old", last_fetched_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
        never = make_source(name="never")
        make_source(name="inactive", is_active=False)

        names = [s.name for s in get_active_sources(session)]
        assert names == [never.name, old.name, recent.name]

    def test_limit(self, session, make_source) -> None:
        for _ in range(3):
            make_source()
        assert len(get_active_sources(session, limit=2)) == 2


class TestCreateSource:
    def test_creates(self, session) -> None:
        source = create_source(session, " BBC ", "https://bbc.example/rss ")
        assert source.name == "BBC"
        assert source.url == "https://bbc.example/rss"
        assert source.is_active is True

    def test_duplicate_url_raises(self, session) -> None:
        create_source(session, "BBC", "https://bbc.example/rss")
        with pytest.raises(DuplicateSourceError) as exc_info:
            create_source(session, "BBC again", "https://bbc.example/rss")
        assert exc_info.value.code == "DUPLICATE_URL"
        assert len(list_sources(session)) == 1


class TestSourceUpdates:
    def test_set_active(self, session, make_source) -> None:
        source = make_source()
        set_source_active(session, source.id, False)
        assert list_sources(session, active_only=True) == []

    def test_set_active_missing_raises(self, session) -> None:
        with pytest.raises(SourceNotFoundError):
            set_source_active(session, uuid.uuid4(), True)

    def test_delete_cascades_to_articles(self, session, make_source, make_article) -> None:
        source = make_source()
        make_article(source=source)
        make_article(source=source)
        delete_source(session, source.id)
        assert session.scalar(select(func.count()).select_from(Article)) == 0
        assert session.get(Source, source.id) is None

    def test_update_source_fields(self, session, make_source) -> None:
        source = make_source(name="Old", url="https://f/old")
        updated = update_source(session, source.id, name=" New ", url="https://f/new", is_active=False)
        assert updated.name == "New"
        assert updated.url == "https://f/new"
        assert updated.is_active is False

    def test_update_source_keeps_unset_fields(self, session, make_source) -> None:
        source = make_source(name="Keep", url="https://f/keep")
        update_source(session, source.id, is_active=False)
        session.refresh(source)
        assert source.name == "Keep"
        assert source.url == "https://f/keep"

    def test_update_source_url_taken_raises(self, session, make_source) -> None:
        make_source(url="https://f/taken")
        source = make_source(url="https://f/mine")
        with pytest.raises(DuplicateSourceError):
            update_source(session, source.id, url="https://f/taken")
        session.refresh(source)
        assert source.url == "https://f/mine"

    def test_update_source_missing_raises(self, session) -> None:
        with pytest.raises(SourceNotFoundError):
            update_source(session, uuid.uuid4(), name="x")


class TestFetchBookkeeping:
    def test_mark_succeeded_clears_error(self, session, make_source) -> None:
        source = make_source(last_fetch_error="HTTP 500: boom")
        assert mark_fetch_succeeded(session, [source.id]) == 1
        session.refresh(source)
        assert source.last_fetched_at is not None
        assert source.last_fetch_error is None

    def test_mark_succeeded_empty(self, session) -> None:
        assert mark_fetch_succeeded(session, []) == 0

    def test_mark_failed_records_truncated_error(self, session, make_source) -> None:
        source = make_source()
        mark_fetch_failed(session, source.id, "x" * 5000)
        session.refresh(source)
        assert len(source.last_fetch_error) == MAX_FETCH_ERROR_LENGTH
        assert source.last_fetched_at is not None


class TestSeedSources:
    def test_seed_is_idempotent(self, session) -> None:
        feeds = {"A": "https://a.example/rss", "B": "https://b.example/rss"}
        assert seed_sources(session, feeds) == 2
        assert seed_sources(session, feeds) == 0
        assert len(list_sources(session)) == 2

    def test_seed_defaults(self, session) -> None:
        assert seed_sources(session) > 0
