"""Shared fixtures: an in-memory SQLite database with the full schema."""

from datetime import datetime, timedelta, timezone
from typing import Iterator

import pytest
from sqlalchemy.orm import Session

from feed_db.connection import build_engine, make_session_factory
from feed_db.models import Article, Base, Source

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine) -> Iterator[Session]:
    factory = make_session_factory(engine)
    with factory() as session:
        yield session


@pytest.fixture
def make_source(session):
    counter = {"n": 0}

    def _make(name: str | None = None, url: str | None = None, **kwargs) -> Source:
        counter["n"] += 1
        source = Source(
            name=name or f"Source {counter['n']}",
            url=url or f"https://feeds.example.com/{counter['n']}.xml",
            **kwargs,
        )
        session.add(source)
        session.commit()
        return source

    return _make


@pytest.fixture
def make_article(session, make_source):
    counter = {"n": 0}

    def _make(source: Source | None = None, **kwargs) -> Article:
        counter["n"] += 1
        n = counter["n"]
        source = source or make_source()
        values = {
            "title": f"Article {n}",
            "description": f"Description {n}",
            "link": f"https://news.example.com/articles/{n}",
            "publication_date": BASE_TIME + timedelta(hours=n),
        }
        values.update(kwargs)
        article = Article(source_id=source.id, **values)
        session.add(article)
        session.commit()
        return article

    return _make
