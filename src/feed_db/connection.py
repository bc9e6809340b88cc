"""Engine and session management."""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from common.config import DatabaseConfig
from feed_db.models import Base

logger = logging.getLogger(__name__)

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


def build_engine(url: str, schema: str | None = None, echo: bool = False) -> Engine:
    """Create an engine for the given URL.

    In-memory SQLite shares one connection across threads so every session
    sees the same database. SQLite connections enforce foreign keys. When a
    schema is given, all unqualified tables resolve into it.
    """
    kwargs: dict = {"echo": echo}
    if _is_memory_sqlite(url):
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}

    engine = create_engine(url, **kwargs)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    if schema:
        engine = engine.execution_options(schema_translate_map={None: schema})

    return engine


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


def configure(config: DatabaseConfig) -> Engine:
    """Build the process-wide engine and session factory from config."""
    global _engine, _session_factory
    _engine = build_engine(config.url, schema=config.schema, echo=config.echo)
    _session_factory = make_session_factory(_engine)
    logger.info("Configured database engine: dialect=%s schema=%s", _engine.dialect.name, config.schema)
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Database not configured; call feed_db.connection.configure() first")
    return _engine


def init_db(engine: Engine | None = None) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(engine or get_engine())


@contextmanager
def get_session() -> Iterator[Session]:
    """Yield a session from the configured factory and close it afterwards.

    Nothing is committed implicitly; callers commit their own units of work.
    """
    if _session_factory is None:
        raise RuntimeError("Database not configured; call feed_db.connection.configure() first")
    session = _session_factory()
    try:
        yield session
    finally:
        session.close()
