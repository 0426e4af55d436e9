"""Database engine and sessions for the holdings/snapshot blob store."""

import logging
from typing import Optional

from sqlalchemy import create_engine, Engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from sqlalchemy.pool import StaticPool

from networth.config.settings import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()

# Module-level database state (can be reconfigured at runtime)
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def build_engine(database_url: str) -> Engine:
    """
    Create an engine for a database URL.

    SQLite connections may be used from the event loop thread and worker
    threads alike. An in-memory SQLite database lives in a single shared
    connection so every session sees the same kv_blobs table.
    """
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(url, echo=False)

    if url.database in (None, "", ":memory:"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
    return create_engine(url, connect_args={"check_same_thread": False}, echo=False)


def get_engine() -> Engine:
    """Get or create the engine for the configured database."""
    global _engine
    if _engine is None:
        database_url = get_settings().get_database_url()
        _engine = build_engine(database_url)
        logger.info("Using database %s", make_url(database_url).render_as_string(hide_password=True))
    return _engine


def get_session_factory() -> sessionmaker:
    """Get or create the session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=get_engine(),
        )
    return _SessionLocal


def get_session() -> Session:
    """Get a new database session."""
    return get_session_factory()()


def init_db(engine: Optional[Engine] = None) -> None:
    """Create the kv_blobs table if it does not exist yet."""
    from networth.repositories.sqlalchemy import orm_models  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())


def open_session() -> Session:
    """Ensure the schema exists and return a session on the configured database."""
    init_db()
    return get_session()


def reset_database() -> None:
    """Dispose the engine so the next call picks up new settings."""
    global _engine, _SessionLocal

    if _engine is not None:
        _engine.dispose()

    _engine = None
    _SessionLocal = None
