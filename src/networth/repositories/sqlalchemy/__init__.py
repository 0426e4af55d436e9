"""SQLAlchemy repository implementations."""

from networth.repositories.sqlalchemy.database import (
    build_engine,
    get_engine,
    get_session_factory,
    get_session,
    init_db,
    open_session,
    reset_database,
    Base,
)
from networth.repositories.sqlalchemy.portfolio_store import SqlAlchemyPortfolioStore

__all__ = [
    "build_engine",
    "get_engine",
    "get_session_factory",
    "get_session",
    "init_db",
    "open_session",
    "reset_database",
    "Base",
    "SqlAlchemyPortfolioStore",
]
