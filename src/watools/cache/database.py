"""Local SQLite database management for the cache."""

from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from watools.cache.models import CacheBase
from watools.config import get_cache_db_path


def get_cache_engine(db_path: Path | str | None = None) -> Engine:
    """Get SQLAlchemy engine for the cache database.

    Args:
        db_path: Database file, ``":memory:"`` for a throwaway cache,
            or None for the configured location.

    Returns:
        SQLAlchemy Engine instance for cache.db
    """
    path = get_cache_db_path() if db_path is None else db_path
    if str(path) == ":memory:":
        from sqlalchemy.pool import StaticPool

        # One shared connection, otherwise every session sees an empty database
        return create_engine(
            "sqlite://",
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(f"sqlite:///{path}", echo=False)


def init_cache_db(engine: Engine) -> None:
    """Initialize the cache database.

    Creates all tables if they don't exist.
    """
    CacheBase.metadata.create_all(engine)


def get_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Get a session factory bound to the cache engine.

    Sessions keep loaded attributes after commit so rows can be
    converted to domain models once the transaction is closed.
    """
    return sessionmaker(bind=engine, expire_on_commit=False)
