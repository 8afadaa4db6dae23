"""Database engine, session factory and schema bootstrap.

The engine is built from settings on demand rather than at import time so the
API process, the standalone worker and the tests can each choose their URL.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from .config import Settings
from .models.base import Base


def create_db_engine(database_url: str, pool_size: int = 5, max_overflow: int = 10) -> Engine:
    """Create an engine with pooling suited to the backend.

    Pool settings only apply to PostgreSQL. In-memory SQLite gets a single
    shared connection so every session sees the same database.

    Args:
        database_url: SQLAlchemy URL
        pool_size: Pool size (non-SQLite only)
        max_overflow: Pool overflow (non-SQLite only)

    Returns:
        Engine: Configured SQLAlchemy engine
    """
    engine_kwargs = {
        "pool_pre_ping": True,
        "echo": False,
    }

    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_size"] = pool_size
        engine_kwargs["max_overflow"] = max_overflow

    return create_engine(database_url, **engine_kwargs)


def engine_from_settings(settings: Settings) -> Engine:
    """Create the engine described by application settings."""
    return create_db_engine(
        settings.DATABASE_URL,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to engine."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


def init_db(engine: Engine) -> None:
    """Create the order tables if they do not exist yet."""
    Base.metadata.create_all(bind=engine)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Context manager for a transactional session.

    Usage:
        with session_scope(SessionLocal) as session:
            session.execute(stmt)

    Automatically commits on success, rolls back on exception.
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
