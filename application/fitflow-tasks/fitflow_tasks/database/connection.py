"""
Database connection utilities for FitFlow Tasks.

This module provides engine creation, schema setup and session management.
Uses SQLModel; SQLite URLs get the connection arguments they need for use
from worker threads.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from ..config import get_database_config

logger = logging.getLogger(__name__)

# Global engine - initialized on first use
_engine = None


def create_database_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL.

    In-memory SQLite uses a single shared connection so every session sees
    the same database.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_recycle=3600,  # Recycle connections every hour
        echo=echo,
    )


def init_database(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    # Registers the table classes on SQLModel.metadata
    from . import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_engine(database_url: Optional[str] = None) -> Engine:
    """Get or create the database engine."""
    global _engine

    if _engine is None:
        db_config = get_database_config()
        _engine = create_database_engine(database_url or db_config['url'], echo=db_config['echo'])
        init_database(_engine)
        logger.info("Created database engine for FitFlow Tasks")

    return _engine


@contextmanager
def session_scope(engine: Engine) -> Generator[Session, None, None]:
    """
    Session that is rolled back when the block raises.

    Objects stay loaded after commit so they can be returned to callers.
    """
    with Session(engine, expire_on_commit=False) as session:
        try:
            yield session
        except Exception as e:
            logger.error(f"Database session error: {e}")
            session.rollback()
            raise
