"""
NoteSync Backend — Database Engine & Session Management
=========================================================

What:  Async SQLAlchemy engine factory, session factory and declarative base.
Why:   Backs the "database" record store. The engine is only built when that
       backend is selected, so the default GraphQL deployment never opens a
       database connection.
How:   create_engine_from_url() applies pool settings for server databases
       and skips them for SQLite (used in tests and local development).
"""

from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from notesync.config import settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object with Alembic for schema management.
    """
    pass


def create_engine_from_url(url: Optional[str] = None, **kwargs) -> AsyncEngine:
    """
    Build an async engine for the configured database.

    Pooling (pool_size, max_overflow, pre-ping, hourly recycle) applies to
    server databases only.
    """
    url = url or settings.database_url
    options = {"echo": settings.log_level == "DEBUG"}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    options.update(kwargs)
    return create_async_engine(url, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: records stay readable after the commit that created them
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
