"""
Mockup Approval Proxy - Database Session Management
=====================================================

What:  Async SQLAlchemy engine, session factory, and table bootstrap for the
       relational send log.
Why:   The send log uses PostgreSQL in production and a JSON file in local
       development, so the engine is only built when DATABASE_URL is set.
How:   `get_engine()` lazily creates one async engine per process;
       `get_session_factory()` hands out an `async_sessionmaker` bound to it.
Who:   Used by DatabaseSendLogStore, the health route, and main.py lifespan.

Connection Pooling Strategy:
    The proxy writes one row per envelope sent, so the pool is small
    (pool_size=5, max_overflow=5). Pool options are only passed for
    PostgreSQL URLs; SQLite (tests) uses SQLAlchemy's defaults.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from mockup_proxy.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object so Alembic and `init_models()` see every table.
    """
    pass


_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def build_engine(database_url: str) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    PostgreSQL gets explicit pool sizing and pre-ping (catches connections
    dropped by managed hosts); other dialects keep SQLAlchemy defaults.
    """
    kwargs = {"echo": settings.log_level == "DEBUG"}
    if database_url.startswith("postgresql"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(database_url, **kwargs)


def get_engine() -> Optional[AsyncEngine]:
    """Return the process-wide engine, or None when DATABASE_URL is unset."""
    global _engine
    if _engine is None and settings.use_database:
        _engine = build_engine(settings.database_url)
    return _engine


def get_session_factory() -> Optional[async_sessionmaker[AsyncSession]]:
    """
    Return the session factory bound to the process-wide engine.

    expire_on_commit=False keeps row attributes readable after commit,
    which the log store relies on when converting rows to entries.
    """
    global _session_factory
    engine = get_engine()
    if engine is None:
        return None
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


async def init_models(engine: Optional[AsyncEngine] = None) -> None:
    """
    Create missing tables (CREATE TABLE IF NOT EXISTS semantics).

    What:  Lets a fresh database accept send log rows without running
           Alembic first. Existing tables are left untouched.
    When:  Called during application startup when DATABASE_URL is set.
    """
    # Registers models on Base.metadata
    from mockup_proxy.models import send_log  # noqa: F401

    engine = engine or get_engine()
    if engine is None:
        return
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Send log table ready")


async def dispose_engine() -> None:
    """
    What:  Gracefully closes all pooled connections.
    When:  Called during application shutdown (lifespan handler).
    """
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
