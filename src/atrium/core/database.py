"""Async SQLAlchemy engine, declarative base, and unit-of-work helpers.

Provides:
- Base: Declarative base for every persisted table (workspace scoping is by
  column, not by schema)
- get_engine() / get_session_factory(): lazily built singletons
- get_session(): AsyncGenerator for FastAPI dependencies
- unit_of_work(): one transaction that commits on normal exit and rolls back
  on every exception path
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.atrium.config import get_settings

# ── Module-level engine (lazy init) ────────────────────────────────────────

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def utcnow() -> datetime:
    """Timezone-aware current time, used for Python-side timestamp defaults."""
    return datetime.now(timezone.utc)


def get_engine() -> AsyncEngine:
    """Get or create the async engine singleton."""
    global _engine
    if _engine is None:
        settings = get_settings()
        kwargs: dict[str, Any] = {"echo": settings.DB_ECHO}
        # SQLite pools reject sizing arguments
        if not settings.DATABASE_URL.startswith("sqlite"):
            kwargs["pool_size"] = settings.DB_POOL_SIZE
            kwargs["max_overflow"] = settings.DB_MAX_OVERFLOW
        _engine = create_async_engine(settings.DATABASE_URL, **kwargs)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory bound to the engine singleton."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


# ── Declarative Base ────────────────────────────────────────────────────────


class Base(DeclarativeBase):
    """Base class for all Atrium tables."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# ── Sessions ────────────────────────────────────────────────────────────────


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a plain AsyncSession (caller decides when to commit)."""
    async with get_session_factory()() as session:
        yield session


@asynccontextmanager
async def unit_of_work(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Open a session and a transaction around the body.

    The transaction commits when the body exits normally and rolls back when
    it raises, so a multi-row write is either fully visible or not at all.

    Usage:
        async with unit_of_work(session_factory) as session:
            session.add(resource)
            await session.flush()
            session.add(meeting)
    """
    async with session_factory() as session:
        async with session.begin():
            yield session


# ── Database Initialization ─────────────────────────────────────────────────


async def init_db() -> None:
    """Create all tables if they don't exist (development convenience;
    production schemas are managed by Alembic)."""
    # Model modules register their tables on Base.metadata when imported
    import src.atrium.meetings.models  # noqa: F401
    import src.atrium.resources.models  # noqa: F401
    import src.atrium.spaces.models  # noqa: F401
    import src.atrium.workspaces.models  # noqa: F401

    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the engine and close all connections."""
    global _engine, _session_factory
    if _engine:
        await _engine.dispose()
        _engine = None
        _session_factory = None
