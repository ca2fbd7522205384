"""Shared fixtures for service and API tests.

Provides:
- An in-memory SQLite database (aiosqlite) with every table created and
  foreign keys enforced
- session_factory bound to it, plus the services built on top
- Two workspaces (alpha, beta), each with one member
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

import src.atrium.meetings.models  # noqa: F401
import src.atrium.resources.models  # noqa: F401
import src.atrium.spaces.models  # noqa: F401
import src.atrium.workspaces.models  # noqa: F401
from src.atrium.core.database import Base
from src.atrium.meetings.service import MeetingService
from src.atrium.resources.service import ResourceService
from src.atrium.spaces.service import SpaceService
from src.atrium.workspaces.repository import WorkspaceDirectory
from src.atrium.workspaces.schemas import Workspace, WorkspaceMember


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def directory(session_factory) -> WorkspaceDirectory:
    return WorkspaceDirectory(session_factory)


@pytest_asyncio.fixture
async def resource_service(session_factory) -> ResourceService:
    return ResourceService(session_factory)


@pytest_asyncio.fixture
async def meeting_service(session_factory, resource_service) -> MeetingService:
    return MeetingService(session_factory, resource_service, default_title="Untitled")


@pytest_asyncio.fixture
async def space_service(session_factory, resource_service) -> SpaceService:
    return SpaceService(session_factory, resource_service)


@pytest_asyncio.fixture
async def workspace(directory) -> Workspace:
    return await directory.create_workspace("Alpha")


@pytest_asyncio.fixture
async def member(directory, workspace) -> WorkspaceMember:
    return await directory.add_member(workspace.id, "Ada", "Lovelace")


@pytest_asyncio.fixture
async def other_workspace(directory) -> Workspace:
    return await directory.create_workspace("Beta")


@pytest_asyncio.fixture
async def other_member(directory, other_workspace) -> WorkspaceMember:
    return await directory.add_member(other_workspace.id, "Alan", "Turing")
