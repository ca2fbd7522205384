"""Workspace lookup -- the collaborator the resource core consumes.

WorkspaceRepository is bound to an open AsyncSession so orchestrators can run
the ownership check inside their own unit of work. WorkspaceDirectory wraps it
with the session_factory pattern for callers outside a transaction (API
guards, provisioning scripts, tests).
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.atrium.core.database import unit_of_work
from src.atrium.workspaces.models import WorkspaceMemberModel, WorkspaceModel
from src.atrium.workspaces.schemas import Workspace, WorkspaceMember

logger = structlog.get_logger(__name__)


# ── Serialization Helpers ───────────────────────────────────────────────────


def model_to_workspace(model: WorkspaceModel) -> Workspace:
    """Convert WorkspaceModel to Workspace schema."""
    return Workspace(id=model.id, name=model.name, created_at=model.created_at)


def model_to_member(model: WorkspaceMemberModel) -> WorkspaceMember:
    """Convert WorkspaceMemberModel to WorkspaceMember schema."""
    return WorkspaceMember(
        id=model.id,
        workspace_id=model.workspace_id,
        first_name=model.first_name,
        last_name=model.last_name or "",
        is_active=model.is_active,
    )


# ── Session-bound Repository ────────────────────────────────────────────────


class WorkspaceRepository:
    """Reads workspaces and members through an already-open session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_workspace_by_id(self, workspace_id: uuid.UUID) -> WorkspaceModel | None:
        return await self._session.get(WorkspaceModel, workspace_id)

    async def find_member_by_id(self, member_id: uuid.UUID) -> WorkspaceMemberModel | None:
        return await self._session.get(WorkspaceMemberModel, member_id)

    async def list_members(self, workspace_id: uuid.UUID) -> list[WorkspaceMemberModel]:
        stmt = (
            select(WorkspaceMemberModel)
            .where(WorkspaceMemberModel.workspace_id == workspace_id)
            .order_by(WorkspaceMemberModel.created_at)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())


# ── Directory Facade ────────────────────────────────────────────────────────


class WorkspaceDirectory:
    """Workspace and member lookup for callers that hold no session.

    Args:
        session_factory: async_sessionmaker producing AsyncSession instances.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_workspace_by_id(self, workspace_id: uuid.UUID) -> Workspace | None:
        async with self._session_factory() as session:
            model = await WorkspaceRepository(session).find_workspace_by_id(workspace_id)
            return model_to_workspace(model) if model is not None else None

    async def find_member_by_id(self, member_id: uuid.UUID) -> WorkspaceMember | None:
        async with self._session_factory() as session:
            model = await WorkspaceRepository(session).find_member_by_id(member_id)
            return model_to_member(model) if model is not None else None

    async def list_members(self, workspace_id: uuid.UUID) -> list[WorkspaceMember]:
        async with self._session_factory() as session:
            models = await WorkspaceRepository(session).list_members(workspace_id)
            return [model_to_member(m) for m in models]

    async def create_workspace(self, name: str) -> Workspace:
        """Create a workspace (provisioning and fixtures only)."""
        async with unit_of_work(self._session_factory) as session:
            model = WorkspaceModel(name=name)
            session.add(model)
            await session.flush()
            workspace = model_to_workspace(model)
        logger.info("workspace.created", workspace_id=str(workspace.id))
        return workspace

    async def add_member(
        self,
        workspace_id: uuid.UUID,
        first_name: str,
        last_name: str = "",
    ) -> WorkspaceMember:
        """Add a member to a workspace (provisioning and fixtures only)."""
        async with unit_of_work(self._session_factory) as session:
            model = WorkspaceMemberModel(
                workspace_id=workspace_id,
                first_name=first_name,
                last_name=last_name,
            )
            session.add(model)
            await session.flush()
            member = model_to_member(model)
        logger.info(
            "workspace.member_added",
            workspace_id=str(workspace_id),
            member_id=str(member.id),
        )
        return member
