"""Resource repository -- session-bound CRUD and hierarchy queries.

The repository only flushes; the caller's unit of work owns the commit, so
the same methods serve single-row writes (ResourceService) and the
multi-row orchestrators (MeetingService, SpaceService).

Listings exclude soft-deleted rows. Hierarchy queries are string-prefix
matches over ``path`` with LIKE wildcards escaped (labels may contain "_").
A meeting soft delete stamps only ``meetings.deleted_at``, so every read
here also hides nodes whose meeting row carries that stamp.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import column, exists, inspect, select, table
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from src.atrium.core.database import utcnow
from src.atrium.resources.models import ResourceModel
from src.atrium.resources.paths import PATH_SEPARATOR, path_depth
from src.atrium.resources.schemas import (
    Resource,
    ResourceType,
    ResourceUpdate,
    ResourceVisibility,
)
from src.atrium.workspaces.models import WorkspaceMemberModel, WorkspaceModel
from src.atrium.workspaces.repository import model_to_member, model_to_workspace

logger = structlog.get_logger(__name__)

# Table clause rather than MeetingModel: the meetings package imports this module.
_meetings = table("meetings", column("id"), column("deleted_at"))


def _visible():
    """Row filter hiding soft-deleted nodes and nodes of soft-deleted meetings."""
    return (
        ResourceModel.deleted_at.is_(None),
        ~exists().where(
            _meetings.c.id == ResourceModel.id,
            _meetings.c.deleted_at.is_not(None),
        ),
    )


# ── Serialization Helpers ───────────────────────────────────────────────────


def model_to_resource(model: ResourceModel) -> Resource:
    """Convert ResourceModel to Resource schema.

    Relations are copied only when already loaded; touching an unloaded
    relationship would trigger IO (lazy="raise").
    """
    unloaded = inspect(model).unloaded
    return Resource(
        id=model.id,
        workspace_id=model.workspace_id,
        owner_id=model.owner_id,
        type=ResourceType(model.type),
        title=model.title,
        visibility=ResourceVisibility(model.visibility),
        path=model.path,
        version=model.version,
        created_at=model.created_at,
        updated_at=model.updated_at,
        deleted_at=model.deleted_at,
        workspace=(
            model_to_workspace(model.workspace)
            if "workspace" not in unloaded and model.workspace is not None
            else None
        ),
        owner=(
            model_to_member(model.owner)
            if "owner" not in unloaded and model.owner is not None
            else None
        ),
    )


# ── Repository ──────────────────────────────────────────────────────────────


class ResourceRepository:
    """CRUD over the generic node through an already-open session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        workspace: WorkspaceModel,
        owner: WorkspaceMemberModel,
        type: ResourceType,
        title: str,
        path: str,
        visibility: ResourceVisibility | None = None,
    ) -> ResourceModel:
        """Persist a new node. Validates nothing; visibility defaults to PUBLIC."""
        model = ResourceModel(
            workspace=workspace,
            workspace_id=workspace.id,
            owner=owner,
            owner_id=owner.id,
            type=type.value,
            title=title,
            visibility=(visibility or ResourceVisibility.PUBLIC).value,
            path=path,
        )
        self._session.add(model)
        await self._session.flush()
        return model

    async def find_by_id(self, resource_id: uuid.UUID) -> ResourceModel | None:
        stmt = select(ResourceModel).where(
            ResourceModel.id == resource_id,
            *_visible(),
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_id_with_relations(self, resource_id: uuid.UUID) -> ResourceModel | None:
        stmt = (
            select(ResourceModel)
            .options(
                joinedload(ResourceModel.workspace),
                joinedload(ResourceModel.owner),
            )
            .where(
                ResourceModel.id == resource_id,
                *_visible(),
            )
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, model: ResourceModel, data: ResourceUpdate) -> ResourceModel:
        """Apply the fields set on data to an already-loaded node."""
        if data.title is not None:
            model.title = data.title
        if data.visibility is not None:
            model.visibility = data.visibility.value
        model.updated_at = utcnow()
        await self._session.flush()
        return model

    async def find_by_workspace(self, workspace_id: uuid.UUID) -> list[ResourceModel]:
        stmt = (
            select(ResourceModel)
            .options(joinedload(ResourceModel.owner))
            .where(
                ResourceModel.workspace_id == workspace_id,
                *_visible(),
            )
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def find_by_workspace_and_type(
        self, workspace_id: uuid.UUID, type: ResourceType
    ) -> list[ResourceModel]:
        stmt = (
            select(ResourceModel)
            .options(joinedload(ResourceModel.owner))
            .where(
                ResourceModel.workspace_id == workspace_id,
                ResourceModel.type == type.value,
                *_visible(),
            )
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def find_by_owner(self, owner_id: uuid.UUID) -> list[ResourceModel]:
        stmt = (
            select(ResourceModel)
            .options(joinedload(ResourceModel.workspace))
            .where(
                ResourceModel.owner_id == owner_id,
                *_visible(),
            )
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def find_descendants(
        self, workspace_id: uuid.UUID, path: str
    ) -> list[ResourceModel]:
        """All nodes strictly below path in the workspace, shallowest first."""
        stmt = (
            select(ResourceModel)
            .where(
                ResourceModel.workspace_id == workspace_id,
                ResourceModel.path.startswith(path + PATH_SEPARATOR, autoescape=True),
                *_visible(),
            )
            .order_by(ResourceModel.path)
        )
        result = await self._session.execute(stmt)
        models = list(result.scalars().all())
        models.sort(key=lambda m: path_depth(m.path))
        return models

    async def find_children(self, workspace_id: uuid.UUID, path: str) -> list[ResourceModel]:
        """Direct children of path (descendants exactly one level deeper)."""
        depth = path_depth(path) + 1
        return [
            m for m in await self.find_descendants(workspace_id, path)
            if path_depth(m.path) == depth
        ]

    async def delete(self, resource_id: uuid.UUID) -> None:
        """Remove the row if present; absent ids are a no-op at this layer."""
        model = await self._session.get(ResourceModel, resource_id)
        if model is not None:
            await self._session.delete(model)
            await self._session.flush()
