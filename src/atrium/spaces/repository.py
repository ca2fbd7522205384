"""Space repository -- session-bound persistence for the Space specialization."""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager, joinedload

from src.atrium.core.database import utcnow
from src.atrium.resources.models import ResourceModel
from src.atrium.resources.repository import model_to_resource
from src.atrium.spaces.models import SpaceModel
from src.atrium.spaces.schemas import Space


def model_to_space(model: SpaceModel) -> Space:
    return Space(
        id=model.id,
        workspace_id=model.workspace_id,
        description=model.description,
        version=model.version,
        created_at=model.created_at,
        updated_at=model.updated_at,
        resource=model_to_resource(model.resource),
    )


class SpaceRepository:
    """Space rows through an already-open session; never commits."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, resource: ResourceModel, description: str | None = None) -> SpaceModel:
        model = SpaceModel(
            id=resource.id,
            workspace_id=resource.workspace_id,
            description=description,
            resource=resource,
        )
        self._session.add(model)
        await self._session.flush()
        return model

    async def find_by_id(
        self,
        space_id: uuid.UUID,
        workspace_id: uuid.UUID | None = None,
    ) -> SpaceModel | None:
        """Space by id, optionally constrained to a workspace."""
        stmt = (
            select(SpaceModel)
            .join(ResourceModel, ResourceModel.id == SpaceModel.id)
            .options(contains_eager(SpaceModel.resource).joinedload(ResourceModel.owner))
            .where(
                SpaceModel.id == space_id,
                ResourceModel.deleted_at.is_(None),
            )
        )
        if workspace_id is not None:
            stmt = stmt.where(SpaceModel.workspace_id == workspace_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_description(self, model: SpaceModel, description: str | None) -> SpaceModel:
        model.description = description
        model.updated_at = utcnow()
        await self._session.flush()
        return model

    async def delete(self, model: SpaceModel) -> None:
        await self._session.delete(model)
        await self._session.flush()

    async def find_by_workspace(self, workspace_id: uuid.UUID) -> list[SpaceModel]:
        """Spaces in the workspace ordered by path, so parents precede children."""
        stmt = (
            select(SpaceModel)
            .join(ResourceModel, ResourceModel.id == SpaceModel.id)
            .options(contains_eager(SpaceModel.resource).joinedload(ResourceModel.owner))
            .where(
                SpaceModel.workspace_id == workspace_id,
                ResourceModel.deleted_at.is_(None),
            )
            .order_by(ResourceModel.path)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def find_by_workspace_and_owner(
        self,
        workspace_id: uuid.UUID,
        owner_id: uuid.UUID,
    ) -> list[SpaceModel]:
        stmt = (
            select(SpaceModel)
            .join(ResourceModel, ResourceModel.id == SpaceModel.id)
            .options(contains_eager(SpaceModel.resource).joinedload(ResourceModel.owner))
            .where(
                SpaceModel.workspace_id == workspace_id,
                ResourceModel.owner_id == owner_id,
                ResourceModel.deleted_at.is_(None),
            )
            .order_by(ResourceModel.path)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
