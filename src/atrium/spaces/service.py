"""Space service -- atomic creation and title write-through.

A Space is displayed by its Resource's title. update_space writes a new
title to the Resource and a new description to the Space row in the same
transaction; delete_space removes both rows together.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from src.atrium.core import errors
from src.atrium.core.database import unit_of_work
from src.atrium.core.errors import ConflictError, NotFoundError
from src.atrium.core.monitoring import record_lifecycle_event
from src.atrium.resources.repository import ResourceRepository
from src.atrium.resources.schemas import ResourceCreate, ResourceType, ResourceUpdate
from src.atrium.resources.service import ResourceService, validate_title
from src.atrium.spaces.repository import SpaceRepository, model_to_space
from src.atrium.spaces.schemas import Space, SpaceCreate, SpaceUpdate

logger = structlog.get_logger(__name__)


class SpaceService:
    """Space lifecycle operations.

    Args:
        session_factory: async_sessionmaker producing AsyncSession instances.
        resource_service: Stages the Resource row inside space transactions.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        resource_service: ResourceService,
    ) -> None:
        self._session_factory = session_factory
        self._resources = resource_service

    async def create_space(self, data: SpaceCreate) -> Space:
        """Create Resource(type=space) and its Space row atomically.

        Raises:
            NotFoundError: Workspace or member missing, or member of another workspace.
            ValidationFailureError: Title empty or too long.
            ConflictError: Generated path collided in the workspace.
        """
        async with unit_of_work(self._session_factory) as session:
            resource = await self._resources.stage(
                session,
                ResourceCreate(
                    workspace_id=data.workspace_id,
                    owner_id=data.workspace_member_id,
                    type=ResourceType.SPACE,
                    title=data.title,
                    visibility=data.visibility,
                    parent_path=data.parent_path,
                ),
            )
            model = await SpaceRepository(session).create(resource, data.description)
            space = model_to_space(model)

        logger.info(
            "space.created",
            space_id=str(space.id),
            workspace_id=str(space.workspace_id),
            path=space.resource.path,
        )
        record_lifecycle_event("space.created")
        return space

    async def update_space(
        self,
        space_id: uuid.UUID,
        data: SpaceUpdate,
        workspace_id: uuid.UUID | None = None,
    ) -> Space:
        """Partial update; title goes to the Resource, description to the Space.

        Raises:
            NotFoundError: space.fetch.notFound.
            ValidationFailureError: New title empty or too long.
            ConflictError: space.update.conflict on a concurrent write.
        """
        fields = data.model_dump(exclude_unset=True)
        if fields.get("title") is not None:
            validate_title(fields["title"])

        try:
            async with unit_of_work(self._session_factory) as session:
                repo = SpaceRepository(session)
                model = await repo.find_by_id(space_id, workspace_id)
                if model is None:
                    raise NotFoundError(errors.SPACE_NOT_FOUND, {"spaceId": str(space_id)})
                if fields.get("title") is not None:
                    await ResourceRepository(session).update(
                        model.resource, ResourceUpdate(title=fields["title"])
                    )
                if "description" in fields:
                    model = await repo.update_description(model, fields["description"])
                space = model_to_space(model)
        except StaleDataError as exc:
            raise ConflictError(errors.SPACE_UPDATE_CONFLICT, {"spaceId": str(space_id)}) from exc

        logger.info("space.updated", space_id=str(space_id), fields=sorted(fields))
        return space

    async def get_space_by_id(
        self, space_id: uuid.UUID, workspace_id: uuid.UUID | None = None
    ) -> Space:
        """Raises NotFoundError(space.fetch.notFound) when absent."""
        async with self._session_factory() as session:
            model = await SpaceRepository(session).find_by_id(space_id, workspace_id)
            if model is None:
                raise NotFoundError(errors.SPACE_NOT_FOUND, {"spaceId": str(space_id)})
            return model_to_space(model)

    async def find_spaces_by_workspace(self, workspace_id: uuid.UUID) -> list[Space]:
        async with self._session_factory() as session:
            models = await SpaceRepository(session).find_by_workspace(workspace_id)
            return [model_to_space(m) for m in models]

    async def find_spaces_by_workspace_and_owner(
        self,
        workspace_id: uuid.UUID,
        owner_id: uuid.UUID,
    ) -> list[Space]:
        async with self._session_factory() as session:
            models = await SpaceRepository(session).find_by_workspace_and_owner(
                workspace_id, owner_id
            )
            return [model_to_space(m) for m in models]

    async def delete_space(
        self, space_id: uuid.UUID, workspace_id: uuid.UUID | None = None
    ) -> None:
        """Remove the Space and its Resource in one transaction.

        Raises:
            NotFoundError: space.fetch.notFound.
        """
        async with unit_of_work(self._session_factory) as session:
            repo = SpaceRepository(session)
            model = await repo.find_by_id(space_id, workspace_id)
            if model is None:
                raise NotFoundError(errors.SPACE_NOT_FOUND, {"spaceId": str(space_id)})
            await repo.delete(model)
            await ResourceRepository(session).delete(space_id)

        logger.info("space.deleted", space_id=str(space_id))
        record_lifecycle_event("space.deleted")
