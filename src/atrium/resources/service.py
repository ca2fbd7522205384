"""Resource service -- validation, path generation, and committed CRUD.

stage() is the building block for the creation orchestrators: it validates
the workspace and owner, generates the materialized path, and adds the
Resource row to the caller's open transaction without committing. Every
other public method opens its own unit of work and commits immediately.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from src.atrium.core import errors
from src.atrium.core.database import unit_of_work
from src.atrium.core.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationFailureError,
)
from src.atrium.core.monitoring import record_lifecycle_event
from src.atrium.resources.models import ResourceModel
from src.atrium.resources.paths import LabelSequence, generate_path
from src.atrium.resources.repository import ResourceRepository, model_to_resource
from src.atrium.resources.schemas import (
    TITLE_MAX_LENGTH,
    Resource,
    ResourceCreate,
    ResourceType,
    ResourceUpdate,
)
from src.atrium.workspaces.models import WorkspaceMemberModel, WorkspaceModel
from src.atrium.workspaces.repository import WorkspaceRepository

logger = structlog.get_logger(__name__)

PATH_UNIQUE_CONSTRAINT = "uq_resources_workspace_path"


# ── Validation Helpers ──────────────────────────────────────────────────────


def validate_title(title: str | None) -> str:
    """Return the title or raise ValidationFailureError (empty or >255 chars)."""
    if title is None or not title.strip():
        raise ValidationFailureError(
            errors.VALIDATION_INPUT_INVALID,
            {"field": "title", "reason": "empty"},
        )
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationFailureError(
            errors.VALIDATION_INPUT_INVALID,
            {"field": "title", "reason": "tooLong", "maxLength": TITLE_MAX_LENGTH},
        )
    return title


async def resolve_owner(
    session: AsyncSession,
    workspace_id: uuid.UUID,
    owner_id: uuid.UUID,
) -> tuple[WorkspaceModel, WorkspaceMemberModel]:
    """Load workspace and owner, enforcing that the owner belongs to it.

    A member of another workspace is reported exactly like a missing member
    so callers cannot probe foreign tenants.

    Raises:
        NotFoundError: workspace.fetch.notFound or workspace.member.fetch.notFound.
    """
    lookup = WorkspaceRepository(session)
    workspace = await lookup.find_workspace_by_id(workspace_id)
    if workspace is None:
        raise NotFoundError(errors.WORKSPACE_NOT_FOUND, {"workspaceId": str(workspace_id)})

    owner = await lookup.find_member_by_id(owner_id)
    if owner is None or owner.workspace_id != workspace.id:
        raise NotFoundError(
            errors.WORKSPACE_MEMBER_NOT_FOUND,
            {"workspaceMemberId": str(owner_id), "workspaceId": str(workspace_id)},
        )
    return workspace, owner


def is_path_collision(exc: IntegrityError) -> bool:
    """True when the IntegrityError comes from the (workspace_id, path) unique index."""
    message = str(exc.orig)
    return PATH_UNIQUE_CONSTRAINT in message or "resources.path" in message


# ── Service ─────────────────────────────────────────────────────────────────


class ResourceService:
    """Generic node operations.

    Args:
        session_factory: async_sessionmaker producing AsyncSession instances.
        label_sequence: Path label source; the process-wide default when None.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        label_sequence: LabelSequence | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._label_sequence = label_sequence

    def generate_path(self, parent_path: str | None) -> str:
        return generate_path(parent_path, self._label_sequence)

    async def stage(self, session: AsyncSession, data: ResourceCreate) -> ResourceModel:
        """Validate and add a Resource row to the caller's transaction.

        Raises:
            NotFoundError: Workspace or owner missing, or owner in another workspace.
            ValidationFailureError: Title empty or too long.
            ConflictError: Generated path already taken in the workspace.
        """
        title = validate_title(data.title)
        workspace, owner = await resolve_owner(session, data.workspace_id, data.owner_id)
        path = self.generate_path(data.parent_path)

        try:
            model = await ResourceRepository(session).create(
                workspace=workspace,
                owner=owner,
                type=data.type,
                title=title,
                path=path,
                visibility=data.visibility,
            )
        except IntegrityError as exc:
            if is_path_collision(exc):
                raise ConflictError(errors.RESOURCE_DUPLICATE, {"path": path}) from exc
            raise

        logger.info(
            "resource.staged",
            resource_id=str(model.id),
            workspace_id=str(workspace.id),
            type=data.type.value,
            path=path,
        )
        return model

    async def create(self, data: ResourceCreate) -> Resource:
        """Create a bare Resource in its own transaction."""
        async with unit_of_work(self._session_factory) as session:
            model = await self.stage(session, data)
            resource = model_to_resource(model)
        logger.info("resource.created", resource_id=str(resource.id), path=resource.path)
        record_lifecycle_event("resource.created")
        return resource

    async def update(self, resource_id: uuid.UUID, data: ResourceUpdate) -> Resource:
        """Partial update of title and/or visibility.

        Raises:
            NotFoundError: resource.fetch.notFound if the id does not exist.
            ValidationFailureError: New title empty or too long.
            ConflictError: The row changed concurrently.
        """
        if data.title is not None:
            validate_title(data.title)
        try:
            async with unit_of_work(self._session_factory) as session:
                repo = ResourceRepository(session)
                model = await repo.find_by_id(resource_id)
                if model is None:
                    raise NotFoundError(errors.RESOURCE_NOT_FOUND, {"resourceId": str(resource_id)})
                model = await repo.update(model, data)
                resource = model_to_resource(model)
        except StaleDataError as exc:
            raise ConflictError(
                errors.RESOURCE_UPDATE_CONFLICT, {"resourceId": str(resource_id)}
            ) from exc

        logger.info("resource.updated", resource_id=str(resource_id))
        return resource

    async def find_by_id(self, resource_id: uuid.UUID) -> Resource | None:
        async with self._session_factory() as session:
            model = await ResourceRepository(session).find_by_id(resource_id)
            return model_to_resource(model) if model is not None else None

    async def find_by_id_with_relations(self, resource_id: uuid.UUID) -> Resource | None:
        async with self._session_factory() as session:
            model = await ResourceRepository(session).find_by_id_with_relations(resource_id)
            return model_to_resource(model) if model is not None else None

    async def find_by_workspace(self, workspace_id: uuid.UUID) -> list[Resource]:
        async with self._session_factory() as session:
            models = await ResourceRepository(session).find_by_workspace(workspace_id)
            return [model_to_resource(m) for m in models]

    async def find_by_workspace_and_type(
        self, workspace_id: uuid.UUID, type: ResourceType
    ) -> list[Resource]:
        async with self._session_factory() as session:
            models = await ResourceRepository(session).find_by_workspace_and_type(
                workspace_id, type
            )
            return [model_to_resource(m) for m in models]

    async def find_by_owner(self, owner_id: uuid.UUID) -> list[Resource]:
        async with self._session_factory() as session:
            models = await ResourceRepository(session).find_by_owner(owner_id)
            return [model_to_resource(m) for m in models]

    async def find_descendants(self, workspace_id: uuid.UUID, path: str) -> list[Resource]:
        async with self._session_factory() as session:
            models = await ResourceRepository(session).find_descendants(workspace_id, path)
            return [model_to_resource(m) for m in models]

    async def find_children(self, workspace_id: uuid.UUID, path: str) -> list[Resource]:
        async with self._session_factory() as session:
            models = await ResourceRepository(session).find_children(workspace_id, path)
            return [model_to_resource(m) for m in models]

    async def delete_resource(self, resource_id: uuid.UUID) -> None:
        """Hard-delete a node after checking it exists.

        Meeting nodes are refused: the row cascade would hard-delete the
        meeting, which only ever gets a soft delete (MeetingService.delete_meeting).

        Raises:
            NotFoundError: resource.fetch.notFound.
            InvalidStateError: resource.delete.isMeeting.
        """
        async with unit_of_work(self._session_factory) as session:
            repo = ResourceRepository(session)
            model = await repo.find_by_id(resource_id)
            if model is None:
                raise NotFoundError(errors.RESOURCE_NOT_FOUND, {"resourceId": str(resource_id)})
            if model.type == ResourceType.MEETING.value:
                raise InvalidStateError(
                    errors.RESOURCE_DELETE_IS_MEETING, {"resourceId": str(resource_id)}
                )
            await repo.delete(resource_id)
        logger.info("resource.deleted", resource_id=str(resource_id))
        record_lifecycle_event("resource.deleted")
