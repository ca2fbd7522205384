"""Meeting service -- atomic creation and the guarded publish transition.

create_meeting and publish_meeting each write two rows (Resource and
Meeting) inside one unit of work: either both changes commit or neither
does. Plain updates and soft deletes touch only the meeting row.

Every UPDATE is version-checked (optimistic concurrency); a concurrent
writer surfaces as ConflictError instead of silently losing an update.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from src.atrium.config import get_settings
from src.atrium.core import errors
from src.atrium.core.database import unit_of_work
from src.atrium.core.errors import ConflictError, InvalidStateError, NotFoundError
from src.atrium.core.monitoring import record_lifecycle_event
from src.atrium.meetings.repository import MeetingRepository, model_to_meeting
from src.atrium.meetings.schemas import (
    PUBLISH_REQUIRED_STATUS,
    Meeting,
    MeetingCreate,
    MeetingPublish,
    MeetingStatus,
    MeetingUpdate,
)
from src.atrium.resources.repository import ResourceRepository
from src.atrium.resources.schemas import (
    ResourceCreate,
    ResourceType,
    ResourceUpdate,
    ResourceVisibility,
)
from src.atrium.resources.service import ResourceService

logger = structlog.get_logger(__name__)


class MeetingService:
    """Meeting lifecycle operations.

    Args:
        session_factory: async_sessionmaker producing AsyncSession instances.
        resource_service: Stages the Resource row inside meeting transactions.
        default_title: Title given to new meetings; settings value when None.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        resource_service: ResourceService,
        default_title: str | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._resources = resource_service
        self._default_title = default_title or get_settings().DEFAULT_MEETING_TITLE

    # ── Writes ───────────────────────────────────────────────────────────

    async def create_meeting(self, data: MeetingCreate) -> Meeting:
        """Create Resource(type=meeting, public) and its DRAFT Meeting atomically.

        Raises:
            NotFoundError: Workspace or member missing, or member of another workspace.
            ValidationFailureError: Supplied title empty or too long.
            ConflictError: Generated path collided in the workspace.
        """
        title = data.title if data.title is not None else self._default_title
        async with unit_of_work(self._session_factory) as session:
            resource = await self._resources.stage(
                session,
                ResourceCreate(
                    workspace_id=data.workspace_id,
                    owner_id=data.workspace_member_id,
                    type=ResourceType.MEETING,
                    title=title,
                    visibility=ResourceVisibility.PUBLIC,
                    parent_path=data.parent_path,
                ),
            )
            model = await MeetingRepository(session).create(resource)
            meeting = model_to_meeting(model)

        logger.info(
            "meeting.created",
            meeting_id=str(meeting.id),
            workspace_id=str(meeting.workspace_id),
            path=meeting.resource.path,
        )
        record_lifecycle_event("meeting.created")
        return meeting

    async def update_meeting(
        self,
        meeting_id: uuid.UUID,
        data: MeetingUpdate,
        workspace_id: uuid.UUID | None = None,
    ) -> Meeting:
        """Partial update of memo/summary/status/tags. Status is not guarded here.

        Raises:
            NotFoundError: meeting.update.notFound (missing or soft-deleted).
            ConflictError: meeting.update.conflict (expected_version mismatch
                or concurrent write).
        """
        fields = data.model_dump(exclude_unset=True)
        expected_version = fields.pop("expected_version", None)

        try:
            async with unit_of_work(self._session_factory) as session:
                repo = MeetingRepository(session)
                model = await repo.find_by_id(meeting_id, workspace_id)
                if model is None:
                    raise NotFoundError(
                        errors.MEETING_UPDATE_NOT_FOUND, {"meetingId": str(meeting_id)}
                    )
                if expected_version is not None and model.version != expected_version:
                    raise ConflictError(
                        errors.MEETING_UPDATE_CONFLICT,
                        {
                            "meetingId": str(meeting_id),
                            "expectedVersion": expected_version,
                            "currentVersion": model.version,
                        },
                    )
                model = await repo.update(model, fields)
                meeting = model_to_meeting(model)
        except StaleDataError as exc:
            raise ConflictError(
                errors.MEETING_UPDATE_CONFLICT, {"meetingId": str(meeting_id)}
            ) from exc

        logger.info(
            "meeting.updated",
            meeting_id=str(meeting_id),
            fields=sorted(fields),
            status=meeting.status.value,
        )
        return meeting

    async def publish_meeting(self, data: MeetingPublish) -> Meeting:
        """COMPLETED -> PUBLISHED, setting the resource visibility in the same commit.

        Raises:
            NotFoundError: meeting.publish.notFound (missing, soft-deleted, or
                in another workspace).
            InvalidStateError: meeting.publish.isDraft when status != COMPLETED;
                nothing is written.
            ConflictError: meeting.update.conflict on a concurrent write.
        """
        try:
            async with unit_of_work(self._session_factory) as session:
                repo = MeetingRepository(session)
                model = await repo.find_by_id(data.id, data.workspace_id)
                if model is None:
                    raise NotFoundError(
                        errors.MEETING_PUBLISH_NOT_FOUND, {"meetingId": str(data.id)}
                    )

                current = MeetingStatus(model.status)
                if current != PUBLISH_REQUIRED_STATUS:
                    logger.warning(
                        "meeting.publish_rejected",
                        meeting_id=str(data.id),
                        current_status=current.value,
                    )
                    raise InvalidStateError(
                        errors.MEETING_PUBLISH_NOT_COMPLETED,
                        {
                            "currentStatus": current.value,
                            "requiredStatus": PUBLISH_REQUIRED_STATUS.value,
                        },
                    )

                await ResourceRepository(session).update(
                    model.resource, ResourceUpdate(visibility=data.visibility)
                )
                model = await repo.update(model, {"status": MeetingStatus.PUBLISHED})
                meeting = model_to_meeting(model)
        except StaleDataError as exc:
            raise ConflictError(
                errors.MEETING_UPDATE_CONFLICT, {"meetingId": str(data.id)}
            ) from exc

        logger.info(
            "meeting.published",
            meeting_id=str(meeting.id),
            workspace_id=str(meeting.workspace_id),
            visibility=meeting.resource.visibility.value,
        )
        record_lifecycle_event("meeting.published")
        return meeting

    async def delete_meeting(
        self, meeting_id: uuid.UUID, workspace_id: uuid.UUID | None = None
    ) -> None:
        """Soft delete: stamp deleted_at on the meeting; the resource row stays.

        Raises:
            NotFoundError: meeting.delete.notFound.
        """
        async with unit_of_work(self._session_factory) as session:
            repo = MeetingRepository(session)
            model = await repo.find_by_id(meeting_id, workspace_id)
            if model is None:
                raise NotFoundError(
                    errors.MEETING_DELETE_NOT_FOUND, {"meetingId": str(meeting_id)}
                )
            await repo.soft_delete(model)

        logger.info("meeting.deleted", meeting_id=str(meeting_id))
        record_lifecycle_event("meeting.deleted")

    # ── Reads ────────────────────────────────────────────────────────────

    async def get_meeting_by_id(
        self, meeting_id: uuid.UUID, workspace_id: uuid.UUID
    ) -> Meeting | None:
        async with self._session_factory() as session:
            model = await MeetingRepository(session).find_by_id(meeting_id, workspace_id)
            return model_to_meeting(model) if model is not None else None

    async def find_meetings_by_workspace(
        self,
        workspace_id: uuid.UUID,
        status: MeetingStatus | None = None,
    ) -> list[Meeting]:
        """Workspace listing; drafts are private to their owner and excluded."""
        async with self._session_factory() as session:
            models = await MeetingRepository(session).find_by_workspace(workspace_id, status)
            return [model_to_meeting(m) for m in models]

    async def find_my_draft_meetings(
        self,
        workspace_id: uuid.UUID,
        workspace_member_id: uuid.UUID,
    ) -> list[Meeting]:
        async with self._session_factory() as session:
            models = await MeetingRepository(session).find_drafts_by_owner(
                workspace_id, workspace_member_id
            )
            return [model_to_meeting(m) for m in models]
