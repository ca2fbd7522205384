"""Meeting repository -- session-bound persistence for the Meeting specialization.

Every query joins the owning Resource (the relationship is lazy="joined")
and excludes soft-deleted rows. Writes only flush; commit belongs to the
MeetingService unit of work.
"""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager, joinedload

from src.atrium.core.database import utcnow
from src.atrium.meetings.models import MeetingModel
from src.atrium.meetings.schemas import Meeting, MeetingStatus
from src.atrium.resources.models import ResourceModel
from src.atrium.resources.repository import model_to_resource

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = ("memo", "summary", "status", "tags")


# ── Serialization Helpers ───────────────────────────────────────────────────


def model_to_meeting(model: MeetingModel) -> Meeting:
    """Convert MeetingModel (with its resource loaded) to Meeting schema."""
    return Meeting(
        id=model.id,
        workspace_id=model.workspace_id,
        status=MeetingStatus(model.status),
        memo=model.memo,
        summary=model.summary,
        tags=list(model.tags or []),
        version=model.version,
        created_at=model.created_at,
        updated_at=model.updated_at,
        deleted_at=model.deleted_at,
        resource=model_to_resource(model.resource),
    )


# ── Repository ──────────────────────────────────────────────────────────────


class MeetingRepository:
    """Meeting rows through an already-open session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, resource: ResourceModel) -> MeetingModel:
        """Insert the Meeting row for a freshly staged Resource (same id)."""
        model = MeetingModel(
            id=resource.id,
            workspace_id=resource.workspace_id,
            status=MeetingStatus.DRAFT.value,
            memo=None,
            summary=None,
            tags=[],
            resource=resource,
        )
        self._session.add(model)
        await self._session.flush()
        return model

    async def find_by_id(
        self,
        meeting_id: uuid.UUID,
        workspace_id: uuid.UUID | None = None,
    ) -> MeetingModel | None:
        """Live meeting by id, optionally constrained to a workspace."""
        stmt = (
            select(MeetingModel)
            .options(joinedload(MeetingModel.resource).joinedload(ResourceModel.owner))
            .where(
                MeetingModel.id == meeting_id,
                MeetingModel.deleted_at.is_(None),
            )
        )
        if workspace_id is not None:
            stmt = stmt.where(MeetingModel.workspace_id == workspace_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, model: MeetingModel, fields: dict[str, Any]) -> MeetingModel:
        """Write the given subset of memo/summary/status/tags."""
        for name in UPDATABLE_FIELDS:
            if name not in fields:
                continue
            value = fields[name]
            if name == "status":
                if value is None:
                    continue
                value = MeetingStatus(value).value
            if name == "tags":
                # New list object so the JSON column registers the change
                value = list(value or [])
            setattr(model, name, value)
        model.updated_at = utcnow()
        await self._session.flush()
        return model

    async def soft_delete(self, model: MeetingModel) -> MeetingModel:
        model.deleted_at = utcnow()
        await self._session.flush()
        return model

    async def find_by_workspace(
        self,
        workspace_id: uuid.UUID,
        status: MeetingStatus | None = None,
    ) -> list[MeetingModel]:
        """Non-draft meetings in the workspace, newest first."""
        stmt = (
            select(MeetingModel)
            .options(joinedload(MeetingModel.resource).joinedload(ResourceModel.owner))
            .where(
                MeetingModel.workspace_id == workspace_id,
                MeetingModel.status != MeetingStatus.DRAFT.value,
                MeetingModel.deleted_at.is_(None),
            )
            .order_by(MeetingModel.created_at.desc())
        )
        if status is not None:
            stmt = stmt.where(MeetingModel.status == status.value)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def find_drafts_by_owner(
        self,
        workspace_id: uuid.UUID,
        owner_id: uuid.UUID,
    ) -> list[MeetingModel]:
        """DRAFT meetings whose resource is owned by owner_id, newest first."""
        stmt = (
            select(MeetingModel)
            .join(ResourceModel, ResourceModel.id == MeetingModel.id)
            .options(contains_eager(MeetingModel.resource).joinedload(ResourceModel.owner))
            .where(
                MeetingModel.workspace_id == workspace_id,
                MeetingModel.status == MeetingStatus.DRAFT.value,
                MeetingModel.deleted_at.is_(None),
                ResourceModel.owner_id == owner_id,
            )
            .order_by(MeetingModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
