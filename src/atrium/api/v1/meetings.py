"""REST endpoints for meetings.

Every route is scoped to the workspace in the path and requires the caller
to be a member of it (get_current_member). Meetings created here are owned
by the calling member. Domain errors propagate to the DomainError handler.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field

from src.atrium.api.deps import get_current_member, get_meeting_service
from src.atrium.api.v1.resources import ResourceResponse, resource_to_response
from src.atrium.core import errors
from src.atrium.core.errors import NotFoundError
from src.atrium.meetings.schemas import (
    MAX_TAGS,
    Meeting,
    MeetingCreate,
    MeetingPublish,
    MeetingStatus,
    MeetingUpdate,
)
from src.atrium.meetings.service import MeetingService
from src.atrium.resources.schemas import ResourceVisibility
from src.atrium.workspaces.schemas import WorkspaceMember

router = APIRouter(prefix="/workspaces/{workspace_id}/meetings", tags=["meetings"])


# ── Request / Response Schemas ───────────────────────────────────────────────


class MeetingCreateRequest(BaseModel):
    title: str | None = None
    parent_path: str | None = None


class MeetingUpdateRequest(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    memo: str | None = None
    summary: str | None = None
    status: MeetingStatus | None = None
    tags: list[str] | None = Field(default=None, max_length=MAX_TAGS)
    expected_version: int | None = None


class MeetingPublishRequest(BaseModel):
    visibility: ResourceVisibility


class MeetingResponse(BaseModel):
    """Response for meeting data, serializes ids and datetimes to strings."""

    id: str
    workspace_id: str
    status: str
    title: str
    memo: str | None = None
    summary: str | None = None
    tags: list[str] = Field(default_factory=list)
    version: int
    resource: ResourceResponse
    created_at: str | None = None
    updated_at: str | None = None


# ── Conversion Helpers ───────────────────────────────────────────────────────


def _meeting_to_response(m: Meeting) -> MeetingResponse:
    """Convert Meeting schema to MeetingResponse."""
    return MeetingResponse(
        id=str(m.id),
        workspace_id=str(m.workspace_id),
        status=m.status.value,
        title=m.resource.title,
        memo=m.memo,
        summary=m.summary,
        tags=m.tags,
        version=m.version,
        resource=resource_to_response(m.resource),
        created_at=m.created_at.isoformat() if m.created_at else None,
        updated_at=m.updated_at.isoformat() if m.updated_at else None,
    )


# ── Endpoints ────────────────────────────────────────────────────────────────


@router.post("", response_model=MeetingResponse, status_code=status.HTTP_201_CREATED)
async def create_meeting(
    workspace_id: uuid.UUID,
    body: MeetingCreateRequest,
    member: WorkspaceMember = Depends(get_current_member),
    service: MeetingService = Depends(get_meeting_service),
) -> MeetingResponse:
    """Create a DRAFT meeting owned by the calling member."""
    meeting = await service.create_meeting(
        MeetingCreate(
            workspace_id=workspace_id,
            workspace_member_id=member.id,
            parent_path=body.parent_path,
            title=body.title,
        )
    )
    return _meeting_to_response(meeting)


@router.get("", response_model=list[MeetingResponse])
async def list_meetings(
    workspace_id: uuid.UUID,
    status_filter: MeetingStatus | None = Query(
        default=None,
        alias="status",
        description="Filter by meeting status",
    ),
    member: WorkspaceMember = Depends(get_current_member),
    service: MeetingService = Depends(get_meeting_service),
) -> list[MeetingResponse]:
    """List non-draft meetings in the workspace, newest first."""
    meetings = await service.find_meetings_by_workspace(workspace_id, status_filter)
    return [_meeting_to_response(m) for m in meetings]


@router.get("/drafts", response_model=list[MeetingResponse])
async def list_my_drafts(
    workspace_id: uuid.UUID,
    member: WorkspaceMember = Depends(get_current_member),
    service: MeetingService = Depends(get_meeting_service),
) -> list[MeetingResponse]:
    """List the calling member's draft meetings."""
    meetings = await service.find_my_draft_meetings(workspace_id, member.id)
    return [_meeting_to_response(m) for m in meetings]


@router.get("/{meeting_id}", response_model=MeetingResponse)
async def get_meeting(
    workspace_id: uuid.UUID,
    meeting_id: uuid.UUID,
    member: WorkspaceMember = Depends(get_current_member),
    service: MeetingService = Depends(get_meeting_service),
) -> MeetingResponse:
    meeting = await service.get_meeting_by_id(meeting_id, workspace_id)
    if meeting is None:
        raise NotFoundError(errors.MEETING_NOT_FOUND, {"meetingId": str(meeting_id)})
    return _meeting_to_response(meeting)


@router.patch("/{meeting_id}", response_model=MeetingResponse)
async def update_meeting(
    workspace_id: uuid.UUID,
    meeting_id: uuid.UUID,
    body: MeetingUpdateRequest,
    member: WorkspaceMember = Depends(get_current_member),
    service: MeetingService = Depends(get_meeting_service),
) -> MeetingResponse:
    """Update memo, summary, status or tags. Publishing has its own route."""
    data = MeetingUpdate(**body.model_dump(exclude_unset=True))
    meeting = await service.update_meeting(meeting_id, data, workspace_id=workspace_id)
    return _meeting_to_response(meeting)


@router.post("/{meeting_id}/publish", response_model=MeetingResponse)
async def publish_meeting(
    workspace_id: uuid.UUID,
    meeting_id: uuid.UUID,
    body: MeetingPublishRequest,
    member: WorkspaceMember = Depends(get_current_member),
    service: MeetingService = Depends(get_meeting_service),
) -> MeetingResponse:
    """Publish a COMPLETED meeting with the requested visibility."""
    meeting = await service.publish_meeting(
        MeetingPublish(id=meeting_id, workspace_id=workspace_id, visibility=body.visibility)
    )
    return _meeting_to_response(meeting)


@router.delete("/{meeting_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_meeting(
    workspace_id: uuid.UUID,
    meeting_id: uuid.UUID,
    member: WorkspaceMember = Depends(get_current_member),
    service: MeetingService = Depends(get_meeting_service),
) -> Response:
    await service.delete_meeting(meeting_id, workspace_id=workspace_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
