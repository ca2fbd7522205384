"""REST endpoints for spaces (container nodes of the workspace tree)."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel

from src.atrium.api.deps import get_current_member, get_space_service
from src.atrium.api.v1.resources import ResourceResponse, resource_to_response
from src.atrium.resources.schemas import ResourceVisibility
from src.atrium.spaces.schemas import Space, SpaceCreate, SpaceUpdate
from src.atrium.spaces.service import SpaceService
from src.atrium.workspaces.schemas import WorkspaceMember

router = APIRouter(prefix="/workspaces/{workspace_id}/spaces", tags=["spaces"])


# ── Request / Response Schemas ───────────────────────────────────────────────


class SpaceCreateRequest(BaseModel):
    title: str
    parent_path: str | None = None
    visibility: ResourceVisibility | None = None
    description: str | None = None


class SpaceUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None


class SpaceResponse(BaseModel):
    id: str
    workspace_id: str
    title: str
    description: str | None = None
    version: int
    resource: ResourceResponse
    created_at: str | None = None
    updated_at: str | None = None


def _space_to_response(s: Space) -> SpaceResponse:
    """Convert Space schema to SpaceResponse."""
    return SpaceResponse(
        id=str(s.id),
        workspace_id=str(s.workspace_id),
        title=s.resource.title,
        description=s.description,
        version=s.version,
        resource=resource_to_response(s.resource),
        created_at=s.created_at.isoformat() if s.created_at else None,
        updated_at=s.updated_at.isoformat() if s.updated_at else None,
    )


# ── Endpoints ────────────────────────────────────────────────────────────────


@router.post("", response_model=SpaceResponse, status_code=status.HTTP_201_CREATED)
async def create_space(
    workspace_id: uuid.UUID,
    body: SpaceCreateRequest,
    member: WorkspaceMember = Depends(get_current_member),
    service: SpaceService = Depends(get_space_service),
) -> SpaceResponse:
    """Create a space owned by the calling member."""
    space = await service.create_space(
        SpaceCreate(
            workspace_id=workspace_id,
            workspace_member_id=member.id,
            title=body.title,
            parent_path=body.parent_path,
            visibility=body.visibility,
            description=body.description,
        )
    )
    return _space_to_response(space)


@router.get("", response_model=list[SpaceResponse])
async def list_spaces(
    workspace_id: uuid.UUID,
    mine: bool = Query(default=False, description="Only spaces owned by the caller"),
    member: WorkspaceMember = Depends(get_current_member),
    service: SpaceService = Depends(get_space_service),
) -> list[SpaceResponse]:
    if mine:
        spaces = await service.find_spaces_by_workspace_and_owner(workspace_id, member.id)
    else:
        spaces = await service.find_spaces_by_workspace(workspace_id)
    return [_space_to_response(s) for s in spaces]


@router.get("/{space_id}", response_model=SpaceResponse)
async def get_space(
    workspace_id: uuid.UUID,
    space_id: uuid.UUID,
    member: WorkspaceMember = Depends(get_current_member),
    service: SpaceService = Depends(get_space_service),
) -> SpaceResponse:
    space = await service.get_space_by_id(space_id, workspace_id)
    return _space_to_response(space)


@router.patch("/{space_id}", response_model=SpaceResponse)
async def update_space(
    workspace_id: uuid.UUID,
    space_id: uuid.UUID,
    body: SpaceUpdateRequest,
    member: WorkspaceMember = Depends(get_current_member),
    service: SpaceService = Depends(get_space_service),
) -> SpaceResponse:
    """Rename (title) and/or redescribe a space in one transaction."""
    data = SpaceUpdate(**body.model_dump(exclude_unset=True))
    space = await service.update_space(space_id, data, workspace_id=workspace_id)
    return _space_to_response(space)


@router.delete("/{space_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_space(
    workspace_id: uuid.UUID,
    space_id: uuid.UUID,
    member: WorkspaceMember = Depends(get_current_member),
    service: SpaceService = Depends(get_space_service),
) -> Response:
    await service.delete_space(space_id, workspace_id=workspace_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
