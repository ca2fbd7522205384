"""Read endpoints over the generic resource hierarchy.

Used by clients that browse a workspace tree without caring whether a
node is a Space or a Meeting. Writes go through the meeting and space
endpoints, except for the title/visibility patch.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from src.atrium.api.deps import get_current_member, get_resource_service
from src.atrium.core import errors
from src.atrium.core.errors import NotFoundError
from src.atrium.resources.schemas import (
    Resource,
    ResourceType,
    ResourceUpdate,
    ResourceVisibility,
)
from src.atrium.resources.service import ResourceService
from src.atrium.workspaces.schemas import WorkspaceMember

router = APIRouter(prefix="/workspaces/{workspace_id}/resources", tags=["resources"])


# ── Request / Response Schemas ───────────────────────────────────────────────


class ResourceOwnerResponse(BaseModel):
    id: str
    display_name: str


class ResourceResponse(BaseModel):
    """Resource node, serializes ids and datetimes to strings."""

    id: str
    workspace_id: str
    owner_id: str
    type: str
    title: str
    visibility: str
    path: str
    parent_path: str | None = None
    depth: int
    version: int
    owner: ResourceOwnerResponse | None = None
    created_at: str | None = None
    updated_at: str | None = None


class ResourceUpdateRequest(BaseModel):
    title: str | None = None
    visibility: ResourceVisibility | None = None


# ── Conversion Helpers ───────────────────────────────────────────────────────


def resource_to_response(r: Resource) -> ResourceResponse:
    """Convert Resource schema to ResourceResponse."""
    return ResourceResponse(
        id=str(r.id),
        workspace_id=str(r.workspace_id),
        owner_id=str(r.owner_id),
        type=r.type.value,
        title=r.title,
        visibility=r.visibility.value,
        path=r.path,
        parent_path=r.get_parent_path(),
        depth=r.get_depth(),
        version=r.version,
        owner=(
            ResourceOwnerResponse(id=str(r.owner.id), display_name=r.owner.display_name())
            if r.owner is not None
            else None
        ),
        created_at=r.created_at.isoformat() if r.created_at else None,
        updated_at=r.updated_at.isoformat() if r.updated_at else None,
    )


async def _load_in_workspace(
    service: ResourceService, resource_id: uuid.UUID, workspace_id: uuid.UUID
) -> Resource:
    resource = await service.find_by_id_with_relations(resource_id)
    if resource is None or resource.workspace_id != workspace_id:
        raise NotFoundError(errors.RESOURCE_NOT_FOUND, {"resourceId": str(resource_id)})
    return resource


# ── Endpoints ────────────────────────────────────────────────────────────────


@router.get("", response_model=list[ResourceResponse])
async def list_resources(
    workspace_id: uuid.UUID,
    type_filter: ResourceType | None = Query(default=None, alias="type"),
    member: WorkspaceMember = Depends(get_current_member),
    service: ResourceService = Depends(get_resource_service),
) -> list[ResourceResponse]:
    """List resources in the workspace, optionally by type, ordered by path."""
    if type_filter is None:
        resources = await service.find_by_workspace(workspace_id)
    else:
        resources = await service.find_by_workspace_and_type(workspace_id, type_filter)
    return [resource_to_response(r) for r in sorted(resources, key=lambda r: r.path)]


@router.get("/{resource_id}", response_model=ResourceResponse)
async def get_resource(
    workspace_id: uuid.UUID,
    resource_id: uuid.UUID,
    member: WorkspaceMember = Depends(get_current_member),
    service: ResourceService = Depends(get_resource_service),
) -> ResourceResponse:
    resource = await _load_in_workspace(service, resource_id, workspace_id)
    return resource_to_response(resource)


@router.get("/{resource_id}/children", response_model=list[ResourceResponse])
async def list_children(
    workspace_id: uuid.UUID,
    resource_id: uuid.UUID,
    member: WorkspaceMember = Depends(get_current_member),
    service: ResourceService = Depends(get_resource_service),
) -> list[ResourceResponse]:
    """Direct children of the resource."""
    resource = await _load_in_workspace(service, resource_id, workspace_id)
    children = await service.find_children(workspace_id, resource.path)
    return [resource_to_response(r) for r in children]


@router.get("/{resource_id}/descendants", response_model=list[ResourceResponse])
async def list_descendants(
    workspace_id: uuid.UUID,
    resource_id: uuid.UUID,
    member: WorkspaceMember = Depends(get_current_member),
    service: ResourceService = Depends(get_resource_service),
) -> list[ResourceResponse]:
    """Whole subtree below the resource, shallowest first."""
    resource = await _load_in_workspace(service, resource_id, workspace_id)
    descendants = await service.find_descendants(workspace_id, resource.path)
    return [resource_to_response(r) for r in descendants]


@router.patch("/{resource_id}", response_model=ResourceResponse)
async def update_resource(
    workspace_id: uuid.UUID,
    resource_id: uuid.UUID,
    body: ResourceUpdateRequest,
    member: WorkspaceMember = Depends(get_current_member),
    service: ResourceService = Depends(get_resource_service),
) -> ResourceResponse:
    """Change title and/or visibility of any node."""
    await _load_in_workspace(service, resource_id, workspace_id)
    resource = await service.update(
        resource_id, ResourceUpdate(title=body.title, visibility=body.visibility)
    )
    return resource_to_response(resource)
