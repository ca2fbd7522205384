"""FastAPI dependency injection for workspace-scoped services and membership.

Services are built once in the application lifespan and stored on app.state;
the getters below return 503 when a service was not initialized. The
membership guard resolves the calling member from the X-Workspace-Member-ID
header and requires it to belong to the workspace in the path.
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import Depends, Header, HTTPException, Request, status

from src.atrium.meetings.service import MeetingService
from src.atrium.resources.service import ResourceService
from src.atrium.spaces.service import SpaceService
from src.atrium.workspaces.repository import WorkspaceDirectory
from src.atrium.workspaces.schemas import WorkspaceMember

MEMBER_HEADER = "X-Workspace-Member-ID"


def _get_state_service(request: Request, attr: str, label: str):
    service = getattr(request.app.state, attr, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} not initialized",
        )
    return service


def get_workspace_directory(request: Request) -> WorkspaceDirectory:
    """Retrieve WorkspaceDirectory from app.state, 503 if not available."""
    return _get_state_service(request, "workspace_directory", "Workspace directory")


def get_resource_service(request: Request) -> ResourceService:
    """Retrieve ResourceService from app.state, 503 if not available."""
    return _get_state_service(request, "resource_service", "Resource service")


def get_meeting_service(request: Request) -> MeetingService:
    """Retrieve MeetingService from app.state, 503 if not available."""
    return _get_state_service(request, "meeting_service", "Meeting service")


def get_space_service(request: Request) -> SpaceService:
    """Retrieve SpaceService from app.state, 503 if not available."""
    return _get_state_service(request, "space_service", "Space service")


async def get_current_member(
    workspace_id: uuid.UUID,
    member_header: str | None = Header(default=None, alias=MEMBER_HEADER),
    directory: WorkspaceDirectory = Depends(get_workspace_directory),
) -> WorkspaceMember:
    """Resolve the calling member and check it belongs to the path workspace.

    Binds workspace_id and workspace_member_id into the structlog context so
    every log line (and Sentry event) of the request carries them.

    Raises:
        HTTPException(401): Header missing or not a UUID.
        HTTPException(403): Member unknown, inactive, or in another workspace.
    """
    if not member_header:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {MEMBER_HEADER} header",
        )
    try:
        member_id = uuid.UUID(member_header)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Malformed {MEMBER_HEADER} header",
        )

    member = await directory.find_member_by_id(member_id)
    if member is None or not member.is_active or not member.belongs_to(workspace_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not a member of this workspace",
        )

    structlog.contextvars.bind_contextvars(
        workspace_id=str(workspace_id),
        workspace_member_id=str(member.id),
    )
    return member
