"""Workspace and membership lookup consumed by the resource core."""

from src.atrium.workspaces.repository import WorkspaceDirectory, WorkspaceRepository
from src.atrium.workspaces.schemas import Workspace, WorkspaceMember

__all__ = [
    "Workspace",
    "WorkspaceDirectory",
    "WorkspaceMember",
    "WorkspaceRepository",
]
