"""Pydantic v2 schemas for the generic resource node.

A Resource is the hierarchical node behind every Space and Meeting. The
specialization row shares its id; type decides which table holds it.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from src.atrium.resources.paths import is_descendant_path, parent_path_of, path_depth
from src.atrium.workspaces.schemas import Workspace, WorkspaceMember

TITLE_MAX_LENGTH = 255


# ── Enums ────────────────────────────────────────────────────────────────────


class ResourceType(str, Enum):
    """Which specialization table holds the row with the same id."""

    SPACE = "space"
    MEETING = "meeting"


class ResourceVisibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


# ── Read Model ───────────────────────────────────────────────────────────────


class Resource(BaseModel):
    """Generic hierarchical node.

    workspace and owner are populated only when the query loaded them
    (find_by_id_with_relations, creation results).
    """

    id: uuid.UUID
    workspace_id: uuid.UUID
    owner_id: uuid.UUID
    type: ResourceType
    title: str
    visibility: ResourceVisibility = ResourceVisibility.PUBLIC
    path: str
    version: int = 1
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None
    workspace: Workspace | None = None
    owner: WorkspaceMember | None = None

    def get_parent_path(self) -> str | None:
        return parent_path_of(self.path)

    def get_depth(self) -> int:
        return path_depth(self.path)

    def is_child_of(self, parent_path: str) -> bool:
        return is_descendant_path(self.path, parent_path)

    def is_meeting(self) -> bool:
        return self.type == ResourceType.MEETING

    def is_space(self) -> bool:
        return self.type == ResourceType.SPACE

    def is_owned_by(self, member_id: uuid.UUID) -> bool:
        return self.owner_id == member_id

    def is_private(self) -> bool:
        return self.visibility == ResourceVisibility.PRIVATE


# ── Write Models ─────────────────────────────────────────────────────────────


class ResourceCreate(BaseModel):
    """Input to ResourceService.create; the path is generated, not supplied."""

    workspace_id: uuid.UUID
    owner_id: uuid.UUID
    type: ResourceType
    title: str
    visibility: ResourceVisibility | None = None
    parent_path: str | None = None


class ResourceUpdate(BaseModel):
    """Partial update: only fields that are set are written."""

    title: str | None = None
    visibility: ResourceVisibility | None = None
