"""Pydantic v2 schemas for spaces."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel

from src.atrium.resources.schemas import Resource, ResourceVisibility


class Space(BaseModel):
    """Space specialization with its Resource populated."""

    id: uuid.UUID
    workspace_id: uuid.UUID
    description: str | None = None
    version: int = 1
    created_at: datetime | None = None
    updated_at: datetime | None = None
    resource: Resource

    @property
    def title(self) -> str:
        return self.resource.title


class SpaceCreate(BaseModel):
    """Space creation request. Unlike meetings, the title is required."""

    workspace_id: uuid.UUID
    workspace_member_id: uuid.UUID
    title: str
    parent_path: str | None = None
    visibility: ResourceVisibility | None = None
    description: str | None = None


class SpaceUpdate(BaseModel):
    """Partial update. title is written to the Resource, description to the
    Space; sending description=null clears it."""

    title: str | None = None
    description: str | None = None
