"""Pydantic v2 read models for workspaces and workspace members."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel


class Workspace(BaseModel):
    """Tenant boundary."""

    id: uuid.UUID
    name: str
    created_at: datetime | None = None


class WorkspaceMember(BaseModel):
    """Membership identity; carries its own workspace_id for ownership checks."""

    id: uuid.UUID
    workspace_id: uuid.UUID
    first_name: str
    last_name: str = ""
    is_active: bool = True

    def display_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    def belongs_to(self, workspace_id: uuid.UUID) -> bool:
        return self.workspace_id == workspace_id
