"""Pydantic v2 schemas for meetings and the publish state machine."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from src.atrium.resources.schemas import Resource, ResourceVisibility

# Enforced by the HTTP layer; the service stores whatever it is given.
MAX_TAGS = 10


# ── Enums ────────────────────────────────────────────────────────────────────


class MeetingStatus(str, Enum):
    """Lifecycle status. DRAFT is initial; PUBLISHED is terminal."""

    DRAFT = "DRAFT"
    IN_PROGRESS = "IN_PROGRESS"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"
    PUBLISHED = "PUBLISHED"


# Only PUBLISHED has a precondition; every other status is set directly.
PUBLISH_REQUIRED_STATUS = MeetingStatus.COMPLETED


# ── Read Model ───────────────────────────────────────────────────────────────


class Meeting(BaseModel):
    """Meeting specialization with its Resource populated."""

    id: uuid.UUID
    workspace_id: uuid.UUID
    status: MeetingStatus = MeetingStatus.DRAFT
    memo: str | None = None
    summary: str | None = None
    tags: list[str] = Field(default_factory=list)
    version: int = 1
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None
    resource: Resource

    def can_publish(self) -> bool:
        return self.status == PUBLISH_REQUIRED_STATUS


# ── Write Models ─────────────────────────────────────────────────────────────


class MeetingCreate(BaseModel):
    """Meeting creation request. Title falls back to the configured default."""

    workspace_id: uuid.UUID
    workspace_member_id: uuid.UUID
    parent_path: str | None = None
    title: str | None = None


class MeetingUpdate(BaseModel):
    """Partial update. Only fields explicitly set are written, so memo or
    summary can be cleared by sending null."""

    memo: str | None = None
    summary: str | None = None
    status: MeetingStatus | None = None
    tags: list[str] | None = None
    expected_version: int | None = None


class MeetingPublish(BaseModel):
    """Publish request: the visibility the resource takes once published."""

    id: uuid.UUID
    workspace_id: uuid.UUID
    visibility: ResourceVisibility
