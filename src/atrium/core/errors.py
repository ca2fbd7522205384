"""Typed domain errors surfaced by the resource/lifecycle core.

Every failure carries a stable machine-readable ``code`` in
``domain.action.reason`` form plus a structured ``context`` map. Upstream
layers (the FastAPI exception handler in src.atrium.api.errors) translate
the error kind into a transport status; codes are never localized here.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for all typed errors raised by the core."""

    def __init__(self, code: str, context: dict[str, Any] | None = None) -> None:
        self.code = code
        self.context: dict[str, Any] = dict(context or {})
        super().__init__(f"{code} {self.context}" if self.context else code)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "context": self.context}


class NotFoundError(DomainError):
    """Entity does not exist, is soft-deleted, or lies outside the workspace."""


class InvalidStateError(DomainError):
    """Entity state forbids the operation (e.g. publishing a non-completed meeting)."""


class ValidationFailureError(DomainError):
    """Input violates a data-model invariant at creation/update time."""


class ConflictError(DomainError):
    """Write lost a race: duplicate path or stale optimistic version."""


# ── Error codes ──────────────────────────────────────────────────────────────

WORKSPACE_NOT_FOUND = "workspace.fetch.notFound"
WORKSPACE_MEMBER_NOT_FOUND = "workspace.member.fetch.notFound"

RESOURCE_NOT_FOUND = "resource.fetch.notFound"
RESOURCE_DUPLICATE = "resource.create.duplicate"
RESOURCE_UPDATE_CONFLICT = "resource.update.conflict"
RESOURCE_DELETE_IS_MEETING = "resource.delete.isMeeting"

MEETING_NOT_FOUND = "meeting.fetch.notFound"
MEETING_UPDATE_NOT_FOUND = "meeting.update.notFound"
MEETING_UPDATE_CONFLICT = "meeting.update.conflict"
MEETING_DELETE_NOT_FOUND = "meeting.delete.notFound"
MEETING_PUBLISH_NOT_FOUND = "meeting.publish.notFound"
# Historical name: means "not yet completed", not literally "is draft"
MEETING_PUBLISH_NOT_COMPLETED = "meeting.publish.isDraft"

SPACE_NOT_FOUND = "space.fetch.notFound"
SPACE_UPDATE_CONFLICT = "space.update.conflict"

VALIDATION_INPUT_INVALID = "validation.input.invalid"
