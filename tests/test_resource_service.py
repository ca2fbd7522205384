"""Tests for ResourceService: validation, ownership, hierarchy queries."""

from __future__ import annotations

import re
import uuid

import pytest

from src.atrium.core import errors
from src.atrium.core.errors import ConflictError, NotFoundError, ValidationFailureError
from src.atrium.resources.paths import LabelSequence
from src.atrium.resources.schemas import (
    ResourceCreate,
    ResourceType,
    ResourceUpdate,
    ResourceVisibility,
)
from src.atrium.resources.service import ResourceService


def _create(workspace, member, **overrides) -> ResourceCreate:
    defaults = {
        "workspace_id": workspace.id,
        "owner_id": member.id,
        "type": ResourceType.SPACE,
        "title": "Docs",
    }
    defaults.update(overrides)
    return ResourceCreate(**defaults)


# ── Creation ─────────────────────────────────────────────────────────────────


class TestCreate:
    @pytest.mark.asyncio
    async def test_defaults_to_public_root_node(self, resource_service, workspace, member):
        resource = await resource_service.create(_create(workspace, member))

        assert resource.visibility == ResourceVisibility.PUBLIC
        assert re.fullmatch(r"r\d+", resource.path)
        assert resource.owner is not None
        assert resource.owner.id == member.id
        assert resource.workspace is not None
        assert resource.workspace.id == workspace.id

    @pytest.mark.asyncio
    async def test_explicit_visibility_and_parent(self, resource_service, workspace, member):
        resource = await resource_service.create(
            _create(
                workspace,
                member,
                visibility=ResourceVisibility.PRIVATE,
                parent_path="root.team",
            )
        )
        assert resource.is_private()
        assert resource.get_parent_path() == "root.team"

    @pytest.mark.asyncio
    async def test_unknown_workspace(self, resource_service, workspace, member):
        missing = uuid.uuid4()
        with pytest.raises(NotFoundError) as exc_info:
            await resource_service.create(
                _create(workspace, member, workspace_id=missing)
            )
        assert exc_info.value.code == errors.WORKSPACE_NOT_FOUND
        assert exc_info.value.context == {"workspaceId": str(missing)}

    @pytest.mark.asyncio
    async def test_unknown_member(self, resource_service, workspace, member):
        with pytest.raises(NotFoundError) as exc_info:
            await resource_service.create(_create(workspace, member, owner_id=uuid.uuid4()))
        assert exc_info.value.code == errors.WORKSPACE_MEMBER_NOT_FOUND

    @pytest.mark.asyncio
    async def test_member_of_other_workspace_is_rejected_before_persisting(
        self, resource_service, workspace, other_member
    ):
        with pytest.raises(NotFoundError) as exc_info:
            await resource_service.create(
                ResourceCreate(
                    workspace_id=workspace.id,
                    owner_id=other_member.id,
                    type=ResourceType.SPACE,
                    title="Docs",
                )
            )

        assert exc_info.value.code == errors.WORKSPACE_MEMBER_NOT_FOUND
        assert exc_info.value.context["workspaceMemberId"] == str(other_member.id)
        assert await resource_service.find_by_workspace(workspace.id) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title, reason", [("", "empty"), ("   ", "empty"), ("x" * 256, "tooLong")])
    async def test_invalid_title(self, resource_service, workspace, member, title, reason):
        with pytest.raises(ValidationFailureError) as exc_info:
            await resource_service.create(_create(workspace, member, title=title))
        assert exc_info.value.code == errors.VALIDATION_INPUT_INVALID
        assert exc_info.value.context["field"] == "title"
        assert exc_info.value.context["reason"] == reason

    @pytest.mark.asyncio
    async def test_title_at_limit_is_accepted(self, resource_service, workspace, member):
        resource = await resource_service.create(_create(workspace, member, title="x" * 255))
        assert len(resource.title) == 255

    @pytest.mark.asyncio
    async def test_path_collision_is_a_conflict(self, session_factory, workspace, member):
        # Two independent sequences pinned to the same millisecond
        first = ResourceService(session_factory, LabelSequence(clock=lambda: 1000))
        second = ResourceService(session_factory, LabelSequence(clock=lambda: 1000))

        await first.create(_create(workspace, member))
        with pytest.raises(ConflictError) as exc_info:
            await second.create(_create(workspace, member))

        assert exc_info.value.code == errors.RESOURCE_DUPLICATE
        assert exc_info.value.context == {"path": "r1000"}

    @pytest.mark.asyncio
    async def test_same_path_in_different_workspaces(
        self, session_factory, workspace, member, other_workspace, other_member
    ):
        first = ResourceService(session_factory, LabelSequence(clock=lambda: 1000))
        second = ResourceService(session_factory, LabelSequence(clock=lambda: 1000))

        a = await first.create(_create(workspace, member))
        b = await second.create(_create(other_workspace, other_member))
        assert a.path == b.path == "r1000"


# ── Reads and updates ────────────────────────────────────────────────────────


class TestReadUpdateDelete:
    @pytest.mark.asyncio
    async def test_find_by_id_never_raises(self, resource_service):
        assert await resource_service.find_by_id(uuid.uuid4()) is None
        assert await resource_service.find_by_id_with_relations(uuid.uuid4()) is None

    @pytest.mark.asyncio
    async def test_find_with_relations(self, resource_service, workspace, member):
        created = await resource_service.create(_create(workspace, member))

        plain = await resource_service.find_by_id(created.id)
        assert plain.owner is None

        loaded = await resource_service.find_by_id_with_relations(created.id)
        assert loaded.owner.display_name() == "Ada Lovelace"
        assert loaded.workspace.name == "Alpha"

    @pytest.mark.asyncio
    async def test_listings(self, resource_service, workspace, member, other_workspace, other_member):
        await resource_service.create(_create(workspace, member, title="Docs"))
        await resource_service.create(
            _create(workspace, member, title="Sync", type=ResourceType.MEETING)
        )
        await resource_service.create(_create(other_workspace, other_member, title="Elsewhere"))

        assert len(await resource_service.find_by_workspace(workspace.id)) == 2
        meetings = await resource_service.find_by_workspace_and_type(
            workspace.id, ResourceType.MEETING
        )
        assert [r.title for r in meetings] == ["Sync"]
        assert {r.title for r in await resource_service.find_by_owner(other_member.id)} == {
            "Elsewhere"
        }
        assert await resource_service.find_by_owner(uuid.uuid4()) == []

    @pytest.mark.asyncio
    async def test_partial_update(self, resource_service, workspace, member):
        created = await resource_service.create(_create(workspace, member))

        renamed = await resource_service.update(created.id, ResourceUpdate(title="Handbook"))
        assert renamed.title == "Handbook"
        assert renamed.visibility == ResourceVisibility.PUBLIC
        assert renamed.version == created.version + 1
        assert renamed.updated_at is not None

        hidden = await resource_service.update(
            created.id, ResourceUpdate(visibility=ResourceVisibility.PRIVATE)
        )
        assert hidden.title == "Handbook"
        assert hidden.is_private()

    @pytest.mark.asyncio
    async def test_update_missing(self, resource_service):
        with pytest.raises(NotFoundError) as exc_info:
            await resource_service.update(uuid.uuid4(), ResourceUpdate(title="x"))
        assert exc_info.value.code == errors.RESOURCE_NOT_FOUND

    @pytest.mark.asyncio
    async def test_update_rejects_empty_title(self, resource_service, workspace, member):
        created = await resource_service.create(_create(workspace, member))
        with pytest.raises(ValidationFailureError):
            await resource_service.update(created.id, ResourceUpdate(title=""))

    @pytest.mark.asyncio
    async def test_delete(self, resource_service, workspace, member):
        created = await resource_service.create(_create(workspace, member))
        await resource_service.delete_resource(created.id)
        assert await resource_service.find_by_id(created.id) is None

        with pytest.raises(NotFoundError):
            await resource_service.delete_resource(created.id)


# ── Hierarchy ────────────────────────────────────────────────────────────────


class TestHierarchy:
    @pytest.mark.asyncio
    async def test_descendants_and_children(self, resource_service, workspace, member):
        root = await resource_service.create(_create(workspace, member, title="Root"))
        child = await resource_service.create(
            _create(workspace, member, title="Child", parent_path=root.path)
        )
        grandchild = await resource_service.create(
            _create(workspace, member, title="Grandchild", parent_path=child.path)
        )
        await resource_service.create(_create(workspace, member, title="Sibling root"))

        descendants = await resource_service.find_descendants(workspace.id, root.path)
        assert [r.id for r in descendants] == [child.id, grandchild.id]

        children = await resource_service.find_children(workspace.id, root.path)
        assert [r.id for r in children] == [child.id]
        assert children[0].is_child_of(root.path)

        assert await resource_service.find_descendants(workspace.id, grandchild.path) == []

    @pytest.mark.asyncio
    async def test_prefix_match_escapes_like_wildcards(self, resource_service, workspace, member):
        await resource_service.create(_create(workspace, member, parent_path="team_a"))
        await resource_service.create(_create(workspace, member, parent_path="teamXa"))

        below = await resource_service.find_descendants(workspace.id, "team_a")
        assert len(below) == 1
        assert below[0].path.startswith("team_a.")

    @pytest.mark.asyncio
    async def test_hierarchy_is_workspace_scoped(
        self, resource_service, workspace, member, other_workspace, other_member
    ):
        await resource_service.create(_create(other_workspace, other_member, parent_path="shared"))
        assert await resource_service.find_descendants(workspace.id, "shared") == []
