"""Integration tests for the v1 HTTP endpoints.

Builds a minimal FastAPI app with the v1 router, the DomainError handler and
the logging middleware, wires real services over the in-memory database onto
app.state, and drives it through httpx AsyncClient.
"""

from __future__ import annotations

import uuid

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.atrium.api.errors import register_exception_handlers, status_for
from src.atrium.api.middleware.logging import LoggingMiddleware
from src.atrium.api.v1.router import router as v1_router
from src.atrium.core.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationFailureError,
)


# ── Fixtures ─────────────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def app(directory, resource_service, meeting_service, space_service) -> FastAPI:
    application = FastAPI()
    register_exception_handlers(application)
    application.add_middleware(LoggingMiddleware)
    application.include_router(v1_router)
    application.state.workspace_directory = directory
    application.state.resource_service = resource_service
    application.state.meeting_service = meeting_service
    application.state.space_service = space_service
    return application


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def _headers(member) -> dict:
    return {"X-Workspace-Member-ID": str(member.id)}


def _meetings_url(workspace) -> str:
    return f"/api/v1/workspaces/{workspace.id}/meetings"


def _spaces_url(workspace) -> str:
    return f"/api/v1/workspaces/{workspace.id}/spaces"


# ── Membership guard ─────────────────────────────────────────────────────────


class TestMembershipGuard:
    @pytest.mark.asyncio
    async def test_missing_header(self, client, workspace):
        response = await client.get(_meetings_url(workspace))
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_malformed_header(self, client, workspace):
        response = await client.get(
            _meetings_url(workspace), headers={"X-Workspace-Member-ID": "nope"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_member_of_other_workspace(self, client, workspace, other_member):
        response = await client.get(_meetings_url(workspace), headers=_headers(other_member))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_request_id_header(self, client, workspace, member):
        response = await client.get(_meetings_url(workspace), headers=_headers(member))
        assert response.status_code == 200
        assert response.headers.get("X-Request-ID")

    @pytest.mark.asyncio
    async def test_services_not_initialized(self, workspace, member):
        bare = FastAPI()
        bare.include_router(v1_router)
        transport = ASGITransport(app=bare)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get(_meetings_url(workspace), headers=_headers(member))
        assert response.status_code == 503


# ── Meetings ─────────────────────────────────────────────────────────────────


class TestMeetingEndpoints:
    @pytest.mark.asyncio
    async def test_create_and_publish_flow(self, client, workspace, member):
        response = await client.post(_meetings_url(workspace), json={}, headers=_headers(member))
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "DRAFT"
        assert body["title"] == "Untitled"
        assert body["resource"]["visibility"] == "public"
        assert body["resource"]["owner_id"] == str(member.id)
        meeting_url = f"{_meetings_url(workspace)}/{body['id']}"

        response = await client.post(
            f"{meeting_url}/publish", json={"visibility": "private"}, headers=_headers(member)
        )
        assert response.status_code == 409
        assert response.json() == {
            "code": "meeting.publish.isDraft",
            "context": {"currentStatus": "DRAFT", "requiredStatus": "COMPLETED"},
        }

        response = await client.patch(
            meeting_url, json={"status": "COMPLETED"}, headers=_headers(member)
        )
        assert response.status_code == 200
        assert response.json()["status"] == "COMPLETED"

        response = await client.post(
            f"{meeting_url}/publish", json={"visibility": "private"}, headers=_headers(member)
        )
        assert response.status_code == 200
        assert response.json()["status"] == "PUBLISHED"
        assert response.json()["resource"]["visibility"] == "private"

        response = await client.get(
            f"/api/v1/workspaces/{workspace.id}/resources/{body['id']}",
            headers=_headers(member),
        )
        assert response.json()["visibility"] == "private"

    @pytest.mark.asyncio
    async def test_get_missing_meeting(self, client, workspace, member):
        meeting_id = uuid.uuid4()
        response = await client.get(
            f"{_meetings_url(workspace)}/{meeting_id}", headers=_headers(member)
        )
        assert response.status_code == 404
        assert response.json()["code"] == "meeting.fetch.notFound"

    @pytest.mark.asyncio
    async def test_too_many_tags(self, client, workspace, member):
        created = await client.post(_meetings_url(workspace), json={}, headers=_headers(member))
        response = await client.patch(
            f"{_meetings_url(workspace)}/{created.json()['id']}",
            json={"tags": [f"t{i}" for i in range(11)]},
            headers=_headers(member),
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_stale_expected_version(self, client, workspace, member):
        created = (
            await client.post(_meetings_url(workspace), json={}, headers=_headers(member))
        ).json()
        url = f"{_meetings_url(workspace)}/{created['id']}"
        await client.patch(url, json={"memo": "first"}, headers=_headers(member))

        response = await client.patch(
            url,
            json={"memo": "second", "expected_version": created["version"]},
            headers=_headers(member),
        )
        assert response.status_code == 409
        assert response.json()["code"] == "meeting.update.conflict"

    @pytest.mark.asyncio
    async def test_drafts_and_listing(self, client, workspace, member):
        created = (
            await client.post(_meetings_url(workspace), json={"title": "Standup"}, headers=_headers(member))
        ).json()

        listed = await client.get(_meetings_url(workspace), headers=_headers(member))
        assert listed.json() == []

        drafts = await client.get(f"{_meetings_url(workspace)}/drafts", headers=_headers(member))
        assert [m["id"] for m in drafts.json()] == [created["id"]]

    @pytest.mark.asyncio
    async def test_delete(self, client, workspace, member):
        created = (
            await client.post(_meetings_url(workspace), json={}, headers=_headers(member))
        ).json()
        url = f"{_meetings_url(workspace)}/{created['id']}"

        response = await client.delete(url, headers=_headers(member))
        assert response.status_code == 204

        response = await client.delete(url, headers=_headers(member))
        assert response.status_code == 404
        assert response.json()["code"] == "meeting.delete.notFound"

        resource_url = f"/api/v1/workspaces/{workspace.id}/resources"
        listed = await client.get(
            resource_url, params={"type": "meeting"}, headers=_headers(member)
        )
        assert listed.json() == []
        response = await client.patch(
            f"{resource_url}/{created['id']}", json={"title": "Back"}, headers=_headers(member)
        )
        assert response.status_code == 404
        assert response.json()["code"] == "resource.fetch.notFound"

    @pytest.mark.asyncio
    async def test_cross_workspace_access_is_not_found(
        self, client, workspace, member, other_workspace, other_member
    ):
        created = (
            await client.post(_meetings_url(workspace), json={}, headers=_headers(member))
        ).json()

        response = await client.get(
            f"{_meetings_url(other_workspace)}/{created['id']}", headers=_headers(other_member)
        )
        assert response.status_code == 404

        response = await client.patch(
            f"{_meetings_url(other_workspace)}/{created['id']}",
            json={"memo": "hijack"},
            headers=_headers(other_member),
        )
        assert response.status_code == 404
        assert response.json()["code"] == "meeting.update.notFound"


# ── Spaces and resources ─────────────────────────────────────────────────────


class TestSpaceEndpoints:
    @pytest.mark.asyncio
    async def test_create_rename_and_browse(self, client, workspace, member):
        response = await client.post(
            _spaces_url(workspace),
            json={"title": "Docs", "description": "Team docs"},
            headers=_headers(member),
        )
        assert response.status_code == 201
        root = response.json()

        child = (
            await client.post(
                _spaces_url(workspace),
                json={"title": "API", "parent_path": root["resource"]["path"]},
                headers=_headers(member),
            )
        ).json()
        assert child["resource"]["parent_path"] == root["resource"]["path"]
        assert child["resource"]["depth"] == 2

        response = await client.patch(
            f"{_spaces_url(workspace)}/{root['id']}",
            json={"title": "Handbook"},
            headers=_headers(member),
        )
        assert response.json()["title"] == "Handbook"
        assert response.json()["description"] == "Team docs"

        children = await client.get(
            f"/api/v1/workspaces/{workspace.id}/resources/{root['id']}/children",
            headers=_headers(member),
        )
        assert [r["id"] for r in children.json()] == [child["id"]]

        mine = await client.get(
            _spaces_url(workspace), params={"mine": "true"}, headers=_headers(member)
        )
        assert len(mine.json()) == 2

    @pytest.mark.asyncio
    async def test_empty_title_is_validation_failure(self, client, workspace, member):
        response = await client.post(
            _spaces_url(workspace), json={"title": ""}, headers=_headers(member)
        )
        assert response.status_code == 422
        assert response.json() == {
            "code": "validation.input.invalid",
            "context": {"field": "title", "reason": "empty"},
        }

    @pytest.mark.asyncio
    async def test_other_workspace_space_is_not_found(
        self, client, workspace, member, other_workspace, other_member
    ):
        created = (
            await client.post(
                _spaces_url(workspace), json={"title": "Docs"}, headers=_headers(member)
            )
        ).json()

        response = await client.get(
            f"{_spaces_url(other_workspace)}/{created['id']}", headers=_headers(other_member)
        )
        assert response.status_code == 404
        assert response.json()["code"] == "space.fetch.notFound"

        response = await client.get(
            f"/api/v1/workspaces/{other_workspace.id}/resources/{created['id']}",
            headers=_headers(other_member),
        )
        assert response.status_code == 404
        assert response.json()["code"] == "resource.fetch.notFound"

    @pytest.mark.asyncio
    async def test_delete_space(self, client, workspace, member):
        created = (
            await client.post(
                _spaces_url(workspace), json={"title": "Docs"}, headers=_headers(member)
            )
        ).json()

        response = await client.delete(
            f"{_spaces_url(workspace)}/{created['id']}", headers=_headers(member)
        )
        assert response.status_code == 204

        listed = await client.get(
            f"/api/v1/workspaces/{workspace.id}/resources", headers=_headers(member)
        )
        assert listed.json() == []


class TestErrorMapping:
    @pytest.mark.parametrize(
        "error, expected",
        [
            (NotFoundError("x.fetch.notFound"), 404),
            (InvalidStateError("x.publish.isDraft"), 409),
            (ConflictError("x.update.conflict"), 409),
            (ValidationFailureError("validation.input.invalid"), 422),
        ],
    )
    def test_status_for(self, error, expected):
        assert status_for(error) == expected

    def test_error_body(self):
        error = NotFoundError("meeting.fetch.notFound", {"meetingId": "abc"})
        assert error.to_dict() == {"code": "meeting.fetch.notFound", "context": {"meetingId": "abc"}}


class TestHealth:
    @pytest.mark.asyncio
    async def test_liveness(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
