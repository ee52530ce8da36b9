"""Tests for /api/workspaces, including the ownership gate on real rows."""

import uuid

import pytest
import pytest_asyncio

from models.user import UserRole
from models.workspace import MemberStatus


@pytest_asyncio.fixture
async def team(make_user, make_workspace):
    """A creator-owned workspace with one active and one pending member."""
    owner = await make_user(role=UserRole.CREATOR)
    member = await make_user(role=UserRole.AGENCY)
    pending = await make_user(role=UserRole.AGENCY)
    stranger = await make_user(role=UserRole.AGENCY)
    workspace = await make_workspace(owner, members=[member, (pending, MemberStatus.PENDING)])
    return {
        "owner": owner,
        "member": member,
        "pending": pending,
        "stranger": stranger,
        "workspace": workspace,
    }


class TestCreateWorkspace:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.AGENCY, UserRole.CREATOR])
    async def test_caller_becomes_owner(self, client, make_user, auth_headers, role):
        user = await make_user(role=role)
        response = await client.post(
            "/api/workspaces", json={"name": "  Studio  "}, headers=auth_headers(user)
        )
        assert response.status_code == 201
        assert response.json()["owner_id"] == user.id
        assert response.json()["name"] == "Studio"
        assert response.json()["members"] == []

    @pytest.mark.asyncio
    async def test_client_role_is_403(self, client, make_user, auth_headers):
        user = await make_user(role=UserRole.CLIENT)
        response = await client.post("/api/workspaces", json={"name": "Mine"}, headers=auth_headers(user))
        assert response.status_code == 403


class TestListWorkspaces:

    @pytest.mark.asyncio
    async def test_owner_and_active_member_see_it(self, client, team, auth_headers):
        for who in ("owner", "member"):
            response = await client.get("/api/workspaces", headers=auth_headers(team[who]))
            assert [w["id"] for w in response.json()] == [team["workspace"].id]

    @pytest.mark.asyncio
    async def test_pending_member_and_stranger_do_not(self, client, team, auth_headers):
        for who in ("pending", "stranger"):
            response = await client.get("/api/workspaces", headers=auth_headers(team[who]))
            assert response.json() == []

    @pytest.mark.asyncio
    async def test_admin_sees_all(self, client, team, make_user, make_workspace, auth_headers):
        await make_workspace(team["stranger"], name="Other")
        admin = await make_user(role=UserRole.ADMIN)
        response = await client.get("/api/workspaces", headers=auth_headers(admin))
        assert len(response.json()) == 2


class TestGetWorkspace:

    @pytest.mark.asyncio
    async def test_owner_and_active_member_proceed(self, client, team, auth_headers):
        for who in ("owner", "member"):
            response = await client.get(
                f"/api/workspaces/{team['workspace'].id}", headers=auth_headers(team[who])
            )
            assert response.status_code == 200
            assert {m["user_id"] for m in response.json()["members"]} == {
                team["member"].id,
                team["pending"].id,
            }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("who", ["pending", "stranger"])
    async def test_others_are_denied(self, client, team, auth_headers, who):
        response = await client.get(
            f"/api/workspaces/{team['workspace'].id}", headers=auth_headers(team[who])
        )
        assert response.status_code == 403
        assert response.json() == {
            "error": "Access denied",
            "message": "You do not have access to this workspace",
        }

    @pytest.mark.asyncio
    async def test_admin_proceeds_without_membership(self, client, team, make_user, auth_headers):
        admin = await make_user(role=UserRole.ADMIN)
        response = await client.get(f"/api/workspaces/{team['workspace'].id}", headers=auth_headers(admin))
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_missing_workspace_is_404(self, client, team, auth_headers):
        response = await client.get(f"/api/workspaces/{uuid.uuid4()}", headers=auth_headers(team["owner"]))
        assert response.status_code == 404
        assert response.json()["error"] == "Workspace not found"

    @pytest.mark.asyncio
    async def test_non_uuid_id_is_404(self, client, team, auth_headers):
        response = await client.get("/api/workspaces/not-a-uuid", headers=auth_headers(team["owner"]))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unauthenticated_is_401(self, client, team):
        response = await client.get(f"/api/workspaces/{team['workspace'].id}")
        assert response.status_code == 401


class TestManageWorkspace:

    @pytest.mark.asyncio
    async def test_owner_updates(self, client, team, auth_headers):
        response = await client.put(
            f"/api/workspaces/{team['workspace'].id}",
            json={"name": "Renamed", "description": "Spring campaigns"},
            headers=auth_headers(team["owner"]),
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"
        assert response.json()["description"] == "Spring campaigns"

    @pytest.mark.asyncio
    async def test_member_cannot_update(self, client, team, auth_headers):
        response = await client.put(
            f"/api/workspaces/{team['workspace'].id}",
            json={"name": "Mine now"},
            headers=auth_headers(team["member"]),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_owner_deletes(self, client, team, auth_headers):
        url = f"/api/workspaces/{team['workspace'].id}"
        response = await client.delete(url, headers=auth_headers(team["owner"]))
        assert response.status_code == 200

        gone = await client.get(url, headers=auth_headers(team["owner"]))
        assert gone.status_code == 404

    @pytest.mark.asyncio
    async def test_member_cannot_delete(self, client, team, auth_headers):
        response = await client.delete(
            f"/api/workspaces/{team['workspace'].id}", headers=auth_headers(team["member"])
        )
        assert response.status_code == 403


class TestMembers:

    @pytest.mark.asyncio
    async def test_owner_adds_member_who_then_has_access(self, client, team, auth_headers):
        url = f"/api/workspaces/{team['workspace'].id}"
        response = await client.post(
            f"{url}/members",
            json={"user_id": team["stranger"].id, "role": "viewer"},
            headers=auth_headers(team["owner"]),
        )
        assert response.status_code == 201
        assert response.json()["role"] == "viewer"
        assert response.json()["status"] == "active"

        now_visible = await client.get(url, headers=auth_headers(team["stranger"]))
        assert now_visible.status_code == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize("who", ["member", "owner"])
    async def test_existing_member_or_owner_is_409(self, client, team, auth_headers, who):
        response = await client.post(
            f"/api/workspaces/{team['workspace'].id}/members",
            json={"user_id": team[who].id},
            headers=auth_headers(team["owner"]),
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_unknown_user_is_404(self, client, team, auth_headers):
        response = await client.post(
            f"/api/workspaces/{team['workspace'].id}/members",
            json={"user_id": str(uuid.uuid4())},
            headers=auth_headers(team["owner"]),
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_member_cannot_add_members(self, client, team, auth_headers):
        response = await client.post(
            f"/api/workspaces/{team['workspace'].id}/members",
            json={"user_id": team["stranger"].id},
            headers=auth_headers(team["member"]),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_owner_removes_member(self, client, team, auth_headers):
        url = f"/api/workspaces/{team['workspace'].id}"
        response = await client.delete(
            f"{url}/members/{team['member'].id}", headers=auth_headers(team["owner"])
        )
        assert response.status_code == 200

        revoked = await client.get(url, headers=auth_headers(team["member"]))
        assert revoked.status_code == 403

    @pytest.mark.asyncio
    async def test_removing_non_member_is_404(self, client, team, auth_headers):
        response = await client.delete(
            f"/api/workspaces/{team['workspace'].id}/members/{team['stranger'].id}",
            headers=auth_headers(team["owner"]),
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_member_added_as_pending_has_no_access(self, client, team, auth_headers):
        url = f"/api/workspaces/{team['workspace'].id}"
        response = await client.post(
            f"{url}/members",
            json={"user_id": team["stranger"].id, "status": "pending"},
            headers=auth_headers(team["owner"]),
        )
        assert response.status_code == 201
        assert response.json()["status"] == "pending"

        denied = await client.get(url, headers=auth_headers(team["stranger"]))
        assert denied.status_code == 403


class TestMemberStatus:

    @pytest.mark.asyncio
    async def test_deactivating_a_member_revokes_access(self, client, team, auth_headers):
        url = f"/api/workspaces/{team['workspace'].id}"
        response = await client.put(
            f"{url}/members/{team['member'].id}",
            json={"status": "inactive"},
            headers=auth_headers(team["owner"]),
        )
        assert response.status_code == 200
        assert response.json()["status"] == "inactive"
        assert response.json()["user_id"] == team["member"].id

        revoked = await client.get(url, headers=auth_headers(team["member"]))
        assert revoked.status_code == 403

    @pytest.mark.asyncio
    async def test_activating_a_pending_member_grants_access(self, client, team, auth_headers):
        url = f"/api/workspaces/{team['workspace'].id}"
        response = await client.put(
            f"{url}/members/{team['pending'].id}",
            json={"status": "active", "role": "admin"},
            headers=auth_headers(team["owner"]),
        )
        assert response.status_code == 200
        assert response.json()["role"] == "admin"

        granted = await client.get(url, headers=auth_headers(team["pending"]))
        assert granted.status_code == 200

    @pytest.mark.asyncio
    async def test_member_cannot_change_members(self, client, team, auth_headers):
        response = await client.put(
            f"/api/workspaces/{team['workspace'].id}/members/{team['pending'].id}",
            json={"status": "active"},
            headers=auth_headers(team["member"]),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_may_change_members(self, client, team, make_user, auth_headers):
        admin = await make_user(role=UserRole.ADMIN)
        response = await client.put(
            f"/api/workspaces/{team['workspace'].id}/members/{team['member'].id}",
            json={"role": "viewer"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200
        assert response.json()["role"] == "viewer"
        assert response.json()["status"] == "active"

    @pytest.mark.asyncio
    async def test_non_member_is_404(self, client, team, auth_headers):
        response = await client.put(
            f"/api/workspaces/{team['workspace'].id}/members/{team['stranger'].id}",
            json={"status": "inactive"},
            headers=auth_headers(team["owner"]),
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unknown_status_is_400(self, client, team, auth_headers):
        response = await client.put(
            f"/api/workspaces/{team['workspace'].id}/members/{team['member'].id}",
            json={"status": "banned"},
            headers=auth_headers(team["owner"]),
        )
        assert response.status_code == 400


class TestWorkspaceClients:

    @pytest.mark.asyncio
    async def test_lists_clients_in_workspace(self, client, team, make_client, auth_headers):
        await make_client(team["owner"], workspace=team["workspace"], name="Acme")
        await make_client(team["owner"], name="Loose")

        response = await client.get(
            f"/api/workspaces/{team['workspace'].id}/clients", headers=auth_headers(team["member"])
        )
        assert response.status_code == 200
        assert [c["name"] for c in response.json()] == ["Acme"]

    @pytest.mark.asyncio
    async def test_owner_reads_client_through_workspace(self, client, team, make_client, auth_headers):
        record = await make_client(team["owner"], workspace=team["workspace"])
        response = await client.get(
            f"/api/workspaces/{team['workspace'].id}/clients/{record.id}",
            headers=auth_headers(team["owner"]),
        )
        assert response.status_code == 200
        assert response.json()["id"] == record.id

    @pytest.mark.asyncio
    async def test_member_passes_workspace_but_not_client_check(
        self, client, team, make_client, auth_headers
    ):
        record = await make_client(team["owner"], workspace=team["workspace"])
        response = await client.get(
            f"/api/workspaces/{team['workspace'].id}/clients/{record.id}",
            headers=auth_headers(team["member"]),
        )
        assert response.status_code == 403
        assert response.json()["message"] == "You do not have access to this client"

    @pytest.mark.asyncio
    async def test_client_from_another_workspace_is_404(
        self, client, team, make_client, make_workspace, auth_headers
    ):
        other = await make_workspace(team["owner"], name="Second")
        record = await make_client(team["owner"], workspace=other)
        response = await client.get(
            f"/api/workspaces/{team['workspace'].id}/clients/{record.id}",
            headers=auth_headers(team["owner"]),
        )
        assert response.status_code == 404
