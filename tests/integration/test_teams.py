"""Integration tests for /api/teams: teams, subteams and memberships."""

from __future__ import annotations

import pytest


async def _team(member, name: str = "Platform") -> dict:
    resp = await member.client.post("/api/teams", json={"name": name})
    assert resp.status_code == 201
    return resp.json()["data"]


async def _subteam(member, team_id: str, name: str = "Infra") -> dict:
    resp = await member.client.post(f"/api/teams/{team_id}/subteams", json={"name": name})
    assert resp.status_code == 201
    return resp.json()["data"]


@pytest.mark.integration
class TestTeamCrud:
    async def test_create_list_get(self, admin, worker) -> None:
        team = await _team(admin)
        assert team["created_by"] == admin.id

        listed = await worker.client.get("/api/teams")
        assert listed.status_code == 200
        assert [(t["name"], t["member_count"]) for t in listed.json()["data"]] == [("Platform", 0)]

        detail = await worker.client.get(f"/api/teams/{team['id']}")
        assert detail.status_code == 200
        assert detail.json()["data"]["members"] == []
        assert detail.json()["data"]["subteams"] == []

    async def test_non_admin_cannot_create(self, worker) -> None:
        resp = await worker.client.post("/api/teams", json={"name": "Rogue"})
        assert resp.status_code == 403

    async def test_update_with_manager(self, admin, worker) -> None:
        team = await _team(admin)
        resp = await admin.client.put(
            f"/api/teams/{team['id']}", json={"description": "Core", "manager_id": worker.id}
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["manager_id"] == worker.id

    async def test_foreign_manager_is_forbidden(self, admin, outsider) -> None:
        resp = await admin.client.post(
            "/api/teams", json={"name": "Platform", "manager_id": outsider.id}
        )
        assert resp.status_code == 403

    async def test_cross_tenant_team_is_forbidden(self, admin, outsider) -> None:
        team = await _team(admin)
        assert (await outsider.client.get(f"/api/teams/{team['id']}")).status_code == 403
        assert (await outsider.client.delete(f"/api/teams/{team['id']}")).status_code == 403

    async def test_name_cannot_be_nulled(self, admin) -> None:
        team = await _team(admin)
        resp = await admin.client.put(f"/api/teams/{team['id']}", json={"name": None})
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

        cleared = await admin.client.put(f"/api/teams/{team['id']}", json={"description": None})
        assert cleared.status_code == 200
        assert cleared.json()["data"]["name"] == "Platform"

    async def test_delete_twice_is_not_found(self, admin) -> None:
        team = await _team(admin)
        assert (await admin.client.delete(f"/api/teams/{team['id']}")).status_code == 200
        assert (await admin.client.delete(f"/api/teams/{team['id']}")).status_code == 404


@pytest.mark.integration
class TestTeamMembers:
    async def test_admin_adds_member_of_same_company(self, admin, worker) -> None:
        team = await _team(admin)
        resp = await admin.client.post(
            f"/api/teams/{team['id']}/members", json={"employee_id": worker.id}
        )
        assert resp.status_code == 200
        assert resp.json()["success"] is True

        members = await admin.client.get(f"/api/teams/{team['id']}/members")
        assert [m["id"] for m in members.json()["data"]] == [worker.id]

    async def test_non_admin_cannot_add_member(self, admin, worker) -> None:
        team = await _team(admin)
        resp = await worker.client.post(
            f"/api/teams/{team['id']}/members", json={"employee_id": worker.id}
        )
        assert resp.status_code == 403
        assert resp.json()["success"] is False

    async def test_cannot_add_employee_of_other_company(self, admin, outsider) -> None:
        team = await _team(admin)
        resp = await admin.client.post(
            f"/api/teams/{team['id']}/members", json={"employee_id": outsider.id}
        )
        assert resp.status_code == 403

    async def test_duplicate_member_conflicts(self, admin, worker) -> None:
        team = await _team(admin)
        url = f"/api/teams/{team['id']}/members"
        await admin.client.post(url, json={"employee_id": worker.id})
        resp = await admin.client.post(url, json={"employee_id": worker.id})
        assert resp.status_code == 409

    async def test_add_to_missing_team(self, admin, worker) -> None:
        resp = await admin.client.post(
            "/api/teams/no-such-team/members", json={"employee_id": worker.id}
        )
        assert resp.status_code == 404

    async def test_remove_member(self, admin, worker) -> None:
        team = await _team(admin)
        await admin.client.post(f"/api/teams/{team['id']}/members", json={"employee_id": worker.id})
        url = f"/api/teams/{team['id']}/members/{worker.id}"
        assert (await admin.client.delete(url)).status_code == 200
        assert (await admin.client.delete(url)).status_code == 404


@pytest.mark.integration
class TestSubteams:
    async def test_subteam_crud(self, admin) -> None:
        team = await _team(admin)
        subteam = await _subteam(admin, team["id"])
        base = f"/api/teams/{team['id']}/subteams/{subteam['id']}"

        assert (await admin.client.get(base)).json()["data"]["members"] == []
        updated = await admin.client.put(base, json={"name": "Infrastructure"})
        assert updated.json()["data"]["name"] == "Infrastructure"
        listed = await admin.client.get(f"/api/teams/{team['id']}/subteams")
        assert [s["name"] for s in listed.json()["data"]] == ["Infrastructure"]
        assert (await admin.client.delete(base)).status_code == 200
        assert (await admin.client.get(base)).status_code == 404

    async def test_subteam_name_cannot_be_nulled(self, admin) -> None:
        team = await _team(admin)
        subteam = await _subteam(admin, team["id"])
        base = f"/api/teams/{team['id']}/subteams/{subteam['id']}"
        resp = await admin.client.put(base, json={"name": None})
        assert resp.status_code == 422
        assert (await admin.client.get(base)).json()["data"]["name"] == "Infra"

    async def test_subteam_under_wrong_team_is_not_found(self, admin) -> None:
        first = await _team(admin, "A")
        second = await _team(admin, "B")
        subteam = await _subteam(admin, first["id"])
        resp = await admin.client.get(f"/api/teams/{second['id']}/subteams/{subteam['id']}")
        assert resp.status_code == 404

    async def test_member_must_join_parent_team_first(self, admin, worker) -> None:
        team = await _team(admin)
        subteam = await _subteam(admin, team["id"])
        url = f"/api/teams/{team['id']}/subteams/{subteam['id']}/members"

        rejected = await admin.client.post(url, json={"employee_id": worker.id})
        assert rejected.status_code == 409
        assert rejected.json()["error"]["code"] == "RESOURCE_CONFLICT"

        await admin.client.post(f"/api/teams/{team['id']}/members", json={"employee_id": worker.id})
        accepted = await admin.client.post(url, json={"employee_id": worker.id})
        assert accepted.status_code == 200

        detail = await admin.client.get(f"/api/teams/{team['id']}/subteams/{subteam['id']}")
        assert [m["id"] for m in detail.json()["data"]["members"]] == [worker.id]

    async def test_non_admin_cannot_add_subteam_member(self, admin, worker) -> None:
        team = await _team(admin)
        subteam = await _subteam(admin, team["id"])
        resp = await worker.client.post(
            f"/api/teams/{team['id']}/subteams/{subteam['id']}/members",
            json={"employee_id": worker.id},
        )
        assert resp.status_code == 403

    async def test_remove_subteam_member(self, admin, worker) -> None:
        team = await _team(admin)
        subteam = await _subteam(admin, team["id"])
        await admin.client.post(f"/api/teams/{team['id']}/members", json={"employee_id": worker.id})
        base = f"/api/teams/{team['id']}/subteams/{subteam['id']}/members"
        await admin.client.post(base, json={"employee_id": worker.id})
        assert (await admin.client.delete(f"{base}/{worker.id}")).status_code == 200
        assert (await admin.client.delete(f"{base}/{worker.id}")).status_code == 404
