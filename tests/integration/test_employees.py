"""Integration tests for /api/employees."""

from __future__ import annotations

import pytest

NEW_HIRE = {
    "full_name": "Carla Dias",
    "email": "Carla@Acme.com",
    "position": "Analyst",
    "department": "Finance",
    "hire_date": "2025-03-01",
}


@pytest.mark.integration
class TestEmployeeRoutes:
    async def test_admin_admits_employee(self, admin, acme) -> None:
        resp = await admin.client.post("/api/employees", json=NEW_HIRE)
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["company_id"] == acme.id
        assert data["email"] == "carla@acme.com"
        assert data["hire_date"] == "2025-03-01"
        assert data["status"] == "active"

    async def test_non_admin_cannot_admit(self, worker) -> None:
        resp = await worker.client.post("/api/employees", json=NEW_HIRE)
        assert resp.status_code == 403
        assert resp.json()["error"]["details"] == {"reason": "admin-required"}

    async def test_list_is_tenant_scoped(self, admin, worker, outsider) -> None:
        resp = await worker.client.get("/api/employees")
        assert resp.status_code == 200
        ids = {e["id"] for e in resp.json()["data"]}
        assert ids == {admin.id, worker.id}

    async def test_list_filters_and_departments(self, seed, acme, admin) -> None:
        await seed.employee(acme, full_name="Dora Sales", department="Sales")
        await seed.employee(acme, full_name="Ed Eng", department="Engineering")
        sales = await admin.client.get("/api/employees", params={"department": "Sales"})
        assert [e["full_name"] for e in sales.json()["data"]] == ["Dora Sales"]
        found = await admin.client.get("/api/employees", params={"search": "ed eng"})
        assert [e["full_name"] for e in found.json()["data"]] == ["Ed Eng"]
        departments = await admin.client.get("/api/employees/departments")
        assert departments.json()["data"] == ["Engineering", "Sales"]

    async def test_self_view_allowed_other_view_forbidden(self, admin, worker) -> None:
        own = await worker.client.get(f"/api/employees/{worker.id}")
        assert own.status_code == 200
        other = await worker.client.get(f"/api/employees/{admin.id}")
        assert other.status_code == 403
        assert other.json()["error"]["details"] == {"reason": "forbidden"}

    async def test_cross_tenant_view_is_forbidden(self, worker, outsider) -> None:
        resp = await outsider.client.get(f"/api/employees/{worker.id}")
        assert resp.status_code == 403
        assert resp.json()["error"]["details"] == {"reason": "cross-tenant"}

    async def test_missing_employee_is_not_found(self, admin) -> None:
        resp = await admin.client.get("/api/employees/does-not-exist")
        assert resp.status_code == 404

    async def test_update_and_status(self, admin, worker) -> None:
        resp = await admin.client.put(
            f"/api/employees/{worker.id}", json={"position": "Lead", "department": "Ops"}
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["position"] == "Lead"

        status = await admin.client.patch(
            f"/api/employees/{worker.id}/status", json={"status": "vacation"}
        )
        assert status.status_code == 200
        assert status.json()["data"]["status"] == "vacation"

        bad = await admin.client.patch(
            f"/api/employees/{worker.id}/status", json={"status": "retired"}
        )
        assert bad.status_code == 422

    async def test_worker_cannot_update_self(self, worker) -> None:
        resp = await worker.client.put(f"/api/employees/{worker.id}", json={"is_admin": True})
        assert resp.status_code == 403

    async def test_admin_cannot_revoke_own_admin(self, admin) -> None:
        resp = await admin.client.put(f"/api/employees/{admin.id}", json={"is_admin": False})
        assert resp.status_code == 409

    async def test_null_admin_flag_leaves_admin_in_place(self, admin) -> None:
        resp = await admin.client.put(f"/api/employees/{admin.id}", json={"is_admin": None})
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

        me = await admin.client.get(f"/api/employees/{admin.id}")
        assert me.json()["data"]["is_admin"] is True
        team = await admin.client.post("/api/teams", json={"name": "Still admin"})
        assert team.status_code == 201

    async def test_admin_may_confirm_own_admin_flag(self, admin) -> None:
        resp = await admin.client.put(f"/api/employees/{admin.id}", json={"is_admin": True})
        assert resp.status_code == 200
        assert resp.json()["data"]["is_admin"] is True

    @pytest.mark.parametrize("field", ["full_name", "email", "status", "contract_type", "is_admin"])
    async def test_required_fields_cannot_be_nulled(self, admin, worker, field: str) -> None:
        resp = await admin.client.put(f"/api/employees/{worker.id}", json={field: None})
        assert resp.status_code == 422
        assert field in resp.text

        unchanged = await admin.client.get(f"/api/employees/{worker.id}")
        assert unchanged.json()["data"]["full_name"] == "Bob Worker"

    async def test_optional_fields_can_be_cleared(self, admin, worker) -> None:
        await admin.client.put(f"/api/employees/{worker.id}", json={"position": "Lead"})
        resp = await admin.client.put(f"/api/employees/{worker.id}", json={"position": None})
        assert resp.status_code == 200
        assert resp.json()["data"]["position"] is None

    async def test_admin_cannot_delete_self(self, admin) -> None:
        resp = await admin.client.delete(f"/api/employees/{admin.id}")
        assert resp.status_code == 409

    async def test_delete_is_not_repeatable(self, admin, seed, acme) -> None:
        employee = await seed.employee(acme)
        first = await admin.client.delete(f"/api/employees/{employee.id}")
        assert first.status_code == 200
        second = await admin.client.delete(f"/api/employees/{employee.id}")
        assert second.status_code == 404

    async def test_delete_removes_employee_files(self, admin, worker, store) -> None:
        upload = await worker.client.put(
            f"/api/employees/{worker.id}/photo",
            files={"file": ("me.png", b"\x89PNG\r\n", "image/png")},
        )
        key = upload.json()["data"]["admission_photo"]
        assert await store.get(key) is not None

        resp = await admin.client.delete(f"/api/employees/{worker.id}")
        assert resp.status_code == 200
        assert await store.get(key) is None
