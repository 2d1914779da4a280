"""Integration tests for onboarding tasks and assignments."""

from __future__ import annotations

from datetime import date, timedelta

import pytest


async def _task(member, name: str = "Sign contract", **extra) -> dict:
    resp = await member.client.post("/api/onboarding/tasks", json={"name": name, **extra})
    assert resp.status_code == 201
    return resp.json()["data"]


async def _assign(member, employee_id: str, task_ids: list[str], **extra) -> list[dict]:
    resp = await member.client.post(
        "/api/onboarding", json={"employee_id": employee_id, "task_ids": task_ids, **extra}
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


@pytest.mark.integration
class TestOnboardingTasks:
    async def test_task_crud(self, admin, worker) -> None:
        task = await _task(admin, category="training", default_due_days=5)
        assert task["category"] == "training"

        listed = await worker.client.get("/api/onboarding/tasks")
        assert [t["name"] for t in listed.json()["data"]] == ["Sign contract"]
        filtered = await worker.client.get("/api/onboarding/tasks", params={"category": "equipment"})
        assert filtered.json()["data"] == []

        updated = await admin.client.put(
            f"/api/onboarding/tasks/{task['id']}", json={"is_required": False}
        )
        assert updated.json()["data"]["is_required"] is False
        assert (await admin.client.delete(f"/api/onboarding/tasks/{task['id']}")).status_code == 200
        assert (await admin.client.get(f"/api/onboarding/tasks/{task['id']}")).status_code == 404

    async def test_task_fields_cannot_be_nulled(self, admin) -> None:
        task = await _task(admin)
        url = f"/api/onboarding/tasks/{task['id']}"
        for field in ("name", "category", "is_required", "default_due_days"):
            resp = await admin.client.put(url, json={field: None})
            assert resp.status_code == 422, field
        assert (await admin.client.get(url)).json()["data"]["name"] == "Sign contract"

    async def test_worker_cannot_manage_tasks(self, worker) -> None:
        resp = await worker.client.post("/api/onboarding/tasks", json={"name": "Sneaky"})
        assert resp.status_code == 403

    async def test_assigned_task_cannot_be_deleted(self, admin, worker) -> None:
        task = await _task(admin)
        await _assign(admin, worker.id, [task["id"]])
        resp = await admin.client.delete(f"/api/onboarding/tasks/{task['id']}")
        assert resp.status_code == 409


@pytest.mark.integration
class TestOnboardingAssignments:
    async def test_assign_defaults_due_date(self, admin, worker) -> None:
        task = await _task(admin, default_due_days=10)
        [record] = await _assign(admin, worker.id, [task["id"], task["id"]])
        assert record["status"] == "pending"
        assert record["due_date"] == (date.today() + timedelta(days=10)).isoformat()

    async def test_assign_alias_path(self, admin, worker) -> None:
        task = await _task(admin)
        resp = await admin.client.post(
            "/api/onboarding/assign",
            json={"employee_id": worker.id, "task_ids": [task["id"]], "due_date": "2030-01-31"},
        )
        assert resp.status_code == 201
        assert resp.json()["data"][0]["due_date"] == "2030-01-31"

    async def test_worker_assigns_only_to_self(self, admin, worker) -> None:
        task = await _task(admin)
        await _assign(worker, worker.id, [task["id"]])
        resp = await worker.client.post(
            "/api/onboarding", json={"employee_id": admin.id, "task_ids": [task["id"]]}
        )
        assert resp.status_code == 403

    async def test_foreign_task_cannot_be_assigned(self, admin, worker, outsider) -> None:
        foreign = await _task(outsider, "Foreign task")
        resp = await admin.client.post(
            "/api/onboarding", json={"employee_id": worker.id, "task_ids": [foreign["id"]]}
        )
        assert resp.status_code == 403

    async def test_missing_task_is_not_found(self, admin, worker) -> None:
        resp = await admin.client.post(
            "/api/onboarding", json={"employee_id": worker.id, "task_ids": ["ghost"]}
        )
        assert resp.status_code == 404
        assert resp.json()["error"]["details"] == {"missing": ["ghost"]}

    async def test_empty_task_list_is_schema_error(self, admin, worker) -> None:
        resp = await admin.client.post(
            "/api/onboarding", json={"employee_id": worker.id, "task_ids": []}
        )
        assert resp.status_code == 422


@pytest.mark.integration
class TestOnboardingListing:
    async def test_non_admin_must_name_employee(self, worker) -> None:
        resp = await worker.client.get("/api/onboarding")
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_admin_flag_from_non_admin_is_ignored(self, worker) -> None:
        resp = await worker.client.get("/api/onboarding", params={"isAdmin": "true"})
        assert resp.status_code == 400

    async def test_worker_lists_own_onboarding(self, admin, worker) -> None:
        task = await _task(admin)
        await _assign(admin, worker.id, [task["id"]])
        own = await worker.client.get("/api/onboarding", params={"employeeId": worker.id})
        assert own.status_code == 200
        [row] = own.json()["data"]
        assert row["employee"]["id"] == worker.id
        assert row["task"]["name"] == "Sign contract"

        other = await worker.client.get("/api/onboarding", params={"employeeId": admin.id})
        assert other.status_code == 403

    async def test_admin_company_view_with_filters_and_pages(self, admin, worker, seed, acme):
        third = await seed.employee(acme, full_name="Zed Third")
        first_task = await _task(admin, "Laptop")
        second_task = await _task(admin, "Badge")
        await _assign(admin, worker.id, [first_task["id"], second_task["id"]])
        await _assign(admin, third.id, [first_task["id"]])

        everything = await admin.client.get(
            "/api/onboarding", params={"isAdmin": "true", "pageSize": 2}
        )
        body = everything.json()
        assert len(body["data"]) == 2
        assert body["meta"] == {"page": 1, "pageSize": 2, "totalItems": 3, "totalPages": 2}

        page_two = await admin.client.get(
            "/api/onboarding", params={"isAdmin": "true", "pageSize": 2, "page": 2}
        )
        assert len(page_two.json()["data"]) == 1

        narrowed = await admin.client.get(
            "/api/onboarding", params={"isAdmin": "true", "filterEmployeeId": third.id}
        )
        assert [r["employee"]["id"] for r in narrowed.json()["data"]] == [third.id]

        searched = await admin.client.get(
            "/api/onboarding", params={"isAdmin": "true", "search": "badge"}
        )
        assert [r["task"]["name"] for r in searched.json()["data"]] == ["Badge"]

    async def test_company_view_excludes_other_tenants(self, admin, outsider, seed, globex):
        foreign_employee = await seed.employee(globex)
        task = await _task(outsider, "Foreign")
        await _assign(outsider, foreign_employee.id, [task["id"]])
        resp = await admin.client.get("/api/onboarding", params={"isAdmin": "true"})
        assert resp.json()["data"] == []


@pytest.mark.integration
class TestOnboardingRecord:
    async def test_get_and_complete(self, admin, worker) -> None:
        task = await _task(admin)
        [record] = await _assign(admin, worker.id, [task["id"]])

        detail = await worker.client.get(f"/api/onboarding/{record['id']}")
        assert detail.status_code == 200

        done = await worker.client.patch(
            f"/api/onboarding/{record['id']}/status", json={"status": "completed", "notes": "ok"}
        )
        assert done.status_code == 200
        data = done.json()["data"]
        assert data["completed_by"] == worker.id
        assert data["completed_at"] is not None
        assert data["completed_by_employee"] == {"full_name": "Bob Worker"}

        reopened = await admin.client.patch(
            f"/api/onboarding/{record['id']}/status", json={"status": "pending"}
        )
        assert reopened.json()["data"]["completed_at"] is None

    async def test_worker_cannot_touch_others_onboarding(self, admin, worker, seed, acme):
        other = await seed.employee(acme)
        task = await _task(admin)
        [record] = await _assign(admin, other.id, [task["id"]])
        assert (await worker.client.get(f"/api/onboarding/{record['id']}")).status_code == 403
        resp = await worker.client.patch(
            f"/api/onboarding/{record['id']}/status", json={"status": "completed"}
        )
        assert resp.status_code == 403

    async def test_only_admin_deletes(self, admin, worker) -> None:
        task = await _task(admin)
        [record] = await _assign(admin, worker.id, [task["id"]])
        assert (await worker.client.delete(f"/api/onboarding/{record['id']}")).status_code == 403
        assert (await admin.client.delete(f"/api/onboarding/{record['id']}")).status_code == 200
        assert (await admin.client.delete(f"/api/onboarding/{record['id']}")).status_code == 404

    async def test_admin_delete_of_other_company_onboarding_is_not_found(
        self, admin, outsider, seed, globex
    ) -> None:
        foreign_employee = await seed.employee(globex)
        task = await _task(outsider, "Foreign")
        [record] = await _assign(outsider, foreign_employee.id, [task["id"]])

        resp = await admin.client.delete(f"/api/onboarding/{record['id']}")
        assert resp.status_code == 404
        assert resp.json()["success"] is False
        still_there = await outsider.client.get(f"/api/onboarding/{record['id']}")
        assert still_there.status_code == 200

    async def test_anonymous_is_unauthenticated(self, client) -> None:
        assert (await client.get("/api/onboarding/anything")).status_code == 401
