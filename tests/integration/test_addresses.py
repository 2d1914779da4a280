"""Integration tests for employee addresses."""

from __future__ import annotations

import pytest

HOME = {
    "street": "Rua das Flores",
    "number": "120",
    "complement": "Apto 42",
    "neighborhood": "Centro",
    "postal_code": "01310-100",
    "city": "São Paulo",
    "state": "SP",
}


async def _address(member, employee_id: str, **overrides) -> dict:
    resp = await member.client.post(
        f"/api/employees/{employee_id}/addresses", json={**HOME, **overrides}
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


@pytest.mark.integration
class TestAddressRoutes:
    async def test_crud(self, worker) -> None:
        address = await _address(worker, worker.id)
        assert address["employee_id"] == worker.id
        assert address["country"] == "Brasil"

        listed = await worker.client.get(f"/api/employees/{worker.id}/addresses")
        assert [a["id"] for a in listed.json()["data"]] == [address["id"]]

        url = f"/api/addresses/{address['id']}"
        updated = await worker.client.put(url, json={"number": "121", "complement": None})
        assert updated.status_code == 200
        assert updated.json()["data"]["number"] == "121"
        assert updated.json()["data"]["complement"] is None
        assert updated.json()["data"]["street"] == "Rua das Flores"

        assert (await worker.client.delete(url)).status_code == 200
        assert (await worker.client.get(url)).status_code == 404

    async def test_short_postal_code_is_rejected(self, worker) -> None:
        resp = await worker.client.post(
            f"/api/employees/{worker.id}/addresses", json={**HOME, "postal_code": "0131"}
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_required_fields_cannot_be_nulled(self, worker) -> None:
        address = await _address(worker, worker.id)
        url = f"/api/addresses/{address['id']}"
        for field in ("street", "city", "postal_code"):
            resp = await worker.client.put(url, json={field: None})
            assert resp.status_code == 422, field
        assert (await worker.client.get(url)).json()["data"]["city"] == "São Paulo"

    async def test_colleague_addresses_are_forbidden(self, admin, worker) -> None:
        address = await _address(admin, admin.id)

        assert (await worker.client.get(f"/api/addresses/{address['id']}")).status_code == 403
        listing = await worker.client.get(f"/api/employees/{admin.id}/addresses")
        assert listing.status_code == 403
        adding = await worker.client.post(f"/api/employees/{admin.id}/addresses", json=HOME)
        assert adding.status_code == 403

    async def test_admin_manages_employee_addresses(self, admin, worker) -> None:
        address = await _address(admin, worker.id)
        resp = await admin.client.put(f"/api/addresses/{address['id']}", json={"state": "RJ"})
        assert resp.json()["data"]["state"] == "RJ"
        seen = await worker.client.get(f"/api/employees/{worker.id}/addresses")
        assert len(seen.json()["data"]) == 1

    async def test_other_company_is_forbidden(self, worker, outsider) -> None:
        address = await _address(worker, worker.id)
        resp = await outsider.client.delete(f"/api/addresses/{address['id']}")
        assert resp.status_code == 403
        assert resp.json()["error"]["details"]["reason"] == "cross-tenant"

    async def test_missing_address_is_not_found(self, worker) -> None:
        assert (await worker.client.get("/api/addresses/missing")).status_code == 404

    async def test_employee_removal_drops_addresses(self, admin, seed, acme) -> None:
        leaver = await seed.employee(acme, full_name="Eve Leaver")
        address = await _address(admin, leaver.id)
        assert (await admin.client.delete(f"/api/employees/{leaver.id}")).status_code == 200
        assert (await admin.client.get(f"/api/addresses/{address['id']}")).status_code == 404
