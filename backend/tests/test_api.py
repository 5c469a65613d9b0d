"""HTTP API tests — routing, auth, error rendering, commit/rollback per request."""

import pytest
from httpx import AsyncClient


def _load_payload(seed, **overrides) -> dict:
    payload = {
        "origin_site_id": seed.farm.id,
        "destination_site_id": seed.depot.id,
        "dispatch_date": "2025-06-01",
        "packaging": [{"packaging_type_id": seed.crate.id, "quantity": 100}],
    }
    payload.update(overrides)
    return payload


@pytest.mark.api
@pytest.mark.asyncio
class TestAuth:

    async def test_health_is_public(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["service"] == "PackTrack"

    async def test_missing_token(self, client: AsyncClient, seed):
        resp = await client.get("/api/loads/")
        assert resp.status_code == 401

    async def test_invalid_token(self, client: AsyncClient, seed):
        resp = await client.get("/api/loads/", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401


@pytest.mark.api
@pytest.mark.asyncio
class TestLoadEndpoints:

    async def test_full_lifecycle(self, client: AsyncClient, auth_headers, seed):
        resp = await client.post("/api/loads/", json=_load_payload(seed), headers=auth_headers)
        assert resp.status_code == 201
        load = resp.json()
        assert load["load_number"] == "BV1250601"
        assert load["origin_site_code"] == "BV1"
        assert load["packaging"][0]["packaging_type_code"] == "CRATE"
        load_id = load["id"]

        resp = await client.post(
            f"/api/loads/{load_id}/confirm-farm-arrival",
            json={"actual_farm_arrival_time": "2025-06-01T14:37:00"},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["farm_arrival_overtime_minutes"] == 37
        assert resp.json()["has_overtime"] is True

        resp = await client.post(f"/api/loads/{load_id}/confirm-dispatch", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["status"] == "departed"
        assert resp.json()["confirmed_dispatch_by"] == "user-clerk-1"

        resp = await client.post(f"/api/loads/{load_id}/in-transit", headers=auth_headers)
        assert resp.json()["status"] == "in_transit"

        line_id = load["packaging"][0]["id"]
        resp = await client.post(
            f"/api/loads/{load_id}/confirm-receipt",
            json={"packaging": [{"line_id": line_id, "quantity_received": 95, "quantity_missing": 5}]},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "completed"
        assert body["has_discrepancy"] is True

        resp = await client.get(
            "/api/packaging/inventory", params={"site_id": seed.depot.id}, headers=auth_headers,
        )
        assert [row["quantity"] for row in resp.json()] == [95]

        resp = await client.get(
            "/api/alerts/", params={"load_id": load_id}, headers=auth_headers,
        )
        assert resp.json()["total"] == 1
        assert resp.json()["items"][0]["alert_type"] == "missing_packaging"

    async def test_second_dispatch_is_conflict(self, client: AsyncClient, auth_headers, seed):
        load_id = (await client.post("/api/loads/", json=_load_payload(seed), headers=auth_headers)).json()["id"]
        assert (await client.post(f"/api/loads/{load_id}/confirm-dispatch", headers=auth_headers)).status_code == 200

        resp = await client.post(f"/api/loads/{load_id}/confirm-dispatch", headers=auth_headers)
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "INVALID_STATE"
        assert resp.json()["error"]["details"]["current_status"] == "departed"

        resp = await client.get(
            "/api/packaging/movements",
            params={"load_id": load_id, "movement_type": "dispatch"},
            headers=auth_headers,
        )
        assert resp.json()["total"] == 1

    async def test_same_origin_and_destination_is_422(self, client: AsyncClient, auth_headers, seed):
        resp = await client.post(
            "/api/loads/",
            json=_load_payload(seed, destination_site_id=seed.farm.id),
            headers=auth_headers,
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_unknown_load_is_404(self, client: AsyncClient, auth_headers, seed):
        resp = await client.get("/api/loads/does-not-exist", headers=auth_headers)
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "RESOURCE_NOT_FOUND"

    async def test_failed_request_rolls_back(self, client: AsyncClient, auth_headers, seed):
        load = (await client.post("/api/loads/", json=_load_payload(seed), headers=auth_headers)).json()
        await client.post(f"/api/loads/{load['id']}/confirm-dispatch", headers=auth_headers)

        resp = await client.post(
            f"/api/loads/{load['id']}/confirm-receipt",
            json={"packaging": [{"line_id": "foreign-line", "quantity_received": 1}]},
            headers=auth_headers,
        )
        assert resp.status_code == 422

        resp = await client.get(f"/api/loads/{load['id']}", headers=auth_headers)
        assert resp.json()["status"] == "departed"

    async def test_duplicate_patch_delete(self, client: AsyncClient, auth_headers, seed):
        load = (await client.post("/api/loads/", json=_load_payload(seed), headers=auth_headers)).json()

        resp = await client.post(
            f"/api/loads/{load['id']}/duplicate", json={"dispatch_date": "2025-06-02"}, headers=auth_headers,
        )
        assert resp.status_code == 201
        copy = resp.json()
        assert copy["load_number"] == "BV1250602"

        resp = await client.patch(
            f"/api/loads/{copy['id']}", json={"driver_id": "driver-9"}, headers=auth_headers,
        )
        assert resp.json()["driver_id"] == "driver-9"

        resp = await client.delete(f"/api/loads/{copy['id']}", headers=auth_headers)
        assert resp.status_code == 204

        resp = await client.get("/api/loads/", headers=auth_headers)
        assert resp.json()["total"] == 1

    async def test_cancel(self, client: AsyncClient, auth_headers, seed):
        load = (await client.post("/api/loads/", json=_load_payload(seed), headers=auth_headers)).json()
        resp = await client.post(
            f"/api/loads/{load['id']}/cancel", json={"reason": "No truck"}, headers=auth_headers,
        )
        assert resp.json()["status"] == "cancelled"
        assert resp.json()["cancelled_reason"] == "No truck"

        resp = await client.patch(f"/api/loads/{load['id']}", json={"notes": "x"}, headers=auth_headers)
        assert resp.status_code == 409


@pytest.mark.api
@pytest.mark.asyncio
class TestPackagingEndpoints:

    async def test_manual_movement_and_threshold_status(self, client: AsyncClient, auth_headers, seed):
        resp = await client.post(
            "/api/packaging/movements",
            json={
                "site_id": seed.farm.id,
                "packaging_type_id": seed.crate.id,
                "movement_type": "loss",
                "quantity": -460,
            },
            headers=auth_headers,
        )
        assert resp.status_code == 201
        assert resp.json()["direction"] == "out"

        resp = await client.put(
            "/api/packaging/thresholds",
            json={"site_id": seed.farm.id, "packaging_type_id": seed.crate.id, "min_threshold": 50},
            headers=auth_headers,
        )
        assert resp.status_code == 200

        resp = await client.get(
            "/api/packaging/inventory", params={"site_id": seed.farm.id}, headers=auth_headers,
        )
        [row] = resp.json()
        assert row["quantity"] == 40
        assert row["min_threshold"] == 50
        assert row["stock_status"] == "critical"

        resp = await client.post("/api/alerts/evaluate", headers=auth_headers)
        [alert] = resp.json()
        assert alert["severity"] == "critical"

        resp = await client.post(f"/api/alerts/{alert['id']}/acknowledge", headers=auth_headers)
        assert resp.json()["acknowledged_by"] == "user-clerk-1"

    async def test_manual_dispatch_type_rejected(self, client: AsyncClient, auth_headers, seed):
        resp = await client.post(
            "/api/packaging/movements",
            json={
                "site_id": seed.farm.id,
                "packaging_type_id": seed.crate.id,
                "movement_type": "dispatch",
                "quantity": -5,
            },
            headers=auth_headers,
        )
        assert resp.status_code == 422

    async def test_balance(self, client: AsyncClient, auth_headers, seed):
        resp = await client.get(f"/api/packaging/balance/{seed.crate.id}", headers=auth_headers)
        assert resp.json() == {
            "packaging_type_id": seed.crate.id, "on_hand": 500, "in_transit": 0, "total": 500,
        }
