"""Integration tests for location, config, share, and health routes."""

from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

import pytest

from backend.main import app
from engine.kernel.codec import decode
from engine.kernel.errors import PersistenceError


def location_body(location_id: str = "loc-1", name: str = "Main Street", code: str = "return 1") -> dict:
    return {
        "id": location_id,
        "name": name,
        "widgets": [{"id": "1700000000000", "name": "Sales", "code": code}],
    }


class BrokenStore:
    backend = "broken"

    async def list(self):
        raise PersistenceError("disk on fire")

    async def replace_all(self, locations):
        raise PersistenceError("disk on fire")


# ── /api/locations ──────────────────────────────────────────────────────────


class TestLocationRoutes:
    @pytest.mark.asyncio
    async def test_list_empty(self, async_client):
        res = await async_client.get("/api/locations")
        assert res.status_code == 200
        assert res.json() == []

    @pytest.mark.asyncio
    async def test_replace_all_then_list(self, async_client):
        res = await async_client.post("/api/locations", json=[location_body("a"), location_body("b")])
        assert res.status_code == 200
        assert res.json() == {"success": True}

        res = await async_client.post("/api/locations", json=[location_body("b", name="Renamed")])
        assert res.status_code == 200

        res = await async_client.get("/api/locations")
        assert [loc["id"] for loc in res.json()] == ["b"]
        assert res.json()[0]["name"] == "Renamed"

    @pytest.mark.asyncio
    async def test_replace_all_missing_code_rejected(self, async_client):
        res = await async_client.post("/api/locations", json=[location_body(code="   ")])
        assert res.status_code == 422

    @pytest.mark.asyncio
    async def test_replace_all_missing_name_rejected(self, async_client):
        res = await async_client.post("/api/locations", json=[location_body(name="")])
        assert res.status_code == 422

    @pytest.mark.asyncio
    async def test_replace_all_duplicate_ids_rejected(self, async_client):
        res = await async_client.post("/api/locations", json=[location_body("x"), location_body("x")])
        assert res.status_code == 422

        res = await async_client.get("/api/locations")
        assert res.json() == []

    @pytest.mark.asyncio
    async def test_replace_all_not_a_list(self, async_client):
        res = await async_client.post("/api/locations", json=location_body())
        assert res.status_code == 422

    @pytest.mark.asyncio
    async def test_widget_id_assigned_when_missing(self, async_client):
        body = location_body()
        del body["widgets"][0]["id"]
        res = await async_client.post("/api/locations", json=[body])
        assert res.status_code == 200

        saved = (await async_client.get("/api/locations")).json()[0]
        assert saved["widgets"][0]["id"].isdigit()

    @pytest.mark.asyncio
    async def test_several_widgets_without_ids_get_distinct_ids(self, async_client):
        body = location_body()
        body["widgets"] = [
            {"name": "A", "code": "return 1"},
            {"name": "B", "code": "return 2"},
            {"name": "C", "code": "return 3"},
        ]
        res = await async_client.post("/api/locations", json=[body])
        assert res.status_code == 200

        ids = [w["id"] for w in (await async_client.get("/api/locations")).json()[0]["widgets"]]
        assert len(set(ids)) == 3

        res = await async_client.put("/api/locations/loc-1", json=body)
        assert res.status_code == 200
        assert len({w["id"] for w in res.json()["location"]["widgets"]}) == 3

    @pytest.mark.asyncio
    async def test_upsert(self, async_client):
        res = await async_client.put("/api/locations/loc-1", json=location_body())
        assert res.status_code == 200
        assert res.json()["success"] is True
        assert res.json()["location"]["id"] == "loc-1"

        res = await async_client.put("/api/locations/loc-1", json=location_body(name="Second"))
        assert res.json()["location"]["name"] == "Second"

        res = await async_client.get("/api/locations")
        assert len(res.json()) == 1

    @pytest.mark.asyncio
    async def test_upsert_id_mismatch(self, async_client):
        res = await async_client.put("/api/locations/other", json=location_body("loc-1"))
        assert res.status_code == 400
        assert res.json()["detail"] == "Location ID mismatch"

    @pytest.mark.asyncio
    async def test_delete(self, async_client):
        await async_client.post("/api/locations", json=[location_body("a"), location_body("b")])

        res = await async_client.delete("/api/locations/a")
        assert res.status_code == 200
        assert res.json() == {"success": True}

        res = await async_client.get("/api/locations")
        assert [loc["id"] for loc in res.json()] == ["b"]

    @pytest.mark.asyncio
    async def test_delete_unknown_succeeds(self, async_client):
        res = await async_client.delete("/api/locations/nope")
        assert res.status_code == 200

    @pytest.mark.asyncio
    async def test_persistence_failure_is_500(self, async_client):
        app.state.store = BrokenStore()

        res = await async_client.post("/api/locations", json=[location_body()])
        assert res.status_code == 500
        assert res.json()["detail"] == "Failed to save locations"

        res = await async_client.get("/api/locations")
        assert res.status_code == 500


# ── /api/config/{id} ────────────────────────────────────────────────────────


class TestConfigRoute:
    @pytest.mark.asyncio
    async def test_get_config(self, async_client):
        await async_client.post("/api/locations", json=[location_body("loc-1")])

        res = await async_client.get("/api/config/loc-1")
        assert res.status_code == 200
        assert res.json() == location_body("loc-1")

    @pytest.mark.asyncio
    async def test_get_config_not_found(self, async_client):
        res = await async_client.get("/api/config/missing")
        assert res.status_code == 404
        assert res.json()["detail"] == "Location not found"


# ── /api/locations/{id}/share ───────────────────────────────────────────────


class TestShareRoute:
    @pytest.mark.asyncio
    async def test_share_inlines_small_config(self, async_client):
        await async_client.post("/api/locations", json=[location_body("loc-1")])

        res = await async_client.get("/api/locations/loc-1/share")
        assert res.status_code == 200
        link = res.json()
        assert link["config_inlined"] is True

        query = parse_qs(urlsplit(link["url"]).query)
        assert query["locationId"] == ["loc-1"]
        assert decode(query["config"][0]).id == "loc-1"

    @pytest.mark.asyncio
    async def test_share_omits_large_config(self, async_client):
        await async_client.post("/api/locations", json=[location_body("loc-1", code="x" * 4000)])

        link = (await async_client.get("/api/locations/loc-1/share")).json()
        assert link["config_inlined"] is False
        assert link["url"].endswith("?locationId=loc-1")

    @pytest.mark.asyncio
    async def test_share_not_found(self, async_client):
        res = await async_client.get("/api/locations/missing/share")
        assert res.status_code == 404


# ── /health ─────────────────────────────────────────────────────────────────


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, async_client):
        res = await async_client.get("/health")
        assert res.status_code == 200
        assert res.json() == {"status": "ok", "backend": "file"}
