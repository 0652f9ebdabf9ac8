"""Tests for the REST API and the WebSocket channel.

Uses httpx AsyncClient with an ASGI transport to test REST endpoints
end-to-end without starting a real server, and FastAPI's TestClient for
the WebSocket.  The AI turn runs on a ManualScheduler so tests decide
when it fires.
"""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from hextactics.engine.scheduler import ManualScheduler
from hextactics.loaders.map_loader import Scenario, UnitPlacement
from hextactics.main import Configuration, Services, create_services, populate
from hextactics.models.unit import Owner, UnitType
from hextactics.network.rest_api import create_app
from hextactics.util.constants import DEFAULT_MASK


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

# uids are handed out in this order: 1..6
_UNITS = [
    UnitPlacement(UnitType.SOLDIER, Owner.PLAYER, 5, 0),
    UnitPlacement(UnitType.ARCHER, Owner.PLAYER, 4, 1),
    UnitPlacement(UnitType.KNIGHT, Owner.PLAYER, 5, 2),
    UnitPlacement(UnitType.SOLDIER, Owner.AI, 0, 5),
    UnitPlacement(UnitType.MAGE, Owner.AI, 0, 3),
    UnitPlacement(UnitType.KNIGHT, Owner.AI, 1, 4),
]


def _make_services(scheduler: ManualScheduler) -> Services:
    scenario = Scenario(mask=[list(row) for row in DEFAULT_MASK], units=list(_UNITS))
    svc = create_services(Configuration(scenario=scenario), scheduler=scheduler)
    populate(svc, scenario)
    return svc


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def services(scheduler):
    return _make_services(scheduler)


@pytest.fixture
def app(services):
    return create_app(services)


@pytest.fixture
async def client(app):
    """httpx async client wired to the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def _receive_until(ws, msg_type: str, limit: int = 10) -> dict[str, Any]:
    """Read messages until one of ``msg_type`` arrives (skips state pushes)."""
    for _ in range(limit):
        msg = ws.receive_json()
        if msg["type"] == msg_type:
            return msg
    raise AssertionError(f"no {msg_type!r} message within {limit} reads")


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


class TestStateEndpoint:
    @pytest.mark.asyncio
    async def test_snapshot_shape(self, client):
        resp = await client.get("/api/state")
        assert resp.status_code == 200
        data = resp.json()
        assert data["type"] == "state"
        assert data["rows"] == 6 and data["cols"] == 6
        assert data["current_turn"] == "player"
        assert data["input_locked"] is False
        assert data["selected_unit"] is None
        assert len(data["cells"]) == 6
        assert all(len(row) == 6 for row in data["cells"])
        assert [u["uid"] for u in data["units"]] == [1, 2, 3, 4, 5, 6]

    @pytest.mark.asyncio
    async def test_cells_report_occupancy_and_visibility(self, client):
        data = (await client.get("/api/state")).json()
        assert data["cells"][5][0]["unit"] == 1
        assert data["cells"][1][1]["visible"] is False
        assert data["cells"][0][0]["unit"] is None

    @pytest.mark.asyncio
    async def test_unit_fields(self, client):
        data = (await client.get("/api/state")).json()
        knight = next(u for u in data["units"] if u["uid"] == 6)
        assert knight["type"] == "knight"
        assert knight["owner"] == "ai"
        assert (knight["row"], knight["col"]) == (1, 4)
        assert knight["movement_remaining"] == 3
        assert knight["color"] == "#F44336"


class TestRangeEndpoint:
    @pytest.mark.asyncio
    async def test_range_skips_holes(self, client):
        resp = await client.get("/api/range", params={"row": 2, "col": 2, "distance": 1})
        assert resp.status_code == 200
        assert resp.json()["cells"] == [[1, 2], [2, 1], [2, 2], [3, 1], [3, 2]]

    @pytest.mark.asyncio
    async def test_negative_distance(self, client):
        resp = await client.get("/api/range", params={"row": 2, "col": 2, "distance": -1})
        assert resp.json()["cells"] == []

    @pytest.mark.asyncio
    async def test_missing_params(self, client):
        resp = await client.get("/api/range", params={"row": 2})
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Intents
# ---------------------------------------------------------------------------


class TestIntentEndpoints:
    @pytest.mark.asyncio
    async def test_select_own_unit(self, client, services):
        resp = await client.post("/api/select", json={"row": 5, "col": 0})
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "reason": ""}
        assert services.state.selected_uid == 1

    @pytest.mark.asyncio
    async def test_select_enemy_unit(self, client):
        resp = await client.post("/api/select", json={"row": 0, "col": 5})
        assert resp.json() == {"success": False, "reason": "not_current_owners_turn"}

    @pytest.mark.asyncio
    async def test_select_hole(self, client):
        resp = await client.post("/api/select", json={"row": 1, "col": 1})
        assert resp.json()["reason"] == "cell_invisible"

    @pytest.mark.asyncio
    async def test_move(self, client, services):
        resp = await client.post("/api/move", json={"uid": 1, "row": 4, "col": 0})
        assert resp.json() == {"success": True, "reason": ""}
        data = (await client.get("/api/state")).json()
        assert data["cells"][4][0]["unit"] == 1
        assert data["cells"][5][0]["unit"] is None
        assert data["units"][0]["movement_remaining"] == 1

    @pytest.mark.asyncio
    async def test_move_onto_friend(self, client):
        resp = await client.post("/api/move", json={"uid": 1, "row": 4, "col": 1})
        assert resp.json() == {"success": False, "reason": "cell_occupied"}

    @pytest.mark.asyncio
    async def test_move_unknown_unit(self, client):
        resp = await client.post("/api/move", json={"uid": 99, "row": 4, "col": 0})
        assert resp.json()["reason"] == "unknown_unit"

    @pytest.mark.asyncio
    async def test_move_bad_body(self, client):
        resp = await client.post("/api/move", json={"row": 4, "col": 0})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_end_turn_locks_until_ai_done(self, client, scheduler):
        resp = await client.post("/api/end-turn")
        assert resp.json() == {"success": True, "reason": ""}

        data = (await client.get("/api/state")).json()
        assert data["current_turn"] == "ai"
        assert data["input_locked"] is True

        resp = await client.post("/api/select", json={"row": 5, "col": 0})
        assert resp.json()["reason"] == "input_locked"
        resp = await client.post("/api/end-turn")
        assert resp.json()["reason"] == "input_locked"

        scheduler.advance(0.5)
        data = (await client.get("/api/state")).json()
        assert data["current_turn"] == "player"
        assert data["input_locked"] is False


# ---------------------------------------------------------------------------
# WebSocket
# ---------------------------------------------------------------------------


class TestWebSocket:
    def test_failed_snapshot_releases_session(self, app, services):
        async def broken_state(message):
            raise RuntimeError("boom")

        services.router.register("state_request", broken_state)
        with TestClient(app) as tc:
            with pytest.raises(Exception):
                with tc.websocket_connect("/ws") as ws:
                    ws.receive_json()
        assert services.sessions.connection_count == 0

    def test_initial_snapshot(self, app, services):
        with TestClient(app) as tc:
            with tc.websocket_connect("/ws") as ws:
                first = ws.receive_json()
                assert first["type"] == "state"
                assert len(first["units"]) == 6
                assert services.sessions.connection_count == 1
        assert services.sessions.connection_count == 0

    def test_intent_round_trip(self, app, services):
        with TestClient(app) as tc:
            with tc.websocket_connect("/ws") as ws:
                ws.receive_json()
                ws.send_json({"type": "select_or_toggle_at", "row": 5, "col": 0,
                              "request_id": 7})
                resp = _receive_until(ws, "select_or_toggle_at_response")
                assert resp["success"] is True
                assert resp["request_id"] == 7
                assert services.state.selected_uid == 1

    def test_state_pushed_after_change(self, app):
        with TestClient(app) as tc:
            with tc.websocket_connect("/ws") as ws:
                ws.receive_json()
                ws.send_json({"type": "request_move", "uid": 1, "row": 4, "col": 0})
                # The push and the reply may arrive in either order
                seen: dict[str, dict[str, Any]] = {}
                while len(seen) < 2:
                    msg = ws.receive_json()
                    seen[msg["type"]] = msg
                assert seen["request_move_response"]["success"] is True
                assert seen["state"]["cells"][4][0]["unit"] == 1

    def test_refusal_reason(self, app):
        with TestClient(app) as tc:
            with tc.websocket_connect("/ws") as ws:
                ws.receive_json()
                ws.send_json({"type": "request_move", "uid": 4, "row": 0, "col": 4})
                resp = _receive_until(ws, "request_move_response")
                assert resp == {"type": "request_move_response", "success": False,
                                "reason": "not_current_owners_turn"}

    def test_range_request(self, app):
        with TestClient(app) as tc:
            with tc.websocket_connect("/ws") as ws:
                ws.receive_json()
                ws.send_json({"type": "range_request", "row": 0, "col": 0, "distance": 0})
                resp = _receive_until(ws, "range_response")
                assert resp["cells"] == [[0, 0]]

    def test_invalid_json(self, app):
        with TestClient(app) as tc:
            with tc.websocket_connect("/ws") as ws:
                ws.receive_json()
                ws.send_text("not json")
                err = ws.receive_json()
                assert err == {"type": "error", "message": "Invalid JSON"}

    def test_non_object(self, app):
        with TestClient(app) as tc:
            with tc.websocket_connect("/ws") as ws:
                ws.receive_json()
                ws.send_text("[1, 2]")
                err = ws.receive_json()
                assert err["type"] == "error"
                assert err["message"] == "Must be JSON object"

    def test_unknown_type(self, app):
        with TestClient(app) as tc:
            with tc.websocket_connect("/ws") as ws:
                ws.receive_json()
                ws.send_json({"type": "fireball"})
                err = ws.receive_json()
                assert err["type"] == "error"
                assert "Unknown message type" in err["message"]

    def test_validation_error_echoes_request_id(self, app):
        with TestClient(app) as tc:
            with tc.websocket_connect("/ws") as ws:
                ws.receive_json()
                ws.send_json({"type": "request_move", "row": 1, "request_id": 3})
                err = ws.receive_json()
                assert err["type"] == "error"
                assert err["request_id"] == 3
