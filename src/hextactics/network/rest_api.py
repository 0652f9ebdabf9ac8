"""REST API — FastAPI application for the render/input layer.

The browser client reads state snapshots and posts the player's intents.
Snapshot pushes and intents are also available over WebSocket via /ws on
the same port.

Usage::

    from hextactics.network.rest_api import create_app

    app = create_app(services)
    # Serve with uvicorn
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from hextactics.network.rest_models import ActionResult, CellRequest, MoveRequest

if TYPE_CHECKING:
    from hextactics.main import Services

log = logging.getLogger(__name__)


def create_app(services: "Services") -> FastAPI:
    """Factory: create and return a configured FastAPI application.

    The ``services`` reference is captured by closure so every endpoint
    can reach the engine without global state.
    """
    router = services.router

    app = FastAPI(title="Hex Tactics", version="0.1.0")

    # The renderer is served from a different origin during development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =================================================================
    # State
    # =================================================================

    @app.get("/api/state")
    async def get_state() -> dict[str, Any]:
        return await router.route({"type": "state_request"})

    @app.get("/api/range")
    async def get_range(row: int, col: int, distance: int) -> dict[str, Any]:
        """Cells within ``distance`` steps of ``(row, col)``, ignoring units."""
        return await router.route({
            "type": "range_request", "row": row, "col": col, "distance": distance,
        })

    # =================================================================
    # Intents
    # =================================================================

    @app.post("/api/select", response_model=ActionResult)
    async def select_or_toggle(body: CellRequest) -> dict[str, Any]:
        return await router.route({"type": "select_or_toggle_at", **body.model_dump()})

    @app.post("/api/move", response_model=ActionResult)
    async def move(body: MoveRequest) -> dict[str, Any]:
        return await router.route({"type": "request_move", **body.model_dump()})

    @app.post("/api/end-turn", response_model=ActionResult)
    async def end_turn() -> dict[str, Any]:
        return await router.route({"type": "end_turn"})

    # =================================================================
    # WebSocket — snapshot pushes + intents
    # =================================================================

    @app.websocket("/ws")
    async def websocket_endpoint(ws: WebSocket) -> None:
        await ws.accept()
        hub = services.sessions

        try:
            hub.register(ws)
            await ws.send_json(await router.route({"type": "state_request"}))

            while True:
                raw = await ws.receive_text()
                try:
                    data = json.loads(raw)
                except json.JSONDecodeError:
                    await ws.send_json({"type": "error", "message": "Invalid JSON"})
                    continue

                if not isinstance(data, dict):
                    await ws.send_json({"type": "error", "message": "Must be JSON object"})
                    continue

                try:
                    response = await router.route(data)
                except ValidationError as exc:
                    err: dict[str, Any] = {"type": "error", "message": str(exc)}
                    if isinstance(data.get("request_id"), int):
                        err["request_id"] = data["request_id"]
                    await ws.send_json(err)
                    continue

                if response is None:
                    await ws.send_json({
                        "type": "error",
                        "message": f"Unknown message type: {data.get('type', '')!r}",
                    })
                    continue
                await ws.send_json(response)

        except WebSocketDisconnect:
            log.info("WS client disconnected")
        finally:
            hub.unregister(ws)

    log.info("REST API created with %d routes", len(app.routes))
    return app
