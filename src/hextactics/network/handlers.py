"""Message handlers — the input intents and state queries.

Each handler is an async function that receives a parsed message and
returns a response dict.  REST routes and the WebSocket channel both go
through the router, so the two transports behave identically.

Handlers are closures over the Services container; there is no
module-level state.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from hextactics.main import Services
    from hextactics.util.rejections import Outcome

from hextactics.network.messages import (
    ActionResponse,
    GameMessage,
    RangeRequest,
    RangeResponse,
    RequestMove,
    SelectOrToggleAt,
)
from hextactics.network.serialization import build_snapshot

log = logging.getLogger(__name__)


def _action_response(msg_type: str, outcome: Outcome) -> dict[str, Any]:
    reason = outcome.reason.value if outcome.reason is not None else ""
    return ActionResponse(
        type=f"{msg_type}_response", success=outcome.success, reason=reason,
    ).model_dump(exclude={"request_id"})


def register_all_handlers(services: Services) -> None:
    """Register every message handler on ``services.router``."""
    controller = services.controller
    router = services.router

    async def handle_state_request(message: GameMessage) -> Optional[dict[str, Any]]:
        return build_snapshot(controller)

    async def handle_select_or_toggle_at(message: SelectOrToggleAt) -> Optional[dict[str, Any]]:
        outcome = controller.select_or_toggle_at(message.row, message.col)
        return _action_response(message.type, outcome)

    async def handle_request_move(message: RequestMove) -> Optional[dict[str, Any]]:
        outcome = controller.request_move(message.uid, message.row, message.col)
        return _action_response(message.type, outcome)

    async def handle_end_turn(message: GameMessage) -> Optional[dict[str, Any]]:
        outcome = controller.request_end_turn()
        return _action_response(message.type, outcome)

    async def handle_range_request(message: RangeRequest) -> Optional[dict[str, Any]]:
        cells = controller.range_from(message.row, message.col, message.distance)
        coords = sorted([cell.row, cell.col] for cell in cells)
        return RangeResponse(cells=coords).model_dump(exclude={"request_id"})

    router.register("state_request", handle_state_request)
    router.register("select_or_toggle_at", handle_select_or_toggle_at)
    router.register("request_move", handle_request_move)
    router.register("end_turn", handle_end_turn)
    router.register("range_request", handle_range_request)
    log.info("Registered %d message handlers", len(router.registered_types))
