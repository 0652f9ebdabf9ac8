"""Network message models.

Typed Pydantic models for the client → server intents and the server's
replies.  The same models back the WebSocket channel and the REST routes.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel


# -- Base ----------------------------------------------------------------

class GameMessage(BaseModel):
    """Base class for all game messages."""

    type: str
    request_id: Optional[int] = None


# -- Intents -------------------------------------------------------------

class SelectOrToggleAt(GameMessage):
    type: Literal["select_or_toggle_at"] = "select_or_toggle_at"
    row: int
    col: int


class RequestMove(GameMessage):
    type: Literal["request_move"] = "request_move"
    uid: int
    row: int
    col: int


class EndTurnRequest(GameMessage):
    type: Literal["end_turn"] = "end_turn"


# -- Queries -------------------------------------------------------------

class StateRequest(GameMessage):
    type: Literal["state_request"] = "state_request"


class RangeRequest(GameMessage):
    type: Literal["range_request"] = "range_request"
    row: int
    col: int
    distance: int


# -- Replies -------------------------------------------------------------

class ActionResponse(GameMessage):
    """Reply to an intent; ``reason`` is a Rejection value on failure."""

    success: bool
    reason: str = ""


class RangeResponse(GameMessage):
    type: Literal["range_response"] = "range_response"
    cells: list[list[int]] = []


# -- Registry ------------------------------------------------------------

MESSAGE_TYPES: dict[str, type[GameMessage]] = {
    "select_or_toggle_at": SelectOrToggleAt,
    "request_move": RequestMove,
    "end_turn": EndTurnRequest,
    "state_request": StateRequest,
    "range_request": RangeRequest,
}


def parse_message(data: dict[str, Any]) -> GameMessage:
    """Parse a raw dict into the appropriate typed message model.

    Raises:
        pydantic.ValidationError: If required fields are missing or invalid.
    """
    msg_type = data.get("type", "")
    model_cls = MESSAGE_TYPES.get(msg_type, GameMessage)
    return model_cls.model_validate(data)
