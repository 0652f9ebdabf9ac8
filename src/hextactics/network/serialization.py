"""Serialization — read-only JSON snapshots of the game state.

The render layer only ever sees these dicts; it never holds engine objects.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hextactics.engine.turn_controller import TurnController
    from hextactics.models.cell import Cell
    from hextactics.models.unit import Unit


def encode(data: dict[str, Any]) -> str:
    """Encode a message dict as compact JSON text."""
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def decode(raw: str | bytes) -> dict[str, Any]:
    """Decode JSON text to a message dict."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    return json.loads(raw)


def cell_to_dict(cell: Cell) -> dict[str, Any]:
    return {
        "row": cell.row,
        "col": cell.col,
        "visible": cell.is_visible,
        "active": cell.is_active,
        "highlighted": cell.is_highlighted,
        "unit": cell.unit_id,
    }


def unit_to_dict(unit: Unit) -> dict[str, Any]:
    return {
        "uid": unit.uid,
        "type": unit.unit_type.value,
        "owner": unit.owner.value,
        "health": unit.health,
        "max_health": unit.max_health,
        "attack": unit.attack,
        "movement": unit.movement,
        "movement_remaining": unit.movement_remaining,
        "has_attacked": unit.has_attacked,
        "row": unit.position.row,
        "col": unit.position.col,
        "color": unit.color,
        "symbol": unit.symbol,
    }


def build_snapshot(controller: TurnController) -> dict[str, Any]:
    """Full state snapshot: board, roster, selection and turn."""
    state = controller.state
    grid = state.grid
    return {
        "type": "state",
        "rows": grid.rows,
        "cols": grid.cols,
        "current_turn": state.current_turn.value,
        "input_locked": controller.input_locked,
        "selected_unit": state.selected_uid,
        "cells": [[cell_to_dict(cell) for cell in row] for row in grid.cells],
        "units": [unit_to_dict(unit) for unit in sorted(state.roster, key=lambda u: u.uid)],
    }
