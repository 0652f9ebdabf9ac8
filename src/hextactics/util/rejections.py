"""Reasons an input or engine action was refused.

Rejections are values, not exceptions: gameplay operations return False or
an empty result and leave the state untouched.  The reason is logged and
reported back to clients by the network layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Rejection(Enum):
    OUT_OF_BOUNDS = "out_of_bounds"
    CELL_INVISIBLE = "cell_invisible"
    CELL_OCCUPIED = "cell_occupied"
    INSUFFICIENT_MOVEMENT = "insufficient_movement"
    NOT_CURRENT_OWNERS_TURN = "not_current_owners_turn"
    UNKNOWN_UNIT = "unknown_unit"
    UNIT_NOT_PLACED = "unit_not_placed"
    INPUT_LOCKED = "input_locked"
    AI_UNAVAILABLE = "ai_unavailable"


@dataclass(frozen=True)
class Outcome:
    """Result of a player intent.  Truthy on success."""

    success: bool
    reason: Optional[Rejection] = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls) -> Outcome:
        return cls(True)

    @classmethod
    def refused(cls, reason: Rejection) -> Outcome:
        return cls(False, reason)
