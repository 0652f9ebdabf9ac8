"""AI service — plays the AI side's turn.

The AI currently has no strategy: when its turn comes it simply passes the
turn back.  The turn controller calls :meth:`AIService.take_turn` from the
scheduled callback, with player input locked for the whole call.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hextactics.engine.turn_controller import TurnController

from hextactics.models.unit import Owner

log = logging.getLogger(__name__)


class AIService:
    """Stub AI opponent."""

    def __init__(self) -> None:
        self.turns_played: int = 0

    def take_turn(self, controller: TurnController) -> None:
        """Act for the AI side, then end the turn."""
        self.turns_played += 1
        units = controller.state.roster.owned_by(Owner.AI)
        log.info("[AI] turn %d: %d units, passing", self.turns_played, len(units))
        controller.end_turn()
