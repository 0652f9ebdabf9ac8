"""Placement service — keeps units and cells consistent.

Responsibilities:
- Roster membership (add / remove)
- Putting units on cells with the one-unit-per-cell invariant
- Keeping ``unit.position`` and ``cell.unit_id`` in step

Every public method either fully succeeds or changes nothing.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from hextactics.models.game_state import GameState
    from hextactics.util.events import EventBus

from hextactics.models.hex import NOT_PLACED, OffsetCoord
from hextactics.models.unit import Owner, Unit, UnitStats, UnitType, create_unit
from hextactics.util.events import UnitPlaced, UnitRemoved, UnitSelected
from hextactics.util.rejections import Rejection

log = logging.getLogger(__name__)


class PlacementService:
    """Service for roster and occupancy management.

    Args:
        state: Game state to operate on.
        event_bus: Event bus for placement notifications.
        unit_stats: Optional stat table used by :meth:`spawn_unit`.
    """

    def __init__(self, state: GameState, event_bus: EventBus | None = None,
                 unit_stats: dict[UnitType, UnitStats] | None = None) -> None:
        self.state = state
        self._events = event_bus
        self._unit_stats = unit_stats

    # -- Roster ----------------------------------------------------------

    def add_unit(self, unit: Unit) -> bool:
        """Add a unit to the roster.

        Returns:
            True if the unit is in the roster afterwards.  Adding the same
            unit twice is a no-op; a different unit reusing a taken id is
            refused.
        """
        roster = self.state.roster
        if roster.contains(unit):
            return True
        if unit.uid in roster:
            log.warning("Unit id %d already taken, refusing %r", unit.uid, unit)
            return False
        roster.add(unit)
        log.debug("Unit added: %r", unit)
        return True

    def remove_unit(self, unit: Unit) -> bool:
        """Remove a unit from the roster, vacating its cell and selection.

        Returns:
            False if the unit is not in the roster.
        """
        state = self.state
        if not state.roster.contains(unit):
            return False

        state.roster.discard(unit)
        self._vacate(unit)
        unit.position = NOT_PLACED

        if state.selected_uid == unit.uid:
            state.selected_uid = None
            state.grid.clear_highlights()
            self._emit(UnitSelected(uid=None))

        log.info("Unit removed: uid=%d", unit.uid)
        self._emit(UnitRemoved(uid=unit.uid))
        return True

    # -- Placement -------------------------------------------------------

    def check_target(self, row: int, col: int) -> Optional[Rejection]:
        """Return why ``(row, col)`` cannot take a unit, or None if it can."""
        cell = self.state.grid.get(row, col)
        if cell is None:
            return Rejection.OUT_OF_BOUNDS
        if not cell.is_visible:
            return Rejection.CELL_INVISIBLE
        if cell.unit_id is not None:
            return Rejection.CELL_OCCUPIED
        return None

    def place_unit(self, unit: Unit, row: int, col: int) -> bool:
        """Put a unit on ``(row, col)``, moving it off its previous cell.

        The unit joins the roster if it is new.  No movement is spent.

        Returns:
            False if the target is missing, invisible or occupied, or the
            unit's id is taken by another unit.
        """
        reason = self.check_target(row, col)
        if reason is not None:
            log.debug("place_unit(%r, %d, %d) refused: %s", unit, row, col, reason.value)
            return False
        if not self.add_unit(unit):
            return False

        self._vacate(unit)
        self.relocate(unit, row, col)

        log.debug("Unit placed: uid=%d at (%d, %d)", unit.uid, row, col)
        self._emit(UnitPlaced(uid=unit.uid, row=row, col=col))
        return True

    def spawn_unit(self, unit_type: UnitType, owner: Owner,
                   row: int, col: int) -> Optional[Unit]:
        """Create a unit with a fresh id and place it.

        Returns:
            The new unit, or None if the target cell cannot take it (the
            roster is left unchanged in that case).
        """
        if self.check_target(row, col) is not None:
            return None
        unit = create_unit(unit_type, owner, self.state.roster.next_uid(),
                           stats=self._unit_stats)
        self.place_unit(unit, row, col)
        return unit

    def relocate(self, unit: Unit, row: int, col: int) -> None:
        """Set ``unit.position`` and point the target cell at the unit.

        The caller has already validated the target and vacated the old cell.
        """
        unit.position = OffsetCoord(row, col)
        self.state.grid.cells[row][col].unit_id = unit.uid

    # -- Internal --------------------------------------------------------

    def _vacate(self, unit: Unit) -> None:
        """Clear the cell the unit currently stands on, if any."""
        if not unit.is_placed:
            return
        cell = self.state.grid.get(unit.position.row, unit.position.col)
        if cell is not None and cell.unit_id == unit.uid:
            cell.unit_id = None

    def _emit(self, event: object) -> None:
        if self._events is not None:
            self._events.emit(event)
