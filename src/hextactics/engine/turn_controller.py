"""Turn controller — selection, movement and the player/AI turn cycle.

State machine over two states, PLAYER and AI (initially PLAYER):

    PLAYER --end_turn--> AI --(AI callback: take_turn, end_turn)--> PLAYER

Responsibilities:
- Selection and movement-range highlighting
- Move validation and execution (1 movement point per hex)
- Turn switching with per-side budget refresh
- Scheduling the AI turn and locking player input until it is done
- Gating the player intents coming from the input layer

Core operations (``select_unit``, ``move_unit``, ``end_turn``, ...) are not
gated; the ``request_*`` / ``select_or_toggle_at`` intents are.  Nothing here
raises on illegal input: failures return False or a refused Outcome and
leave the state unchanged.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from hextactics.engine.scheduler import Scheduler, TaskHandle
    from hextactics.loaders.game_config_loader import GameConfig
    from hextactics.models.cell import Cell
    from hextactics.util.events import EventBus

from hextactics.engine.ai_service import AIService
from hextactics.engine.placement_service import PlacementService
from hextactics.engine.range_query import (
    CellPredicate,
    admit_all,
    distances_from,
    empty_or_occupied_by,
    range_from,
)
from hextactics.engine.scheduler import AsyncioScheduler
from hextactics.models.game_state import GameState, Roster
from hextactics.models.grid import HexGrid
from hextactics.models.hex import OffsetCoord
from hextactics.models.unit import Owner, Unit
from hextactics.util.constants import AI_TURN_DELAY_MS, MOVE_COST_PER_HEX
from hextactics.util.events import (
    AITurnScheduled,
    BoardInitialized,
    CellToggled,
    TurnChanged,
    UnitDefeated,
    UnitMoved,
    UnitSelected,
)
from hextactics.util.rejections import Outcome, Rejection

log = logging.getLogger(__name__)


class TurnController:
    """Orchestrates selection, movement and turns on a GameState.

    Args:
        state: Game state to operate on.
        placement: Placement service bound to the same state.
        event_bus: Event bus for state-change notifications.
        scheduler: Scheduler for the deferred AI turn.
        ai_service: Opponent playing the AI side.
        game_config: Game configuration (AI delay).
    """

    def __init__(
        self,
        state: GameState,
        placement: PlacementService | None = None,
        event_bus: EventBus | None = None,
        scheduler: Scheduler | None = None,
        ai_service: AIService | None = None,
        game_config: GameConfig | None = None,
    ) -> None:
        self.state = state
        self._events = event_bus
        self._placement = placement or PlacementService(state, event_bus)
        self._scheduler = scheduler or AsyncioScheduler()
        self._ai = ai_service or AIService()
        self._ai_delay_ms = (
            game_config.ai_turn_delay_ms if game_config else AI_TURN_DELAY_MS
        )

        self._ai_handle: Optional[TaskHandle] = None
        self._ai_running = False
        # Bumped whenever a scheduled AI callback must no longer act
        self._epoch = 0

    # -- Read-only view --------------------------------------------------

    @property
    def grid(self) -> HexGrid:
        return self.state.grid

    @property
    def current_turn(self) -> Owner:
        return self.state.current_turn

    @property
    def selected_unit(self) -> Optional[Unit]:
        return self.state.selected_unit

    @property
    def placement(self) -> PlacementService:
        return self._placement

    @property
    def ai_pending(self) -> bool:
        """True while an AI turn is scheduled or executing."""
        return self._ai_handle is not None or self._ai_running

    @property
    def input_locked(self) -> bool:
        """True whenever player input must be refused."""
        return self.state.current_turn is not Owner.PLAYER or self.ai_pending

    # -- Board -----------------------------------------------------------

    def initialize(self, mask: Sequence[Sequence[int]]) -> None:
        """Rebuild the board from a mask and reset roster, selection and turn.

        A pending AI callback is cancelled (and ignored should it fire).

        Raises:
            MaskError: If the mask is malformed; the state is unchanged.
        """
        grid = HexGrid.from_mask(mask)
        self._cancel_ai_turn()
        self._ai_running = False

        state = self.state
        state.grid = grid
        state.roster = Roster()
        state.selected_uid = None
        state.current_turn = Owner.PLAYER

        log.info("Board initialized: %dx%d, %d visible cells",
                 grid.rows, grid.cols, len(grid.visible_cells()))
        self._emit(BoardInitialized(rows=grid.rows, cols=grid.cols))

    def toggle_active(self, row: int, col: int) -> Optional[bool]:
        """Flip a visible cell's active flag.  Returns the new value or None."""
        result = self.state.grid.toggle_active(row, col)
        if result is not None:
            self._emit(CellToggled(row=row, col=col, is_active=result))
        return result

    def clear_highlights(self) -> None:
        self.state.grid.clear_highlights()

    def range_from(self, row: int, col: int, max_distance: int,
                   admissible: CellPredicate = admit_all) -> set[Cell]:
        """Cells reachable from ``(row, col)`` within ``max_distance`` steps."""
        return range_from(self.state.grid, row, col, max_distance, admissible)

    # -- Roster (delegated) ----------------------------------------------

    def add_unit(self, unit: Unit) -> bool:
        return self._placement.add_unit(unit)

    def remove_unit(self, unit: Unit) -> bool:
        removed = self._placement.remove_unit(unit)
        if removed:
            self._refresh_highlights()
        return removed

    def place_unit(self, unit: Unit, row: int, col: int) -> bool:
        placed = self._placement.place_unit(unit, row, col)
        if placed:
            self._refresh_highlights()
        return placed

    # -- Selection -------------------------------------------------------

    def select_unit(self, unit: Optional[Unit]) -> bool:
        """Select ``unit`` (or clear the selection with None).

        Highlights the cells the unit can reach with its remaining movement,
        its own cell included.

        Returns:
            False if the unit is not in the roster (nothing changes).
        """
        if unit is not None and not self.state.roster.contains(unit):
            log.debug("select_unit(%r) refused: %s", unit, Rejection.UNKNOWN_UNIT.value)
            return False

        self.state.selected_uid = unit.uid if unit is not None else None
        self.state.grid.clear_highlights()
        if unit is not None:
            self._highlight_movement_range(unit)

        self._emit(UnitSelected(uid=self.state.selected_uid))
        return True

    def movement_range(self, unit: Unit) -> set[Cell]:
        """Cells the unit could move to (or stay on) this turn."""
        if unit.movement_remaining <= 0 or not unit.is_placed:
            return set()
        return range_from(
            self.state.grid,
            unit.position.row,
            unit.position.col,
            unit.movement_remaining // MOVE_COST_PER_HEX,
            empty_or_occupied_by(unit.uid),
        )

    def _highlight_movement_range(self, unit: Unit) -> None:
        for cell in self.movement_range(unit):
            cell.is_highlighted = True

    def _refresh_highlights(self) -> None:
        """Recompute the selected unit's highlights after occupancy changed."""
        self.state.grid.clear_highlights()
        selected = self.state.selected_unit
        if selected is not None:
            self._highlight_movement_range(selected)

    # -- Movement --------------------------------------------------------

    def move_cost(self, unit: Unit, row: int, col: int) -> Optional[int]:
        """Movement points needed to reach ``(row, col)`` this turn.

        Returns:
            None if the target is not reachable within the unit's
            remaining movement through empty cells.
        """
        if not unit.is_placed:
            return None
        distances = distances_from(
            self.state.grid,
            unit.position.row,
            unit.position.col,
            unit.movement_remaining // MOVE_COST_PER_HEX,
            empty_or_occupied_by(unit.uid),
        )
        distance = distances.get(OffsetCoord(row, col))
        if distance is None:
            return None
        return distance * MOVE_COST_PER_HEX

    def validate_move(self, unit: Optional[Unit], row: int, col: int) -> Optional[Rejection]:
        """Return why ``unit`` cannot move to ``(row, col)``, or None if it can."""
        if unit is None or not self.state.roster.contains(unit):
            return Rejection.UNKNOWN_UNIT

        reason = self._placement.check_target(row, col)
        if reason is not None:
            return reason

        origin = self.state.grid.get(unit.position.row, unit.position.col)
        if origin is None or origin.unit_id != unit.uid:
            return Rejection.UNIT_NOT_PLACED

        if self.move_cost(unit, row, col) is None:
            return Rejection.INSUFFICIENT_MOVEMENT
        return None

    def move_unit(self, unit: Optional[Unit], row: int, col: int) -> bool:
        """Move a unit to an empty, visible cell within its movement range.

        Spends 1 movement point per hex of the shortest path through empty
        cells.  Highlights are recomputed from the new position while the
        unit has movement left.

        Returns:
            False if the move is illegal; nothing changes in that case.
        """
        reason = self.validate_move(unit, row, col)
        if reason is not None:
            log.debug("move_unit(%r, %d, %d) refused: %s", unit, row, col, reason.value)
            return False

        cost = self.move_cost(unit, row, col)
        origin = unit.position
        if not unit.move(row, col, cost):
            log.debug("move_unit(%r, %d, %d) refused: %s", unit, row, col,
                      Rejection.INSUFFICIENT_MOVEMENT.value)
            return False

        self.state.grid.cells[origin.row][origin.col].unit_id = None
        self._placement.relocate(unit, row, col)

        self.state.grid.clear_highlights()
        if unit.movement_remaining > 0:
            self._highlight_movement_range(unit)

        log.debug("Unit moved: uid=%d %r -> (%d, %d) cost=%d", unit.uid, origin, row, col, cost)
        self._emit(UnitMoved(
            uid=unit.uid,
            from_row=origin.row, from_col=origin.col,
            to_row=row, to_col=col,
            cost=cost,
        ))
        return True

    # -- Combat primitives -----------------------------------------------

    def damage_unit(self, unit: Unit, amount: int) -> bool:
        """Apply damage to a unit.  Returns whether it survived.

        A defeated unit stays in the roster; listeners of UnitDefeated
        decide what happens to it.
        """
        alive = unit.take_damage(amount)
        if not alive:
            log.info("Unit defeated: uid=%d", unit.uid)
            self._emit(UnitDefeated(uid=unit.uid))
        return alive

    # -- Turns -----------------------------------------------------------

    def end_turn(self) -> bool:
        """Pass the turn to the other side.

        Clears selection and highlights, refreshes the budgets of the side
        whose turn begins and, if that is the AI, schedules its turn.

        Returns:
            False if the AI turn could not be scheduled (no running event
            loop); the turn stays where it was and nothing changes.
        """
        state = self.state
        next_turn = Owner.AI if state.current_turn is Owner.PLAYER else Owner.PLAYER

        # Schedule first so a scheduler failure leaves the state untouched
        handle: Optional[TaskHandle] = None
        if next_turn is Owner.AI:
            try:
                handle = self._scheduler.call_later(
                    self._ai_delay_ms / 1000.0,
                    partial(self._run_ai_turn, self._epoch + 1),
                )
            except RuntimeError as exc:
                log.error("Cannot schedule the AI turn, turn stays with %s: %s",
                          state.current_turn.value, exc)
                return False

        self._cancel_ai_turn()
        self._ai_handle = handle

        had_selection = state.selected_uid is not None
        state.selected_uid = None
        state.grid.clear_highlights()

        state.current_turn = next_turn
        for unit in state.roster.owned_by(next_turn):
            unit.reset_turn()

        log.info("Turn changed: %s", next_turn.value)
        if had_selection:
            self._emit(UnitSelected(uid=None))
        self._emit(TurnChanged(current_turn=next_turn.value))

        if handle is not None:
            log.info("AI turn scheduled in %.0f ms", self._ai_delay_ms)
            self._emit(AITurnScheduled(delay_ms=self._ai_delay_ms))
        return True

    def _cancel_ai_turn(self) -> None:
        if self._ai_handle is not None:
            self._ai_handle.cancel()
            self._ai_handle = None
        self._epoch += 1

    def _run_ai_turn(self, epoch: int) -> None:
        """Scheduled callback: let the AI play, then hand the turn back."""
        if epoch != self._epoch:
            log.info("Ignoring stale AI callback (epoch %d, now %d)", epoch, self._epoch)
            return
        self._ai_handle = None
        if self.state.current_turn is not Owner.AI:
            log.warning("AI callback fired during %s turn, ignoring",
                        self.state.current_turn.value)
            return

        self._ai_running = True
        try:
            self._ai.take_turn(self)
        except Exception:
            log.exception("AI turn failed — handing the turn back")
        finally:
            self._ai_running = False

        if self.state.current_turn is Owner.AI and epoch == self._epoch:
            # The AI did not pass the turn itself
            self.end_turn()

    # -- Player intents (gated) ------------------------------------------

    def select_or_toggle_at(self, row: int, col: int) -> Outcome:
        """Handle a tap on ``(row, col)``.

        - A unit of the side to move is selected.
        - A highlighted empty cell moves the selected unit there.
        - Any other visible empty cell toggles its active flag and clears
          the selection.
        """
        if self.input_locked:
            return self._refuse("select_or_toggle_at", Rejection.INPUT_LOCKED)

        cell = self.state.grid.get(row, col)
        if cell is None:
            return self._refuse("select_or_toggle_at", Rejection.OUT_OF_BOUNDS)
        if not cell.is_visible:
            return self._refuse("select_or_toggle_at", Rejection.CELL_INVISIBLE)

        unit = self.state.roster.get(cell.unit_id)
        if unit is not None:
            if unit.owner is not self.state.current_turn:
                return self._refuse("select_or_toggle_at", Rejection.NOT_CURRENT_OWNERS_TURN)
            self.select_unit(unit)
            return Outcome.ok()

        selected = self.state.selected_unit
        if selected is not None and cell.is_highlighted:
            return self.request_move(selected.uid, row, col)

        self.toggle_active(row, col)
        if selected is not None:
            self.select_unit(None)
        return Outcome.ok()

    def request_move(self, uid: int, row: int, col: int) -> Outcome:
        """Player intent: move unit ``uid`` to ``(row, col)``."""
        if self.input_locked:
            return self._refuse("request_move", Rejection.INPUT_LOCKED)

        unit = self.state.roster.get(uid)
        if unit is None:
            return self._refuse("request_move", Rejection.UNKNOWN_UNIT)
        if unit.owner is not self.state.current_turn:
            return self._refuse("request_move", Rejection.NOT_CURRENT_OWNERS_TURN)

        reason = self.validate_move(unit, row, col)
        if reason is not None:
            return self._refuse("request_move", reason)
        self.move_unit(unit, row, col)
        return Outcome.ok()

    def request_end_turn(self) -> Outcome:
        """Player intent: end the player's turn."""
        if self.input_locked:
            return self._refuse("request_end_turn", Rejection.INPUT_LOCKED)
        if not self.end_turn():
            return self._refuse("request_end_turn", Rejection.AI_UNAVAILABLE)
        return Outcome.ok()

    # -- Internal --------------------------------------------------------

    def _refuse(self, action: str, reason: Rejection) -> Outcome:
        log.debug("%s refused: %s", action, reason.value)
        return Outcome.refused(reason)

    def _emit(self, event: object) -> None:
        if self._events is not None:
            self._events.emit(event)
