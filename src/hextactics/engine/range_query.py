"""Bounded flood-fill over the hex grid.

Computes every cell reachable from an origin within a number of steps,
walking only through cells that exist, are visible and pass a
caller-supplied predicate.  The predicate is the only place where game
rules enter: movement passes "empty or the mover's own cell", an
attack-range overlay could pass "any visible cell".

Traversal is breadth-first, so the first time a cell is accepted it is at
its minimum distance from the origin.  A rejected cell is neither part of
the result nor expanded, which is how occupied cells block movement.
"""

from __future__ import annotations

from collections import deque
from typing import Callable

from hextactics.models.cell import Cell
from hextactics.models.grid import HexGrid
from hextactics.models.hex import OffsetCoord

CellPredicate = Callable[[Cell], bool]
"""Admissibility test applied to each candidate cell."""


def admit_all(cell: Cell) -> bool:
    """Predicate accepting every visible cell."""
    return True


def empty_or_occupied_by(uid: int) -> CellPredicate:
    """Predicate for movement: the cell is empty or holds unit ``uid``."""

    def admissible(cell: Cell) -> bool:
        return cell.unit_id is None or cell.unit_id == uid

    return admissible


def distances_from(
    grid: HexGrid,
    row: int,
    col: int,
    max_distance: int,
    admissible: CellPredicate = admit_all,
) -> dict[OffsetCoord, int]:
    """Map every reachable coordinate to its shortest admissible distance.

    Args:
        grid: Board to search.
        row: Origin row.
        col: Origin column.
        max_distance: Maximum number of steps (inclusive).
        admissible: Predicate a cell must pass to be entered.

    Returns:
        ``{coord: distance}``; empty if ``max_distance < 0`` or the origin
        does not exist or is invisible.
    """
    if max_distance < 0 or not grid.exists(row, col):
        return {}

    reached: dict[OffsetCoord, int] = {}
    queue: deque[tuple[OffsetCoord, int]] = deque([(OffsetCoord(row, col), 0)])

    while queue:
        coord, dist = queue.popleft()
        cell = grid.get(coord.row, coord.col)

        # Missing, invisible or blocked: not reached, not expanded
        if cell is None or not cell.is_visible or not admissible(cell):
            continue
        if coord in reached:
            continue
        reached[coord] = dist

        if dist >= max_distance:
            continue
        for neighbor in coord.neighbors():
            if neighbor not in reached:
                queue.append((neighbor, dist + 1))

    return reached


def range_from(
    grid: HexGrid,
    row: int,
    col: int,
    max_distance: int,
    admissible: CellPredicate = admit_all,
) -> set[Cell]:
    """Return the set of cells reachable within ``max_distance`` steps.

    See :func:`distances_from` for the traversal rules.
    """
    return {
        grid.cells[coord.row][coord.col]
        for coord in distances_from(grid, row, col, max_distance, admissible)
    }
