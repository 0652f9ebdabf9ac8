"""Hexagonal coordinate system using offset coordinates (row, col).

The board is stored as plain rows of cells.  Odd rows are drawn shifted
half a hex to the right ("odd-r" layout), so the six neighbours of a cell
depend on the parity of its row.

Distances are computed by converting to axial coordinates (q, r) where
s = -q - r is the implicit third cube coordinate.

Reference: https://www.redblobgames.com/grids/hexagons/#coordinates-offset
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class OffsetCoord:
    """Immutable offset hex coordinate.

    Attributes:
        row: Row index (0 = top row).
        col: Column index within the row.
    """

    row: int
    col: int

    # -- Placement sentinel ----------------------------------------------

    @property
    def is_placed(self) -> bool:
        """False for the ``(-1, -1)`` sentinel used by unplaced units."""
        return self.row >= 0 and self.col >= 0

    # -- Axial conversion ------------------------------------------------

    @property
    def q(self) -> int:
        """Axial column: the offset column shifted back by half the row."""
        return self.col - (self.row - (self.row & 1)) // 2

    @property
    def r(self) -> int:
        return self.row

    @property
    def s(self) -> int:
        """Implicit cube coordinate: s = -q - r."""
        return -self.q - self.r

    # -- Geometry --------------------------------------------------------

    def distance_to(self, other: OffsetCoord) -> int:
        """Hex grid distance (number of steps along hex edges)."""
        dq = abs(self.q - other.q)
        dr = abs(self.r - other.r)
        ds = abs(self.s - other.s)
        return max(dq, dr, ds)

    def neighbors(self) -> list[OffsetCoord]:
        """Return the 6 adjacent offset coordinates (may be off the board)."""
        offsets = _ODD_ROW_OFFSETS if self.row % 2 else _EVEN_ROW_OFFSETS
        return [OffsetCoord(self.row + dr, self.col + dc) for dr, dc in offsets]

    def as_tuple(self) -> tuple[int, int]:
        return (self.row, self.col)

    # -- Serialization ---------------------------------------------------

    def __repr__(self) -> str:
        return f"Hex({self.row},{self.col})"


NOT_PLACED = OffsetCoord(-1, -1)
"""Position of a unit that is not on the board."""


# Neighbour offsets (d_row, d_col), clockwise from the upper-left neighbour.
_EVEN_ROW_OFFSETS: list[tuple[int, int]] = [
    (-1, -1),  # NW
    (-1, 0),   # NE
    (0, 1),    # E
    (1, 0),    # SE
    (1, -1),   # SW
    (0, -1),   # W
]

_ODD_ROW_OFFSETS: list[tuple[int, int]] = [
    (-1, 0),   # NW
    (-1, 1),   # NE
    (0, 1),    # E
    (1, 1),    # SE
    (1, 0),    # SW
    (0, -1),   # W
]
