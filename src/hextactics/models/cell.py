"""Cell — a single hex on the board.

A cell only holds flags and the id of the unit standing on it.  The unit
itself lives in the roster; the cell never owns it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from hextactics.models.hex import OffsetCoord


@dataclass(eq=False)
class Cell:
    """A single board cell.

    Cells compare and hash by identity so they can be collected in sets
    while their flags change.

    Attributes:
        row: Row index.
        col: Column index.
        is_visible: Whether the cell takes part in play (fixed by the mask).
        is_active: Free toggle flag, independent of units.
        is_highlighted: Marks a legal destination of the selected unit.
        unit_id: Id of the occupying unit, or None if empty.
    """

    row: int
    col: int
    is_visible: bool = True
    is_active: bool = False
    is_highlighted: bool = False
    unit_id: Optional[int] = None

    @property
    def coord(self) -> OffsetCoord:
        return OffsetCoord(self.row, self.col)

    def __repr__(self) -> str:
        flags = "".join((
            "V" if self.is_visible else "-",
            "A" if self.is_active else "-",
            "H" if self.is_highlighted else "-",
        ))
        return f"Cell({self.row},{self.col} {flags} unit={self.unit_id})"
