"""Hex grid model.

Holds the rectangular matrix of cells built from a visibility mask.  The
dimensions are fixed at construction; only cell flags and occupancy change
afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence

from hextactics.models.cell import Cell


class MaskError(ValueError):
    """The visibility mask is not a rectangular matrix of 0/1 values."""


def validate_mask(mask: Sequence[Sequence[int]]) -> None:
    """Check that ``mask`` is non-empty, rectangular and only holds 0 or 1.

    Raises:
        MaskError: Describing the first problem found.
    """
    if not mask:
        raise MaskError("mask has no rows")
    width = len(mask[0])
    if width == 0:
        raise MaskError("mask rows are empty")
    for row_index, row in enumerate(mask):
        if len(row) != width:
            raise MaskError(
                f"row {row_index} has {len(row)} cells, expected {width}"
            )
        for col_index, value in enumerate(row):
            # bools are ints in Python; reject them along with anything else
            if isinstance(value, bool) or value not in (0, 1):
                raise MaskError(
                    f"invalid mask value {value!r} at ({row_index}, {col_index})"
                )


@dataclass
class HexGrid:
    """The board as a matrix of cells, indexed ``cells[row][col]``.

    Attributes:
        cells: Row-major matrix of Cell objects.
    """

    cells: list[list[Cell]] = field(default_factory=list)

    @classmethod
    def from_mask(cls, mask: Sequence[Sequence[int]]) -> HexGrid:
        """Build a grid from a 0/1 mask (1 = visible).

        Raises:
            MaskError: If the mask is empty, ragged or holds other values.
        """
        validate_mask(mask)
        cells = [
            [Cell(row=r, col=c, is_visible=value == 1) for c, value in enumerate(row)]
            for r, row in enumerate(mask)
        ]
        return cls(cells=cells)

    # -- Dimensions ------------------------------------------------------

    @property
    def rows(self) -> int:
        return len(self.cells)

    @property
    def cols(self) -> int:
        return len(self.cells[0]) if self.cells else 0

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    # -- Queries ---------------------------------------------------------

    def get(self, row: int, col: int) -> Optional[Cell]:
        """Return the cell at ``(row, col)``, or None if out of bounds."""
        if not self.in_bounds(row, col):
            return None
        return self.cells[row][col]

    def exists(self, row: int, col: int) -> bool:
        """True if ``(row, col)`` is on the board and visible."""
        cell = self.get(row, col)
        return cell is not None and cell.is_visible

    def __iter__(self) -> Iterator[Cell]:
        for row in self.cells:
            yield from row

    def visible_cells(self) -> list[Cell]:
        return [cell for cell in self if cell.is_visible]

    def highlighted(self) -> list[Cell]:
        """All cells currently highlighted, in row-major order."""
        return [cell for cell in self if cell.is_highlighted]

    def to_mask(self) -> list[list[int]]:
        return [[1 if cell.is_visible else 0 for cell in row] for row in self.cells]

    # -- Mutation --------------------------------------------------------

    def toggle_active(self, row: int, col: int) -> Optional[bool]:
        """Flip ``is_active`` on a visible cell.

        Returns:
            The new ``is_active`` value, or None if the cell is missing or
            invisible (nothing changes in that case).
        """
        cell = self.get(row, col)
        if cell is None or not cell.is_visible:
            return None
        cell.is_active = not cell.is_active
        return cell.is_active

    def clear_highlights(self) -> None:
        """Reset ``is_highlighted`` on every cell."""
        for cell in self:
            cell.is_highlighted = False
