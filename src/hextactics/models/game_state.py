"""Game state — the single state struct shared by the engine services.

There is no module-level game object: a GameState is created at startup
(or per test) and handed to the services that mutate it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

from hextactics.models.grid import HexGrid
from hextactics.models.unit import Owner, Unit


class Roster:
    """Arena of all units in play, keyed by unit id."""

    def __init__(self) -> None:
        self._units: dict[int, Unit] = {}  # uid → Unit
        self._next_uid: int = 1

    def next_uid(self) -> int:
        """Allocate an id that is not used by any unit in the roster."""
        while self._next_uid in self._units:
            self._next_uid += 1
        uid = self._next_uid
        self._next_uid += 1
        return uid

    def get(self, uid: Optional[int]) -> Optional[Unit]:
        if uid is None:
            return None
        return self._units.get(uid)

    def contains(self, unit: Unit) -> bool:
        """Identity check: True only for this exact unit object."""
        return self._units.get(unit.uid) is unit

    def add(self, unit: Unit) -> None:
        self._units[unit.uid] = unit

    def discard(self, unit: Unit) -> None:
        self._units.pop(unit.uid, None)

    def owned_by(self, owner: Owner) -> list[Unit]:
        return [u for u in self._units.values() if u.owner == owner]

    def __iter__(self) -> Iterator[Unit]:
        return iter(list(self._units.values()))

    def __len__(self) -> int:
        return len(self._units)

    def __contains__(self, uid: object) -> bool:
        return uid in self._units


@dataclass
class GameState:
    """Board, roster, selection and turn.

    Attributes:
        grid: The hex board.
        roster: All units in play.
        selected_uid: Id of the selected unit, or None.
        current_turn: Side whose turn it is (PLAYER or AI).
    """

    grid: HexGrid
    roster: Roster = field(default_factory=Roster)
    selected_uid: Optional[int] = None
    current_turn: Owner = Owner.PLAYER

    @property
    def selected_unit(self) -> Optional[Unit]:
        return self.roster.get(self.selected_uid)

    def unit_at(self, row: int, col: int) -> Optional[Unit]:
        """Return the unit standing on ``(row, col)``, if any."""
        cell = self.grid.get(row, col)
        if cell is None:
            return None
        return self.roster.get(cell.unit_id)
