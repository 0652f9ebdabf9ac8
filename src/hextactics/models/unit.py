"""Unit model — a single piece on the board.

Units carry their own combat and movement budget and enforce it in their
mutators.  Whether a destination is legal on the board is decided by the
placement and turn layers, never here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from hextactics.models.hex import NOT_PLACED, OffsetCoord


class UnitType(Enum):
    """Unit variants, each with its own base stats."""

    SOLDIER = "soldier"
    ARCHER = "archer"
    KNIGHT = "knight"
    MAGE = "mage"


class Owner(Enum):
    """Side a unit fights for.  Only PLAYER and AI ever take turns."""

    PLAYER = "player"
    AI = "ai"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class UnitStats:
    """Base stats of a unit type."""

    health: int
    attack: int
    movement: int


BASE_STATS: dict[UnitType, UnitStats] = {
    UnitType.SOLDIER: UnitStats(health=10, attack=3, movement=2),
    UnitType.ARCHER: UnitStats(health=7, attack=4, movement=2),
    UnitType.KNIGHT: UnitStats(health=12, attack=5, movement=3),
    UnitType.MAGE: UnitStats(health=6, attack=6, movement=1),
}

FALLBACK_STATS = UnitStats(health=5, attack=2, movement=2)

# Display hints for the renderer
OWNER_COLORS: dict[Owner, str] = {
    Owner.PLAYER: "#4CAF50",
    Owner.AI: "#F44336",
    Owner.NEUTRAL: "#9E9E9E",
}

TYPE_SYMBOLS: dict[UnitType, str] = {
    UnitType.SOLDIER: "♙",
    UnitType.ARCHER: "♘",
    UnitType.KNIGHT: "♞",
    UnitType.MAGE: "♝",
}


@dataclass(eq=False)
class Unit:
    """A unit in play.

    Attributes:
        uid: Stable id, unique within a roster.
        unit_type: Variant of the unit.
        owner: Side the unit belongs to.
        health: Current hit points.
        max_health: Hit point cap for healing.
        attack: Damage dealt by one attack.
        movement: Hexes the unit may move per turn.
        movement_remaining: Hexes left this turn.
        has_attacked: Whether the unit already attacked this turn.
        position: Board coordinate, ``NOT_PLACED`` when off the board.
    """

    uid: int
    unit_type: UnitType
    owner: Owner
    health: int
    attack: int
    movement: int
    max_health: int = -1
    movement_remaining: int = -1
    has_attacked: bool = False
    position: OffsetCoord = field(default=NOT_PLACED)

    def __post_init__(self) -> None:
        if self.max_health < 0:
            self.max_health = self.health
        if self.movement_remaining < 0:
            self.movement_remaining = self.movement

    # -- Derived properties ----------------------------------------------

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    @property
    def is_placed(self) -> bool:
        return self.position.is_placed

    @property
    def color(self) -> str:
        return OWNER_COLORS.get(self.owner, "#FFFFFF")

    @property
    def symbol(self) -> str:
        return TYPE_SYMBOLS.get(self.unit_type, "?")

    # -- Turn budget -----------------------------------------------------

    def reset_turn(self) -> None:
        """Restore the full movement budget and the attack for a new turn."""
        self.movement_remaining = self.movement
        self.has_attacked = False

    def move(self, row: int, col: int, cost: int) -> bool:
        """Spend ``cost`` movement to stand at ``(row, col)``.

        Returns:
            False (and changes nothing) if the budget is too small.
        """
        if cost > self.movement_remaining:
            return False
        self.position = OffsetCoord(row, col)
        self.movement_remaining -= cost
        return True

    # -- Combat ----------------------------------------------------------

    def take_damage(self, amount: int) -> bool:
        """Lose ``amount`` health (floored at 0).  Returns whether still alive."""
        self.health = max(0, self.health - amount)
        return self.health > 0

    def heal(self, amount: int) -> None:
        self.health = min(self.max_health, self.health + amount)

    def can_attack(self) -> bool:
        return not self.has_attacked

    def perform_attack(self) -> int:
        """Use this turn's attack.  Returns the damage, or 0 if already used."""
        if not self.can_attack():
            return 0
        self.has_attacked = True
        return self.attack

    def __repr__(self) -> str:
        return (
            f"Unit(uid={self.uid}, {self.unit_type.value}/{self.owner.value}, "
            f"hp={self.health}/{self.max_health}, "
            f"mv={self.movement_remaining}/{self.movement}, at={self.position!r})"
        )


def create_unit(
    unit_type: UnitType,
    owner: Owner,
    uid: int,
    stats: Optional[dict[UnitType, UnitStats]] = None,
) -> Unit:
    """Create a unit with the base stats of its type.

    Args:
        unit_type: Variant to create.
        owner: Side the unit belongs to.
        uid: Roster id for the new unit.
        stats: Optional stat table overriding :data:`BASE_STATS`.
    """
    table = stats if stats is not None else BASE_STATS
    base = table.get(unit_type, FALLBACK_STATS)
    return Unit(
        uid=uid,
        unit_type=unit_type,
        owner=owner,
        health=base.health,
        attack=base.attack,
        movement=base.movement,
    )
