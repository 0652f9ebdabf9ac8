"""Map loader — parses board scenarios from YAML.

Format::

    mask:              # rectangular 0/1 matrix, 1 = visible
      - [1, 1, 1]
      - [1, 0, 1]
    units:             # optional initial placements
      - {type: soldier, owner: player, row: 0, col: 0}
      - {type: mage, owner: ai, row: 1, col: 2}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from hextactics.models.grid import MaskError, validate_mask
from hextactics.models.unit import Owner, UnitType

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnitPlacement:
    """A unit to create and place when the scenario starts."""

    unit_type: UnitType
    owner: Owner
    row: int
    col: int


@dataclass
class Scenario:
    """A board mask plus its initial units."""

    mask: list[list[int]]
    units: list[UnitPlacement] = field(default_factory=list)


def load_map(path: str | Path) -> Scenario:
    """Load a scenario from a YAML file.

    Args:
        path: Path to the map YAML file.

    Returns:
        Parsed Scenario.

    Raises:
        FileNotFoundError: If the file does not exist.
        MaskError: If the mask is missing or malformed.
        ValueError: If a unit entry names an unknown type or owner.
    """
    path = Path(path)
    with path.open() as f:
        data: dict[str, Any] = yaml.safe_load(f) or {}
    scenario = scenario_from_dict(data)
    log.info("Loaded map %s: %dx%d, %d units", path,
             len(scenario.mask), len(scenario.mask[0]), len(scenario.units))
    return scenario


def scenario_from_dict(data: dict[str, Any]) -> Scenario:
    """Build a Scenario from an already-parsed mapping."""
    mask = data.get("mask")
    if not isinstance(mask, list):
        raise MaskError("map has no 'mask' list")
    validate_mask(mask)

    units: list[UnitPlacement] = []
    for entry in data.get("units") or []:
        units.append(UnitPlacement(
            unit_type=UnitType(entry["type"]),
            owner=Owner(entry.get("owner", Owner.PLAYER.value)),
            row=int(entry["row"]),
            col=int(entry["col"]),
        ))
    return Scenario(mask=[list(row) for row in mask], units=units)
