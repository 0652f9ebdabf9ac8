"""Unit loader — parses the unit stat table from YAML.

Format::

    soldier: {health: 10, attack: 3, movement: 2}
    archer:  {health: 7,  attack: 4, movement: 2}

Types missing from the file keep their built-in base stats.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from hextactics.models.unit import BASE_STATS, UnitStats, UnitType

log = logging.getLogger(__name__)


def load_unit_stats(path: str | Path) -> dict[UnitType, UnitStats]:
    """Load the unit stat table, falling back to built-in stats.

    A missing file is not an error: the built-in table is returned.
    """
    path = Path(path)
    stats = dict(BASE_STATS)
    if not path.exists():
        log.warning("Unit stats not found at %s — using built-in stats", path)
        return stats

    with path.open() as f:
        data = yaml.safe_load(f) or {}

    for key, attrs in data.items():
        if not isinstance(attrs, dict):
            continue
        unit_type = UnitType(key)
        base = stats[unit_type]
        stats[unit_type] = UnitStats(
            health=int(attrs.get("health", base.health)),
            attack=int(attrs.get("attack", base.attack)),
            movement=int(attrs.get("movement", base.movement)),
        )
    log.info("Loaded stats for %d unit types from %s", len(data), path)
    return stats
