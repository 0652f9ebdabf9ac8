"""Game configuration — loads tunable settings from config/game.yaml.

Provides a single ``GameConfig`` dataclass that is loaded once at startup
and then passed (or injected) wherever settings are needed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

log = logging.getLogger(__name__)

DEFAULT_GAME_CONFIG_PATH = "config/game.yaml"


@dataclass
class GameConfig:
    """All tunable settings.

    Loaded from ``config/game.yaml``.  Every field has a sensible default
    so the server can start even without the file.
    """

    # -- Timing ------------------------------------------------------
    ai_turn_delay_ms: float = 500.0

    # -- Content -----------------------------------------------------
    map_path: str = "config/maps/default.yaml"
    units_path: str = "config/units.yaml"

    # -- Network -----------------------------------------------------
    host: str = "127.0.0.1"
    rest_port: int = 8080

    # -- Logging -----------------------------------------------------
    log_level: str = "INFO"


def load_game_config(path: str | Path = DEFAULT_GAME_CONFIG_PATH) -> GameConfig:
    """Load game configuration from a YAML file.

    Missing keys fall back to dataclass defaults and unknown keys are
    ignored.  If the file does not exist, a warning is logged and pure
    defaults are returned.
    """
    p = Path(path)
    if not p.exists():
        log.warning("Game config not found at %s — using defaults", p)
        return GameConfig()

    with p.open() as f:
        raw = yaml.safe_load(f) or {}

    log.info("Loaded game config from %s (%d keys)", p, len(raw))

    known = {f.name for f in fields(GameConfig)}
    unknown = sorted(k for k in raw if k not in known)
    if unknown:
        log.warning("Ignoring unknown game config keys: %s", ", ".join(unknown))

    return GameConfig(**{k: v for k, v in raw.items() if k in known})
