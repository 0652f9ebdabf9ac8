"""Hex tactics server entry point.

Initializes all components and serves the game over HTTP/WebSocket:
1. Load configuration (game settings, map scenario, unit stats)
2. Create game state and engine services
3. Create event bus and wire up listeners
4. Place the scenario's units
5. Start the REST/WebSocket server (uvicorn)

Usage:
    python -m hextactics.main
    # or via entry point:
    hextactics --config config/game.yaml
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from hextactics.engine.ai_service import AIService
from hextactics.engine.placement_service import PlacementService
from hextactics.engine.scheduler import AsyncioScheduler, Scheduler
from hextactics.engine.turn_controller import TurnController
from hextactics.loaders.game_config_loader import (
    DEFAULT_GAME_CONFIG_PATH,
    GameConfig,
    load_game_config,
)
from hextactics.loaders.map_loader import Scenario, load_map
from hextactics.loaders.unit_loader import load_unit_stats
from hextactics.models.game_state import GameState
from hextactics.models.grid import HexGrid
from hextactics.models.unit import BASE_STATS, UnitStats, UnitType
from hextactics.network.handlers import register_all_handlers
from hextactics.network.router import Router
from hextactics.network.sessions import SessionHub
from hextactics.util.constants import DEFAULT_MASK
from hextactics.util.events import EventBus, UnitDefeated

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Container for all loaded configuration
# ---------------------------------------------------------------------------


@dataclass
class Configuration:
    """Holds all data loaded from config files."""

    game: GameConfig = field(default_factory=GameConfig)
    scenario: Scenario = field(
        default_factory=lambda: Scenario(mask=[list(row) for row in DEFAULT_MASK]))
    unit_stats: dict[UnitType, UnitStats] = field(default_factory=lambda: dict(BASE_STATS))


# ---------------------------------------------------------------------------
# Container for all services (makes passing around easier)
# ---------------------------------------------------------------------------


@dataclass
class Services:
    """Holds references to the game state and all services."""

    game_config: Optional[GameConfig] = None
    event_bus: Optional[EventBus] = None
    state: Optional[GameState] = None
    placement: Optional[PlacementService] = None
    ai_service: Optional[AIService] = None
    controller: Optional[TurnController] = None
    router: Optional[Router] = None
    sessions: Optional[SessionHub] = None


# ===================================================================
# 1. Load configuration
# ===================================================================


def load_configuration(config_path: str = DEFAULT_GAME_CONFIG_PATH) -> Configuration:
    """Load game settings, the map scenario and unit stats.

    Args:
        config_path: Path to the game YAML; map and unit paths come from it.

    Returns:
        Populated :class:`Configuration`.
    """
    log.info("Loading configuration …")

    game_cfg = load_game_config(config_path)
    scenario = load_map(game_cfg.map_path)
    log.info("  map:          %dx%d, %d units from %s",
             len(scenario.mask), len(scenario.mask[0]), len(scenario.units), game_cfg.map_path)

    unit_stats = load_unit_stats(game_cfg.units_path)
    log.info("  unit_stats:   %d types", len(unit_stats))

    return Configuration(game=game_cfg, scenario=scenario, unit_stats=unit_stats)


# ===================================================================
# 2. Create state and services
# ===================================================================


def create_services(config: Configuration, scheduler: Scheduler | None = None) -> Services:
    """Instantiate state and services with proper dependency injection.

    Args:
        config: Loaded configuration.
        scheduler: Scheduler for the AI turn (asyncio by default).

    Returns:
        Populated :class:`Services` container.
    """
    log.info("Creating services …")

    event_bus = EventBus()
    state = GameState(grid=HexGrid.from_mask(config.scenario.mask))
    placement = PlacementService(state, event_bus, unit_stats=config.unit_stats)
    ai_service = AIService()
    controller = TurnController(
        state,
        placement,
        event_bus,
        scheduler=scheduler or AsyncioScheduler(),
        ai_service=ai_service,
        game_config=config.game,
    )
    router = Router()
    sessions = SessionHub(controller, event_bus)

    svc = Services(
        game_config=config.game,
        event_bus=event_bus,
        state=state,
        placement=placement,
        ai_service=ai_service,
        controller=controller,
        router=router,
        sessions=sessions,
    )
    register_all_handlers(svc)
    log.info("  all services created")
    return svc


# ===================================================================
# 3. Wire up event handlers
# ===================================================================


def wire_events(services: Services) -> None:
    """Register cross-cutting event listeners."""
    log.info("Wiring event handlers …")
    bus = services.event_bus

    # Defeated units are only reported; removal belongs to combat resolution
    bus.on(UnitDefeated, lambda evt: log.info("Unit %d defeated", evt.uid))

    log.info("  event handlers registered")


# ===================================================================
# 4. Populate the board
# ===================================================================


def populate(services: Services, scenario: Scenario) -> int:
    """Place the scenario's units.  Returns how many were placed."""
    placed = 0
    for entry in scenario.units:
        unit = services.placement.spawn_unit(entry.unit_type, entry.owner, entry.row, entry.col)
        if unit is None:
            log.warning("Could not place %s/%s at (%d, %d)",
                        entry.unit_type.value, entry.owner.value, entry.row, entry.col)
            continue
        placed += 1
    log.info("Placed %d of %d scenario units", placed, len(scenario.units))
    return placed


# ===================================================================
# 5. Serve
# ===================================================================


async def serve(services: Services) -> None:
    """Run the REST/WebSocket server until it is stopped."""
    from hextactics.network.rest_api import create_app
    import uvicorn

    gc = services.game_config
    app = create_app(services)
    config = uvicorn.Config(
        app,
        host=gc.host,
        port=gc.rest_port,
        log_level=gc.log_level.lower(),
        access_log=False,
    )
    server = uvicorn.Server(config)
    log.info("Serving on http://%s:%d", gc.host, gc.rest_port)
    await server.serve()
    log.info("Server stopped")


# ===================================================================
# Entry points
# ===================================================================


def build(config_path: str = DEFAULT_GAME_CONFIG_PATH) -> Services:
    """Load configuration and return fully wired, populated services."""
    config = load_configuration(config_path)
    services = create_services(config)
    wire_events(services)
    populate(services, config.scenario)
    return services


def main(argv: list[str] | None = None) -> None:
    """Entry point for the game server."""
    parser = argparse.ArgumentParser(description="Hex tactics game server")
    parser.add_argument("--config", default=DEFAULT_GAME_CONFIG_PATH,
                        help="path to the game YAML (default: %(default)s)")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    log.info("=== Hex Tactics starting ===")

    services = build(args.config)
    logging.getLogger().setLevel(services.game_config.log_level.upper())
    asyncio.run(serve(services))


if __name__ == "__main__":
    main()
