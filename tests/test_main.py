"""Tests for startup wiring (configuration → services → populated board)."""

from __future__ import annotations

import logging

from hextactics.engine.scheduler import ManualScheduler
from hextactics.loaders.map_loader import Scenario, UnitPlacement
from hextactics.main import Configuration, build, create_services, populate, wire_events
from hextactics.models.unit import Owner, UnitType


def _write_config(tmp_path, units_yaml: str = "") -> str:
    map_path = tmp_path / "map.yaml"
    map_path.write_text(
        "mask:\n"
        "  - [1, 1, 1]\n"
        "  - [1, 0, 1]\n"
        "units:\n"
        "  - {type: knight, owner: player, row: 0, col: 0}\n"
        "  - {type: mage, owner: ai, row: 1, col: 2}\n"
        "  - {type: soldier, owner: ai, row: 1, col: 1}\n"
    )
    units_path = tmp_path / "units.yaml"
    units_path.write_text(units_yaml)
    game_path = tmp_path / "game.yaml"
    game_path.write_text(
        f"map_path: {map_path}\n"
        f"units_path: {units_path}\n"
        "ai_turn_delay_ms: 100\n"
    )
    return str(game_path)


class TestBuild:
    def test_build_from_files(self, tmp_path):
        services = build(_write_config(tmp_path))
        assert services.game_config.ai_turn_delay_ms == 100
        assert services.state.grid.rows == 2
        # The soldier on the hole is skipped
        assert len(services.state.roster) == 2
        assert services.state.unit_at(0, 0).unit_type is UnitType.KNIGHT

    def test_unit_stats_from_file(self, tmp_path):
        services = build(_write_config(tmp_path, "knight: {movement: 1}\n"))
        assert services.state.unit_at(0, 0).movement == 1

    def test_all_handlers_registered(self, tmp_path):
        services = build(_write_config(tmp_path))
        assert set(services.router.registered_types) == {
            "state_request", "select_or_toggle_at", "request_move",
            "end_turn", "range_request",
        }


class TestPopulate:
    def test_populate_counts_placed_units(self):
        scenario = Scenario(
            mask=[[1, 1]],
            units=[
                UnitPlacement(UnitType.SOLDIER, Owner.PLAYER, 0, 0),
                UnitPlacement(UnitType.SOLDIER, Owner.AI, 0, 0),
                UnitPlacement(UnitType.ARCHER, Owner.AI, 0, 1),
            ],
        )
        services = create_services(Configuration(scenario=scenario), scheduler=ManualScheduler())
        assert populate(services, scenario) == 2


class TestWireEvents:
    def test_defeat_is_logged(self, caplog):
        services = create_services(Configuration(), scheduler=ManualScheduler())
        wire_events(services)
        unit = services.placement.spawn_unit(UnitType.MAGE, Owner.AI, 0, 0)
        with caplog.at_level(logging.INFO, logger="hextactics.main"):
            services.controller.damage_unit(unit, 100)
        assert f"Unit {unit.uid} defeated" in caplog.text
