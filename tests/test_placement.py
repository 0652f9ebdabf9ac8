"""Tests for PlacementService — roster and occupancy."""

from hextactics.engine.placement_service import PlacementService
from hextactics.models.game_state import GameState
from hextactics.models.grid import HexGrid
from hextactics.models.hex import NOT_PLACED, OffsetCoord
from hextactics.models.unit import Owner, UnitType, create_unit
from hextactics.util.constants import DEFAULT_MASK
from hextactics.util.events import EventBus, UnitPlaced, UnitRemoved
from hextactics.util.rejections import Rejection


def _make_service(mask=None, bus=None) -> PlacementService:
    state = GameState(grid=HexGrid.from_mask(mask or DEFAULT_MASK))
    return PlacementService(state, bus)


class TestRoster:
    def test_add_unit(self):
        svc = _make_service()
        u = create_unit(UnitType.SOLDIER, Owner.PLAYER, uid=1)
        assert svc.add_unit(u)
        assert svc.state.roster.contains(u)
        assert len(svc.state.roster) == 1

    def test_add_is_idempotent(self):
        svc = _make_service()
        u = create_unit(UnitType.SOLDIER, Owner.PLAYER, uid=1)
        svc.add_unit(u)
        assert svc.add_unit(u)
        assert len(svc.state.roster) == 1

    def test_add_refuses_taken_id(self):
        svc = _make_service()
        svc.add_unit(create_unit(UnitType.SOLDIER, Owner.PLAYER, uid=1))
        other = create_unit(UnitType.MAGE, Owner.AI, uid=1)
        assert not svc.add_unit(other)
        assert not svc.state.roster.contains(other)

    def test_next_uid_skips_taken(self):
        svc = _make_service()
        svc.add_unit(create_unit(UnitType.SOLDIER, Owner.PLAYER, uid=1))
        assert svc.state.roster.next_uid() == 2

    def test_remove_absent_unit(self):
        svc = _make_service()
        u = create_unit(UnitType.SOLDIER, Owner.PLAYER, uid=1)
        assert not svc.remove_unit(u)

    def test_remove_clears_cell_and_selection(self):
        svc = _make_service()
        u = create_unit(UnitType.SOLDIER, Owner.PLAYER, uid=1)
        svc.place_unit(u, 0, 0)
        svc.state.selected_uid = u.uid
        svc.state.grid.get(0, 1).is_highlighted = True

        assert svc.remove_unit(u)
        assert svc.state.grid.get(0, 0).unit_id is None
        assert svc.state.selected_uid is None
        assert svc.state.grid.highlighted() == []
        assert u.position == NOT_PLACED
        assert len(svc.state.roster) == 0

    def test_remove_keeps_other_selection(self):
        svc = _make_service()
        a = create_unit(UnitType.SOLDIER, Owner.PLAYER, uid=1)
        b = create_unit(UnitType.SOLDIER, Owner.PLAYER, uid=2)
        svc.place_unit(a, 0, 0)
        svc.place_unit(b, 0, 2)
        svc.state.selected_uid = b.uid
        svc.remove_unit(a)
        assert svc.state.selected_uid == b.uid


class TestPlace:
    def test_place_sets_both_sides(self):
        svc = _make_service()
        u = create_unit(UnitType.SOLDIER, Owner.PLAYER, uid=1)
        assert svc.place_unit(u, 2, 2)
        assert u.position == OffsetCoord(2, 2)
        assert svc.state.grid.get(2, 2).unit_id == u.uid
        assert svc.state.unit_at(2, 2) is u

    def test_place_adds_to_roster(self):
        svc = _make_service()
        u = create_unit(UnitType.SOLDIER, Owner.PLAYER, uid=1)
        svc.place_unit(u, 2, 2)
        assert svc.state.roster.contains(u)

    def test_place_does_not_spend_movement(self):
        svc = _make_service()
        u = create_unit(UnitType.KNIGHT, Owner.PLAYER, uid=1)
        svc.place_unit(u, 0, 0)
        svc.place_unit(u, 4, 4)
        assert u.movement_remaining == u.movement

    def test_replace_vacates_old_cell(self):
        svc = _make_service()
        u = create_unit(UnitType.SOLDIER, Owner.PLAYER, uid=1)
        svc.place_unit(u, 0, 0)
        assert svc.place_unit(u, 3, 3)
        assert svc.state.grid.get(0, 0).unit_id is None
        assert svc.state.grid.get(3, 3).unit_id == u.uid

    def test_place_on_invisible_fails(self):
        svc = _make_service()
        u = create_unit(UnitType.SOLDIER, Owner.PLAYER, uid=1)
        assert not svc.place_unit(u, 1, 1)
        assert u.position == NOT_PLACED
        assert len(svc.state.roster) == 0

    def test_place_out_of_bounds_fails(self):
        svc = _make_service()
        u = create_unit(UnitType.SOLDIER, Owner.PLAYER, uid=1)
        assert not svc.place_unit(u, 6, 0)
        assert len(svc.state.roster) == 0

    def test_place_on_occupied_fails_without_side_effects(self):
        svc = _make_service()
        a = create_unit(UnitType.SOLDIER, Owner.PLAYER, uid=1)
        b = create_unit(UnitType.SOLDIER, Owner.AI, uid=2)
        svc.place_unit(a, 0, 0)
        svc.place_unit(b, 3, 3)
        assert not svc.place_unit(b, 0, 0)
        assert b.position == OffsetCoord(3, 3)
        assert svc.state.grid.get(3, 3).unit_id == b.uid
        assert svc.state.grid.get(0, 0).unit_id == a.uid

    def test_check_target_reasons(self):
        svc = _make_service()
        svc.place_unit(create_unit(UnitType.SOLDIER, Owner.PLAYER, uid=1), 0, 0)
        assert svc.check_target(-1, 0) is Rejection.OUT_OF_BOUNDS
        assert svc.check_target(1, 1) is Rejection.CELL_INVISIBLE
        assert svc.check_target(0, 0) is Rejection.CELL_OCCUPIED
        assert svc.check_target(0, 1) is None


class TestSpawn:
    def test_spawn_creates_and_places(self):
        svc = _make_service()
        u = svc.spawn_unit(UnitType.ARCHER, Owner.AI, 4, 4)
        assert u is not None
        assert u.unit_type is UnitType.ARCHER
        assert svc.state.unit_at(4, 4) is u

    def test_spawn_on_blocked_cell(self):
        svc = _make_service()
        assert svc.spawn_unit(UnitType.ARCHER, Owner.AI, 1, 1) is None
        assert len(svc.state.roster) == 0

    def test_spawn_ids_unique(self):
        svc = _make_service()
        a = svc.spawn_unit(UnitType.SOLDIER, Owner.PLAYER, 0, 0)
        b = svc.spawn_unit(UnitType.SOLDIER, Owner.PLAYER, 0, 1)
        assert a.uid != b.uid


class TestPlacementEvents:
    def test_events_emitted(self):
        bus = EventBus()
        seen = []
        bus.on(UnitPlaced, seen.append)
        bus.on(UnitRemoved, seen.append)
        svc = _make_service(bus=bus)
        u = create_unit(UnitType.SOLDIER, Owner.PLAYER, uid=5)
        svc.place_unit(u, 0, 0)
        svc.remove_unit(u)
        assert seen == [UnitPlaced(uid=5, row=0, col=0), UnitRemoved(uid=5)]

    def test_no_event_on_failure(self):
        bus = EventBus()
        seen = []
        bus.on(UnitPlaced, seen.append)
        svc = _make_service(bus=bus)
        svc.place_unit(create_unit(UnitType.SOLDIER, Owner.PLAYER, uid=5), 1, 1)
        assert seen == []
