"""
Unit tests for the multi-trade project aggregator.

Tests cover:
- Pushing gross vs net sqft into each trade
- Per-room, per-trade overrides
- Enabling and disabling trades
- Destructive input mode switching
- Room, opening and custom wall mutations
"""

import pytest
from app.services.estimators import HangingEngine
from app.services.geometry import RoomShape
from app.services.project import InputMode, ProjectEstimate
from app.services.trade_estimate import TradeType


# ==================
# FIXTURES
# ==================

@pytest.fixture
def project():
    """One default 12×10×8 room with a standard door, all trades enabled."""
    project = ProjectEstimate()
    room = project.add_room("Bedroom")
    project.add_opening(room.id, "door", "standard_door")
    return project


@pytest.fixture
def room(project):
    return project.rooms[0]


# ==================
# SQFT PIPELINE
# ==================

class TestSqftSync:
    """Tests for what each trade engine receives."""

    def test_hanging_receives_gross_sqft(self, project):
        assert project.hanging.total_sqft == 472
        # ceil(472 × 1.12 / 32)
        assert project.hanging.sheet_count == 17

    def test_finishing_receives_net_sqft(self, project):
        assert project.finishing.total_sqft == 452

    def test_painting_receives_walls_and_ceiling(self, project):
        assert project.painting.wall_sqft == 332
        assert project.painting.ceiling_sqft == 120

    def test_combined_total_is_sum_of_enabled_trades(self, project):
        totals = project.project_totals()
        expected = sum(project.trade_totals(t).total for t in TradeType)
        assert totals.combined_total == pytest.approx(expected)
        assert set(totals.trades) == set(TradeType)

    def test_sync_is_idempotent(self, project):
        before = project.project_totals().combined_total
        project.sync_sqft_to_trades()
        project.sync_sqft_to_trades()
        assert project.project_totals().combined_total == pytest.approx(before)

    def test_missing_engine_counts_as_zero(self):
        hanging = HangingEngine()
        project = ProjectEstimate(engines={TradeType.DRYWALL_HANGING: hanging})
        project.add_room("Room")
        totals = project.project_totals()
        assert totals.trades[TradeType.PAINTING].total == 0
        assert totals.combined_total == pytest.approx(hanging.totals.total)


# ==================
# OVERRIDES
# ==================

class TestOverrides:
    """Tests for per-trade room overrides."""

    def test_excluded_room_only_affects_that_trade(self, project, room):
        project.set_room_override(room.id, TradeType.PAINTING, excluded=True)
        assert project.painting.total_sqft == 0
        assert project.painting.totals.total == 0
        assert project.finishing.total_sqft == 452

    def test_ceiling_off_for_finishing(self, project, room):
        project.set_room_override(room.id, TradeType.DRYWALL_FINISHING, include_ceiling=False)
        assert project.finishing.total_sqft == 332

    def test_unknown_room(self, project):
        assert project.set_room_override("missing", TradeType.PAINTING, excluded=True) is None

    def test_remove_room_drops_overrides(self, project, room):
        project.set_room_override(room.id, TradeType.PAINTING, excluded=True)
        project.remove_room(room.id)
        assert len(project.overrides) == 0
        assert project.finishing.total_sqft == 0

    def test_hanging_exclusion_keeps_sheet_split(self, project, room):
        hanging = project.hanging
        hanging.update_sheet(hanging.sheets[0].id, quantity=10)
        hanging.add_sheet("fire_5_8", "4x8", quantity=7)

        project.set_room_override(room.id, TradeType.DRYWALL_HANGING, excluded=True)
        project.set_room_override(room.id, TradeType.DRYWALL_HANGING, excluded=False)
        assert hanging.total_sqft == 472
        assert [s.quantity for s in hanging.sheets] == [10, 7]

    def test_resolved_defaults(self, project, room):
        override = project.get_room_override(room.id, TradeType.PAINTING)
        assert override.include_walls and override.include_ceiling


# ==================
# TRADE SELECTION
# ==================

class TestTradeSelection:
    """Tests for enabling and disabling trades."""

    def test_disable_removes_contribution(self, project):
        painting_total = project.trade_totals(TradeType.PAINTING).total
        before = project.project_totals().combined_total

        assert project.disable_trade(TradeType.PAINTING) is True
        totals = project.project_totals()
        assert TradeType.PAINTING not in totals.trades
        assert totals.combined_total == pytest.approx(before - painting_total)

    def test_reenable_restores_total(self, project):
        before = project.project_totals().combined_total
        project.toggle_trade(TradeType.PAINTING)
        project.toggle_trade(TradeType.PAINTING)
        assert project.project_totals().combined_total == pytest.approx(before)

    def test_last_trade_cannot_be_disabled(self):
        project = ProjectEstimate(enabled_trades=[TradeType.PAINTING])
        assert project.disable_trade(TradeType.PAINTING) is False
        assert project.enabled_trades == [TradeType.PAINTING]

    def test_enabled_trades_keep_fixed_order(self):
        project = ProjectEstimate(enabled_trades=[TradeType.PAINTING, TradeType.DRYWALL_HANGING])
        assert project.enabled_trades == [TradeType.DRYWALL_HANGING, TradeType.PAINTING]


# ==================
# INPUT MODE
# ==================

class TestInputMode:
    """Tests for switching between rooms and manual sqft."""

    def test_switch_to_manual_clears_rooms_and_resets_engines(self, project, room):
        project.painting.set_coat_count(3)
        project.set_room_override(room.id, TradeType.PAINTING, excluded=True)

        assert project.set_input_mode("manual") is True
        assert project.input_mode == InputMode.MANUAL
        assert project.rooms == []
        assert len(project.overrides) == 0
        assert project.painting.coat_count == 2
        assert project.hanging.sheets == []

    def test_manual_sqft_flows_to_trades(self, project):
        project.set_input_mode(InputMode.MANUAL)
        project.set_manual_wall_sqft(500)
        project.set_manual_ceiling_sqft(100)
        assert project.hanging.total_sqft == 600
        assert project.finishing.total_sqft == 600
        assert project.painting.wall_sqft == 500
        assert project.painting.ceiling_sqft == 100

    def test_switch_back_clears_manual_values(self, project):
        project.set_input_mode(InputMode.MANUAL)
        project.set_manual_wall_sqft(500)
        project.set_input_mode(InputMode.ROOMS)
        assert project.manual_wall_sqft == 0
        assert project.project_totals().combined_total == 0

    def test_same_mode_is_noop(self, project):
        assert project.set_input_mode("rooms") is False
        assert len(project.rooms) == 1


# ==================
# ROOM MUTATIONS
# ==================

class TestRoomMutations:
    """Tests for room, opening and wall edits."""

    def test_default_room_names_and_order(self, project):
        second = project.add_room()
        assert second.name == "Room 2"
        assert second.sort_order == 1

    def test_update_dimensions(self, project, room):
        project.update_room(room.id, length_feet=14, width_inches=15, height_feet="abc")
        assert room.length_feet == 14
        assert room.width_inches == 11
        assert room.height_feet == 8
        assert project.finishing.total_sqft == room.total_sqft

    def test_negative_dimension_clamps(self, project, room):
        project.update_room(room.id, length_feet=-4)
        assert room.length_feet == 0
        assert room.total_sqft >= 0

    def test_switch_to_l_shape(self, project, room):
        project.update_room(room.id, shape="l_shape")
        assert room.ceiling_sqft == 168
        assert room.gross_wall_sqft == 352

    def test_switch_to_custom_keeps_size(self, project, room):
        project.update_room(room.id, shape=RoomShape.CUSTOM, custom_ceiling_sqft=120)
        assert len(room.custom_walls) == 4
        assert room.gross_wall_sqft == 352
        assert room.ceiling_sqft == 120

    def test_last_custom_wall_kept(self, project, room):
        project.update_room(room.id, shape="custom")
        for wall in list(room.custom_walls):
            project.remove_custom_wall(room.id, wall.id)
        assert len(room.custom_walls) == 1

    def test_opening_quantity_below_one_rejected(self, project, room):
        door = room.doors[0]
        assert project.update_opening(room.id, door.id, quantity=0) is True
        assert door.quantity == 1
        project.update_opening(room.id, door.id, quantity=2)
        assert room.wall_sqft == 312

    def test_remove_opening(self, project, room):
        project.remove_opening(room.id, room.doors[0].id)
        assert project.finishing.total_sqft == 472

    def test_custom_opening(self, project, room):
        project.add_custom_opening(room.id, "window", 48, 36, quantity=2)
        assert room.openings_sqft == 44

    def test_reorder(self, project, room):
        second = project.add_room("Office")
        project.reorder_rooms([second.id, room.id])
        assert [r.name for r in project.rooms] == ["Office", "Bedroom"]
        assert room.sort_order == 1

    def test_records_roundtrip_recomputes_derived(self, project, room):
        records = project.room_records("proj_1")
        assert records[0]["project_id"] == "proj_1"
        records[0]["wall_sqft"] = 9999

        other = ProjectEstimate()
        other.load_rooms(records)
        assert other.rooms[0].wall_sqft == 332
        assert other.finishing.total_sqft == 452

    def test_reset(self, project):
        project.disable_trade(TradeType.PAINTING)
        project.reset()
        assert project.rooms == []
        assert project.enabled_trades == list(TradeType)
