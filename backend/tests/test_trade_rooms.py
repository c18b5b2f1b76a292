"""
Unit tests for per-trade room views and the override store.
"""

import pytest
from app.services.geometry import create_opening, create_room, recalculate_room
from app.services.trade_estimate import TradeType
from app.services.trade_rooms import (
    RoomOverride,
    RoomOverrideStore,
    create_trade_room_view,
    create_trade_room_views,
)


@pytest.fixture
def room():
    """Default 12×10×8 room with one door: net walls 332, gross 352, ceiling 120."""
    room = create_room("Bedroom")
    room.doors.append(create_opening("standard_door", "Door", 36, 80))
    return recalculate_room(room)


class TestTradeRoomView:
    """Tests for effective sqft under overrides."""

    def test_defaults_include_walls_and_ceiling(self, room):
        view = create_trade_room_view(room, TradeType.PAINTING)
        assert view.effective_wall_sqft == 332
        assert view.effective_ceiling_sqft == 120
        assert view.effective_total_sqft == 452

    def test_excluded_room_contributes_zero_but_keeps_raw_fields(self, room):
        override = RoomOverride(room.id, TradeType.PAINTING, excluded=True)
        view = create_trade_room_view(room, TradeType.PAINTING, override)
        assert view.effective_total_sqft == 0
        assert view.effective_gross_total_sqft == 0
        assert view.room.wall_sqft == 332
        assert view.to_dict()["ceiling_sqft"] == 120

    def test_walls_and_ceiling_are_independent(self, room):
        ceiling_only = RoomOverride(room.id, TradeType.PAINTING, include_walls=False)
        view = create_trade_room_view(room, TradeType.PAINTING, ceiling_only)
        assert view.effective_wall_sqft == 0
        assert view.effective_ceiling_sqft == 120

        walls_only = RoomOverride(room.id, TradeType.PAINTING, include_ceiling=False)
        view = create_trade_room_view(room, TradeType.PAINTING, walls_only)
        assert view.effective_total_sqft == 332

    def test_hanging_uses_gross_coverage(self, room):
        view = create_trade_room_view(room, TradeType.DRYWALL_HANGING)
        assert view.effective_gross_total_sqft == 472
        assert view.coverage_sqft == 472

    def test_other_trades_use_net_coverage(self, room):
        for trade in (TradeType.DRYWALL_FINISHING, TradeType.PAINTING):
            assert create_trade_room_view(room, trade).coverage_sqft == 452


class TestRoomOverrideStore:
    """Tests for the (room, trade) keyed override table."""

    def test_missing_override_resolves_to_defaults(self):
        store = RoomOverrideStore()
        assert store.get("r1", TradeType.PAINTING) is None
        resolved = store.resolve("r1", TradeType.PAINTING)
        assert resolved.excluded is False
        assert resolved.include_walls is True
        assert resolved.include_ceiling is True
        assert len(store) == 0

    def test_created_lazily_once_per_pair(self):
        store = RoomOverrideStore()
        first = store.set("r1", TradeType.PAINTING, excluded=True)
        second = store.set("r1", TradeType.PAINTING, include_ceiling=False)
        assert first is second
        assert len(store) == 1
        assert second.excluded is True
        assert second.include_ceiling is False

    def test_trades_are_not_shared(self):
        store = RoomOverrideStore()
        store.set("r1", TradeType.PAINTING, excluded=True)
        assert store.resolve("r1", TradeType.DRYWALL_FINISHING).excluded is False

    def test_remove_room(self):
        store = RoomOverrideStore()
        store.set("r1", TradeType.PAINTING, excluded=True)
        store.set("r1", TradeType.DRYWALL_HANGING, include_walls=False)
        store.set("r2", TradeType.PAINTING, excluded=True)
        store.remove_room("r1")
        assert len(store) == 1
        assert store.for_room("r1") == []

    def test_views_read_through_store(self, room):
        store = RoomOverrideStore()
        store.set(room.id, TradeType.DRYWALL_FINISHING, include_ceiling=False)
        views = create_trade_room_views([room], TradeType.DRYWALL_FINISHING, store)
        assert views[0].effective_total_sqft == 332
