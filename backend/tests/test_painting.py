"""
Unit tests for the painting estimator.

Reference job: 332 sqft walls + 120 sqft ceiling, 2 coats (×1.8),
standard paint, no prep:
- material = 452 × 0.50 × 1.8 = 406.8
- labor = (332 × 1.75 + 120 × 1.75 × 1.2) × 1.8 = 1499.4
"""

import pytest
from app.services.estimators.painting import PaintingEngine
from app.services.geometry import create_opening, create_room, recalculate_room
from app.services.trade_estimate import TradeType
from app.services.trade_rooms import RoomOverride, create_trade_room_view


@pytest.fixture
def engine():
    engine = PaintingEngine()
    engine.set_wall_sqft(332)
    engine.set_ceiling_sqft(120)
    return engine


class TestPaintingTotals:
    """Tests for coverage-based pricing."""

    def test_two_coats_standard(self, engine):
        assert engine.material_subtotal() == pytest.approx(406.8)
        assert engine.labor_subtotal() == pytest.approx(1499.4)
        assert engine.totals.total == pytest.approx(1906.2)

    def test_complex_job_with_addon(self, engine):
        engine.set_complexity("complex")
        engine.toggle_addon("furniture_moving")
        assert engine.totals.total == pytest.approx((406.8 + 1499.4) * 1.25 + 100)

    def test_single_coat(self, engine):
        engine.set_coat_count(1)
        assert engine.material_subtotal() == pytest.approx(226)
        assert engine.labor_subtotal() == pytest.approx(833)

    def test_invalid_coat_count_ignored(self, engine):
        engine.set_coat_count(7)
        engine.set_coat_count("two")
        assert engine.coat_count == 2

    def test_quality_affects_material_only(self, engine):
        engine.set_paint_quality("premium")
        assert engine.material_subtotal() == pytest.approx(406.8 * 1.4)
        assert engine.labor_subtotal() == pytest.approx(1499.4)

    def test_surface_prep_is_not_coat_multiplied(self, engine):
        engine.set_surface_prep("heavy")
        assert engine.prep_subtotal == pytest.approx(452 * 0.35)
        assert engine.labor_subtotal() == pytest.approx(1499.4 + 158.2)

    def test_direct_hours_without_rooms(self):
        engine = PaintingEngine()
        engine.set_direct_hours(3)
        assert engine.material_subtotal() == 0
        assert engine.labor_subtotal() == 225

    def test_sqft_addon_defaults_to_total_sqft(self, engine):
        engine.toggle_addon("wallpaper_removal")
        assert engine.addons.get("wallpaper_removal").quantity == 452


class TestSetFromRooms:
    """Tests for summing room views."""

    def test_sums_effective_values(self):
        first = create_room("Bedroom")
        first.doors.append(create_opening("standard_door", "Door", 36, 80))
        recalculate_room(first)
        second = create_room("Office")

        views = [
            create_trade_room_view(first, TradeType.PAINTING),
            create_trade_room_view(
                second,
                TradeType.PAINTING,
                RoomOverride(second.id, TradeType.PAINTING, include_walls=False),
            ),
        ]
        engine = PaintingEngine()
        engine.set_from_rooms(views)
        assert engine.wall_sqft == 332
        assert engine.ceiling_sqft == 240
