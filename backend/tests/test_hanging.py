"""
Unit tests for the drywall hanging estimator.

Tests cover:
- Sheet count calculation with waste
- Sheet allocation and proportional rescaling
- Material/labor with overrides, client-supplied materials and ceiling factor
- Per-sqft pricing and complexity
"""

import pytest
from app.services.estimators.hanging import (
    HangingEngine,
    PricingMethod,
    calculate_sheets_needed,
)
from app.services.profile import PricingProfile


# ==================
# FIXTURES
# ==================

@pytest.fixture
def engine():
    """Hanging engine at the default 12% waste."""
    return HangingEngine()


@pytest.fixture
def engine_452(engine):
    """452 sqft → ceil(452 × 1.12 / 32) = 16 standard 4x8 sheets."""
    engine.set_sqft(452)
    return engine


# ==================
# SHEET COUNT
# ==================

class TestSheetsNeeded:
    """Tests for calculate_sheets_needed."""

    def test_ten_percent_waste(self):
        assert calculate_sheets_needed(452, "4x8", 0.10) == 16

    def test_twelve_percent_waste(self):
        assert calculate_sheets_needed(320, "4x8", 0.12) == 12

    def test_exact_fit_is_not_rounded_up_by_float_noise(self):
        assert calculate_sheets_needed(400, "4x10", 0.10) == 11

    def test_zero_sqft(self):
        assert calculate_sheets_needed(0, "4x8", 0.12) == 0


# ==================
# ALLOCATION
# ==================

class TestAllocation:
    """Tests for sheet allocation when sqft or waste changes."""

    def test_first_sqft_creates_default_sheet(self, engine_452):
        assert len(engine_452.sheets) == 1
        sheet = engine_452.sheets[0]
        assert sheet.type_id == "standard_half"
        assert sheet.size == "4x8"
        assert sheet.quantity == 16

    def test_zero_sqft_creates_nothing(self, engine):
        engine.set_sqft(0)
        assert engine.sheets == []

    def test_single_sheet_absorbs_new_total(self, engine_452):
        engine_452.set_waste_factor(0.15)
        assert engine_452.sheets[0].quantity == 17

    def test_multiple_sheets_rescale_proportionally(self, engine_452):
        first = engine_452.sheets[0]
        engine_452.update_sheet(first.id, quantity=8)
        engine_452.add_sheet("moisture_half", "4x8", quantity=8)

        # ceil(452 × 1.5 / 32) = 22, ratio 22 / 16
        engine_452.set_waste_factor(0.5)
        assert [s.quantity for s in engine_452.sheets] == [11, 11]

    def test_repeated_sync_keeps_manual_quantities(self, engine_452):
        sheet = engine_452.sheets[0]
        engine_452.update_sheet(sheet.id, quantity=20)
        engine_452.set_sqft(452)
        assert sheet.quantity == 20

    def test_zero_sqft_keeps_sheet_split(self, engine_452):
        first = engine_452.sheets[0]
        engine_452.update_sheet(first.id, quantity=10)
        engine_452.add_sheet("moisture_half", "4x8", quantity=6)

        engine_452.set_sqft(0)
        assert [s.quantity for s in engine_452.sheets] == [10, 6]

        engine_452.set_sqft(452)
        assert [s.quantity for s in engine_452.sheets] == [10, 6]

    def test_split_rescales_after_zero_sqft(self, engine_452):
        first = engine_452.sheets[0]
        engine_452.update_sheet(first.id, quantity=10)
        engine_452.add_sheet("moisture_half", "4x8", quantity=6)

        engine_452.set_sqft(0)
        # ceil(600 × 1.12 / 32) = 21, ratio 21 / 16
        engine_452.set_sqft(600)
        assert [s.quantity for s in engine_452.sheets] == [13, 8]

    def test_waste_is_clamped(self, engine):
        engine.set_waste_factor(-1)
        assert engine.waste_factor == 0
        engine.set_waste_factor(3)
        assert engine.waste_factor == 1
        engine.set_waste_factor("lots")
        assert engine.waste_factor == 1


# ==================
# PRICING
# ==================

class TestPricing:
    """Tests for material and labor subtotals."""

    def test_default_sheet_costs(self, engine_452):
        sheet = engine_452.sheets[0]
        # $12 × 1.15 markup, 0.85 × 32 sqft × 1.0
        assert sheet.material_cost.effective() == pytest.approx(13.8)
        assert sheet.labor_cost.effective() == pytest.approx(27.2)

    def test_totals(self, engine_452):
        totals = engine_452.totals
        assert totals.material_subtotal == pytest.approx(220.8)
        assert totals.labor_subtotal == pytest.approx(435.2)
        assert totals.total == pytest.approx(656.0)

    def test_client_supplies_materials_wins(self, engine_452):
        sheet = engine_452.sheets[0]
        engine_452.set_client_supplies_materials(True)
        assert engine_452.material_subtotal() == 0
        assert sheet.include_material is True

        engine_452.set_client_supplies_materials(False)
        assert engine_452.material_subtotal() == pytest.approx(220.8)

    def test_per_sheet_material_flag(self, engine_452):
        extra = engine_452.add_sheet("fire_5_8", "4x8", quantity=2)
        engine_452.set_sheet_include_material(extra.id, False)
        assert engine_452.material_subtotal() == pytest.approx(220.8)

    def test_ceiling_factor_only_affects_labor(self, engine_452):
        engine_452.set_ceiling_factor("cathedral")
        assert engine_452.material_subtotal() == pytest.approx(220.8)
        assert engine_452.labor_subtotal() == pytest.approx(435.2 * 1.35)

    def test_unknown_ceiling_factor_ignored(self, engine_452):
        engine_452.set_ceiling_factor("skyscraper")
        assert engine_452.ceiling_factor == "standard"

    def test_override_and_revert(self, engine_452):
        sheet = engine_452.sheets[0]
        engine_452.set_sheet_material_cost_override(sheet.id, 10)
        assert sheet.has_override
        assert engine_452.material_subtotal() == pytest.approx(160)

        engine_452.set_sheet_material_cost_override(sheet.id, None)
        assert not sheet.has_override
        assert sheet.material_cost.effective() == pytest.approx(13.8)

    def test_type_change_resets_costs(self, engine_452):
        sheet = engine_452.sheets[0]
        engine_452.set_sheet_labor_cost_override(sheet.id, 50)
        engine_452.update_sheet(sheet.id, type_id="soundproof_5_8")
        assert not sheet.has_override
        assert sheet.material_cost.effective() == pytest.approx(55 * 1.15)
        assert sheet.labor_cost.effective() == pytest.approx(0.85 * 32 * 1.5)

    def test_size_change_refreshes_labor(self, engine_452):
        sheet = engine_452.sheets[0]
        engine_452.update_sheet(sheet.id, size="4x12")
        assert sheet.labor_cost.effective() == pytest.approx(0.85 * 48)

    def test_per_sqft_pricing(self, engine_452):
        engine_452.set_pricing_method(PricingMethod.PER_SQFT)
        assert engine_452.material_subtotal() == 0
        assert engine_452.labor_subtotal() == pytest.approx(452 * 0.85)

    def test_direct_hours_add_labor(self, engine_452):
        engine_452.set_direct_hours(2)
        assert engine_452.labor_subtotal() == pytest.approx(435.2 + 150)

    def test_complexity_then_addons(self, engine_452):
        engine_452.set_complexity("complex")
        engine_452.toggle_addon("delivery")
        assert engine_452.totals.total == pytest.approx(656.0 * 1.25 + 75)

    def test_sqft_addon_defaults_to_trade_sqft(self, engine_452):
        engine_452.toggle_addon("stocking")
        assert engine_452.addons.get("stocking").quantity == 452

    def test_profile_labor_rate(self):
        engine = HangingEngine(PricingProfile(custom_rates={
            "drywall_hanging": {"labor_per_sqft": 1.0},
        }))
        engine.set_sqft(452)
        assert engine.sheets[0].labor_cost.effective() == 32

    def test_reset(self, engine_452):
        engine_452.set_complexity("complex")
        engine_452.reset()
        assert engine_452.sheets == []
        assert engine_452.totals.total == 0
        assert engine_452.complexity.value == "standard"
