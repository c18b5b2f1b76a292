"""
Unit tests for the addon engine.

Tests cover:
- Toggle semantics and default quantities
- Price overrides and clearing them
- Quantity validation
- Custom addons
"""

import pytest
from app.services.addons import AddonEngine, AddonUnit, default_quantity_for
from app.services.profile import PricingProfile
from app.services.trade_estimate import TradeType


# ==================
# FIXTURES
# ==================

CATALOG = {
    "delivery": {"name": "Delivery", "price": 75.0, "unit": "flat", "category": "logistics"},
    "texture": {"name": "Texture", "price": 0.35, "unit": "sqft", "category": "finish"},
    "corner_bead": {"name": "Corner Bead", "price": 2.5, "unit": "linear_ft"},
}


@pytest.fixture
def engine():
    return AddonEngine(TradeType.DRYWALL_FINISHING, CATALOG)


# ==================
# TOGGLE
# ==================

class TestToggle:
    """Tests for adding and removing catalog addons."""

    def test_toggle_on_and_off_restores_state(self, engine):
        assert engine.toggle("delivery") is True
        assert "delivery" in engine
        assert engine.subtotal == 75

        assert engine.toggle("delivery") is False
        assert "delivery" not in engine
        assert engine.subtotal == 0
        assert len(engine) == 0

    def test_unknown_addon_is_ignored(self, engine):
        assert engine.toggle("helicopter") is False
        assert len(engine) == 0

    def test_toggle_uses_given_quantity(self, engine):
        engine.toggle("texture", 452)
        assert engine.get("texture").quantity == 452
        assert engine.subtotal == pytest.approx(158.2)

    def test_profile_price_replaces_catalog_price(self):
        profile = PricingProfile(custom_rates={
            "drywall_finishing": {"addons": {"delivery": 90}},
        })
        engine = AddonEngine(TradeType.DRYWALL_FINISHING, CATALOG, profile)
        engine.toggle("delivery")
        assert engine.get("delivery").price.default == 90


class TestDefaultQuantity:
    """Tests for the default quantity of a freshly toggled addon."""

    def test_area_and_length_units_use_sqft(self):
        assert default_quantity_for(AddonUnit.SQFT, 452.4) == 452
        assert default_quantity_for(AddonUnit.LINEAR_FT, 452.5) == 453

    def test_other_units_start_at_one(self):
        assert default_quantity_for(AddonUnit.FLAT, 452) == 1
        assert default_quantity_for(AddonUnit.EACH, 452) == 1

    def test_negative_sqft_gives_zero(self):
        assert default_quantity_for(AddonUnit.SQFT, -10) == 0


# ==================
# QUANTITY AND PRICE
# ==================

class TestQuantityAndPrice:
    """Tests for quantity edits and price overrides."""

    def test_update_quantity(self, engine):
        engine.toggle("corner_bead")
        assert engine.update_quantity("corner_bead", 40) is True
        assert engine.subtotal == 100

    @pytest.mark.parametrize("bad", [0, -3, "abc", None])
    def test_invalid_quantity_is_rejected(self, engine, bad):
        engine.toggle("corner_bead", 10)
        engine.update_quantity("corner_bead", bad)
        assert engine.get("corner_bead").quantity == 10

    def test_override_then_clear_restores_default(self, engine):
        engine.toggle("delivery")
        engine.set_price_override("delivery", 120)
        item = engine.get("delivery")
        assert item.price.has_override
        assert engine.subtotal == 120

        engine.set_price_override("delivery", None)
        assert not item.price.has_override
        assert item.price.effective() == 75

    def test_override_on_unselected_addon(self, engine):
        assert engine.set_price_override("delivery", 10) is False

    def test_negative_override_clamped_to_zero(self, engine):
        engine.toggle("delivery")
        engine.set_price_override("delivery", -20)
        assert engine.get("delivery").price.effective() == 0


# ==================
# CUSTOM ADDONS
# ==================

class TestCustomAddons:
    """Tests for user-defined addons."""

    def test_add_custom(self, engine):
        addon = engine.add_custom("Scaffold rental", 200, unit="each", quantity=2)
        assert addon.is_custom
        assert addon.unit == AddonUnit.EACH
        assert engine.subtotal == 400

    def test_custom_price_edit_has_no_override(self, engine):
        addon = engine.add_custom("Cleanup", 50)
        engine.set_price_override(addon.addon_id, 80)
        assert addon.price.effective() == 80
        assert not addon.price.has_override

    def test_update_and_remove_custom(self, engine):
        addon = engine.add_custom("Cleanup", 50)
        engine.update_custom(addon.addon_id, name="Final cleanup", quantity=3)
        assert addon.name == "Final cleanup"
        assert engine.subtotal == 150

        assert engine.remove_custom(addon.addon_id) is True
        assert engine.subtotal == 0

    def test_catalog_addon_is_not_custom(self, engine):
        engine.toggle("delivery")
        assert engine.remove_custom("delivery") is False
        assert engine.update_custom("delivery", name="x") is False

    def test_subtotal_mixes_catalog_and_custom(self, engine):
        engine.toggle("delivery")
        engine.add_custom("Permit", 25)
        assert engine.subtotal == 100
        assert len(engine.snapshot()) == 2
