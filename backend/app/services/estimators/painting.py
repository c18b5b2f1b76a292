"""
Painting Estimator

Formulas:
- Material = (wall + ceiling) × material rate × coat multiplier × quality multiplier
- Labor = (wall × labor rate + ceiling × labor rate × ceiling modifier) × coat multiplier
          + (wall + ceiling) × surface prep cost + direct hours × hourly rate

Wall and ceiling sqft are pushed in from the rooms; without rooms, direct
hours carry the labor.
"""

import logging
from enum import Enum
from typing import Any, Dict, Iterable

from app.services.estimators.base import BaseTradeEngine
from app.services.trade_estimate import TradeType, coerce_number, parse_enum

logger = logging.getLogger(__name__)


class PaintQuality(str, Enum):
    STANDARD = "standard"
    PREMIUM = "premium"
    SPECIALTY = "specialty"


class SurfacePrep(str, Enum):
    NONE = "none"
    LIGHT = "light"
    HEAVY = "heavy"


COAT_OPTIONS = {
    1: {"label": "1 Coat", "description": "Touch-up or color refresh", "multiplier": 1.0},
    2: {"label": "2 Coats", "description": "Standard coverage", "multiplier": 1.8},
    3: {"label": "3 Coats", "description": "Primer + 2 coats for new drywall", "multiplier": 2.5},
}

DEFAULT_COAT_COUNT = 2

PAINT_QUALITY = {
    PaintQuality.STANDARD: {"label": "Standard", "material_multiplier": 1.0},
    PaintQuality.PREMIUM: {"label": "Premium", "material_multiplier": 1.4},
    PaintQuality.SPECIALTY: {"label": "Specialty", "material_multiplier": 2.0},
}

# Additional labor per sqft
SURFACE_PREP = {
    SurfacePrep.NONE: {"label": "Minimal", "cost_per_sqft": 0.0},
    SurfacePrep.LIGHT: {"label": "Light Prep", "cost_per_sqft": 0.15},
    SurfacePrep.HEAVY: {"label": "Heavy Prep", "cost_per_sqft": 0.35},
}

PAINTING_RATES = {
    "labor_per_sqft": 1.75,
    "material_per_sqft": 0.50,
    "ceiling_modifier": 1.2,  # Ceilings cost more to paint
}

PAINTING_ADDONS = {
    "trim_paint": {"name": "Trim & Baseboards", "price": 2.50, "unit": "linear_ft"},
    "door_paint": {"name": "Door Painting", "price": 75, "unit": "each"},
    "cabinet_paint": {"name": "Cabinet Painting", "price": 150, "unit": "each"},
    "ceiling_texture": {"name": "Ceiling Texture", "price": 0.50, "unit": "sqft"},
    "accent_wall": {"name": "Accent Wall (different color)", "price": 0.25, "unit": "sqft"},
    "wallpaper_removal": {"name": "Wallpaper Removal", "price": 1.50, "unit": "sqft"},
    "high_ceiling": {"name": "High Ceiling Premium (10ft+)", "price": 0.20, "unit": "sqft"},
    "furniture_moving": {"name": "Furniture Moving", "price": 100, "unit": "flat"},
}


class PaintingEngine(BaseTradeEngine):
    """Coverage-based painting estimate."""

    trade_type = TradeType.PAINTING
    addon_catalog = PAINTING_ADDONS

    def _reset_config(self) -> None:
        self.wall_sqft = 0.0
        self.ceiling_sqft = 0.0
        self.coat_count = DEFAULT_COAT_COUNT
        self.paint_quality = PaintQuality.STANDARD
        self.surface_prep = SurfacePrep.NONE

    # ==================
    # RATES
    # ==================

    def _rate(self, key: str) -> float:
        return self.profile.rate(self.trade_type, key, PAINTING_RATES[key])

    @property
    def coat_multiplier(self) -> float:
        return self.profile.table_rate(
            self.trade_type, "coats", str(self.coat_count), COAT_OPTIONS[self.coat_count]["multiplier"]
        )

    @property
    def quality_multiplier(self) -> float:
        return PAINT_QUALITY[self.paint_quality]["material_multiplier"]

    @property
    def prep_cost_per_sqft(self) -> float:
        return self.profile.table_rate(
            self.trade_type,
            "surface_prep",
            self.surface_prep.value,
            SURFACE_PREP[self.surface_prep]["cost_per_sqft"],
        )

    # ==================
    # SQFT
    # ==================

    @property
    def total_sqft(self) -> float:
        return self.wall_sqft + self.ceiling_sqft

    @property
    def coverage_sqft(self) -> float:
        return self.total_sqft

    def set_wall_sqft(self, sqft: Any) -> None:
        self.wall_sqft = coerce_number(sqft, self.wall_sqft)

    def set_ceiling_sqft(self, sqft: Any) -> None:
        self.ceiling_sqft = coerce_number(sqft, self.ceiling_sqft)

    def set_from_rooms(self, views: Iterable) -> None:
        """Sum effective wall and ceiling sqft of the painting room views."""
        views = list(views)
        self.wall_sqft = sum(v.effective_wall_sqft for v in views)
        self.ceiling_sqft = sum(v.effective_ceiling_sqft for v in views)

    # ==================
    # SETTINGS
    # ==================

    def set_coat_count(self, coats: Any) -> None:
        try:
            coats = int(coats)
        except (TypeError, ValueError):
            logger.debug(f"Ignoring coat count {coats!r}")
            return
        if coats not in COAT_OPTIONS:
            logger.debug(f"Ignoring coat count {coats!r}")
            return
        self.coat_count = coats

    def set_paint_quality(self, quality: Any) -> None:
        self.paint_quality = parse_enum(PaintQuality, quality, self.paint_quality)

    def set_surface_prep(self, prep: Any) -> None:
        self.surface_prep = parse_enum(SurfacePrep, prep, self.surface_prep)

    # ==================
    # TOTALS
    # ==================

    def material_subtotal(self) -> float:
        return (
            self.total_sqft
            * self._rate("material_per_sqft")
            * self.coat_multiplier
            * self.quality_multiplier
        )

    @property
    def prep_subtotal(self) -> float:
        return self.total_sqft * self.prep_cost_per_sqft

    def labor_subtotal(self) -> float:
        labor_rate = self._rate("labor_per_sqft")
        coverage_labor = (
            self.wall_sqft * labor_rate
            + self.ceiling_sqft * labor_rate * self._rate("ceiling_modifier")
        )
        return coverage_labor * self.coat_multiplier + self.prep_subtotal + self.direct_labor_cost

    def _trade_parameters(self) -> Dict[str, Any]:
        return {
            "coat_count": self.coat_count,
            "paint_quality": self.paint_quality.value,
            "surface_prep": self.surface_prep.value,
            "wall_sqft": round(self.wall_sqft, 2),
            "ceiling_sqft": round(self.ceiling_sqft, 2),
        }
