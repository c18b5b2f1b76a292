"""
Shared behaviour of the trade estimators.

Every trade engine:
- owns only its configuration, never room data
- receives square footage pushed in by the project
- derives TradeTotals on every read (no cached totals)

Totals:
    base       = material + labor
    adjustment = base × (complexity multiplier - 1)
    total      = base + adjustment + addons
"""

import logging
from typing import Any, Dict, Optional

from app.services.addons import AddonEngine, default_quantity_for
from app.services.profile import PricingProfile
from app.services.trade_estimate import (
    COMPLEXITY_LABELS,
    DEFAULT_COMPLEXITY_MULTIPLIERS,
    ComplexityLevel,
    TradeTotals,
    TradeType,
    coerce_number,
    create_trade_totals,
    parse_enum,
)

logger = logging.getLogger(__name__)


class BaseTradeEngine:
    """Common configuration and totals for one trade."""

    trade_type: TradeType
    addon_catalog: Dict[str, Dict[str, Any]] = {}
    complexity_multipliers: Dict[ComplexityLevel, float] = DEFAULT_COMPLEXITY_MULTIPLIERS

    def __init__(self, profile: Optional[PricingProfile] = None):
        self.profile = profile or PricingProfile()
        self.addons = AddonEngine(self.trade_type, self.addon_catalog, self.profile)
        self.reset()

    def reset(self) -> None:
        """Return to the default configuration."""
        self.complexity = ComplexityLevel.STANDARD
        self.direct_hours = 0.0
        self.addons.clear()
        self._reset_config()

    def _reset_config(self) -> None:
        raise NotImplementedError

    # ==================
    # CONFIGURATION
    # ==================

    @property
    def hourly_rate(self) -> float:
        return self.profile.effective_hourly_rate()

    def set_complexity(self, level: Any) -> None:
        self.complexity = parse_enum(ComplexityLevel, level, self.complexity)

    def set_direct_hours(self, hours: Any) -> None:
        """Flat labor hours outside the sqft model."""
        self.direct_hours = coerce_number(hours, self.direct_hours)

    @property
    def complexity_multiplier(self) -> float:
        return self.profile.complexity_multiplier(
            self.trade_type,
            self.complexity,
            self.complexity_multipliers[self.complexity],
        )

    @property
    def complexity_label(self) -> str:
        return COMPLEXITY_LABELS[self.complexity]

    @property
    def direct_labor_cost(self) -> float:
        return self.direct_hours * self.hourly_rate

    # ==================
    # ADDONS
    # ==================

    @property
    def coverage_sqft(self) -> float:
        """Trade square footage used for addon default quantities."""
        raise NotImplementedError

    def toggle_addon(self, addon_id: str) -> bool:
        """Toggle a catalog addon, sizing area/length addons to the trade sqft."""
        unit = self.addons.catalog_unit(addon_id)
        if unit is None:
            return self.addons.toggle(addon_id)
        return self.addons.toggle(addon_id, default_quantity_for(unit, self.coverage_sqft))

    # ==================
    # TOTALS
    # ==================

    def material_subtotal(self) -> float:
        raise NotImplementedError

    def labor_subtotal(self) -> float:
        raise NotImplementedError

    @property
    def totals(self) -> TradeTotals:
        return create_trade_totals(
            material_subtotal=self.material_subtotal(),
            labor_subtotal=self.labor_subtotal(),
            addons_subtotal=self.addons.subtotal,
            complexity_multiplier=self.complexity_multiplier,
        )

    def parameters(self) -> Dict[str, Any]:
        """Configuration snapshot stored with a submitted estimate."""
        params = {
            "complexity": self.complexity.value,
            "direct_hours": self.direct_hours,
            "hourly_rate": self.hourly_rate,
            "addons": self.addons.snapshot(),
        }
        params.update(self._trade_parameters())
        return params

    def _trade_parameters(self) -> Dict[str, Any]:
        return {}
