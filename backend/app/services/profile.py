"""
Contractor pricing profile.

The profile holds the contractor's own rates. Every accessor takes the
hardcoded catalog value as a fallback, so missing or malformed profile data
never blocks an estimate.

custom_rates layout (all sections optional):
    {
        "drywall_hanging": {"labor_per_sqft": 0.9, "addons": {"delivery": 80}},
        "painting": {"complexity": {"complex": 1.3}},
        ...
    }
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from app.core.config import settings
from app.services.trade_estimate import ComplexityLevel, TradeType

logger = logging.getLogger(__name__)


def _as_rate(value: Any) -> Optional[float]:
    """Return value as a non-negative finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return number


@dataclass
class PricingProfile:
    """Contractor rates with catalog fallbacks."""
    hourly_rate: Optional[float] = None
    custom_rates: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PricingProfile":
        """Build a profile from a stored profile row; tolerant of missing keys."""
        if not data:
            return cls()
        custom_rates = data.get("custom_rates")
        return cls(
            hourly_rate=_as_rate(data.get("hourly_rate")),
            custom_rates=custom_rates if isinstance(custom_rates, dict) else {},
        )

    def _section(self, trade: TradeType) -> Dict[str, Any]:
        section = self.custom_rates.get(trade.value)
        return section if isinstance(section, dict) else {}

    def effective_hourly_rate(self) -> float:
        """Profile hourly rate, or the configured default."""
        if self.hourly_rate is not None:
            return self.hourly_rate
        return settings.default_hourly_rate

    def rate(self, trade: TradeType, key: str, default: float) -> float:
        """Trade-level rate such as labor_per_sqft, falling back to default."""
        value = _as_rate(self._section(trade).get(key))
        if value is None:
            return default
        return value

    def table_rate(self, trade: TradeType, table: str, key: str, default: float) -> float:
        """Rate from a nested table (e.g. ceiling_factors, sheet_types)."""
        nested = self._section(trade).get(table)
        if not isinstance(nested, dict):
            return default
        value = _as_rate(nested.get(key))
        if value is None:
            return default
        return value

    def addon_price(self, trade: TradeType, addon_id: str, default: float) -> float:
        """User price for a catalog addon, falling back to the catalog price."""
        return self.table_rate(trade, "addons", addon_id, default)

    def complexity_multiplier(
        self,
        trade: TradeType,
        level: ComplexityLevel,
        default: float,
    ) -> float:
        return self.table_rate(trade, "complexity", level.value, default)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hourly_rate": self.hourly_rate,
            "effective_hourly_rate": self.effective_hourly_rate(),
            "custom_rates": self.custom_rates,
        }
