"""
Trade Estimate - Core Data Models

This module defines the data structures shared by every trade estimator.
Key principle: totals are always derived, never stored.

Totals (TradeTotals):
- material + labor form the complexity-adjusted base
- addons are added after complexity
- total = material + labor + addons + complexity_adjustment

Overrides (Overridable):
- Every priced entry carries a catalog/profile default
- A user override replaces it until cleared
- has_override is derived from the override, never stored
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar
from uuid import uuid4

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TradeType(str, Enum):
    """Trades the estimator can price."""
    DRYWALL_HANGING = "drywall_hanging"
    DRYWALL_FINISHING = "drywall_finishing"
    PAINTING = "painting"


class ComplexityLevel(str, Enum):
    """Job complexity, applied as a multiplier on material + labor."""
    SIMPLE = "simple"
    STANDARD = "standard"
    COMPLEX = "complex"


# Trade metadata for UI and room views
TRADE_METADATA = {
    TradeType.DRYWALL_HANGING: {
        "label": "Drywall Hanging",
        "short_label": "Hanging",
        "uses_gross_sqft": True,  # Sheet goods are estimated on gross coverage
        "default_include_walls": True,
        "default_include_ceiling": True,
    },
    TradeType.DRYWALL_FINISHING: {
        "label": "Drywall Finishing",
        "short_label": "Finishing",
        "uses_gross_sqft": False,
        "default_include_walls": True,
        "default_include_ceiling": True,
    },
    TradeType.PAINTING: {
        "label": "Painting",
        "short_label": "Painting",
        "uses_gross_sqft": False,
        "default_include_walls": True,
        "default_include_ceiling": True,
    },
}

# Fallback multipliers when the profile has none for a trade
DEFAULT_COMPLEXITY_MULTIPLIERS = {
    ComplexityLevel.SIMPLE: 0.85,
    ComplexityLevel.STANDARD: 1.0,
    ComplexityLevel.COMPLEX: 1.25,
}

COMPLEXITY_LABELS = {
    ComplexityLevel.SIMPLE: "Simple",
    ComplexityLevel.STANDARD: "Standard",
    ComplexityLevel.COMPLEX: "Complex",
}


def _generate_item_id(prefix: str = "item") -> str:
    """Generate a unique item ID with prefix."""
    return f"{prefix}_{uuid4().hex[:8]}"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def coerce_number(
    value: Any,
    previous: float,
    minimum: Optional[float] = 0.0,
    maximum: Optional[float] = None,
) -> float:
    """
    Coerce user input into a usable number.

    Non-numeric text, NaN and infinities are ignored and the previous value is
    returned. Values outside [minimum, maximum] are clamped.
    """
    if value is None or isinstance(value, bool):
        return previous

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return previous

    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring non-numeric input {value!r}, keeping {previous}")
        return previous

    if not math.isfinite(number):
        logger.debug(f"Ignoring non-finite input {value!r}, keeping {previous}")
        return previous

    if minimum is not None and number < minimum:
        number = minimum
    if maximum is not None and number > maximum:
        number = maximum
    return number


def parse_enum(enum_cls, value: Any, previous):
    """Return value as a member of enum_cls, or previous if it is not one."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        logger.debug(f"Ignoring unknown {enum_cls.__name__} value {value!r}")
        return previous


@dataclass
class Overridable(Generic[T]):
    """
    A catalog/profile default with an optional user override.

    The effective value is the override when one is set, otherwise the default.
    """
    default: T
    override: Optional[T] = None

    @property
    def has_override(self) -> bool:
        return self.override is not None

    def effective(self) -> T:
        """Return user override if set, otherwise the default."""
        return self.override if self.override is not None else self.default

    def set_override(self, value: Optional[T]) -> None:
        """Set the override; None clears it."""
        self.override = value

    def clear(self) -> None:
        self.override = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "default": self.default,
            "override": self.override,
            "effective": self.effective(),
            "has_override": self.has_override,
        }


@dataclass
class TradeTotals:
    """
    Subtotals and total for one trade.

    complexity_adjustment only covers material + labor; addons are added
    after complexity.
    """
    material_subtotal: float = 0.0
    labor_subtotal: float = 0.0
    addons_subtotal: float = 0.0
    complexity_multiplier: float = 1.0
    complexity_adjustment: float = 0.0
    total: float = 0.0

    @property
    def subtotal(self) -> float:
        """Material + labor + addons before complexity."""
        return self.material_subtotal + self.labor_subtotal + self.addons_subtotal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "material_subtotal": round(self.material_subtotal, 2),
            "labor_subtotal": round(self.labor_subtotal, 2),
            "addons_subtotal": round(self.addons_subtotal, 2),
            "subtotal": round(self.subtotal, 2),
            "complexity_multiplier": self.complexity_multiplier,
            "complexity_adjustment": round(self.complexity_adjustment, 2),
            "total": round(self.total, 2),
        }


@dataclass
class ProjectTotals:
    """Per-trade totals of the enabled trades plus their sum."""
    trades: Dict[TradeType, TradeTotals] = field(default_factory=dict)
    combined_total: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trades": {t.value: totals.to_dict() for t, totals in self.trades.items()},
            "combined_total": round(self.combined_total, 2),
        }


# Helper functions for creating totals

def create_trade_totals(
    material_subtotal: float,
    labor_subtotal: float,
    addons_subtotal: float,
    complexity_multiplier: float = 1.0,
) -> TradeTotals:
    """Create TradeTotals with complexity adjustment and total filled in."""
    base = material_subtotal + labor_subtotal
    adjustment = base * (complexity_multiplier - 1)
    return TradeTotals(
        material_subtotal=material_subtotal,
        labor_subtotal=labor_subtotal,
        addons_subtotal=addons_subtotal,
        complexity_multiplier=complexity_multiplier,
        complexity_adjustment=adjustment,
        total=base + adjustment + addons_subtotal,
    )


def create_project_totals(trades: Dict[TradeType, TradeTotals]) -> ProjectTotals:
    """Create ProjectTotals summing the given trade totals."""
    return ProjectTotals(
        trades=dict(trades),
        combined_total=sum(t.total for t in trades.values()),
    )
