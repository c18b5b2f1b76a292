"""
Trade Estimators Package

Each module implements one trade engine on top of BaseTradeEngine. Engines
receive square footage from the project and derive TradeTotals on read.

Available estimators:
- hanging: drywall sheets, waste, ceiling height factor
- finishing: finish level line items and taping materials
- painting: coats, paint quality, surface prep
"""

from typing import Optional

from app.services.estimators.base import BaseTradeEngine
from app.services.estimators.finishing import FinishingEngine
from app.services.estimators.hanging import HangingEngine
from app.services.estimators.painting import PaintingEngine
from app.services.profile import PricingProfile
from app.services.trade_estimate import TradeType

ENGINE_CLASSES = {
    TradeType.DRYWALL_HANGING: HangingEngine,
    TradeType.DRYWALL_FINISHING: FinishingEngine,
    TradeType.PAINTING: PaintingEngine,
}


def create_trade_engine(
    trade_type: TradeType,
    profile: Optional[PricingProfile] = None,
) -> BaseTradeEngine:
    """Create the engine for a trade with default configuration."""
    return ENGINE_CLASSES[trade_type](profile)


__all__ = [
    "BaseTradeEngine",
    "HangingEngine",
    "FinishingEngine",
    "PaintingEngine",
    "ENGINE_CLASSES",
    "create_trade_engine",
]
