"""
Addon engine shared by all trades.

Catalog addons carry a default price (profile price, falling back to the
catalog price) that the user may override. Custom addons are entered by the
user and have no default to revert to.

Line total = effective price × quantity
Subtotal   = Σ line totals over catalog + custom addons
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from app.services.profile import PricingProfile
from app.services.trade_estimate import (
    Overridable,
    TradeType,
    _generate_item_id,
    coerce_number,
    parse_enum,
    round_half_up,
)

logger = logging.getLogger(__name__)


class AddonUnit(str, Enum):
    FLAT = "flat"
    SQFT = "sqft"
    LINEAR_FT = "linear_ft"
    EACH = "each"


@dataclass
class SelectedAddon:
    """An addon on the estimate."""
    addon_id: str
    name: str
    unit: AddonUnit
    quantity: float
    price: Overridable[float]
    category: str = "other"
    is_custom: bool = False

    @property
    def line_total(self) -> float:
        return self.price.effective() * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "addon_id": self.addon_id,
            "name": self.name,
            "unit": self.unit.value,
            "quantity": self.quantity,
            "default_price": self.price.default,
            "price_override": self.price.override,
            "price": self.price.effective(),
            "has_override": self.price.has_override,
            "category": self.category,
            "is_custom": self.is_custom,
            "line_total": round(self.line_total, 2),
        }


def default_quantity_for(unit: AddonUnit, trade_sqft: float) -> float:
    """Area and length addons start at the trade's sqft, others at one."""
    if unit in (AddonUnit.SQFT, AddonUnit.LINEAR_FT):
        return round_half_up(max(0.0, trade_sqft))
    return 1


class AddonEngine:
    """Selected addons of one trade."""

    def __init__(
        self,
        trade_type: TradeType,
        catalog: Dict[str, Dict[str, Any]],
        profile: Optional[PricingProfile] = None,
    ):
        self.trade_type = trade_type
        self.catalog = catalog
        self.profile = profile or PricingProfile()
        self._items: Dict[str, SelectedAddon] = {}

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, addon_id: str) -> bool:
        return addon_id in self._items

    def get(self, addon_id: str) -> Optional[SelectedAddon]:
        return self._items.get(addon_id)

    def default_price(self, addon_id: str) -> float:
        definition = self.catalog[addon_id]
        return self.profile.addon_price(self.trade_type, addon_id, definition["price"])

    def catalog_unit(self, addon_id: str) -> Optional[AddonUnit]:
        definition = self.catalog.get(addon_id)
        if definition is None:
            return None
        return AddonUnit(definition["unit"])

    def toggle(self, addon_id: str, default_quantity: float = 1) -> bool:
        """
        Add a catalog addon if absent, remove it if present.

        Returns True if the addon is selected afterwards.
        """
        if addon_id in self._items:
            del self._items[addon_id]
            return False

        definition = self.catalog.get(addon_id)
        if definition is None:
            logger.debug(f"Unknown {self.trade_type.value} addon: {addon_id}")
            return False

        self._items[addon_id] = SelectedAddon(
            addon_id=addon_id,
            name=definition["name"],
            unit=AddonUnit(definition["unit"]),
            quantity=coerce_number(default_quantity, 1),
            price=Overridable(default=self.default_price(addon_id)),
            category=definition.get("category", "other"),
        )
        return True

    def update_quantity(self, addon_id: str, quantity: Any) -> bool:
        """Replace the quantity; zero, negative and non-numeric values are ignored."""
        item = self._items.get(addon_id)
        if item is None:
            return False
        value = coerce_number(quantity, item.quantity, minimum=None)
        if value <= 0:
            logger.debug(f"Rejecting addon quantity {quantity!r} for {addon_id}")
            return False
        item.quantity = value
        return True

    def set_price_override(self, addon_id: str, value: Any) -> bool:
        """
        Override the price; None clears the override.

        Custom addons have no default, so a value replaces their price and
        None leaves it unchanged.
        """
        item = self._items.get(addon_id)
        if item is None:
            return False

        if value is None:
            if not item.is_custom:
                item.price.clear()
            return True

        current = item.price.effective()
        price = coerce_number(value, current)
        if item.is_custom:
            item.price.default = price
        else:
            item.price.set_override(price)
        return True

    def remove(self, addon_id: str) -> bool:
        return self._items.pop(addon_id, None) is not None

    def add_custom(
        self,
        name: str,
        price: Any,
        unit: Any = AddonUnit.FLAT,
        category: str = "other",
        quantity: Any = 1,
    ) -> SelectedAddon:
        """Add a user-defined addon that is not in any catalog."""
        addon = SelectedAddon(
            addon_id=_generate_item_id("custom"),
            name=name,
            unit=parse_enum(AddonUnit, unit, AddonUnit.FLAT),
            quantity=coerce_number(quantity, 1),
            price=Overridable(default=coerce_number(price, 0.0)),
            category=category,
            is_custom=True,
        )
        self._items[addon.addon_id] = addon
        return addon

    def update_custom(
        self,
        addon_id: str,
        name: Optional[str] = None,
        price: Any = None,
        unit: Any = None,
        category: Optional[str] = None,
        quantity: Any = None,
    ) -> bool:
        item = self._items.get(addon_id)
        if item is None or not item.is_custom:
            return False
        if name is not None:
            item.name = name
        if price is not None:
            item.price.default = coerce_number(price, item.price.default)
        if unit is not None:
            item.unit = parse_enum(AddonUnit, unit, item.unit)
        if category is not None:
            item.category = category
        if quantity is not None:
            self.update_quantity(addon_id, quantity)
        return True

    def remove_custom(self, addon_id: str) -> bool:
        item = self._items.get(addon_id)
        if item is None or not item.is_custom:
            return False
        del self._items[addon_id]
        return True

    def line_items(self) -> List[SelectedAddon]:
        return list(self._items.values())

    @property
    def subtotal(self) -> float:
        return sum(item.line_total for item in self._items.values())

    def clear(self) -> None:
        self._items.clear()

    def snapshot(self) -> List[Dict[str, Any]]:
        """Serializable list of selected addons for estimate parameters."""
        return [item.to_dict() for item in self._items.values()]
