"""
Drywall Finishing Estimator

Formulas:
- Line item material = quantity × material rate (when material is included)
- Line item labor = quantity × labor rate
- Default rates split the combined catalog rate 30% material / 70% labor
- Hourly line items are labor only at the hourly rate
- Selected materials = Σ quantity × (price override or base price)

Finish levels (sqft rate of the room-synced line item):
- Level 3: 0.45 / sqft (texture or heavy paint)
- Level 4: 0.55 / sqft (standard flat paint)
- Level 5: 0.95 / sqft (skim coat, critical lighting)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from app.services.estimators.base import BaseTradeEngine
from app.services.trade_estimate import (
    Overridable,
    TradeType,
    _generate_item_id,
    coerce_number,
    parse_enum,
)

logger = logging.getLogger(__name__)


class LineItemType(str, Enum):
    HOURLY = "hourly"
    SQFT_STANDARD = "sqft_standard"
    SQFT_PREMIUM = "sqft_premium"
    LINEAR_JOINTS = "linear_joints"
    LINEAR_CORNERS = "linear_corners"
    ADDON = "addon"


class MaterialCategory(str, Enum):
    MUD = "mud"
    TAPE = "tape"
    CORNER_BEAD = "corner_bead"
    OTHER = "other"


FINISH_LEVELS = {
    3: {"label": "Level 3", "description": "Texture or heavy-nap paint", "sqft_rate": 0.45},
    4: {"label": "Level 4", "description": "Standard for flat paint", "sqft_rate": 0.55},
    5: {"label": "Level 5", "description": "Skim coat for critical lighting", "sqft_rate": 0.95},
}

DEFAULT_FINISH_LEVEL = 4

# Combined (material + labor) rate per unit
LINE_ITEM_TYPES = {
    LineItemType.HOURLY: {"label": "Hourly", "unit": "hour", "rate": 0.0},
    LineItemType.SQFT_STANDARD: {"label": "Per Sqft - Standard", "unit": "sqft", "rate": 0.50},
    LineItemType.SQFT_PREMIUM: {"label": "Per Sqft - Premium", "unit": "sqft", "rate": 0.90},
    LineItemType.LINEAR_JOINTS: {"label": "Linear Ft - Joints", "unit": "linear_ft", "rate": 1.35},
    LineItemType.LINEAR_CORNERS: {"label": "Linear Ft - Corners", "unit": "linear_ft", "rate": 4.35},
    LineItemType.ADDON: {"label": "Addon", "unit": "each", "rate": 0.0},
}

MATERIAL_SHARE = 0.30

SYNCED_LINE_DESCRIPTION = "Wall & Ceiling Finishing"

FINISHING_ADDONS = {
    "sanding": {"name": "Extra Sanding", "price": 50, "unit": "flat"},
    "primer": {"name": "Primer Coat", "price": 0.15, "unit": "sqft"},
    "repair_holes": {"name": "Hole Repair", "price": 25, "unit": "each"},
    "texture_match": {"name": "Texture Matching", "price": 75, "unit": "flat"},
    "high_ceiling": {"name": "High Ceiling Premium", "price": 0.10, "unit": "sqft"},
    "dust_barrier": {"name": "Dust Barrier Setup", "price": 100, "unit": "flat"},
}

FINISHING_MATERIALS = {
    "all_purpose_mud": {"name": "All-Purpose Joint Compound (4.5 gal)", "category": "mud", "unit": "bucket", "price": 18.00},
    "lightweight_mud": {"name": "Lightweight Joint Compound (4.5 gal)", "category": "mud", "unit": "bucket", "price": 20.00},
    "setting_compound_45": {"name": "Setting Compound 45 min (18 lb)", "category": "mud", "unit": "bag", "price": 16.00},
    "topping_compound": {"name": "Topping Compound (4.5 gal)", "category": "mud", "unit": "bucket", "price": 19.00},
    "paper_tape": {"name": "Paper Joint Tape (500 ft)", "category": "tape", "unit": "roll", "price": 5.00},
    "mesh_tape": {"name": "Fiberglass Mesh Tape (300 ft)", "category": "tape", "unit": "roll", "price": 8.00},
    "metal_corner_bead": {"name": "Metal Corner Bead (8 ft)", "category": "corner_bead", "unit": "each", "price": 3.50},
    "vinyl_corner_bead": {"name": "Vinyl Corner Bead (8 ft)", "category": "corner_bead", "unit": "each", "price": 4.00},
    "paper_faced_bead": {"name": "Paper-Faced Corner Bead (8 ft)", "category": "corner_bead", "unit": "each", "price": 6.00},
    "sanding_sponges": {"name": "Sanding Sponges", "category": "other", "unit": "each", "price": 4.00},
    "drywall_primer": {"name": "Drywall Primer", "category": "other", "unit": "gallon", "price": 30.00},
}


@dataclass
class FinishingLineItem:
    """A typed unit of finishing work."""
    id: str
    item_type: LineItemType
    description: str
    quantity: float
    material_rate: Overridable[float]
    labor_rate: Overridable[float]
    include_material: bool = True
    synced: bool = False  # Quantity follows the room sqft

    @property
    def has_override(self) -> bool:
        return self.material_rate.has_override or self.labor_rate.has_override

    @property
    def material_cost(self) -> float:
        if not self.include_material:
            return 0.0
        return self.quantity * self.material_rate.effective()

    @property
    def labor_cost(self) -> float:
        return self.quantity * self.labor_rate.effective()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.item_type.value,
            "description": self.description,
            "quantity": self.quantity,
            "unit": LINE_ITEM_TYPES[self.item_type]["unit"],
            "material_rate": round(self.material_rate.effective(), 4),
            "labor_rate": round(self.labor_rate.effective(), 4),
            "has_override": self.has_override,
            "include_material": self.include_material,
            "material_cost": round(self.material_cost, 2),
            "labor_cost": round(self.labor_cost, 2),
        }


@dataclass
class MaterialSelection:
    """A finishing material picked from the catalog or entered by hand."""
    id: str
    material_id: str
    name: str
    category: MaterialCategory
    unit: str
    quantity: float
    price: Overridable[float]
    is_custom: bool = False

    @property
    def line_total(self) -> float:
        return self.quantity * self.price.effective()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "material_id": self.material_id,
            "name": self.name,
            "category": self.category.value,
            "unit": self.unit,
            "quantity": self.quantity,
            "base_price": self.price.default,
            "price_override": self.price.override,
            "has_override": self.price.has_override,
            "line_total": round(self.line_total, 2),
            "is_custom": self.is_custom,
        }


class FinishingEngine(BaseTradeEngine):
    """Line-item based drywall finishing estimate."""

    trade_type = TradeType.DRYWALL_FINISHING
    addon_catalog = FINISHING_ADDONS

    def _reset_config(self) -> None:
        self.finish_level = DEFAULT_FINISH_LEVEL
        self.total_sqft = 0.0
        self.line_items: List[FinishingLineItem] = []
        self.materials: List[MaterialSelection] = []

    # ==================
    # RATES
    # ==================

    def finish_level_rate(self, level: Optional[int] = None) -> float:
        level = level or self.finish_level
        return self.profile.table_rate(
            self.trade_type, "finish_levels", str(level), FINISH_LEVELS[level]["sqft_rate"]
        )

    def default_rates(self, item_type: LineItemType, synced: bool = False) -> Tuple[float, float]:
        """Default (material, labor) rates for a line item type."""
        if item_type == LineItemType.HOURLY:
            return 0.0, self.hourly_rate

        if synced:
            combined = self.finish_level_rate()
        else:
            combined = self.profile.table_rate(
                self.trade_type, "line_items", item_type.value, LINE_ITEM_TYPES[item_type]["rate"]
            )
        return combined * MATERIAL_SHARE, combined * (1 - MATERIAL_SHARE)

    # ==================
    # SQFT SYNC AND FINISH LEVEL
    # ==================

    @property
    def coverage_sqft(self) -> float:
        return self.total_sqft

    @property
    def synced_line(self) -> Optional[FinishingLineItem]:
        for item in self.line_items:
            if item.synced:
                return item
        return None

    def set_sqft(self, sqft: Any) -> None:
        """Receive net sqft from the rooms into the finishing line item."""
        self.total_sqft = coerce_number(sqft, self.total_sqft)
        line = self.synced_line
        if line is not None:
            line.quantity = self.total_sqft
        elif self.total_sqft > 0:
            self._add_item(
                LineItemType.SQFT_STANDARD,
                SYNCED_LINE_DESCRIPTION,
                self.total_sqft,
                synced=True,
            )

    def set_finish_level(self, level: Any) -> None:
        try:
            level = int(level)
        except (TypeError, ValueError):
            logger.debug(f"Ignoring finish level {level!r}")
            return
        if level not in FINISH_LEVELS:
            logger.debug(f"Ignoring finish level {level!r}")
            return

        self.finish_level = level
        line = self.synced_line
        if line is not None:
            material, labor = self.default_rates(line.item_type, synced=True)
            line.material_rate.default = material
            line.labor_rate.default = labor

    # ==================
    # LINE ITEMS
    # ==================

    def _add_item(self, item_type: LineItemType, description: str, quantity: float,
                  synced: bool = False) -> FinishingLineItem:
        material, labor = self.default_rates(item_type, synced=synced)
        item = FinishingLineItem(
            id=_generate_item_id("line"),
            item_type=item_type,
            description=description or LINE_ITEM_TYPES[item_type]["label"],
            quantity=quantity,
            material_rate=Overridable(default=material),
            labor_rate=Overridable(default=labor),
            synced=synced,
        )
        self.line_items.append(item)
        return item

    def add_line_item(
        self,
        item_type: Any,
        quantity: Any = 0,
        description: str = "",
    ) -> Optional[FinishingLineItem]:
        parsed = parse_enum(LineItemType, item_type, None)
        if parsed is None:
            return None
        return self._add_item(parsed, description, coerce_number(quantity, 0.0))

    def get_line_item(self, item_id: str) -> Optional[FinishingLineItem]:
        for item in self.line_items:
            if item.id == item_id:
                return item
        return None

    def update_line_item(
        self,
        item_id: str,
        quantity: Any = None,
        description: Optional[str] = None,
    ) -> bool:
        item = self.get_line_item(item_id)
        if item is None:
            return False
        if quantity is not None:
            item.quantity = coerce_number(quantity, item.quantity)
        if description is not None:
            item.description = description
        return True

    def remove_line_item(self, item_id: str) -> bool:
        item = self.get_line_item(item_id)
        if item is None:
            return False
        self.line_items.remove(item)
        return True

    def set_line_item_include_material(self, item_id: str, include: bool) -> bool:
        item = self.get_line_item(item_id)
        if item is None:
            return False
        item.include_material = bool(include)
        return True

    def set_line_item_material_rate(self, item_id: str, value: Any) -> bool:
        """Override the material rate; None reverts to the default."""
        item = self.get_line_item(item_id)
        if item is None:
            return False
        if value is None:
            item.material_rate.clear()
        else:
            item.material_rate.set_override(coerce_number(value, item.material_rate.effective()))
        return True

    def set_line_item_labor_rate(self, item_id: str, value: Any) -> bool:
        """Override the labor rate; None reverts to the default."""
        item = self.get_line_item(item_id)
        if item is None:
            return False
        if value is None:
            item.labor_rate.clear()
        else:
            item.labor_rate.set_override(coerce_number(value, item.labor_rate.effective()))
        return True

    # ==================
    # MATERIALS
    # ==================

    def get_material(self, selection_id: str) -> Optional[MaterialSelection]:
        for material in self.materials:
            if material.id == selection_id:
                return material
        return None

    def add_material(self, material_id: str, quantity: Any = 1) -> Optional[MaterialSelection]:
        definition = FINISHING_MATERIALS.get(material_id)
        if definition is None:
            logger.debug(f"Unknown finishing material: {material_id}")
            return None

        base_price = self.profile.table_rate(
            self.trade_type, "materials", material_id, definition["price"]
        )
        selection = MaterialSelection(
            id=_generate_item_id("mat"),
            material_id=material_id,
            name=definition["name"],
            category=MaterialCategory(definition["category"]),
            unit=definition["unit"],
            quantity=coerce_number(quantity, 1.0),
            price=Overridable(default=base_price),
        )
        self.materials.append(selection)
        return selection

    def add_custom_material(
        self,
        name: str,
        category: Any = MaterialCategory.OTHER,
        unit: str = "each",
        base_price: Any = 0,
        quantity: Any = 1,
    ) -> MaterialSelection:
        selection = MaterialSelection(
            id=_generate_item_id("mat"),
            material_id="custom",
            name=name,
            category=parse_enum(MaterialCategory, category, MaterialCategory.OTHER),
            unit=unit,
            quantity=coerce_number(quantity, 1.0),
            price=Overridable(default=coerce_number(base_price, 0.0)),
            is_custom=True,
        )
        self.materials.append(selection)
        return selection

    def update_material_quantity(self, selection_id: str, quantity: Any) -> bool:
        material = self.get_material(selection_id)
        if material is None:
            return False
        material.quantity = coerce_number(quantity, material.quantity)
        return True

    def set_material_price_override(self, selection_id: str, value: Any) -> bool:
        """Override the price; None reverts to the base price."""
        material = self.get_material(selection_id)
        if material is None:
            return False
        if value is None:
            material.price.clear()
        else:
            material.price.set_override(coerce_number(value, material.price.effective()))
        return True

    def remove_material(self, selection_id: str) -> bool:
        material = self.get_material(selection_id)
        if material is None:
            return False
        self.materials.remove(material)
        return True

    @property
    def materials_subtotal(self) -> float:
        return sum(m.line_total for m in self.materials)

    def materials_by_category(self) -> Dict[str, float]:
        totals = {category.value: 0.0 for category in MaterialCategory}
        for material in self.materials:
            totals[material.category.value] += material.line_total
        return totals

    # ==================
    # TOTALS
    # ==================

    def material_subtotal(self) -> float:
        return sum(item.material_cost for item in self.line_items) + self.materials_subtotal

    def labor_subtotal(self) -> float:
        return sum(item.labor_cost for item in self.line_items) + self.direct_labor_cost

    def _trade_parameters(self) -> Dict[str, Any]:
        return {
            "finish_level": self.finish_level,
            "line_items": [item.to_dict() for item in self.line_items],
            "materials": [m.to_dict() for m in self.materials],
            "total_sqft": round(self.total_sqft, 2),
        }
