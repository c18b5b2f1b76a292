"""
Drywall Hanging Estimator

Formulas:
- Sheets needed = ceil(gross sqft × (1 + waste factor) / sqft per sheet)
- Sheet material = sheet type cost × (1 + markup / 100)
- Sheet labor = labor per sqft × sheet sqft × sheet type labor multiplier
- Material = Σ material cost × quantity (sheets whose material is included)
- Labor = Σ labor cost × quantity × ceiling height factor + direct hours

Pricing methods:
- per_sheet: priced from the sheet list
- per_sqft: labor only, sqft × labor per sqft × ceiling height factor

Client-supplied materials:
- The global flag zeroes material for every sheet
- Clearing it lets each sheet's include_material flag apply again
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from app.core.config import settings
from app.services.estimators.base import BaseTradeEngine
from app.services.trade_estimate import (
    Overridable,
    TradeType,
    _generate_item_id,
    coerce_number,
    parse_enum,
    round_half_up,
)

logger = logging.getLogger(__name__)


class PricingMethod(str, Enum):
    PER_SHEET = "per_sheet"
    PER_SQFT = "per_sqft"


# Sheet sizes (most common first)
SHEET_SIZES = {
    "4x8": {"label": "4' × 8'", "sqft": 32, "length_ft": 8},
    "4x10": {"label": "4' × 10'", "sqft": 40, "length_ft": 10},
    "4x12": {"label": "4' × 12'", "sqft": 48, "length_ft": 12},
}

# Sheet types: base material cost per sheet and installation difficulty
SHEET_TYPES = {
    "standard_half": {"label": 'Standard 1/2"', "thickness": 0.5, "material_cost": 12, "labor_multiplier": 1.0},
    "standard_5_8": {"label": 'Standard 5/8"', "thickness": 0.625, "material_cost": 15, "labor_multiplier": 1.1},
    "lightweight_half": {"label": 'Lightweight 1/2"', "thickness": 0.5, "material_cost": 14, "labor_multiplier": 1.0},
    "moisture_half": {"label": 'Moisture Resistant 1/2"', "thickness": 0.5, "material_cost": 18, "labor_multiplier": 1.2},
    "moisture_5_8": {"label": 'Moisture Resistant 5/8"', "thickness": 0.625, "material_cost": 20, "labor_multiplier": 1.3},
    "fire_5_8": {"label": 'Fire-Rated (Type X) 5/8"', "thickness": 0.625, "material_cost": 16, "labor_multiplier": 1.2},
    "soundproof_5_8": {"label": 'Soundproof 5/8"', "thickness": 0.625, "material_cost": 55, "labor_multiplier": 1.5},
    "mold_half": {"label": 'Mold Resistant 1/2"', "thickness": 0.5, "material_cost": 18, "labor_multiplier": 1.2},
}

DEFAULT_SHEET_TYPE = "standard_half"
DEFAULT_SHEET_SIZE = "4x8"

# Labor multipliers for high ceilings
CEILING_HEIGHT_FACTORS = {
    "standard": {"label": "Standard (8')", "multiplier": 1.0},
    "nine_ft": {"label": "9' Ceilings", "multiplier": 1.1},
    "ten_ft": {"label": "10' Ceilings", "multiplier": 1.15},
    "cathedral": {"label": "Cathedral/Vaulted", "multiplier": 1.35},
}

WASTE_FACTOR_OPTIONS = [0.10, 0.12, 0.15]

HANGING_RATES = {
    "labor_per_sqft": 0.85,
}

HANGING_ADDONS = {
    "delivery": {"name": "Delivery", "price": 75, "unit": "flat"},
    "stocking": {"name": "Stocking (carry in)", "price": 0.10, "unit": "sqft"},
    "debris_removal": {"name": "Debris Removal", "price": 150, "unit": "flat"},
    "corner_bead": {"name": "Corner Bead", "price": 4.50, "unit": "linear_ft"},
    "insulation": {"name": "Insulation (R-13)", "price": 1.20, "unit": "sqft"},
    "vapor_barrier": {"name": "Vapor Barrier", "price": 0.40, "unit": "sqft"},
}


def calculate_sheets_needed(sqft: float, size: str, waste_factor: float) -> int:
    """Whole sheets covering sqft plus waste."""
    if sqft <= 0:
        return 0
    sheet_sqft = SHEET_SIZES.get(size, SHEET_SIZES[DEFAULT_SHEET_SIZE])["sqft"]
    # Rounded first so float noise (e.g. 11.000000000000002) does not add a sheet
    return math.ceil(round(sqft * (1 + waste_factor) / sheet_sqft, 6))


@dataclass
class SheetLine:
    """One sheet type/size on the estimate."""
    id: str
    type_id: str
    size: str
    quantity: int
    material_cost: Overridable[float]
    labor_cost: Overridable[float]
    include_material: bool = True

    @property
    def has_override(self) -> bool:
        return self.material_cost.has_override or self.labor_cost.has_override

    @property
    def sqft_per_sheet(self) -> int:
        return SHEET_SIZES[self.size]["sqft"]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type_id": self.type_id,
            "label": SHEET_TYPES[self.type_id]["label"],
            "size": self.size,
            "quantity": self.quantity,
            "material_cost": round(self.material_cost.effective(), 2),
            "labor_cost": round(self.labor_cost.effective(), 2),
            "material_cost_override": self.material_cost.override,
            "labor_cost_override": self.labor_cost.override,
            "has_override": self.has_override,
            "include_material": self.include_material,
        }


class HangingEngine(BaseTradeEngine):
    """Sheet-based drywall hanging estimate."""

    trade_type = TradeType.DRYWALL_HANGING
    addon_catalog = HANGING_ADDONS

    def _reset_config(self) -> None:
        self.pricing_method = PricingMethod.PER_SHEET
        self.sheets: List[SheetLine] = []
        self.total_sqft = 0.0
        self.waste_factor = self.profile.rate(
            self.trade_type, "default_waste_factor", settings.default_waste_factor
        )
        self.ceiling_factor = "standard"
        self.client_supplies_materials = False
        self._allocated_sheets: Optional[int] = None

    # ==================
    # RATES
    # ==================

    @property
    def labor_per_sqft(self) -> float:
        return self.profile.rate(self.trade_type, "labor_per_sqft", HANGING_RATES["labor_per_sqft"])

    @property
    def material_markup(self) -> float:
        """Markup percentage on sheet material."""
        return self.profile.rate(
            self.trade_type, "material_markup", settings.default_material_markup_percent
        )

    @property
    def ceiling_multiplier(self) -> float:
        return self.profile.table_rate(
            self.trade_type,
            "ceiling_factors",
            self.ceiling_factor,
            CEILING_HEIGHT_FACTORS[self.ceiling_factor]["multiplier"],
        )

    def default_material_cost(self, type_id: str) -> float:
        base = self.profile.table_rate(
            self.trade_type, "sheet_material", type_id, SHEET_TYPES[type_id]["material_cost"]
        )
        return base * (1 + self.material_markup / 100)

    def default_labor_cost(self, type_id: str, size: str) -> float:
        return (
            self.labor_per_sqft
            * SHEET_SIZES[size]["sqft"]
            * SHEET_TYPES[type_id]["labor_multiplier"]
        )

    # ==================
    # SQFT AND ALLOCATION
    # ==================

    @property
    def coverage_sqft(self) -> float:
        return self.total_sqft

    @property
    def primary_size(self) -> str:
        return self.sheets[0].size if self.sheets else DEFAULT_SHEET_SIZE

    @property
    def sheets_needed(self) -> int:
        return calculate_sheets_needed(self.total_sqft, self.primary_size, self.waste_factor)

    @property
    def sheet_count(self) -> int:
        return sum(s.quantity for s in self.sheets)

    def set_sqft(self, sqft: Any) -> None:
        """
        Receive gross sqft from the rooms and allocate sheets for it.

        Zero sqft leaves the sheet lines untouched so their type split
        survives until coverage comes back.
        """
        self.total_sqft = coerce_number(sqft, self.total_sqft)
        needed = self.sheets_needed
        if needed <= 0:
            return
        self._allocate(needed)

    def set_waste_factor(self, waste_factor: Any) -> None:
        """Change waste and rescale existing sheet quantities."""
        self.waste_factor = coerce_number(waste_factor, self.waste_factor, 0.0, 1.0)
        if self.total_sqft > 0:
            self._allocate(self.sheets_needed)

    def _allocate(self, needed: int) -> None:
        if needed == self._allocated_sheets:
            return
        self._allocated_sheets = needed

        if not self.sheets:
            if needed > 0:
                self.add_sheet(DEFAULT_SHEET_TYPE, DEFAULT_SHEET_SIZE, quantity=needed)
            return
        self._rescale_sheets(needed)

    def _rescale_sheets(self, new_total: int) -> None:
        current_total = self.sheet_count
        if len(self.sheets) == 1 or current_total <= 0:
            self.sheets[0].quantity = new_total
            return

        ratio = new_total / current_total
        for sheet in self.sheets:
            sheet.quantity = max(0, round_half_up(sheet.quantity * ratio))
        logger.debug(f"Rescaled {len(self.sheets)} sheet lines to {new_total} sheets")

    # ==================
    # SHEETS
    # ==================

    def get_sheet(self, sheet_id: str) -> Optional[SheetLine]:
        for sheet in self.sheets:
            if sheet.id == sheet_id:
                return sheet
        return None

    def add_sheet(
        self,
        type_id: str = DEFAULT_SHEET_TYPE,
        size: str = DEFAULT_SHEET_SIZE,
        quantity: Any = 0,
    ) -> Optional[SheetLine]:
        if type_id not in SHEET_TYPES or size not in SHEET_SIZES:
            logger.debug(f"Unknown sheet {type_id} / {size}")
            return None

        sheet = SheetLine(
            id=_generate_item_id("sheet"),
            type_id=type_id,
            size=size,
            quantity=round_half_up(coerce_number(quantity, 0)),
            material_cost=Overridable(default=self.default_material_cost(type_id)),
            labor_cost=Overridable(default=self.default_labor_cost(type_id, size)),
        )
        self.sheets.append(sheet)
        return sheet

    def update_sheet(
        self,
        sheet_id: str,
        type_id: Optional[str] = None,
        size: Optional[str] = None,
        quantity: Any = None,
    ) -> bool:
        """
        Update a sheet line.

        A type change resets both costs to the new type's defaults; a size
        change refreshes the labor default and keeps overrides.
        """
        sheet = self.get_sheet(sheet_id)
        if sheet is None:
            return False

        if type_id is not None and type_id in SHEET_TYPES and type_id != sheet.type_id:
            sheet.type_id = type_id
            sheet.material_cost = Overridable(default=self.default_material_cost(type_id))
            sheet.labor_cost = Overridable(default=self.default_labor_cost(type_id, sheet.size))

        if size is not None and size in SHEET_SIZES and size != sheet.size:
            sheet.size = size
            sheet.labor_cost.default = self.default_labor_cost(sheet.type_id, size)

        if quantity is not None:
            sheet.quantity = round_half_up(coerce_number(quantity, sheet.quantity))
        return True

    def remove_sheet(self, sheet_id: str) -> bool:
        sheet = self.get_sheet(sheet_id)
        if sheet is None:
            return False
        self.sheets.remove(sheet)
        return True

    def set_sheet_include_material(self, sheet_id: str, include: bool) -> bool:
        sheet = self.get_sheet(sheet_id)
        if sheet is None:
            return False
        sheet.include_material = bool(include)
        return True

    def set_sheet_material_cost_override(self, sheet_id: str, value: Any) -> bool:
        """Override material cost per sheet; None reverts to the default."""
        sheet = self.get_sheet(sheet_id)
        if sheet is None:
            return False
        if value is None:
            sheet.material_cost.clear()
        else:
            sheet.material_cost.set_override(coerce_number(value, sheet.material_cost.effective()))
        return True

    def set_sheet_labor_cost_override(self, sheet_id: str, value: Any) -> bool:
        """Override labor cost per sheet; None reverts to the default."""
        sheet = self.get_sheet(sheet_id)
        if sheet is None:
            return False
        if value is None:
            sheet.labor_cost.clear()
        else:
            sheet.labor_cost.set_override(coerce_number(value, sheet.labor_cost.effective()))
        return True

    # ==================
    # SETTINGS
    # ==================

    def set_client_supplies_materials(self, value: bool) -> None:
        self.client_supplies_materials = bool(value)

    def set_ceiling_factor(self, factor: str) -> None:
        if factor not in CEILING_HEIGHT_FACTORS:
            logger.debug(f"Ignoring unknown ceiling factor: {factor}")
            return
        self.ceiling_factor = factor

    def set_pricing_method(self, method: Any) -> None:
        self.pricing_method = parse_enum(PricingMethod, method, self.pricing_method)

    def sheet_material_included(self, sheet: SheetLine) -> bool:
        """The global client-supplies flag wins over the per-sheet flag."""
        return not self.client_supplies_materials and sheet.include_material

    # ==================
    # TOTALS
    # ==================

    def material_subtotal(self) -> float:
        if self.pricing_method == PricingMethod.PER_SQFT:
            return 0.0
        return sum(
            sheet.material_cost.effective() * sheet.quantity
            for sheet in self.sheets
            if self.sheet_material_included(sheet)
        )

    def labor_subtotal(self) -> float:
        if self.pricing_method == PricingMethod.PER_SQFT:
            sqft_labor = self.total_sqft * self.labor_per_sqft
        else:
            sqft_labor = sum(s.labor_cost.effective() * s.quantity for s in self.sheets)
        return sqft_labor * self.ceiling_multiplier + self.direct_labor_cost

    @property
    def cost_per_sqft(self) -> float:
        if self.total_sqft <= 0:
            return 0.0
        return self.totals.total / self.total_sqft

    @property
    def cost_per_sheet(self) -> float:
        if self.sheet_count <= 0:
            return 0.0
        return self.totals.total / self.sheet_count

    def summary(self) -> Dict[str, Any]:
        return {
            "total_sqft": round(self.total_sqft, 2),
            "sheets_needed": self.sheets_needed,
            "sheet_count": self.sheet_count,
            "cost_per_sqft": round(self.cost_per_sqft, 2),
            "cost_per_sheet": round(self.cost_per_sheet, 2),
            **self.totals.to_dict(),
        }

    def _trade_parameters(self) -> Dict[str, Any]:
        return {
            "pricing_method": self.pricing_method.value,
            "sheets": [s.to_dict() for s in self.sheets],
            "ceiling_factor": self.ceiling_factor,
            "waste_factor": self.waste_factor,
            "client_supplies_materials": self.client_supplies_materials,
            "total_sqft": round(self.total_sqft, 2),
        }
