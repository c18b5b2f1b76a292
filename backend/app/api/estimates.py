"""
Trade Estimate API Endpoints

Endpoints for pricing multi-trade drywall and painting estimates.
Takes rooms (or manual sqft) and per-trade configuration and produces:
- Per-trade subtotals and totals
- A flattened estimate document for PDF/email/spreadsheet layers
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Response
from pydantic import BaseModel, Field

from app.services.estimators.finishing import FINISH_LEVELS, FINISHING_ADDONS, FINISHING_MATERIALS
from app.services.estimators.hanging import (
    CEILING_HEIGHT_FACTORS,
    HANGING_ADDONS,
    SHEET_SIZES,
    SHEET_TYPES,
)
from app.services.estimators.painting import COAT_OPTIONS, PAINTING_ADDONS
from app.services.excel_export import export_estimate_to_excel
from app.services.geometry import calculate_room_sqft, suggest_sheet_size
from app.services.profile import PricingProfile
from app.services.project import InputMode, ProjectEstimate
from app.services.room_records import room_from_record
from app.services.trade_estimate import TRADE_METADATA, TradeType, _generate_item_id


router = APIRouter(prefix="/estimates", tags=["estimates"])


TRADE_CATALOGS = {
    TradeType.DRYWALL_HANGING: {
        "addons": HANGING_ADDONS,
        "sheet_types": SHEET_TYPES,
        "sheet_sizes": SHEET_SIZES,
        "ceiling_factors": CEILING_HEIGHT_FACTORS,
    },
    TradeType.DRYWALL_FINISHING: {
        "addons": FINISHING_ADDONS,
        "finish_levels": FINISH_LEVELS,
        "materials": FINISHING_MATERIALS,
    },
    TradeType.PAINTING: {
        "addons": PAINTING_ADDONS,
        "coats": COAT_OPTIONS,
    },
}


# ==================
# REQUEST/RESPONSE MODELS
# ==================

class OpeningRequest(BaseModel):
    """Door or window, dimensions in inches."""
    id: Optional[str] = None
    preset_id: str = "custom"
    label: str = ""
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)
    quantity: int = Field(1, ge=1)


class WallRequest(BaseModel):
    id: Optional[str] = None
    label: str = ""
    length_feet: float = Field(10, ge=0)
    length_inches: float = Field(0, ge=0, le=11)


class RoomRequest(BaseModel):
    """Room record as stored per project."""
    id: str = Field(default_factory=lambda: _generate_item_id("room"))
    name: str = "Room"
    shape: str = Field("rectangular", description="rectangular, l_shape, custom")
    length_feet: float = Field(12, ge=0)
    length_inches: float = Field(0, ge=0, le=11)
    width_feet: float = Field(10, ge=0)
    width_inches: float = Field(0, ge=0, le=11)
    height_feet: float = Field(8, ge=0)
    height_inches: float = Field(0, ge=0, le=11)
    l_shape_dimensions: Optional[Dict[str, float]] = None
    custom_walls: List[WallRequest] = Field(default_factory=list)
    custom_ceiling_sqft: Optional[float] = Field(None, ge=0)
    doors: List[OpeningRequest] = Field(default_factory=list)
    windows: List[OpeningRequest] = Field(default_factory=list)
    sort_order: int = 0


class OverrideRequest(BaseModel):
    room_id: str
    trade_type: str
    excluded: Optional[bool] = None
    include_walls: Optional[bool] = None
    include_ceiling: Optional[bool] = None


class AddonRequest(BaseModel):
    """Catalog addon (addon_id) or custom addon (name + price)."""
    addon_id: Optional[str] = None
    name: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    unit: str = "flat"
    category: str = "other"
    quantity: Optional[float] = Field(None, gt=0)
    price_override: Optional[float] = Field(None, ge=0)


class SheetRequest(BaseModel):
    type_id: str = "standard_half"
    size: str = "4x8"
    quantity: int = Field(0, ge=0)
    include_material: bool = True
    material_cost_override: Optional[float] = Field(None, ge=0)
    labor_cost_override: Optional[float] = Field(None, ge=0)


class LineItemRequest(BaseModel):
    type: str
    quantity: float = Field(0, ge=0)
    description: str = ""
    include_material: bool = True
    material_rate_override: Optional[float] = Field(None, ge=0)
    labor_rate_override: Optional[float] = Field(None, ge=0)


class MaterialRequest(BaseModel):
    """Catalog material (material_id) or custom material (name + base_price)."""
    material_id: Optional[str] = None
    name: Optional[str] = None
    category: str = "other"
    unit: str = "each"
    base_price: float = Field(0, ge=0)
    quantity: float = Field(1, ge=0)
    price_override: Optional[float] = Field(None, ge=0)


class TradeConfigRequest(BaseModel):
    complexity: str = "standard"
    direct_hours: float = Field(0, ge=0)
    addons: List[AddonRequest] = Field(default_factory=list)


class HangingConfigRequest(TradeConfigRequest):
    pricing_method: str = Field("per_sheet", description="per_sheet or per_sqft")
    waste_factor: Optional[float] = Field(None, ge=0, le=1)
    ceiling_factor: str = "standard"
    client_supplies_materials: bool = False
    sheets: List[SheetRequest] = Field(default_factory=list)


class FinishingConfigRequest(TradeConfigRequest):
    finish_level: int = Field(4, ge=3, le=5)
    line_items: List[LineItemRequest] = Field(default_factory=list)
    materials: List[MaterialRequest] = Field(default_factory=list)


class PaintingConfigRequest(TradeConfigRequest):
    coat_count: int = Field(2, ge=1, le=3)
    paint_quality: str = "standard"
    surface_prep: str = "none"


class EstimateRequest(BaseModel):
    """Request for a multi-trade estimate."""
    project_name: str = ""
    input_mode: str = Field("rooms", description="rooms or manual")
    rooms: List[RoomRequest] = Field(default_factory=list)
    manual_wall_sqft: float = Field(0, ge=0)
    manual_ceiling_sqft: float = Field(0, ge=0)
    enabled_trades: List[str] = Field(default_factory=lambda: [t.value for t in TradeType])
    overrides: List[OverrideRequest] = Field(default_factory=list)
    hanging: HangingConfigRequest = Field(default_factory=HangingConfigRequest)
    finishing: FinishingConfigRequest = Field(default_factory=FinishingConfigRequest)
    painting: PaintingConfigRequest = Field(default_factory=PaintingConfigRequest)
    profile: Optional[Dict[str, Any]] = Field(None, description="hourly_rate and custom_rates")


class EstimateResponse(BaseModel):
    document: Dict[str, Any]
    totals: Dict[str, Any]
    parameters: Dict[str, Dict[str, Any]]


class TradeInfoResponse(BaseModel):
    """Information about a single trade."""
    type: str
    label: str
    short_label: str
    uses_gross_sqft: bool


class TradeListResponse(BaseModel):
    trades: List[TradeInfoResponse]


# ==================
# HELPER FUNCTIONS
# ==================

def _parse_trade(value: str) -> TradeType:
    try:
        return TradeType(value.lower())
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown trade type: {value}. Valid types: {[t.value for t in TradeType]}"
        )


def _apply_addons(engine, addons: List[AddonRequest]) -> None:
    for request in addons:
        if request.addon_id and request.addon_id in engine.addons.catalog:
            if request.addon_id not in engine.addons:
                engine.toggle_addon(request.addon_id)
            addon_id = request.addon_id
        elif request.name and request.price is not None:
            addon_id = engine.addons.add_custom(
                request.name, request.price, request.unit, request.category
            ).addon_id
        else:
            raise HTTPException(
                status_code=400,
                detail=f"Unknown addon: {request.addon_id or request.name}",
            )
        if request.quantity is not None:
            engine.addons.update_quantity(addon_id, request.quantity)
        if request.price_override is not None:
            engine.addons.set_price_override(addon_id, request.price_override)


def _apply_common(engine, config: TradeConfigRequest) -> None:
    engine.set_complexity(config.complexity)
    engine.set_direct_hours(config.direct_hours)


def _configure_hanging(engine, config: HangingConfigRequest) -> None:
    _apply_common(engine, config)
    engine.set_pricing_method(config.pricing_method)
    engine.set_ceiling_factor(config.ceiling_factor)
    engine.set_client_supplies_materials(config.client_supplies_materials)
    if config.waste_factor is not None:
        engine.set_waste_factor(config.waste_factor)
    for request in config.sheets:
        sheet = engine.add_sheet(request.type_id, request.size, request.quantity)
        if sheet is None:
            raise HTTPException(status_code=400, detail=f"Unknown sheet: {request.type_id} {request.size}")
        engine.set_sheet_include_material(sheet.id, request.include_material)
        engine.set_sheet_material_cost_override(sheet.id, request.material_cost_override)
        engine.set_sheet_labor_cost_override(sheet.id, request.labor_cost_override)


def _configure_finishing(engine, config: FinishingConfigRequest) -> None:
    _apply_common(engine, config)
    engine.set_finish_level(config.finish_level)
    for request in config.line_items:
        item = engine.add_line_item(request.type, request.quantity, request.description)
        if item is None:
            raise HTTPException(status_code=400, detail=f"Unknown line item type: {request.type}")
        engine.set_line_item_include_material(item.id, request.include_material)
        engine.set_line_item_material_rate(item.id, request.material_rate_override)
        engine.set_line_item_labor_rate(item.id, request.labor_rate_override)
    for request in config.materials:
        if request.material_id:
            selection = engine.add_material(request.material_id, request.quantity)
            if selection is None:
                raise HTTPException(status_code=400, detail=f"Unknown material: {request.material_id}")
        else:
            selection = engine.add_custom_material(
                request.name or "Custom Material",
                request.category,
                request.unit,
                request.base_price,
                request.quantity,
            )
        engine.set_material_price_override(selection.id, request.price_override)


def _configure_painting(engine, config: PaintingConfigRequest) -> None:
    _apply_common(engine, config)
    engine.set_coat_count(config.coat_count)
    engine.set_paint_quality(config.paint_quality)
    engine.set_surface_prep(config.surface_prep)


def _build_project(request: EstimateRequest) -> ProjectEstimate:
    """Assemble a project: mode, engine configuration, then sqft inputs."""
    enabled = [_parse_trade(t) for t in request.enabled_trades]
    if not enabled:
        raise HTTPException(status_code=400, detail="At least one trade must be enabled")

    try:
        input_mode = InputMode(request.input_mode)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown input mode: {request.input_mode}")

    project = ProjectEstimate(
        profile=PricingProfile.from_dict(request.profile),
        enabled_trades=enabled,
    )
    project.set_input_mode(input_mode)

    _configure_hanging(project.hanging, request.hanging)
    _configure_finishing(project.finishing, request.finishing)
    _configure_painting(project.painting, request.painting)

    if input_mode == InputMode.MANUAL:
        project.set_manual_wall_sqft(request.manual_wall_sqft)
        project.set_manual_ceiling_sqft(request.manual_ceiling_sqft)
    else:
        project.load_rooms([room.model_dump() for room in request.rooms])
        for override in request.overrides:
            result = project.set_room_override(
                override.room_id,
                _parse_trade(override.trade_type),
                excluded=override.excluded,
                include_walls=override.include_walls,
                include_ceiling=override.include_ceiling,
            )
            if result is None:
                raise HTTPException(status_code=400, detail=f"Unknown room id: {override.room_id}")

    # Addons last so area/length defaults follow the synced sqft
    _apply_addons(project.hanging, request.hanging.addons)
    _apply_addons(project.finishing, request.finishing.addons)
    _apply_addons(project.painting, request.painting.addons)
    return project


# ==================
# ENDPOINTS
# ==================

@router.get("/trades", response_model=TradeListResponse)
async def list_available_trades():
    """List the trades that can be estimated."""
    trades = []
    for trade_type, metadata in TRADE_METADATA.items():
        trades.append(TradeInfoResponse(
            type=trade_type.value,
            label=metadata["label"],
            short_label=metadata["short_label"],
            uses_gross_sqft=metadata["uses_gross_sqft"],
        ))
    return TradeListResponse(trades=trades)


@router.get("/trades/{trade_type}")
async def get_trade_catalog(trade_type: str):
    """Get metadata and default catalog of a trade."""
    trade_enum = _parse_trade(trade_type)
    return {
        "type": trade_enum.value,
        **TRADE_METADATA[trade_enum],
        **TRADE_CATALOGS[trade_enum],
    }


@router.post("/rooms/sqft")
async def calculate_room(room: RoomRequest):
    """
    Calculate square footage for one room.

    Returns gross and net walls, ceiling, openings and the suggested sheet
    size for the room height.
    """
    parsed = room_from_record(room.model_dump())
    result = calculate_room_sqft(parsed)
    return {
        "room_id": parsed.id,
        **result.to_dict(),
        "suggested_sheet_size": suggest_sheet_size(parsed.height_feet, parsed.height_inches),
    }


@router.post("/calculate", response_model=EstimateResponse)
async def calculate_estimate(request: EstimateRequest):
    """
    Calculate a multi-trade estimate.

    Rooms are converted to per-trade sqft (gross for hanging, net for the
    other trades) and priced by each enabled trade's configuration.
    """
    project = _build_project(request)
    document = project.build_document(project_name=request.project_name)
    return EstimateResponse(
        document=document.to_dict(),
        totals=project.project_totals().to_dict(),
        parameters={s.trade_type.value: s.to_dict() for s in project.build_submissions()},
    )


@router.post("/export/excel")
async def export_estimate_excel(request: EstimateRequest):
    """Calculate an estimate and return it as an .xlsx workbook."""
    project = _build_project(request)
    result = export_estimate_to_excel(project.build_document(project_name=request.project_name))
    if not result.success:
        raise HTTPException(status_code=500, detail=f"Excel export failed: {result.error}")

    return Response(
        content=result.file_bytes,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )
