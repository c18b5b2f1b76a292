"""
Room Geometry Calculator

Formulas (all dimensions converted to decimal feet first):
- Rectangular walls = 2 × (length + width) × height
- Rectangular ceiling = length × width
- L-shape walls = six outer walls × height
      main_length + main_width + ext_length + ext_width
      + max(0, main_width - ext_width) + max(0, main_length - ext_length)
- L-shape ceiling = main rectangle + extension rectangle (not de-overlapped)
- Custom walls = Σ wall length × height, ceiling entered manually
- Opening sqft = width_in × height_in / 144 per unit
- Net walls = max(0, gross walls - openings)

Every result is a pure function of the room's shape, dimensions and openings,
and is never negative.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from app.services.trade_estimate import _generate_item_id

logger = logging.getLogger(__name__)


class RoomShape(str, Enum):
    RECTANGULAR = "rectangular"
    L_SHAPE = "l_shape"
    CUSTOM = "custom"


class OpeningKind(str, Enum):
    DOOR = "door"
    WINDOW = "window"


# Opening presets, width × height in inches
OPENING_PRESETS = {
    OpeningKind.DOOR: {
        "standard_door": {"label": "Standard Door", "width": 36, "height": 80},
        "interior_door": {"label": "Interior Door", "width": 32, "height": 80},
        "double_door": {"label": "Double Door", "width": 72, "height": 80},
        "sliding_door": {"label": "Sliding Door", "width": 72, "height": 80},
    },
    OpeningKind.WINDOW: {
        "small_window": {"label": "Small Window", "width": 24, "height": 36},
        "medium_window": {"label": "Medium Window", "width": 36, "height": 48},
        "large_window": {"label": "Large Window", "width": 48, "height": 60},
        "picture_window": {"label": "Picture Window", "width": 72, "height": 48},
    },
}

CUSTOM_OPENING_ID = "custom"

DEFAULT_ROOM_LENGTH_FEET = 12
DEFAULT_ROOM_WIDTH_FEET = 10
DEFAULT_ROOM_HEIGHT_FEET = 8
DEFAULT_CUSTOM_WALL_LENGTH_FEET = 10


def feet_inches_to_feet(feet: float, inches: float) -> float:
    """Convert a whole-feet + inches pair to decimal feet."""
    return (feet or 0) + (inches or 0) / 12


def _length(feet: float, inches: float) -> float:
    return max(0.0, feet_inches_to_feet(feet, inches))


def calculate_opening_sqft(width_inches: float, height_inches: float) -> float:
    """Square footage of one opening from inch dimensions."""
    return max(0.0, width_inches or 0) * max(0.0, height_inches or 0) / 144


@dataclass
class Opening:
    """A door or window deducted from net wall area."""
    id: str
    preset_id: str
    label: str
    width: float   # inches
    height: float  # inches
    quantity: int = 1
    sqft: float = 0.0        # per unit
    total_sqft: float = 0.0  # sqft × quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "preset_id": self.preset_id,
            "label": self.label,
            "width": self.width,
            "height": self.height,
            "quantity": self.quantity,
            "sqft": round(self.sqft, 2),
            "total_sqft": round(self.total_sqft, 2),
        }


@dataclass
class WallSegment:
    """One wall of a custom-shaped room."""
    id: str
    label: str
    length_feet: float = DEFAULT_CUSTOM_WALL_LENGTH_FEET
    length_inches: float = 0
    sqft: float = 0.0

    @property
    def length(self) -> float:
        return _length(self.length_feet, self.length_inches)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "length_feet": self.length_feet,
            "length_inches": self.length_inches,
            "sqft": round(self.sqft, 2),
        }


@dataclass
class LShapeDimensions:
    """Main rectangle plus extension rectangle."""
    main_length_feet: float = 12
    main_length_inches: float = 0
    main_width_feet: float = 10
    main_width_inches: float = 0
    ext_length_feet: float = 8
    ext_length_inches: float = 0
    ext_width_feet: float = 6
    ext_width_inches: float = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "main_length_feet": self.main_length_feet,
            "main_length_inches": self.main_length_inches,
            "main_width_feet": self.main_width_feet,
            "main_width_inches": self.main_width_inches,
            "ext_length_feet": self.ext_length_feet,
            "ext_length_inches": self.ext_length_inches,
            "ext_width_feet": self.ext_width_feet,
            "ext_width_inches": self.ext_width_inches,
        }


@dataclass
class Room:
    """
    A room in the project.

    The sqft fields are derived by recalculate_room() and must never be
    edited directly.
    """
    id: str
    name: str
    shape: RoomShape = RoomShape.RECTANGULAR
    length_feet: float = DEFAULT_ROOM_LENGTH_FEET
    length_inches: float = 0
    width_feet: float = DEFAULT_ROOM_WIDTH_FEET
    width_inches: float = 0
    height_feet: float = DEFAULT_ROOM_HEIGHT_FEET
    height_inches: float = 0
    l_shape: Optional[LShapeDimensions] = None
    custom_walls: List[WallSegment] = field(default_factory=list)
    custom_ceiling_sqft: Optional[float] = None
    doors: List[Opening] = field(default_factory=list)
    windows: List[Opening] = field(default_factory=list)
    sort_order: int = 0

    # Derived
    gross_wall_sqft: float = 0.0
    wall_sqft: float = 0.0
    ceiling_sqft: float = 0.0
    openings_sqft: float = 0.0
    gross_total_sqft: float = 0.0
    total_sqft: float = 0.0

    @property
    def height(self) -> float:
        return _length(self.height_feet, self.height_inches)

    def openings(self, kind: OpeningKind) -> List[Opening]:
        return self.doors if kind == OpeningKind.DOOR else self.windows

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "shape": self.shape.value,
            "length_feet": self.length_feet,
            "length_inches": self.length_inches,
            "width_feet": self.width_feet,
            "width_inches": self.width_inches,
            "height_feet": self.height_feet,
            "height_inches": self.height_inches,
            "l_shape_dimensions": self.l_shape.to_dict() if self.l_shape else None,
            "custom_walls": [w.to_dict() for w in self.custom_walls],
            "custom_ceiling_sqft": self.custom_ceiling_sqft,
            "doors": [d.to_dict() for d in self.doors],
            "windows": [w.to_dict() for w in self.windows],
            "sort_order": self.sort_order,
            "gross_wall_sqft": self.gross_wall_sqft,
            "wall_sqft": self.wall_sqft,
            "ceiling_sqft": self.ceiling_sqft,
            "openings_sqft": self.openings_sqft,
            "gross_total_sqft": self.gross_total_sqft,
            "total_sqft": self.total_sqft,
        }


@dataclass
class RoomSqft:
    """Square footage of one room, gross and net."""
    gross_wall_sqft: float
    wall_sqft: float
    ceiling_sqft: float
    openings_sqft: float
    gross_total_sqft: float
    total_sqft: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gross_wall_sqft": self.gross_wall_sqft,
            "wall_sqft": self.wall_sqft,
            "ceiling_sqft": self.ceiling_sqft,
            "openings_sqft": self.openings_sqft,
            "gross_total_sqft": self.gross_total_sqft,
            "total_sqft": self.total_sqft,
        }


@dataclass
class RoomsSqftTotals:
    """Sums over several rooms."""
    total_wall_sqft: float = 0.0
    total_ceiling_sqft: float = 0.0
    total_openings_sqft: float = 0.0
    gross_total_sqft: float = 0.0
    grand_total_sqft: float = 0.0
    room_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_wall_sqft": round(self.total_wall_sqft, 2),
            "total_ceiling_sqft": round(self.total_ceiling_sqft, 2),
            "total_openings_sqft": round(self.total_openings_sqft, 2),
            "gross_total_sqft": round(self.gross_total_sqft, 2),
            "grand_total_sqft": round(self.grand_total_sqft, 2),
            "room_count": self.room_count,
        }


# ==================
# OPENINGS
# ==================

def get_opening_preset(kind: OpeningKind, preset_id: str) -> Optional[Dict[str, Any]]:
    """Look up a door/window preset; None for unknown ids."""
    return OPENING_PRESETS.get(kind, {}).get(preset_id)


def recalculate_opening(opening: Opening) -> Opening:
    """Refresh the derived sqft fields of an opening in place."""
    opening.sqft = calculate_opening_sqft(opening.width, opening.height)
    opening.total_sqft = opening.sqft * max(0, opening.quantity)
    return opening


def create_opening(
    preset_id: str,
    label: str,
    width: float,
    height: float,
    quantity: int = 1,
) -> Opening:
    """Create an Opening with auto-generated ID and derived sqft."""
    return recalculate_opening(Opening(
        id=_generate_item_id("open"),
        preset_id=preset_id,
        label=label,
        width=width,
        height=height,
        quantity=quantity,
    ))


def create_opening_from_preset(
    kind: OpeningKind,
    preset_id: str,
    quantity: int = 1,
) -> Optional[Opening]:
    """Create an Opening from a preset; None if the preset is unknown."""
    preset = get_opening_preset(kind, preset_id)
    if preset is None:
        logger.debug(f"Unknown {kind.value} preset: {preset_id}")
        return None
    return create_opening(
        preset_id=preset_id,
        label=preset["label"],
        width=preset["width"],
        height=preset["height"],
        quantity=quantity,
    )


# ==================
# WALLS AND CEILINGS
# ==================

def calculate_l_shape_walls(dims: LShapeDimensions, height: float) -> float:
    main_length = _length(dims.main_length_feet, dims.main_length_inches)
    main_width = _length(dims.main_width_feet, dims.main_width_inches)
    ext_length = _length(dims.ext_length_feet, dims.ext_length_inches)
    ext_width = _length(dims.ext_width_feet, dims.ext_width_inches)

    perimeter = (
        main_length
        + main_width
        + ext_length
        + ext_width
        + max(0.0, main_width - ext_width)
        + max(0.0, main_length - ext_length)
    )
    return perimeter * height


def calculate_l_shape_ceiling(dims: LShapeDimensions) -> float:
    # Both rectangles are added whole; the overlap is not removed.
    main_area = (
        _length(dims.main_length_feet, dims.main_length_inches)
        * _length(dims.main_width_feet, dims.main_width_inches)
    )
    ext_area = (
        _length(dims.ext_length_feet, dims.ext_length_inches)
        * _length(dims.ext_width_feet, dims.ext_width_inches)
    )
    return main_area + ext_area


def calculate_custom_walls_sqft(walls: List[WallSegment], height: float) -> float:
    return sum(wall.length * height for wall in walls)


def calculate_room_sqft(room: Room, include_ceiling: bool = True) -> RoomSqft:
    """
    Calculate square footage for a room.

    Args:
        room: Room with shape, dimensions and openings
        include_ceiling: Whether the ceiling counts toward the totals

    Returns:
        RoomSqft with gross and net values rounded to 2 decimals
    """
    height = room.height
    wall_area = 0.0
    ceiling_area = 0.0

    if room.shape == RoomShape.L_SHAPE:
        if room.l_shape is not None:
            wall_area = calculate_l_shape_walls(room.l_shape, height)
            ceiling_area = calculate_l_shape_ceiling(room.l_shape)
    elif room.shape == RoomShape.CUSTOM:
        wall_area = calculate_custom_walls_sqft(room.custom_walls, height)
        if room.custom_ceiling_sqft is not None:
            ceiling_area = max(0.0, room.custom_ceiling_sqft)
    else:
        length = _length(room.length_feet, room.length_inches)
        width = _length(room.width_feet, room.width_inches)
        wall_area = 2 * (length + width) * height
        ceiling_area = length * width

    if not include_ceiling:
        ceiling_area = 0.0

    openings_area = sum(
        calculate_opening_sqft(o.width, o.height) * max(0, o.quantity)
        for o in room.doors + room.windows
    )
    net_wall_area = max(0.0, wall_area - openings_area)

    return RoomSqft(
        gross_wall_sqft=round(wall_area, 2),
        wall_sqft=round(net_wall_area, 2),
        ceiling_sqft=round(ceiling_area, 2),
        openings_sqft=round(openings_area, 2),
        gross_total_sqft=round(wall_area + ceiling_area, 2),
        total_sqft=round(net_wall_area + ceiling_area, 2),
    )


def recalculate_room(room: Room) -> Room:
    """Refresh every derived sqft field of a room in place."""
    height = room.height
    for wall in room.custom_walls:
        wall.sqft = wall.length * height
    for opening in room.doors + room.windows:
        recalculate_opening(opening)

    result = calculate_room_sqft(room, include_ceiling=True)
    room.gross_wall_sqft = result.gross_wall_sqft
    room.wall_sqft = result.wall_sqft
    room.ceiling_sqft = result.ceiling_sqft
    room.openings_sqft = result.openings_sqft
    room.gross_total_sqft = result.gross_total_sqft
    room.total_sqft = result.total_sqft
    return room


def calculate_total_rooms_sqft(rooms: List[Room]) -> RoomsSqftTotals:
    """Sum net walls, ceilings and openings over rooms."""
    totals = RoomsSqftTotals(room_count=len(rooms))
    for room in rooms:
        result = calculate_room_sqft(room)
        totals.total_wall_sqft += result.wall_sqft
        totals.total_ceiling_sqft += result.ceiling_sqft
        totals.total_openings_sqft += result.openings_sqft
        totals.gross_total_sqft += result.gross_total_sqft
        totals.grand_total_sqft += result.total_sqft
    return totals


def suggest_sheet_size(height_feet: float, height_inches: float = 0) -> str:
    """Suggest the sheet length that covers the wall height in one piece."""
    height = feet_inches_to_feet(height_feet, height_inches)
    if height <= 8:
        return "4x8"
    if height <= 9:
        return "4x10"
    return "4x12"


# ==================
# FACTORIES
# ==================

def create_custom_wall(label: str, length_feet: float = DEFAULT_CUSTOM_WALL_LENGTH_FEET,
                       length_inches: float = 0) -> WallSegment:
    """Create a WallSegment with auto-generated ID."""
    return WallSegment(
        id=_generate_item_id("wall"),
        label=label,
        length_feet=length_feet,
        length_inches=length_inches,
    )


def create_room(
    name: str,
    shape: RoomShape = RoomShape.RECTANGULAR,
    sort_order: int = 0,
) -> Room:
    """Create a default 12' × 10' × 8' room with derived sqft filled in."""
    room = Room(
        id=_generate_item_id("room"),
        name=name,
        shape=shape,
        sort_order=sort_order,
    )
    if shape == RoomShape.L_SHAPE:
        room.l_shape = LShapeDimensions()
    return recalculate_room(room)
