"""
Room persistence records.

Rooms are stored one row per room with snake_case columns. Derived sqft
columns are written for read convenience but are never trusted on load:
room_from_record() always recalculates them.
"""

import logging
from typing import Any, Dict, List, Optional

from app.services.geometry import (
    LShapeDimensions,
    Opening,
    Room,
    RoomShape,
    WallSegment,
    recalculate_room,
)
from app.services.trade_estimate import _generate_item_id, coerce_number, parse_enum

logger = logging.getLogger(__name__)

DERIVED_COLUMNS = [
    "gross_wall_sqft",
    "wall_sqft",
    "ceiling_sqft",
    "openings_sqft",
    "gross_total_sqft",
    "total_sqft",
]


def _number(value: Any, default: float = 0, minimum: Optional[float] = 0.0) -> float:
    """Stored numbers may be missing, text, NaN or infinite; fall back to default."""
    return coerce_number(value, default, minimum=minimum)


def _opening_from_record(data: Dict[str, Any]) -> Opening:
    return Opening(
        id=data.get("id") or _generate_item_id("open"),
        preset_id=data.get("preset_id") or "custom",
        label=data.get("label") or "",
        width=_number(data.get("width")),
        height=_number(data.get("height")),
        quantity=max(1, int(_number(data.get("quantity"), 1))),
    )


def _wall_from_record(data: Dict[str, Any], index: int) -> WallSegment:
    return WallSegment(
        id=data.get("id") or _generate_item_id("wall"),
        label=data.get("label") or f"Wall {index + 1}",
        length_feet=_number(data.get("length_feet")),
        length_inches=_number(data.get("length_inches")),
    )


def _l_shape_from_record(data: Optional[Dict[str, Any]]) -> Optional[LShapeDimensions]:
    if not data:
        return None
    defaults = LShapeDimensions()
    return LShapeDimensions(**{
        key: _number(data.get(key), getattr(defaults, key))
        for key in defaults.to_dict()
    })


def room_from_record(record: Dict[str, Any]) -> Room:
    """
    Build a Room from a stored row.

    Raises:
        ValueError: if the record has no id
    """
    room_id = record.get("id")
    if not room_id:
        raise ValueError("Room record is missing 'id'")

    custom_ceiling = record.get("custom_ceiling_sqft")
    room = Room(
        id=room_id,
        name=record.get("name") or "Room",
        shape=parse_enum(RoomShape, record.get("shape"), RoomShape.RECTANGULAR),
        length_feet=_number(record.get("length_feet")),
        length_inches=_number(record.get("length_inches")),
        width_feet=_number(record.get("width_feet")),
        width_inches=_number(record.get("width_inches")),
        height_feet=_number(record.get("height_feet"), 8),
        height_inches=_number(record.get("height_inches")),
        l_shape=_l_shape_from_record(record.get("l_shape_dimensions")),
        custom_walls=[
            _wall_from_record(w, i) for i, w in enumerate(record.get("custom_walls") or [])
        ],
        custom_ceiling_sqft=_number(custom_ceiling) if custom_ceiling is not None else None,
        doors=[_opening_from_record(d) for d in record.get("doors") or []],
        windows=[_opening_from_record(w) for w in record.get("windows") or []],
        sort_order=int(_number(record.get("sort_order"), minimum=None)),
    )
    return recalculate_room(room)


def room_to_record(room: Room, project_id: Optional[str] = None) -> Dict[str, Any]:
    """Serialize a Room into a row, derived sqft columns included."""
    record = room.to_dict()
    if project_id is not None:
        record["project_id"] = project_id
    return record


def rooms_from_records(records: List[Dict[str, Any]]) -> List[Room]:
    """Load rows ordered by sort_order."""
    rooms = [room_from_record(r) for r in records]
    rooms.sort(key=lambda r: r.sort_order)
    return rooms
