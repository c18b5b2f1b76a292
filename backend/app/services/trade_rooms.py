"""
Per-trade room views.

A TradeRoomView is the read-only projection of a Room under one trade, after
applying that trade's RoomOverride (excluded / walls / ceiling). Overrides
live in a RoomOverrideStore keyed by (room_id, trade_type), at most one entry
per pair.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.services.geometry import Room
from app.services.trade_estimate import TRADE_METADATA, TradeType


@dataclass
class RoomOverride:
    """Per-room, per-trade inclusion settings."""
    room_id: str
    trade_type: TradeType
    excluded: bool = False
    include_walls: bool = True
    include_ceiling: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "room_id": self.room_id,
            "trade_type": self.trade_type.value,
            "excluded": self.excluded,
            "include_walls": self.include_walls,
            "include_ceiling": self.include_ceiling,
        }


def default_override(room_id: str, trade_type: TradeType) -> RoomOverride:
    """The settings a room has under a trade before anyone edits them."""
    metadata = TRADE_METADATA[trade_type]
    return RoomOverride(
        room_id=room_id,
        trade_type=trade_type,
        excluded=False,
        include_walls=metadata["default_include_walls"],
        include_ceiling=metadata["default_include_ceiling"],
    )


class RoomOverrideStore:
    """Keyed table (room_id, trade_type) -> RoomOverride."""

    def __init__(self):
        self._overrides: Dict[Tuple[str, TradeType], RoomOverride] = {}

    def __len__(self) -> int:
        return len(self._overrides)

    def get(self, room_id: str, trade_type: TradeType) -> Optional[RoomOverride]:
        """Stored override, or None if the pair was never edited."""
        return self._overrides.get((room_id, trade_type))

    def resolve(self, room_id: str, trade_type: TradeType) -> RoomOverride:
        """Stored override, or the trade defaults."""
        stored = self.get(room_id, trade_type)
        if stored is not None:
            return stored
        return default_override(room_id, trade_type)

    def set(
        self,
        room_id: str,
        trade_type: TradeType,
        excluded: Optional[bool] = None,
        include_walls: Optional[bool] = None,
        include_ceiling: Optional[bool] = None,
    ) -> RoomOverride:
        """Create the override lazily and apply the given flags."""
        key = (room_id, trade_type)
        override = self._overrides.get(key)
        if override is None:
            override = default_override(room_id, trade_type)
            self._overrides[key] = override

        if excluded is not None:
            override.excluded = bool(excluded)
        if include_walls is not None:
            override.include_walls = bool(include_walls)
        if include_ceiling is not None:
            override.include_ceiling = bool(include_ceiling)
        return override

    def for_room(self, room_id: str) -> List[RoomOverride]:
        return [o for (rid, _), o in self._overrides.items() if rid == room_id]

    def remove_room(self, room_id: str) -> None:
        for key in [k for k in self._overrides if k[0] == room_id]:
            del self._overrides[key]

    def clear(self) -> None:
        self._overrides.clear()

    def to_list(self) -> List[Dict[str, Any]]:
        return [o.to_dict() for o in self._overrides.values()]


@dataclass
class TradeRoomView:
    """A room's effective square footage under one trade."""
    room: Room
    trade_type: TradeType
    excluded: bool
    include_walls: bool
    include_ceiling: bool
    effective_wall_sqft: float
    effective_ceiling_sqft: float
    effective_gross_wall_sqft: float

    @property
    def effective_total_sqft(self) -> float:
        return self.effective_wall_sqft + self.effective_ceiling_sqft

    @property
    def effective_gross_total_sqft(self) -> float:
        """Total without opening deduction, used for sheet goods."""
        return self.effective_gross_wall_sqft + self.effective_ceiling_sqft

    @property
    def coverage_sqft(self) -> float:
        """Gross for trades estimated on gross coverage, net otherwise."""
        if TRADE_METADATA[self.trade_type]["uses_gross_sqft"]:
            return self.effective_gross_total_sqft
        return self.effective_total_sqft

    def to_dict(self) -> Dict[str, Any]:
        return {
            "room_id": self.room.id,
            "name": self.room.name,
            "trade_type": self.trade_type.value,
            "excluded": self.excluded,
            "include_walls": self.include_walls,
            "include_ceiling": self.include_ceiling,
            "wall_sqft": self.room.wall_sqft,
            "ceiling_sqft": self.room.ceiling_sqft,
            "effective_wall_sqft": round(self.effective_wall_sqft, 2),
            "effective_ceiling_sqft": round(self.effective_ceiling_sqft, 2),
            "effective_total_sqft": round(self.effective_total_sqft, 2),
            "effective_gross_total_sqft": round(self.effective_gross_total_sqft, 2),
        }


def create_trade_room_view(
    room: Room,
    trade_type: TradeType,
    override: Optional[RoomOverride] = None,
) -> TradeRoomView:
    """Project a room under a trade; a missing override means trade defaults."""
    if override is None:
        override = default_override(room.id, trade_type)

    walls_counted = not override.excluded and override.include_walls
    ceiling_counted = not override.excluded and override.include_ceiling

    return TradeRoomView(
        room=room,
        trade_type=trade_type,
        excluded=override.excluded,
        include_walls=override.include_walls,
        include_ceiling=override.include_ceiling,
        effective_wall_sqft=room.wall_sqft if walls_counted else 0.0,
        effective_ceiling_sqft=room.ceiling_sqft if ceiling_counted else 0.0,
        effective_gross_wall_sqft=room.gross_wall_sqft if walls_counted else 0.0,
    )


def create_trade_room_views(
    rooms: Iterable[Room],
    trade_type: TradeType,
    store: RoomOverrideStore,
) -> List[TradeRoomView]:
    return [
        create_trade_room_view(room, trade_type, store.get(room.id, trade_type))
        for room in rooms
    ]
