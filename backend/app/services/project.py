"""
Project Estimate - multi-trade aggregation

The project owns the rooms, the per-room/per-trade overrides and the set of
enabled trades. After every room, override, mode or trade-selection mutation
it runs the pipeline in order:

    recalculate_room -> create_trade_room_views -> sync_sqft_to_trades
    -> engine.totals -> project_totals

Trade engines never see rooms directly; they only receive sqft:
- hanging: gross walls + ceilings (no opening deduction)
- finishing: net walls + ceilings
- painting: net walls and ceilings separately
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from app.services.estimate_document import (
    EstimateDocument,
    TradeSubmission,
    build_estimate_document,
    build_trade_submissions,
)
from app.services.estimators import BaseTradeEngine, PaintingEngine, create_trade_engine
from app.services.geometry import (
    LShapeDimensions,
    Opening,
    OpeningKind,
    Room,
    RoomShape,
    WallSegment,
    create_custom_wall,
    create_opening,
    create_opening_from_preset,
    create_room,
    recalculate_room,
)
from app.services.profile import PricingProfile
from app.services.room_records import room_to_record, rooms_from_records
from app.services.trade_estimate import (
    TRADE_METADATA,
    ProjectTotals,
    TradeTotals,
    TradeType,
    coerce_number,
    create_project_totals,
    parse_enum,
)
from app.services.trade_rooms import (
    RoomOverride,
    RoomOverrideStore,
    TradeRoomView,
    create_trade_room_views,
)

logger = logging.getLogger(__name__)


class InputMode(str, Enum):
    ROOMS = "rooms"
    MANUAL = "manual"


FEET_FIELDS = {"length_feet", "width_feet", "height_feet"}
INCH_FIELDS = {"length_inches", "width_inches", "height_inches"}
MAX_INCHES = 11


class ProjectEstimate:
    """Rooms, overrides and trade engines of one multi-trade estimate."""

    def __init__(
        self,
        profile: Optional[PricingProfile] = None,
        enabled_trades: Optional[List[TradeType]] = None,
        engines: Optional[Dict[TradeType, BaseTradeEngine]] = None,
    ):
        self.profile = profile or PricingProfile()
        if engines is None:
            engines = {t: create_trade_engine(t, self.profile) for t in TradeType}
        self.engines = engines
        self.rooms: List[Room] = []
        self.overrides = RoomOverrideStore()
        self.input_mode = InputMode.ROOMS
        self.manual_wall_sqft = 0.0
        self.manual_ceiling_sqft = 0.0

        if enabled_trades is None:
            enabled_trades = list(TradeType)
        self._enabled: Set[TradeType] = set(enabled_trades)
        self.sync_sqft_to_trades()

    # ==================
    # TRADE SELECTION
    # ==================

    @property
    def enabled_trades(self) -> List[TradeType]:
        return [t for t in TradeType if t in self._enabled]

    def is_trade_enabled(self, trade_type: TradeType) -> bool:
        return trade_type in self._enabled

    def enable_trade(self, trade_type: TradeType) -> None:
        self._enabled.add(trade_type)
        self.sync_sqft_to_trades()

    def disable_trade(self, trade_type: TradeType) -> bool:
        """Disable a trade; the last enabled trade cannot be disabled."""
        if trade_type not in self._enabled:
            return False
        if len(self._enabled) == 1:
            logger.debug(f"Keeping {trade_type.value}: last enabled trade")
            return False
        self._enabled.discard(trade_type)
        return True

    def toggle_trade(self, trade_type: TradeType) -> bool:
        """Toggle a trade; returns whether it is enabled afterwards."""
        if trade_type in self._enabled:
            self.disable_trade(trade_type)
        else:
            self.enable_trade(trade_type)
        return trade_type in self._enabled

    def engine(self, trade_type: TradeType) -> Optional[BaseTradeEngine]:
        return self.engines.get(trade_type)

    @property
    def hanging(self):
        return self.engines.get(TradeType.DRYWALL_HANGING)

    @property
    def finishing(self):
        return self.engines.get(TradeType.DRYWALL_FINISHING)

    @property
    def painting(self):
        return self.engines.get(TradeType.PAINTING)

    # ==================
    # ROOMS
    # ==================

    def get_room(self, room_id: str) -> Optional[Room]:
        for room in self.rooms:
            if room.id == room_id:
                return room
        return None

    def add_room(self, name: Optional[str] = None,
                 shape: RoomShape = RoomShape.RECTANGULAR) -> Room:
        room = create_room(
            name=name or f"Room {len(self.rooms) + 1}",
            shape=parse_enum(RoomShape, shape, RoomShape.RECTANGULAR),
            sort_order=len(self.rooms),
        )
        self.rooms.append(room)
        self.sync_sqft_to_trades()
        return room

    def update_room(self, room_id: str, **changes: Any) -> bool:
        """
        Update room fields.

        Supported keys: name, shape, length/width/height feet and inches,
        custom_ceiling_sqft and l_shape (dict of L-shape dimension fields).
        Invalid numbers are ignored, negatives clamp to 0, inches clamp to 0-11.
        """
        room = self.get_room(room_id)
        if room is None:
            return False

        for key, value in changes.items():
            if key == "name":
                room.name = str(value)
            elif key == "shape":
                self._set_shape(room, value)
            elif key in FEET_FIELDS:
                setattr(room, key, coerce_number(value, getattr(room, key)))
            elif key in INCH_FIELDS:
                setattr(room, key, coerce_number(value, getattr(room, key), 0, MAX_INCHES))
            elif key == "custom_ceiling_sqft":
                room.custom_ceiling_sqft = (
                    None if value is None
                    else coerce_number(value, room.custom_ceiling_sqft or 0.0)
                )
            elif key == "l_shape" and isinstance(value, dict):
                self._update_l_shape(room, value)
            else:
                logger.debug(f"Ignoring unknown room field: {key}")

        recalculate_room(room)
        self.sync_sqft_to_trades()
        return True

    def _set_shape(self, room: Room, value: Any) -> None:
        shape = parse_enum(RoomShape, value, room.shape)
        if shape == RoomShape.L_SHAPE and room.l_shape is None:
            room.l_shape = LShapeDimensions()
        if shape == RoomShape.CUSTOM and not room.custom_walls:
            # Seed from the rectangle so the room keeps its size
            lengths = [
                (room.length_feet, room.length_inches),
                (room.width_feet, room.width_inches),
            ] * 2
            room.custom_walls = [
                create_custom_wall(f"Wall {i + 1}", feet, inches)
                for i, (feet, inches) in enumerate(lengths)
            ]
        room.shape = shape

    def _update_l_shape(self, room: Room, values: Dict[str, Any]) -> None:
        if room.l_shape is None:
            room.l_shape = LShapeDimensions()
        for key, value in values.items():
            if not hasattr(room.l_shape, key):
                logger.debug(f"Ignoring unknown L-shape field: {key}")
                continue
            current = getattr(room.l_shape, key)
            if key.endswith("_inches"):
                setattr(room.l_shape, key, coerce_number(value, current, 0, MAX_INCHES))
            else:
                setattr(room.l_shape, key, coerce_number(value, current))

    def remove_room(self, room_id: str) -> bool:
        room = self.get_room(room_id)
        if room is None:
            return False
        self.rooms.remove(room)
        self.overrides.remove_room(room_id)
        for index, remaining in enumerate(self.rooms):
            remaining.sort_order = index
        self.sync_sqft_to_trades()
        return True

    def reorder_rooms(self, room_ids: List[str]) -> None:
        """Order rooms by the given ids; unlisted rooms keep their order at the end."""
        by_id = {room.id: room for room in self.rooms}
        ordered = [by_id.pop(rid) for rid in room_ids if rid in by_id]
        ordered.extend(room for room in self.rooms if room.id in by_id)
        for index, room in enumerate(ordered):
            room.sort_order = index
        self.rooms = ordered
        self.sync_sqft_to_trades()

    def load_rooms(self, records: List[Dict[str, Any]]) -> None:
        """Replace rooms with stored rows; overrides are cleared."""
        self.rooms = rooms_from_records(records)
        self.overrides.clear()
        self.sync_sqft_to_trades()

    def room_records(self, project_id: Optional[str] = None) -> List[Dict[str, Any]]:
        return [room_to_record(room, project_id) for room in self.rooms]

    # ==================
    # OPENINGS
    # ==================

    def _find_opening(self, room: Room, opening_id: str) -> Optional[Tuple[List[Opening], Opening]]:
        for openings in (room.doors, room.windows):
            for opening in openings:
                if opening.id == opening_id:
                    return openings, opening
        return None

    def _add_opening(self, room: Room, kind: OpeningKind, opening: Opening) -> Opening:
        room.openings(kind).append(opening)
        recalculate_room(room)
        self.sync_sqft_to_trades()
        return opening

    def add_opening(self, room_id: str, kind: Any, preset_id: str,
                    quantity: int = 1) -> Optional[Opening]:
        room = self.get_room(room_id)
        kind = parse_enum(OpeningKind, kind, None)
        if room is None or kind is None:
            return None
        opening = create_opening_from_preset(kind, preset_id, max(1, int(coerce_number(quantity, 1))))
        if opening is None:
            return None
        return self._add_opening(room, kind, opening)

    def add_custom_opening(
        self,
        room_id: str,
        kind: Any,
        width: Any,
        height: Any,
        quantity: int = 1,
        label: Optional[str] = None,
    ) -> Optional[Opening]:
        room = self.get_room(room_id)
        kind = parse_enum(OpeningKind, kind, None)
        if room is None or kind is None:
            return None
        opening = create_opening(
            preset_id="custom",
            label=label or f"Custom {kind.value.title()}",
            width=coerce_number(width, 0.0),
            height=coerce_number(height, 0.0),
            quantity=max(1, int(coerce_number(quantity, 1))),
        )
        return self._add_opening(room, kind, opening)

    def update_opening(
        self,
        room_id: str,
        opening_id: str,
        width: Any = None,
        height: Any = None,
        quantity: Any = None,
        label: Optional[str] = None,
    ) -> bool:
        """Update an opening; quantities below 1 are rejected."""
        room = self.get_room(room_id)
        found = self._find_opening(room, opening_id) if room else None
        if found is None:
            return False
        _, opening = found

        if width is not None:
            opening.width = coerce_number(width, opening.width)
        if height is not None:
            opening.height = coerce_number(height, opening.height)
        if quantity is not None:
            value = coerce_number(quantity, opening.quantity, minimum=None)
            if value >= 1:
                opening.quantity = int(value)
        if label is not None:
            opening.label = label

        recalculate_room(room)
        self.sync_sqft_to_trades()
        return True

    def remove_opening(self, room_id: str, opening_id: str) -> bool:
        room = self.get_room(room_id)
        found = self._find_opening(room, opening_id) if room else None
        if found is None:
            return False
        openings, opening = found
        openings.remove(opening)
        recalculate_room(room)
        self.sync_sqft_to_trades()
        return True

    # ==================
    # CUSTOM WALLS
    # ==================

    def _find_wall(self, room: Room, wall_id: str) -> Optional[WallSegment]:
        for wall in room.custom_walls:
            if wall.id == wall_id:
                return wall
        return None

    def add_custom_wall(self, room_id: str, length_feet: Any = 10, length_inches: Any = 0,
                        label: Optional[str] = None) -> Optional[WallSegment]:
        room = self.get_room(room_id)
        if room is None:
            return None
        wall = create_custom_wall(
            label or f"Wall {len(room.custom_walls) + 1}",
            coerce_number(length_feet, 10.0),
            coerce_number(length_inches, 0.0, 0, MAX_INCHES),
        )
        room.custom_walls.append(wall)
        recalculate_room(room)
        self.sync_sqft_to_trades()
        return wall

    def update_custom_wall(self, room_id: str, wall_id: str, length_feet: Any = None,
                           length_inches: Any = None, label: Optional[str] = None) -> bool:
        room = self.get_room(room_id)
        wall = self._find_wall(room, wall_id) if room else None
        if wall is None:
            return False
        if length_feet is not None:
            wall.length_feet = coerce_number(length_feet, wall.length_feet)
        if length_inches is not None:
            wall.length_inches = coerce_number(length_inches, wall.length_inches, 0, MAX_INCHES)
        if label is not None:
            wall.label = label
        recalculate_room(room)
        self.sync_sqft_to_trades()
        return True

    def remove_custom_wall(self, room_id: str, wall_id: str) -> bool:
        """Remove a wall; a custom room keeps at least one."""
        room = self.get_room(room_id)
        wall = self._find_wall(room, wall_id) if room else None
        if wall is None or len(room.custom_walls) <= 1:
            return False
        room.custom_walls.remove(wall)
        recalculate_room(room)
        self.sync_sqft_to_trades()
        return True

    # ==================
    # OVERRIDES AND VIEWS
    # ==================

    def set_room_override(
        self,
        room_id: str,
        trade_type: TradeType,
        excluded: Optional[bool] = None,
        include_walls: Optional[bool] = None,
        include_ceiling: Optional[bool] = None,
    ) -> Optional[RoomOverride]:
        if self.get_room(room_id) is None:
            return None
        override = self.overrides.set(
            room_id,
            trade_type,
            excluded=excluded,
            include_walls=include_walls,
            include_ceiling=include_ceiling,
        )
        self.sync_sqft_to_trades()
        return override

    def get_room_override(self, room_id: str, trade_type: TradeType) -> RoomOverride:
        return self.overrides.resolve(room_id, trade_type)

    def get_trade_room_views(self, trade_type: TradeType) -> List[TradeRoomView]:
        return create_trade_room_views(self.rooms, trade_type, self.overrides)

    # ==================
    # INPUT MODE
    # ==================

    def set_input_mode(self, mode: Any) -> bool:
        """
        Switch between room-based and manual sqft input.

        Switching is destructive: the data of the mode being left is cleared
        and every trade engine returns to its default configuration.
        """
        new_mode = parse_enum(InputMode, mode, self.input_mode)
        if new_mode == self.input_mode:
            return False

        if self.input_mode == InputMode.ROOMS:
            self.rooms = []
            self.overrides.clear()
        else:
            self.manual_wall_sqft = 0.0
            self.manual_ceiling_sqft = 0.0

        for engine in self.engines.values():
            engine.reset()

        logger.info(f"Input mode {self.input_mode.value} -> {new_mode.value}, trade engines reset")
        self.input_mode = new_mode
        self.sync_sqft_to_trades()
        return True

    def set_manual_wall_sqft(self, sqft: Any) -> None:
        self.manual_wall_sqft = coerce_number(sqft, self.manual_wall_sqft)
        self.sync_sqft_to_trades()

    def set_manual_ceiling_sqft(self, sqft: Any) -> None:
        self.manual_ceiling_sqft = coerce_number(sqft, self.manual_ceiling_sqft)
        self.sync_sqft_to_trades()

    # ==================
    # PIPELINE
    # ==================

    def effective_sqft(self, trade_type: TradeType) -> Dict[str, float]:
        """Net wall, ceiling and gross wall sqft a trade receives."""
        if self.input_mode == InputMode.MANUAL:
            return {
                "wall_sqft": self.manual_wall_sqft,
                "ceiling_sqft": self.manual_ceiling_sqft,
                "gross_wall_sqft": self.manual_wall_sqft,
            }

        views = self.get_trade_room_views(trade_type)
        return {
            "wall_sqft": sum(v.effective_wall_sqft for v in views),
            "ceiling_sqft": sum(v.effective_ceiling_sqft for v in views),
            "gross_wall_sqft": sum(v.effective_gross_wall_sqft for v in views),
        }

    def sync_sqft_to_trades(self) -> None:
        """Push each enabled trade's effective sqft into its engine. Idempotent."""
        for trade_type in self.enabled_trades:
            engine = self.engines.get(trade_type)
            if engine is None:
                logger.warning(f"No engine for enabled trade {trade_type.value}")
                continue

            sqft = self.effective_sqft(trade_type)
            if isinstance(engine, PaintingEngine):
                engine.set_wall_sqft(sqft["wall_sqft"])
                engine.set_ceiling_sqft(sqft["ceiling_sqft"])
            elif TRADE_METADATA[trade_type]["uses_gross_sqft"]:
                engine.set_sqft(sqft["gross_wall_sqft"] + sqft["ceiling_sqft"])
            else:
                engine.set_sqft(sqft["wall_sqft"] + sqft["ceiling_sqft"])

    # ==================
    # TOTALS AND DOCUMENTS
    # ==================

    def trade_totals(self, trade_type: TradeType) -> TradeTotals:
        """Totals of one trade; a missing engine contributes nothing."""
        engine = self.engines.get(trade_type)
        if engine is None:
            logger.warning(f"No engine for trade {trade_type.value}, counting as zero")
            return TradeTotals()
        return engine.totals

    def project_totals(self) -> ProjectTotals:
        return create_project_totals({t: self.trade_totals(t) for t in self.enabled_trades})

    def build_document(
        self,
        project_name: str = "",
        created_at: Optional[datetime] = None,
    ) -> EstimateDocument:
        return build_estimate_document(self, project_name=project_name, created_at=created_at)

    def build_submissions(self) -> List[TradeSubmission]:
        return build_trade_submissions(self)

    def reset(self) -> None:
        """Start over: no rooms, room mode, all trades enabled with defaults."""
        self.rooms = []
        self.overrides.clear()
        self.input_mode = InputMode.ROOMS
        self.manual_wall_sqft = 0.0
        self.manual_ceiling_sqft = 0.0
        for engine in self.engines.values():
            engine.reset()
        self._enabled = set(TradeType)
        self.sync_sqft_to_trades()
