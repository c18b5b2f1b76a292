"""
Estimate documents and submission payloads.

The document is a flattened, already-priced breakdown per trade. PDF, email
and spreadsheet layers consume it as-is and never recompute pricing.

Submission payloads carry each trade's configuration snapshot plus a price
range; the estimate is deterministic, so range_low == range_high == total.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from app.core.config import settings
from app.services.trade_estimate import TRADE_METADATA, TradeType


@dataclass
class TradeBreakdown:
    """Priced summary of one trade for documents."""
    trade_type: TradeType
    label: str
    rooms: List[Dict[str, Any]]
    material_subtotal: float
    labor_subtotal: float
    addons_subtotal: float
    complexity_label: str
    complexity_adjustment: float
    total: float
    addons: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trade_type": self.trade_type.value,
            "label": self.label,
            "rooms": self.rooms,
            "material_subtotal": round(self.material_subtotal, 2),
            "labor_subtotal": round(self.labor_subtotal, 2),
            "addons_subtotal": round(self.addons_subtotal, 2),
            "complexity_label": self.complexity_label,
            "complexity_adjustment": round(self.complexity_adjustment, 2),
            "total": round(self.total, 2),
            "addons": self.addons,
        }


@dataclass
class EstimateDocument:
    """Everything a document generator needs for a multi-trade estimate."""
    project_name: str
    input_mode: str
    trades: List[TradeBreakdown]
    total: float
    created_at: datetime
    valid_until: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_name": self.project_name,
            "input_mode": self.input_mode,
            "trades": [t.to_dict() for t in self.trades],
            "total": round(self.total, 2),
            "created_at": self.created_at.isoformat(),
            "valid_until": self.valid_until.isoformat(),
        }


@dataclass
class TradeSubmission:
    """One estimate row to persist on submit."""
    trade_type: TradeType
    parameters: Dict[str, Any]
    total: float
    range_low: float
    range_high: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trade_type": self.trade_type.value,
            "parameters": self.parameters,
            "total": round(self.total, 2),
            "range_low": round(self.range_low, 2),
            "range_high": round(self.range_high, 2),
        }


def build_trade_breakdown(project, trade_type: TradeType) -> TradeBreakdown:
    """Breakdown of one trade; a missing engine gives an all-zero trade."""
    engine = project.engine(trade_type)
    totals = project.trade_totals(trade_type)
    rooms = [
        view.to_dict()
        for view in project.get_trade_room_views(trade_type)
        if not view.excluded
    ]
    return TradeBreakdown(
        trade_type=trade_type,
        label=TRADE_METADATA[trade_type]["label"],
        rooms=rooms,
        material_subtotal=totals.material_subtotal,
        labor_subtotal=totals.labor_subtotal,
        addons_subtotal=totals.addons_subtotal,
        complexity_label=engine.complexity_label if engine else "Standard",
        complexity_adjustment=totals.complexity_adjustment,
        total=totals.total,
        addons=engine.addons.snapshot() if engine else [],
    )


def build_estimate_document(
    project,
    project_name: str = "",
    created_at: Optional[datetime] = None,
    valid_days: Optional[int] = None,
) -> EstimateDocument:
    """Flatten the enabled trades of a project into a document."""
    if created_at is None:
        created_at = datetime.now(timezone.utc)
    if valid_days is None:
        valid_days = settings.estimate_valid_days

    trades = [build_trade_breakdown(project, t) for t in project.enabled_trades]
    return EstimateDocument(
        project_name=project_name,
        input_mode=project.input_mode.value,
        trades=trades,
        total=sum(t.total for t in trades),
        created_at=created_at,
        valid_until=created_at + timedelta(days=valid_days),
    )


def build_trade_submissions(project) -> List[TradeSubmission]:
    """Per-trade parameters and range for every enabled trade with an engine."""
    submissions = []
    for trade_type in project.enabled_trades:
        engine = project.engine(trade_type)
        if engine is None:
            continue
        total = engine.totals.total
        submissions.append(TradeSubmission(
            trade_type=trade_type,
            parameters={"input_mode": project.input_mode.value, **engine.parameters()},
            total=total,
            range_low=total,
            range_high=total,
        ))
    return submissions
