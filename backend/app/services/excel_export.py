"""
Excel Export Service

Generates Excel workbooks from estimate documents: a summary sheet with one
row per trade and one detail sheet per trade listing rooms and addons.
Values are taken from the document as priced; nothing is recomputed.
"""

import io
import logging
import re
from dataclasses import dataclass
from typing import Optional

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from app.services.estimate_document import EstimateDocument, TradeBreakdown

logger = logging.getLogger(__name__)


@dataclass
class ExcelExportResult:
    """Result of Excel export."""
    success: bool
    filename: str
    file_bytes: Optional[bytes] = None
    error: Optional[str] = None
    row_count: int = 0


COLORS = {
    "header_bg": "1F4E79",  # Dark blue
    "header_fg": "FFFFFF",  # White
    "total_bg": "FFC000",   # Gold
}

MONEY_FORMAT = '"$"#,##0.00'
SQFT_FORMAT = "#,##0.00"

THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)


def _header_row(ws, row: int, headers) -> None:
    header_font = Font(bold=True, color=COLORS["header_fg"])
    header_fill = PatternFill(start_color=COLORS["header_bg"], end_color=COLORS["header_bg"], fill_type="solid")
    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=row, column=col, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center")
        cell.border = THIN_BORDER


def _total_row(ws, row: int, columns: int) -> None:
    total_fill = PatternFill(start_color=COLORS["total_bg"], end_color=COLORS["total_bg"], fill_type="solid")
    for col in range(1, columns + 1):
        cell = ws.cell(row=row, column=col)
        cell.font = Font(bold=True)
        cell.fill = total_fill


def _safe_filename(name: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9_-]+", "_", name).strip("_")
    return cleaned or "Estimate"


def export_estimate_to_excel(document: EstimateDocument) -> ExcelExportResult:
    """
    Export an estimate document to an Excel file.

    Args:
        document: Priced estimate document

    Returns:
        ExcelExportResult with file bytes, or success=False with the error
    """
    try:
        wb = openpyxl.Workbook()
        wb.remove(wb.active)

        _create_summary_sheet(wb, document)
        for trade in document.trades:
            _create_trade_sheet(wb, trade)

        timestamp = document.created_at.strftime("%Y%m%d_%H%M%S")
        filename = f"Estimate_{_safe_filename(document.project_name)}_{timestamp}.xlsx"

        buffer = io.BytesIO()
        wb.save(buffer)
        buffer.seek(0)

        return ExcelExportResult(
            success=True,
            filename=filename,
            file_bytes=buffer.getvalue(),
            row_count=len(document.trades),
        )

    except Exception as e:
        logger.error(f"Excel export error: {e}")
        return ExcelExportResult(
            success=False,
            filename="",
            error=str(e),
        )


def _create_summary_sheet(wb, document: EstimateDocument) -> None:
    """Create summary sheet with one row per trade."""
    ws = wb.create_sheet("Summary")

    ws["A1"] = f"ESTIMATE - {document.project_name}" if document.project_name else "ESTIMATE"
    ws["A1"].font = Font(bold=True, size=16)
    ws.merge_cells("A1:G1")

    ws["A3"] = "Created:"
    ws["B3"] = document.created_at.strftime("%m/%d/%Y")
    ws["A4"] = "Valid Until:"
    ws["B4"] = document.valid_until.strftime("%m/%d/%Y")

    row = 6
    headers = ["Trade", "Material", "Labor", "Addons", "Complexity", "Adjustment", "Total"]
    _header_row(ws, row, headers)

    for trade in document.trades:
        row += 1
        ws.cell(row=row, column=1, value=trade.label)
        ws.cell(row=row, column=2, value=round(trade.material_subtotal, 2))
        ws.cell(row=row, column=3, value=round(trade.labor_subtotal, 2))
        ws.cell(row=row, column=4, value=round(trade.addons_subtotal, 2))
        ws.cell(row=row, column=5, value=trade.complexity_label)
        ws.cell(row=row, column=6, value=round(trade.complexity_adjustment, 2))
        ws.cell(row=row, column=7, value=round(trade.total, 2))
        for col in (2, 3, 4, 6, 7):
            ws.cell(row=row, column=col).number_format = MONEY_FORMAT

    row += 1
    ws.cell(row=row, column=1, value="TOTAL")
    ws.cell(row=row, column=7, value=round(document.total, 2))
    ws.cell(row=row, column=7).number_format = MONEY_FORMAT
    _total_row(ws, row, len(headers))

    ws.column_dimensions["A"].width = 22
    for col in "BCDEFG":
        ws.column_dimensions[col].width = 14


def _create_trade_sheet(wb, trade: TradeBreakdown) -> None:
    """Create detail sheet with rooms and addons of one trade."""
    ws = wb.create_sheet(trade.label[:31])

    headers = ["Room", "Walls (sqft)", "Ceiling (sqft)", "Total (sqft)"]
    _header_row(ws, 1, headers)

    row = 1
    total_sqft = 0.0
    for room in trade.rooms:
        row += 1
        ws.cell(row=row, column=1, value=room["name"])
        ws.cell(row=row, column=2, value=room["effective_wall_sqft"])
        ws.cell(row=row, column=3, value=room["effective_ceiling_sqft"])
        ws.cell(row=row, column=4, value=room["effective_total_sqft"])
        for col in (2, 3, 4):
            ws.cell(row=row, column=col).number_format = SQFT_FORMAT
        total_sqft += room["effective_total_sqft"]

    row += 1
    ws.cell(row=row, column=1, value="TOTAL")
    ws.cell(row=row, column=4, value=round(total_sqft, 2))
    _total_row(ws, row, len(headers))

    if trade.addons:
        row += 2
        _header_row(ws, row, ["Addon", "Quantity", "Price", "Line Total"])
        for addon in trade.addons:
            row += 1
            ws.cell(row=row, column=1, value=addon["name"])
            ws.cell(row=row, column=2, value=addon["quantity"])
            ws.cell(row=row, column=3, value=addon["price"])
            ws.cell(row=row, column=4, value=addon["line_total"])
            ws.cell(row=row, column=3).number_format = MONEY_FORMAT
            ws.cell(row=row, column=4).number_format = MONEY_FORMAT

    ws.column_dimensions["A"].width = 28
    for col in "BCD":
        ws.column_dimensions[col].width = 15
