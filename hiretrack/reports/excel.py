from __future__ import annotations

from datetime import datetime, timezone
from io import BytesIO
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from hiretrack.utils.datetime import to_display_tz


def _auto_fit(ws) -> None:
    for col in ws.columns:
        max_len = 0
        col_letter = get_column_letter(col[0].column)
        for cell in col:
            v = "" if cell.value is None else str(cell.value)
            max_len = max(max_len, len(v))
        ws.column_dimensions[col_letter].width = min(max(12, max_len + 2), 60)


def _write_table(ws, headers: list[str], rows: list[list[Any]]) -> None:
    ws.append(headers)
    for r in rows:
        ws.append(r)

    ws.freeze_panes = "A2"
    ws.auto_filter.ref = ws.dimensions

    header_font = Font(bold=True)
    for cell in ws[1]:
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center")

    _auto_fit(ws)


def build_summary_workbook(summary: dict[str, Any], *, timezone_display: str) -> bytes:
    """Sheets: Meta, Status, Conversion, Pipeline."""
    wb = Workbook()
    wb.remove(wb.active)

    meta = wb.create_sheet("Meta")
    _write_table(
        meta,
        ["key", "value"],
        [
            ["report", "summary"],
            ["totalCandidates", summary["totalCandidates"]],
            ["generatedAt", to_display_tz(datetime.now(timezone.utc), timezone_display)],
        ],
    )

    sheets = (
        ("Status", ["status", "count"], "statusBreakdown"),
        ("Conversion", ["metric", "percent"], "conversionRates"),
        ("Pipeline", ["bucket", "count"], "pipeline"),
    )
    for title, headers, key in sheets:
        ws = wb.create_sheet(title)
        _write_table(ws, headers, [[name, value] for name, value in summary[key].items()])

    with BytesIO() as bio:
        wb.save(bio)
        return bio.getvalue()
