from __future__ import annotations

from datetime import datetime, timezone
from io import BytesIO

from flask import Blueprint, current_app, jsonify, send_file

from hiretrack.db import get_store
from hiretrack.reports.excel import build_summary_workbook
from hiretrack.reports.queries import summary_report
from hiretrack.utils.auth import require_permission

reports_bp = Blueprint("reports", __name__)


@reports_bp.get("/summary")
@require_permission("read", "reports")
def summary():
    return jsonify({"success": True, "data": summary_report(get_store())})


@reports_bp.get("/export.xlsx")
@require_permission("read", "reports")
def export_xlsx():
    xlsx_bytes = build_summary_workbook(
        summary_report(get_store()),
        timezone_display=current_app.config["CFG"].TIMEZONE_DISPLAY,
    )

    filename = f"hiring_summary_{datetime.now(timezone.utc).strftime('%Y-%m-%d')}.xlsx"
    return send_file(
        BytesIO(xlsx_bytes),
        as_attachment=True,
        download_name=filename,
        mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
