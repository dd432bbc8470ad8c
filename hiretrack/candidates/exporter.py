from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable

from hiretrack.candidates.csv_format import EXPORT_COLUMNS, format_csv_row
from hiretrack.utils.datetime import to_iso_utc


def _created_at(value: Any) -> str:
    if isinstance(value, datetime):
        return to_iso_utc(value)
    return str(value or "")


def candidate_to_row(doc: dict[str, Any]) -> list[str]:
    tech = doc.get("anotherTech")
    return [
        doc.get("name") or "",
        doc.get("email") or "",
        doc.get("role") or "",
        doc.get("project") or "",
        doc.get("interviewerId") or "",
        doc.get("interviewSchedule") or "",
        doc.get("professionalExperience") or "",
        doc.get("mainLanguage") or "",
        doc.get("database") or "",
        doc.get("cloud") or "",
        ";".join(tech) if isinstance(tech, list) else "",
        doc.get("liveCodeResult") or "",
        doc.get("status") or "",
        doc.get("level") or "",
        doc.get("mirror") or "",
        _created_at(doc.get("createdAt")),
    ]


def build_csv(candidates: Iterable[dict[str, Any]]) -> str:
    lines = [",".join(EXPORT_COLUMNS)]
    lines.extend(format_csv_row(candidate_to_row(c)) for c in candidates)
    return "\n".join(lines)


def export_filename(today: datetime) -> str:
    return f"candidates_export_{today.strftime('%Y-%m-%d')}.csv"
