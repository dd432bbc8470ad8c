from __future__ import annotations

from typing import Any, Iterable

EXPORT_COLUMNS = (
    "name",
    "email",
    "role",
    "project",
    "interviewer",
    "interview_schedule",
    "professional_experience",
    "main_language",
    "database",
    "cloud",
    "another_tech",
    "live_code_result",
    "status",
    "level",
    "mirror",
    "created_at",
)


def split_lines(text: str) -> list[str]:
    """Header line first, then one entry per data row.

    Quoted fields spanning several lines are not supported.
    """
    stripped = (text or "").strip()
    if not stripped:
        return []
    return [line[:-1] if line.endswith("\r") else line for line in stripped.split("\n")]


def parse_csv_line(line: str) -> list[str]:
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    n = len(line)

    while i < n:
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < n and line[i + 1] == '"':
                current.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
        i += 1

    fields.append("".join(current).strip())
    return fields


def quote_field(value: Any) -> str:
    s = "" if value is None else str(value)
    return '"' + s.replace('"', '""') + '"'


def format_csv_row(values: Iterable[Any]) -> str:
    return ",".join(quote_field(v) for v in values)
