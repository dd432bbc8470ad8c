from __future__ import annotations

import re
from typing import Any

from flask import request

from hiretrack.utils.errors import ApiError

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.match(value or ""))


def require_json() -> dict[str, Any]:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ApiError("BAD_REQUEST", "JSON body must be an object", status=400)
    return body


def validate_email(value: Any) -> str:
    """User login email: trimmed and lower-cased."""
    email = str(value or "").strip().lower()
    if not email or not is_valid_email(email):
        raise ApiError("BAD_REQUEST", "Invalid email", status=400)
    return email


def validate_password(value: Any, *, allow_short: bool) -> str:
    password = str(value or "")
    if not password:
        raise ApiError("BAD_REQUEST", "Password required", status=400)
    if not allow_short and len(password) < 8:
        raise ApiError("BAD_REQUEST", "Password must be at least 8 characters", status=400)
    return password


def _positive_int(raw: Any, name: str, default: int) -> int:
    s = str(raw or "").strip()
    if not s:
        return default
    try:
        n = int(s)
    except ValueError as e:
        raise ApiError("BAD_REQUEST", f"{name} must be an integer", status=400) from e
    if n < 1:
        raise ApiError("BAD_REQUEST", f"{name} must be >= 1", status=400)
    return n


def parse_pagination(args, *, default_limit: int, max_limit: int) -> tuple[int, int]:
    page = _positive_int(args.get("page"), "page", 1)
    limit = min(_positive_int(args.get("limit"), "limit", default_limit), max_limit)
    return page, limit


def candidate_filters(args) -> dict[str, Any]:
    filters: dict[str, Any] = {}
    for key in ("status", "level", "interviewerId"):
        value = str(args.get(key) or "").strip()
        if value:
            filters[key] = value

    role = str(args.get("role") or "").strip()
    if role:
        filters["role"] = {"$regex": re.escape(role), "$options": "i"}
    return filters
