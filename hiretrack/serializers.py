from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from bson import ObjectId

from hiretrack.utils.datetime import to_iso_utc

_USER_PRIVATE_FIELDS = {"passwordHash"}


def to_jsonable(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return to_iso_utc(value)
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def candidate_json(doc: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    if doc is None:
        return None
    out = to_jsonable(doc)
    if not isinstance(out.get("anotherTech"), list):
        out["anotherTech"] = []
    return out


def user_json(doc: dict[str, Any]) -> dict[str, Any]:
    return to_jsonable({k: v for k, v in doc.items() if k not in _USER_PRIVATE_FIELDS})


def page_meta(total: int, page: int, limit: int) -> dict[str, int]:
    return {"total": total, "page": page, "limit": limit, "totalPages": (total + limit - 1) // limit}
