from __future__ import annotations

from flask import Blueprint, jsonify, request

from hiretrack.db import get_store
from hiretrack.serializers import to_jsonable
from hiretrack.utils.auth import require_permission
from hiretrack.utils.errors import ApiError

audit_bp = Blueprint("audit", __name__)


@audit_bp.get("")
@require_permission("read", "reports")
def entity_history():
    entity_id = str(request.args.get("entityId") or "").strip()
    entity_type = str(request.args.get("entityType") or "").strip()
    if not entity_id or not entity_type:
        raise ApiError("BAD_REQUEST", "entityId and entityType are required", status=400)

    entries = get_store().audit_for_entity(entity_id, entity_type)
    return jsonify({"success": True, "data": to_jsonable(entries)})


@audit_bp.get("/actors/<actor_id>")
@require_permission("read", "reports")
def actor_history(actor_id: str):
    entries = get_store().audit_by_actor(actor_id)
    return jsonify({"success": True, "data": to_jsonable(entries)})
