from __future__ import annotations

from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request
from pymongo.errors import DuplicateKeyError

from hiretrack.audit import compute_diff, get_recorder
from hiretrack.db import get_store
from hiretrack.models import ROLE_VALUES, Invalid, validate_role
from hiretrack.permissions import USER_ADMIN_ROLES, USER_READ_ROLES
from hiretrack.serializers import page_meta, to_jsonable, user_json
from hiretrack.utils.auth import get_current_user, hash_password, require_roles
from hiretrack.utils.datetime import utc_now
from hiretrack.utils.errors import ApiError, not_found
from hiretrack.utils.validators import parse_pagination, require_json, validate_email, validate_password

users_bp = Blueprint("users", __name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _role_or_400(value) -> str:
    result = validate_role(value)
    if isinstance(result, Invalid):
        raise ApiError("VALIDATION_ERROR", result.message, status=400, details=result.errors)
    return result.value.value


def _sort_key(entry: dict) -> datetime:
    created = entry.get("createdAt")
    if not isinstance(created, datetime):
        return _EPOCH
    return created if created.tzinfo else created.replace(tzinfo=timezone.utc)


@users_bp.get("")
@require_roles(USER_READ_ROLES)
def list_users():
    cfg = current_app.config["CFG"]
    page, limit = parse_pagination(request.args, default_limit=cfg.DEFAULT_PAGE_SIZE, max_limit=cfg.MAX_PAGE_SIZE)

    role = str(request.args.get("role") or "").strip().upper() or None
    if role and role != "ALL" and role not in ROLE_VALUES:
        raise ApiError("BAD_REQUEST", "Unknown role filter", status=400)
    status = str(request.args.get("status") or "all").strip().lower()
    if status not in {"active", "inactive", "all"}:
        raise ApiError("BAD_REQUEST", "status must be active|inactive|all", status=400)

    users, total = get_store().list_users(
        search=str(request.args.get("search") or "").strip() or None,
        role=None if role == "ALL" else role,
        status=status,
        skip=(page - 1) * limit,
        limit=limit,
    )
    return jsonify({"success": True, "data": {"users": [user_json(u) for u in users], **page_meta(total, page, limit)}})


@users_bp.post("")
@require_roles(USER_ADMIN_ROLES)
def invite_user():
    inviter = get_current_user()
    body = require_json()
    email = validate_email(body.get("email"))
    password = validate_password(body.get("password"), allow_short=False)
    name = str(body.get("name") or "").strip()
    if not name:
        raise ApiError("VALIDATION_ERROR", "name: Name is required", status=400, details={"name": "Name is required"})
    role = _role_or_400(body.get("role"))

    auth_id = str(body.get("authId") or "").strip() or None

    store = get_store()
    if store.get_user_by_email(email):
        raise ApiError("CONFLICT", "Email already exists", status=409)
    if auth_id and store.get_user_by_auth_id(auth_id):
        raise ApiError("CONFLICT", "authId already linked to another user", status=409)

    try:
        user = store.create_user(
            {
                "authId": auth_id,
                "name": name,
                "email": email,
                "passwordHash": hash_password(password),
                "role": role,
                "invitedBy": inviter["id"],
                "invitedAt": utc_now(),
            }
        )
    except DuplicateKeyError as e:
        raise ApiError("CONFLICT", "Email already exists", status=409) from e

    get_recorder().record(
        "user", str(user["_id"]), "invited", {"email": email, "role": role, "name": name, "invitedBy": inviter["id"]}
    )
    return jsonify({"success": True, "data": user_json(user)}), 201


@users_bp.get("/stats")
@require_roles(USER_READ_ROLES)
def user_stats():
    return jsonify({"success": True, "data": get_store().user_stats()})


@users_bp.get("/activity")
@require_roles(USER_READ_ROLES)
def user_activity():
    user_id = str(request.args.get("userId") or "").strip()
    if not user_id:
        raise ApiError("BAD_REQUEST", "userId parameter is required", status=400)

    cfg = current_app.config["CFG"]
    page, limit = parse_pagination(request.args, default_limit=cfg.DEFAULT_PAGE_SIZE, max_limit=cfg.MAX_PAGE_SIZE)

    store = get_store()
    merged: dict[str, dict] = {}
    for entry in store.audit_for_entity(user_id, "user") + store.audit_by_actor(user_id):
        merged[str(entry["_id"])] = entry
    activity = sorted(merged.values(), key=_sort_key, reverse=True)

    start = (page - 1) * limit
    return jsonify(
        {
            "success": True,
            "data": {"activity": to_jsonable(activity[start : start + limit]), **page_meta(len(activity), page, limit)},
        }
    )


@users_bp.patch("/<user_id>")
@require_roles(USER_ADMIN_ROLES)
def update_user(user_id: str):
    store = get_store()
    before = store.get_user(user_id)
    if not before:
        raise not_found("User")

    body = require_json()
    updates: dict = {}
    if "name" in body:
        name = str(body.get("name") or "").strip()
        if not name:
            raise ApiError("VALIDATION_ERROR", "name: Name is required", status=400, details={"name": "Name is required"})
        updates["name"] = name
    if "role" in body:
        updates["role"] = _role_or_400(body.get("role"))
    if not updates:
        raise ApiError("BAD_REQUEST", "Nothing to update (name, role)", status=400)

    after = store.update_user(user_id, updates)
    if not after:
        raise not_found("User")

    diff = compute_diff(user_json(before), user_json(after))
    get_recorder().record("user", user_id, "updated", diff)
    return jsonify({"success": True, "data": user_json(after)})


@users_bp.post("/<user_id>/deactivate")
@require_roles(USER_ADMIN_ROLES)
def deactivate_user(user_id: str):
    if user_id == get_current_user()["id"]:
        raise ApiError("BAD_REQUEST", "You cannot deactivate yourself", status=400)
    if not get_store().deactivate_user(user_id):
        raise ApiError("NOT_FOUND", "User not found or already deactivated", status=404)

    get_recorder().record("user", user_id, "deactivated")
    return jsonify({"success": True, "data": {"message": "User deactivated successfully"}})


@users_bp.post("/<user_id>/reactivate")
@require_roles(USER_ADMIN_ROLES)
def reactivate_user(user_id: str):
    if not get_store().reactivate_user(user_id):
        raise ApiError("NOT_FOUND", "User not found or already active", status=404)

    get_recorder().record("user", user_id, "reactivated")
    return jsonify({"success": True, "data": {"message": "User reactivated successfully"}})
