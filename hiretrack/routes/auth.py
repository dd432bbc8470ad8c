from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from hiretrack.db import get_store
from hiretrack.models import Invalid, UserRole, validate_role
from hiretrack.serializers import user_json
from hiretrack.utils.auth import create_access_token, get_current_user, hash_password, verify_password
from hiretrack.utils.errors import ApiError
from hiretrack.utils.validators import require_json, validate_email, validate_password


auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/bootstrap")
def bootstrap():
    cfg = current_app.config["CFG"]
    bootstrap_token = str(cfg.BOOTSTRAP_TOKEN or "").strip()
    if not bootstrap_token:
        raise ApiError("FORBIDDEN", "Bootstrap is disabled", status=403)

    provided = str(request.headers.get("X-Bootstrap-Token") or "").strip()
    if not provided or provided != bootstrap_token:
        raise ApiError("FORBIDDEN", "Invalid bootstrap token", status=403)

    store = get_store()
    if store.count_users() > 0:
        raise ApiError("CONFLICT", "Bootstrap already completed", status=409)

    body = require_json()
    email = validate_email(body.get("email"))
    password = validate_password(body.get("password"), allow_short=False)
    role_result = validate_role(body.get("role") or UserRole.RECRUITER.value)
    if isinstance(role_result, Invalid):
        raise ApiError("VALIDATION_ERROR", role_result.message, status=400, details=role_result.errors)

    user = store.create_user(
        {
            "authId": str(body.get("authId") or "").strip() or None,
            "name": str(body.get("name") or "").strip() or email,
            "email": email,
            "passwordHash": hash_password(password),
            "role": role_result.value.value,
        }
    )
    return jsonify({"success": True, "data": user_json(user)}), 201


@auth_bp.post("/login")
def login():
    body = require_json()
    email = validate_email(body.get("email"))
    password = validate_password(body.get("password"), allow_short=False)

    store = get_store()
    user = store.get_user_by_email(email)
    if not user:
        raise ApiError("AUTH_INVALID", "Invalid credentials", status=401)

    if user.get("deactivatedAt"):
        raise ApiError("FORBIDDEN", "User is deactivated", status=403)

    if not verify_password(password, str(user.get("passwordHash") or "")):
        raise ApiError("AUTH_INVALID", "Invalid credentials", status=401)

    token = create_access_token(current_app, user)
    store.touch_last_login(user["_id"])

    return jsonify(
        {
            "success": True,
            "data": {
                "access_token": token,
                "token_type": "bearer",
                "user": {
                    "id": str(user["_id"]),
                    "email": user["email"],
                    "name": user.get("name", ""),
                    "role": user.get("role", ""),
                },
            },
        }
    )


@auth_bp.get("/me")
def me():
    user = get_current_user()
    return jsonify({"success": True, "data": user})
