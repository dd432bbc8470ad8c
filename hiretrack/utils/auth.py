from __future__ import annotations

import functools
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, TypeVar

import bcrypt
import jwt
from flask import current_app, g, request

from hiretrack.db import get_store
from hiretrack.permissions import has_permission
from hiretrack.utils.errors import ApiError


_T = TypeVar("_T", bound=Callable[..., Any])


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(app, user: dict[str, Any]) -> str:
    cfg = app.config["CFG"]
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user["_id"]),
        "email": str(user.get("email") or ""),
        "role": str(user.get("role") or ""),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=cfg.JWT_EXP_MINUTES)).timestamp()),
    }
    return jwt.encode(payload, cfg.JWT_SECRET, algorithm="HS256")


def _decode_token(token: str) -> dict[str, Any]:
    cfg = current_app.config["CFG"]
    try:
        return jwt.decode(token, cfg.JWT_SECRET, algorithms=["HS256"])
    except jwt.ExpiredSignatureError as e:
        raise ApiError("AUTH_INVALID", "Token expired", status=401) from e
    except jwt.InvalidTokenError as e:
        raise ApiError("AUTH_INVALID", "Invalid token", status=401) from e


def _bearer_token() -> str:
    authz = str(request.headers.get("Authorization") or "").strip()
    if authz.lower().startswith("bearer "):
        return authz.split(" ", 1)[1].strip()
    return ""


def get_current_user() -> dict[str, str]:
    """Authenticate the request and remember the user on ``g`` for audit records."""
    cached = g.get("current_user")
    if cached:
        return cached

    token = _bearer_token()
    if not token:
        raise ApiError("AUTH_INVALID", "Missing bearer token", status=401)

    payload = _decode_token(token)
    sub = str(payload.get("sub") or "").strip()
    if not sub:
        raise ApiError("AUTH_INVALID", "Invalid token payload", status=401)

    user = get_store().get_user(sub)
    if not user:
        raise ApiError("AUTH_INVALID", "User not found", status=401)
    if user.get("deactivatedAt"):
        raise ApiError("FORBIDDEN", "User is deactivated", status=403)

    current = {
        "id": str(user["_id"]),
        "name": str(user.get("name") or ""),
        "email": str(user.get("email") or "").strip().lower(),
        "role": str(user.get("role") or "").upper().strip(),
    }
    g.current_user = current
    return current


def require_roles(roles: list[str]) -> Callable[[_T], _T]:
    allowed = {str(r or "").upper().strip() for r in (roles or []) if str(r or "").strip()}

    def _decorator(fn: _T) -> _T:
        @functools.wraps(fn)
        def _wrapped(*args, **kwargs):
            user = get_current_user()
            if allowed and user["role"] not in allowed:
                raise ApiError("FORBIDDEN", "Insufficient role", status=403, details={"required": sorted(allowed)})
            return fn(*args, **kwargs)

        return _wrapped  # type: ignore[return-value]

    return _decorator


def require_permission(action: str, resource: str) -> Callable[[_T], _T]:
    def _decorator(fn: _T) -> _T:
        @functools.wraps(fn)
        def _wrapped(*args, **kwargs):
            user = get_current_user()
            if not has_permission(user["role"], action, resource):
                raise ApiError(
                    "FORBIDDEN",
                    f"Permission denied: {action} on {resource}",
                    status=403,
                    details={"action": action, "resource": resource},
                )
            return fn(*args, **kwargs)

        return _wrapped  # type: ignore[return-value]

    return _decorator
