from __future__ import annotations

from flask import Flask, request

from hiretrack.middlewares.request_context import client_ip
from hiretrack.utils.rate_limiter import InMemoryRateLimiter

_limiter = InMemoryRateLimiter()

_UNLIMITED_PATHS = {"/health", "/version"}


def init_security_headers(app: Flask) -> None:
    @app.after_request
    def _headers(resp):
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        resp.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")

        cfg = app.config.get("CFG")
        is_https = request.is_secure or str(request.headers.get("X-Forwarded-Proto") or "").lower() == "https"
        if getattr(cfg, "IS_PRODUCTION", False) and is_https:
            resp.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return resp


def init_rate_limiting(app: Flask) -> None:
    cfg = app.config["CFG"]

    @app.before_request
    def _rate_limit():
        path = request.path or ""
        if path in _UNLIMITED_PATHS or not path.startswith("/api/v1/"):
            return None

        ip = client_ip(cfg.TRUST_PROXY_HEADERS)
        if path.startswith("/api/v1/auth/login"):
            _limiter.check(f"{ip}:LOGIN", cfg.RATE_LIMIT_LOGIN)
            return None

        _limiter.check(f"{ip}:GLOBAL", cfg.RATE_LIMIT_GLOBAL)
        if path == "/api/v1/candidates/import":
            _limiter.check(f"{ip}:IMPORT", cfg.RATE_LIMIT_IMPORT)
        else:
            _limiter.check(f"{ip}:PATH:{path}", cfg.RATE_LIMIT_DEFAULT)
        return None


def reset_rate_limits_for_tests() -> None:
    _limiter.clear()
