from __future__ import annotations

import logging
import os
import time
from typing import Any

from flask import Flask, g, request

from hiretrack.utils.logging import log_event


def client_ip(trust_proxy_headers: bool) -> str:
    ip = request.remote_addr or ""
    if trust_proxy_headers:
        ip = request.headers.get("X-Forwarded-For", ip) or ip
    if ip and "," in ip:
        ip = ip.split(",", 1)[0].strip()
    return ip


def init_request_context(app: Flask) -> None:
    """Request id in and out via X-Request-ID, plus one JSON log line per request."""
    logger = logging.getLogger("hiretrack.request")
    cfg = app.config["CFG"]

    @app.before_request
    def _start():
        incoming = str(request.headers.get("X-Request-ID") or "").strip()
        g.request_id = incoming[:64] or os.urandom(8).hex()
        g.start_ts = time.monotonic()

    @app.after_request
    def _finish(resp):
        rid = getattr(g, "request_id", "")
        if rid:
            resp.headers["X-Request-ID"] = rid

        start = getattr(g, "start_ts", None)
        fields: dict[str, Any] = {
            "request_id": rid,
            "method": request.method,
            "path": request.path,
            "status": resp.status_code,
            "latency_ms": int((time.monotonic() - start) * 1000) if isinstance(start, (int, float)) else None,
            "ip": client_ip(cfg.TRUST_PROXY_HEADERS),
        }
        user = g.get("current_user")
        if user:
            fields["user_id"] = user.get("id")
        log_event(logger, "request", **fields)
        return resp
