from __future__ import annotations

import logging
from typing import Any

from flask import Flask, g, jsonify
from werkzeug.exceptions import HTTPException

from hiretrack.utils.errors import ApiError

logger = logging.getLogger("hiretrack")


def _error_response(code: str, message: str, status: int, details: Any = None):
    payload: dict[str, Any] = {
        "success": False,
        "error": {"code": code, "message": message, "details": details},
    }
    request_id = getattr(g, "request_id", None)
    if request_id:
        payload["request_id"] = request_id
    return jsonify(payload), status


def init_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def _api_error(err: ApiError):
        if err.status >= 500:
            logger.error("Request failed code=%s request_id=%s", err.code, getattr(g, "request_id", ""))
        return _error_response(err.code, err.message, err.status, err.details)

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        status = int(err.code or 500)
        return _error_response(f"HTTP_{status}", str(err.description or "HTTP error"), status)

    @app.errorhandler(Exception)
    def _unhandled(err: Exception):
        logger.exception("Unhandled exception request_id=%s", getattr(g, "request_id", ""))
        return _error_response("INTERNAL", "Unexpected error", 500)
