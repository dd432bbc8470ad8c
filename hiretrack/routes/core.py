from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from hiretrack.db import ping_db
from hiretrack.utils.datetime import iso_utc_now

core_bp = Blueprint("core", __name__)

SERVICE_NAME = "hiretrack"


@core_bp.get("/health")
def health():
    db = current_app.extensions.get("mongo_db")
    db_ok = db is not None and ping_db(db)
    cfg = current_app.config["CFG"]
    body = {
        "service": SERVICE_NAME,
        "status": "ok" if db_ok else "degraded",
        "time": iso_utc_now(),
        "version": cfg.APP_VERSION,
        "db": "ok" if db_ok else "error",
    }
    return jsonify(body), 200 if db_ok else 503


@core_bp.get("/version")
def version():
    cfg = current_app.config["CFG"]
    return jsonify({"service": SERVICE_NAME, "version": cfg.APP_VERSION, "env": cfg.ENV, "time": iso_utc_now()})
