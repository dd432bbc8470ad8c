from __future__ import annotations

import threading
from datetime import timezone

from flask import Flask, current_app
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from hiretrack.storage import MongoStore
from hiretrack.utils.errors import ApiError


_client: MongoClient | None = None
_client_lock = threading.Lock()


def _create_client(mongodb_uri: str, *, server_selection_timeout_ms: int) -> MongoClient:
    if mongodb_uri.startswith("mongomock://"):
        import mongomock  # type: ignore[import-not-found]

        return mongomock.MongoClient(tz_aware=True, tzinfo=timezone.utc)

    return MongoClient(
        mongodb_uri,
        serverSelectionTimeoutMS=server_selection_timeout_ms,
        tz_aware=True,
        tzinfo=timezone.utc,
        retryWrites=True,
    )


def get_client(app: Flask) -> MongoClient:
    global _client
    cfg = app.config["CFG"]
    with _client_lock:
        if _client is None:
            _client = _create_client(cfg.MONGODB_URI, server_selection_timeout_ms=cfg.MONGO_SERVER_SELECTION_TIMEOUT_MS)
    return _client


def get_db(app: Flask):
    cfg = app.config["CFG"]
    return get_client(app)[cfg.DB_NAME]


def get_store() -> MongoStore:
    store = current_app.extensions.get("store")
    if store is None:
        raise ApiError("INTERNAL", "Database not initialized", status=500)
    return store


def ping_db(db) -> bool:
    try:
        db.command("ping")
        return True
    except Exception:
        try:
            # mongomock has no "ping" command.
            _ = db.list_collection_names()
            return True
        except PyMongoError:
            return False


def init_mongo(app: Flask) -> None:
    db = get_db(app)
    store = MongoStore(db)
    store.ensure_indexes()
    app.extensions["mongo_db"] = db
    app.extensions["store"] = store


def reset_client_for_tests() -> None:
    global _client
    with _client_lock:
        _client = None
