from __future__ import annotations

from dotenv import load_dotenv
from flask import Flask
from flask_cors import CORS

from hiretrack.audit import AuditRecorder
from hiretrack.config import get_config
from hiretrack.db import init_mongo
from hiretrack.middlewares.error_handler import init_error_handlers
from hiretrack.middlewares.request_context import init_request_context
from hiretrack.middlewares.security import init_rate_limiting, init_security_headers
from hiretrack.routes.audit import audit_bp
from hiretrack.routes.auth import auth_bp
from hiretrack.routes.candidates import candidates_bp
from hiretrack.routes.core import core_bp
from hiretrack.routes.notes import notes_bp
from hiretrack.routes.reports import reports_bp
from hiretrack.routes.users import users_bp
from hiretrack.utils.logging import setup_logging


def create_app() -> Flask:
    load_dotenv()

    cfg = get_config()
    setup_logging(cfg.LOG_LEVEL)

    app = Flask(__name__)
    app.config["CFG"] = cfg
    app.config["MAX_CONTENT_LENGTH"] = cfg.IMPORT_MAX_BYTES

    CORS(
        app,
        origins=cfg.CORS_ORIGINS,
        supports_credentials=cfg.CORS_ALLOW_CREDENTIALS,
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
        expose_headers=["X-Request-ID", "Content-Disposition"],
        methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        max_age=3600,
    )

    init_request_context(app)
    init_security_headers(app)
    init_rate_limiting(app)
    init_error_handlers(app)

    init_mongo(app)
    app.extensions["audit"] = AuditRecorder(app.extensions["store"])

    app.register_blueprint(core_bp)
    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(candidates_bp, url_prefix="/api/v1/candidates")
    app.register_blueprint(notes_bp, url_prefix="/api/v1")
    app.register_blueprint(audit_bp, url_prefix="/api/v1/audit")
    app.register_blueprint(users_bp, url_prefix="/api/v1/users")
    app.register_blueprint(reports_bp, url_prefix="/api/v1/reports")

    return app
