from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .classes.controller import register as register_classes
from .container import Container, build_container
from .core.constants import DEFAULT_SESSION_DAYS
from .core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from .core.logging_config import setup_logging
from .database.bootstrap import seed_demo_data
from .database.snapshot import load_snapshot_file
from .schedules.controller import register as register_schedules
from .settings.controller import register as register_settings
from .subjects.controller import register as register_subjects
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        status = next((code for kind, code in _STATUS_BY_ERROR if isinstance(error, kind)), 400)
        return jsonify({"success": False, "error": str(error)}), status

    @app.errorhandler(404)
    def handle_not_found(_error):
        return jsonify({"success": False, "error": "Endpoint not found"}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(_error):
        return jsonify({"success": False, "error": "Method not allowed"}), 405

    @app.errorhandler(500)
    def handle_internal_error(error):
        original = getattr(error, "original_exception", None) or error
        logger.error("Unhandled error: %r", original)
        message = "Internal server error"
        if app.config.get("DEBUG"):
            message = f"{message}: {original}"
        return jsonify({"success": False, "error": message}), 500


def create_app(settings_module: Optional[str] = None, *, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.permanent_session_lifetime = timedelta(days=int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS)))

    container = container or build_container()

    snapshot_path = getattr(settings, "SNAPSHOT_PATH", None)
    if snapshot_path and Path(snapshot_path).is_file():
        load_snapshot_file(container.store.db, Path(snapshot_path))
        logger.info("Loaded snapshot from %s", snapshot_path)
    elif bool(getattr(settings, "SEED_DEMO_DATA", False)):
        seed_demo_data(container.store)

    logger.info("VirtualRollCall started (settings=%s)", settings_module)

    register_users(app, container)
    register_classes(app, container)
    register_subjects(app, container)
    register_schedules(app, container)
    register_attendance(app, container)
    register_settings(app, container)
    _register_error_handlers(app)

    app.extensions["rollcall"] = container
    return app
