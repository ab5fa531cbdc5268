from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .audit.controller import register as register_audit
from .container import Container, build_container
from .core.exceptions import (
    AlreadyCheckedIn,
    AlreadyResolved,
    ConcurrentModification,
    DomainError,
    InsufficientBalance,
    InvalidTransition,
    NotCheckedIn,
    NotFoundError,
    Unauthorized,
    ValidationError,
)
from .database.bootstrap import apply_schema
from .database.connection import DBConfig, DatabaseConnection
from .employees.controller import register as register_employees
from .requests.controller import register as register_requests

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (Unauthorized, 403),
    (NotFoundError, 404),
    (InsufficientBalance, 422),
    ((AlreadyCheckedIn, NotCheckedIn, InvalidTransition, AlreadyResolved, ConcurrentModification), 409),
)


def status_for(error: DomainError) -> int:
    for types, status in _STATUS_BY_ERROR:
        if isinstance(error, types):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        status = status_for(error)
        logger.warning("%s rejected (%d): %s", type(error).__name__, status, error)
        body = {"success": False, "message": str(error), "error": type(error).__name__, "data": None}
        if isinstance(error, InsufficientBalance):
            body["data"] = {
                "kind": error.kind,
                "requested": float(error.requested),
                "remaining": float(error.remaining),
            }
        return jsonify(body), status


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(DatabaseConnection.get_instance(DBConfig.from_dict(db_config)), schema_path=schema_path)
        container = build_container(db_config=db_config, settings=settings)

    app.extensions["attendance_ledger"] = container
    register_error_handlers(app)

    register_attendance(app, container)
    register_requests(app, container)
    register_employees(app, container)
    register_audit(app, container)

    return app
