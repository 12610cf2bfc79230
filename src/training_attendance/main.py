from __future__ import annotations

import importlib
import logging
import logging.config
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .classes.controller import register as register_classes
from .container import Container, build_container
from .core.exceptions import (
    AuthorizationError,
    CapacityExceededError,
    ConflictError,
    DeadlinePassedError,
    DomainError,
    FaceMismatchError,
    FaceNotRegisteredError,
    InvalidStateError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .database.connection import DBConfig
from .enrollments.controller import register as register_enrollments
from .registrations.controller import register as register_registrations
from .sessions.controller import register as register_sessions
from .statistics.controller import register as register_statistics

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[2]

# Most specific first: AlreadyCheckedOutError is an InvalidStateError.
_ERROR_STATUS = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (InvalidStateError, 409),
    (DeadlinePassedError, 422),
    (CapacityExceededError, 422),
    (FaceNotRegisteredError, 422),
    (FaceMismatchError, 422),
    (ServiceUnavailableError, 503),
)


def status_for(error: DomainError) -> int:
    for error_type, status in _ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 400


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"},
            },
            "handlers": {
                "console": {"class": "logging.StreamHandler", "formatter": "default"},
            },
            "loggers": {
                "training_attendance": {"handlers": ["console"], "level": level.upper(), "propagate": False},
            },
        }
    )


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = status_for(e)
        payload = {"success": False, "error": type(e).__name__, "message": str(e)}
        if isinstance(e, FaceMismatchError):
            payload["score"] = e.score
        if status >= 500:
            logger.error("%s: %s", type(e).__name__, e)
        return jsonify(payload), status


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info("settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
            logger.info("demo seed ready")

        container = build_container(
            db_config=db_config,
            face_api_url=getattr(settings, "FACE_API_URL"),
            face_api_timeout=float(getattr(settings, "FACE_API_TIMEOUT", 20.0)),
            upload_dir=getattr(settings, "UPLOAD_DIR"),
            upload_base_url=getattr(settings, "UPLOAD_BASE_URL"),
            late_counts_as_present=bool(getattr(settings, "LATE_COUNTS_AS_PRESENT", False)),
        )

    register_error_handlers(app)
    register_classes(app, container)
    register_sessions(app, container)
    register_registrations(app, container)
    register_enrollments(app, container)
    register_attendance(app, container)
    register_statistics(app, container)

    return app
