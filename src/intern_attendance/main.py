from __future__ import annotations

import importlib
import logging
import os
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .approvals.controller import register as register_approvals
from .attendance.controller import register as register_attendance
from .container import build_container
from .core.enums import StorageBackend, Workflow
from .database.bootstrap import apply_schema, describe_target, ensure_demo_users, list_tables
from .profiles.controller import register as register_profiles
from .reports.controller import register as register_reports
from .settings import get_settings_module


def setup_logging(app: Flask, level: str) -> None:
    """Configure package loggers; file logging only outside debug/testing."""
    package_logger = logging.getLogger("intern_attendance")
    package_logger.setLevel(level)
    app.logger.setLevel(level)

    if not package_logger.handlers:
        stream = logging.StreamHandler()
        stream.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        package_logger.addHandler(stream)

    if not app.debug and not app.testing:
        os.makedirs("logs", exist_ok=True)
        file_handler = logging.FileHandler("logs/app.log")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]")
        )
        file_handler.setLevel(logging.INFO)
        package_logger.addHandler(file_handler)
        app.logger.addHandler(file_handler)


def create_app(settings_module: Optional[str] = None, **overrides) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    for key in ("DB_CONFIG", "STORAGE_BACKEND", "ATTENDANCE_WORKFLOW", "MISSED_DAYS_WINDOW"):
        app.config[key] = getattr(settings, key)
    app.config.update(overrides)

    setup_logging(app, str(getattr(settings, "LOG_LEVEL", "INFO")).upper())

    storage = StorageBackend(app.config["STORAGE_BACKEND"])
    workflow = Workflow(app.config["ATTENDANCE_WORKFLOW"])
    db_config = app.config["DB_CONFIG"]

    app.logger.info(
        "settings=%s storage=%s workflow=%s db=%s",
        settings_module,
        storage.value,
        workflow.value,
        describe_target(db_config),
    )

    if storage == StorageBackend.MYSQL:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            app.logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_users(db_config)

    container = build_container(
        db_config=db_config,
        storage=storage,
        workflow=workflow,
        missed_days_window=int(app.config["MISSED_DAYS_WINDOW"]),
    )
    app.extensions["intern_attendance"] = container

    register_profiles(app, container)
    register_attendance(app, container)
    register_approvals(app, container)
    register_reports(app, container)

    return app
