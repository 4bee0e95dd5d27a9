"""Quota & attendance scheduling service.

Organized by feature modules (forms, reservations, quotas, attendance,
scheduling) with a thin Flask controller layer over service/repository layers.
"""
from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.http import register_error_handlers
from .common.logging_config import configure_logging
from .container import Container, ServiceSettings, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .attendance.controller import register as register_attendance
from .forms.controller import register as register_forms
from .quotas.controller import register as register_quotas
from .scheduling.controller import register as register_scheduling

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def _bootstrap_database(settings, db_config: dict) -> None:
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
        logger.info("Seed data applied")


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = dict(getattr(settings, "DB_CONFIG"))
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        _bootstrap_database(settings, db_config)
        container = build_container(db_config=db_config, settings=ServiceSettings.from_module(settings))

    register_error_handlers(app)
    register_forms(app, container)
    register_quotas(app, container)
    register_attendance(app, container)
    register_scheduling(app, container)

    return app
