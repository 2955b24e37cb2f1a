from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .core.constants import AttendanceRules
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_accounts, list_tables
from .logging_setup import configure_logging
from .notifications.notifier import NullNotifier
from .notifications.smtp_notifier import MailConfig, SmtpNotifier
from .web import AppJSONProvider

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .classes.controller import register as register_classes
from .courses.controller import register as register_courses
from .reassignments.controller import register as register_reassignments
from .registrations.controller import register as register_registrations
from .reports.controller import register as register_reports
from .sessions.controller import register as register_sessions
from .students.controller import register as register_students
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)
    app.json = AppJSONProvider(app)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(settings)

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["MAX_CONTENT_LENGTH"] = int(getattr(settings, "MAX_UPLOAD_BYTES", 5 * 1024 * 1024))

    if container is None:
        container = _container_from_settings(settings, settings_module)

    register_users(app, container)
    register_courses(app, container)
    register_classes(app, container)
    register_sessions(app, container)
    register_students(app, container)
    register_attendance(app, container)
    register_reassignments(app, container)
    register_registrations(app, container)
    register_reports(app, container)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        db_ok = container.conn.ping() if container.conn is not None else True
        status = 200 if db_ok else 503
        return jsonify({"success": db_ok, "data": {"database": "ok" if db_ok else "unavailable"}}), status

    return app


def _container_from_settings(settings, settings_module: str) -> Container:
    db_config = dict(getattr(settings, "DB_CONFIG"))
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    root = Path(__file__).resolve().parents[3]
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=root / "database" / "schema.sql")
        logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=root / "database" / "seed.sql")
        ensure_demo_accounts(db_config)
        logger.info("Demo seed ready")

    mail = MailConfig.from_settings(settings)
    notifier = SmtpNotifier(mail) if mail else NullNotifier()

    return build_container(
        db_config=db_config,
        rules=AttendanceRules.from_settings(settings),
        notifier=notifier,
    )
