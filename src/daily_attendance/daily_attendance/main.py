from __future__ import annotations

import importlib
import logging
from datetime import datetime
from typing import Callable, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.datetime_utils import now_utc
from .common.web import register_error_handlers
from .container import Container, build_container
from .core.enums import Role
from .database.bootstrap import apply_schema
from .employees.controller import register as register_employees

logger = logging.getLogger(__name__)

_SETTING_NAMES = (
    "SECRET_KEY",
    "DEBUG",
    "TESTING",
    "DB_CONFIG",
    "STORE_BACKEND",
    "AUTO_INIT_DB",
    "QR_TOKEN",
    "DEFAULT_TIMEZONE",
    "TX_MAX_ATTEMPTS",
    "TX_BACKOFF_SECONDS",
    "RUNNING_HOURS_INTERVAL_SECONDS",
    "STREAM_KEEPALIVE_SECONDS",
    "LOG_LEVEL",
    "SEED_ADMIN_EMAIL",
    "SEED_ADMIN_PASSWORD",
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _seed_admin(container: Container, *, email: Optional[str], password: Optional[str]) -> None:
    if not email or not password:
        return
    if container.employees_repo.get_by_email(email.strip().lower()):
        return
    result = container.provisioning_service.create_employee_user(
        name="Administrator",
        email=email,
        password=password,
        department="Administration",
        role=Role.ADMIN.value,
    )
    logger.info("Seeded admin account %s", result.employee.employee_id)


def create_app(
    overrides: Optional[Mapping] = None,
    *,
    clock: Callable[[], datetime] = now_utc,
) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    for name in _SETTING_NAMES:
        if hasattr(settings, name):
            app.config[name] = getattr(settings, name)
    app.config.update(overrides or {})
    app.secret_key = app.config["SECRET_KEY"]

    _configure_logging(app.config.get("LOG_LEVEL", "INFO"))
    logger.info("Starting with settings=%s store=%s", settings_module, app.config.get("STORE_BACKEND"))

    if app.config.get("AUTO_INIT_DB") and app.config.get("STORE_BACKEND") == "mysql":
        apply_schema(app.config["DB_CONFIG"])

    container = build_container(config=app.config, clock=clock)
    app.extensions["daily_attendance"] = container
    _seed_admin(
        container,
        email=app.config.get("SEED_ADMIN_EMAIL"),
        password=app.config.get("SEED_ADMIN_PASSWORD"),
    )

    register_error_handlers(app)
    register_employees(app, container)
    register_attendance(app, container)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok", "store": app.config.get("STORE_BACKEND"), "time": clock().isoformat()})

    return app
