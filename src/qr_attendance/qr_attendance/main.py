from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .core.exceptions import ConfigurationError
from .database.bootstrap import apply_migrations, ensure_default_admin
from .reports.controller import register as register_reports
from .sessions.controller import register as register_sessions
from .users.controller import register as register_users


def _optional_int(value) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=logging.DEBUG if app.config["DEBUG"] else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if container is None:
        qr_secret_key = getattr(settings, "QR_SECRET_KEY", None)
        if not qr_secret_key:
            raise ConfigurationError("QR_SECRET_KEY must be set")

        db_config = getattr(settings, "DB_CONFIG")
        container = build_container(
            db_config=db_config,
            qr_secret_key=qr_secret_key,
            window_minutes=int(getattr(settings, "QR_WINDOW_MINUTES", 5)),
            grace_windows=int(getattr(settings, "QR_GRACE_WINDOWS", 0)),
            bearer_ttl_minutes=_optional_int(getattr(settings, "BEARER_TTL_MINUTES", None)),
            otp_ttl_seconds=int(getattr(settings, "OTP_TTL_SECONDS", 300)),
        )
        app.logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            applied = apply_migrations(container.conn)
            app.logger.info("schema ready (applied=%s)", applied or "none")
            ensure_default_admin(
                container.conn,
                username=getattr(settings, "ADMIN_USER", "admin"),
                password=getattr(settings, "ADMIN_PASSWORD", None),
            )

    app.extensions["qr_attendance"] = container

    @app.route("/api/health", endpoint="health")
    def health():
        return jsonify({"status": "ok"})

    register_users(app, container)
    register_sessions(app, container)
    register_attendance(app, container)
    register_reports(app, container)

    return app
