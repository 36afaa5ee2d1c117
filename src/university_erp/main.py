from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .admission.controller import register as register_admission
from .certification.controller import register as register_certification
from .common.logging_config import configure_logging
from .common.responses import register_error_handlers, success
from .container import Container, build_container
from .core.constants import DEFAULT_PAGE_LIMIT, DEFAULT_TOKEN_MAX_AGE_SECONDS, MAX_PAGE_LIMIT
from .database.bootstrap import apply_schema, list_tables
from .finance.controller import register as register_finance
from .hr.controller import register as register_hr
from .multicampus.controller import register as register_multicampus
from .payroll.controller import register as register_payroll

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the API. A prebuilt container (e.g. backed by fakes) skips the DB wiring."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["TOKEN_MAX_AGE_SECONDS"] = int(getattr(settings, "TOKEN_MAX_AGE_SECONDS", DEFAULT_TOKEN_MAX_AGE_SECONDS))
    app.config["DEFAULT_PAGE_LIMIT"] = int(getattr(settings, "DEFAULT_PAGE_LIMIT", DEFAULT_PAGE_LIMIT))
    app.config["MAX_PAGE_LIMIT"] = int(getattr(settings, "MAX_PAGE_LIMIT", MAX_PAGE_LIMIT))

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        container = build_container(db_config=db_config)

    register_error_handlers(app)

    @app.route("/api/v1/health", methods=["GET"], endpoint="health")
    def health():
        return success({"status": "ok"})

    register_hr(app, container)
    register_payroll(app, container)
    register_certification(app, container)
    register_multicampus(app, container)
    register_admission(app, container)
    register_finance(app, container)

    return app
