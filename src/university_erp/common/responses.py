"""JSON envelope used by every endpoint.

Success: ``{"success": true, "data": ..., "message": ...}``
Failure: ``{"success": false, "error": {"code": ..., "message": ...}}``
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError, RepositoryError
from .pagination import Page

logger = logging.getLogger(__name__)


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_json(value: Any) -> Any:
    """Convert dataclasses/enums/decimals/dates into JSON-ready values with camelCase keys."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {snake_to_camel(f.name): to_json(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {(snake_to_camel(k) if isinstance(k, str) else k): to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json(v) for v in value]
    return value


def success(data: Any = None, message: Optional[str] = None, status: int = 200):
    body: dict[str, Any] = {"success": True, "data": to_json(data)}
    if message:
        body["message"] = message
    return jsonify(body), status


def paginated(page: Page, key: str, message: Optional[str] = None):
    return success({key: page.items, "pagination": page.meta()}, message)


def error(code: str, message: str, status: int):
    return jsonify({"success": False, "error": {"code": code, "message": message}}), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return error(e.code, str(e), e.status_code)

    @app.errorhandler(RepositoryError)
    def handle_repository_error(e: RepositoryError):
        logger.error("Datastore failure: %s (cause: %r)", e, e.__cause__)
        return error(e.code, str(e), e.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        code = (e.name or "HTTP_ERROR").upper().replace(" ", "_")
        return error(code, e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error")
        message = str(e) if app.config.get("DEBUG") else "Internal server error"
        return error("INTERNAL_ERROR", message, 500)
