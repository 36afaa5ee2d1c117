from __future__ import annotations

from typing import Optional

from flask import current_app, request

from ..core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from ..core.exceptions import ValidationError
from .pagination import Pagination


def json_body() -> dict:
    """Request JSON object; an empty or missing body reads as ``{}``."""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def page_from_args(*, default_limit: Optional[int] = None) -> Pagination:
    config = current_app.config
    return Pagination.from_query(
        request.args.get("page"),
        request.args.get("limit"),
        default_limit=default_limit or int(config.get("DEFAULT_PAGE_LIMIT", DEFAULT_PAGE_LIMIT)),
        max_limit=int(config.get("MAX_PAGE_LIMIT", MAX_PAGE_LIMIT)),
    )


def int_arg(name: str) -> Optional[int]:
    raw = request.args.get(name)
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number")


def bool_arg(name: str) -> Optional[bool]:
    raw = request.args.get(name)
    if raw in (None, ""):
        return None
    return raw.strip().lower() in ("1", "true", "yes")


def str_arg(name: str) -> Optional[str]:
    raw = request.args.get(name)
    if raw is None:
        return None
    return raw.strip() or None
