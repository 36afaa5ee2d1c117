"""Bearer-token actor resolution.

Tokens are issued elsewhere; here they are only verified. The payload is kept
on ``flask.g.user`` for the duration of the request.
"""

from __future__ import annotations

from functools import wraps
from typing import Any, Mapping, Optional

from flask import current_app, g, request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..core.constants import DEFAULT_TOKEN_MAX_AGE_SECONDS
from ..core.exceptions import AuthenticationError

TOKEN_SALT = "university-erp-access"


def _serializer(secret_key: str) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)


def issue_token(secret_key: str, payload: Mapping[str, Any]) -> str:
    """Sign a payload. Used by tests and by the token-issuing service."""
    return _serializer(secret_key).dumps(dict(payload))


def verify_token(secret_key: str, token: str, *, max_age: int = DEFAULT_TOKEN_MAX_AGE_SECONDS) -> dict:
    try:
        payload = _serializer(secret_key).loads(token, max_age=max_age)
    except SignatureExpired as e:
        raise AuthenticationError("Token expired") from e
    except BadSignature as e:
        raise AuthenticationError("Invalid or expired token") from e
    if not isinstance(payload, dict):
        raise AuthenticationError("Invalid token payload")
    return payload


def actor_id_from(user: Optional[Mapping[str, Any]]) -> int:
    """Resolve the acting user's id. ``userId`` wins over ``id``."""
    if not user:
        raise AuthenticationError("Authentication required")
    raw = user.get("userId")
    if raw is None:
        raw = user.get("id")
    try:
        actor = int(raw)
    except (TypeError, ValueError):
        raise AuthenticationError("Token does not identify a user")
    if actor <= 0:
        raise AuthenticationError("Token does not identify a user")
    return actor


def load_user_from_request() -> Optional[dict]:
    header = request.headers.get("Authorization")
    if not header:
        return None
    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        raise AuthenticationError("Invalid authorization header format")
    max_age = int(current_app.config.get("TOKEN_MAX_AGE_SECONDS", DEFAULT_TOKEN_MAX_AGE_SECONDS))
    return verify_token(current_app.secret_key, parts[1], max_age=max_age)


def current_actor_id() -> int:
    return actor_id_from(getattr(g, "user", None))


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        user = load_user_from_request()
        if user is None:
            raise AuthenticationError("Authorization header missing")
        g.user = user
        return view(*args, **kwargs)

    return wrapper
