# backend/taskflow/routes/helpers.py
from datetime import date
from typing import Any, Optional

from flask import current_app, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from .. import STORE_EXTENSION_KEY
from ..errors import ValidationFailure
from ..ports.store import TaskFlowStore


def get_store() -> TaskFlowStore:
    return current_app.extensions[STORE_EXTENSION_KEY]


def current_user_id() -> int:
    """
    Caller's user id from the bearer token.

    Without a token, falls back to MOCK_USER_ID when configured (dev setups
    without an identity provider); otherwise the JWT 401 handler answers.
    """
    mock_id = current_app.config.get("MOCK_USER_ID")
    verify_jwt_in_request(optional=mock_id is not None)

    identity = get_jwt_identity()
    if identity is None:
        return int(mock_id)
    try:
        return int(identity)
    except (TypeError, ValueError):
        raise ValidationFailure("token identity is not a user id")


# ------------------------------
# Input parsing
# ------------------------------
def json_object() -> dict:
    """Request body as a dict; a missing body is {}, any other JSON value is a 400."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationFailure("request body must be a JSON object")
    return data


def safe_int_or_none(v: Any) -> Optional[int]:
    if v is None or v == "":
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def parse_bool_arg(raw: Optional[str], name: str) -> Optional[bool]:
    if raw is None or raw == "":
        return None
    lowered = raw.strip().lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    raise ValidationFailure(f"{name} must be true or false")


def parse_date_field(raw: Any, name: str) -> Optional[date]:
    if raw is None or raw == "":
        return None
    try:
        return date.fromisoformat(str(raw))
    except ValueError:
        raise ValidationFailure(f"invalid {name}, expected YYYY-MM-DD")


def require_text(data: dict, name: str, max_len: int = 255) -> str:
    value = data.get(name)
    if not isinstance(value, str) or not value.strip():
        raise ValidationFailure(f"{name} is required")
    value = value.strip()
    if len(value) > max_len:
        raise ValidationFailure(f"{name} must be at most {max_len} characters")
    return value
