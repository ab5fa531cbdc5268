from __future__ import annotations

from datetime import date, datetime
from functools import wraps
from typing import Any, Optional

from flask import g, jsonify, request

from ..core.exceptions import Unauthorized, ValidationError
from .datetime_utils import parse_iso_date

ACTOR_HEADER = "X-Actor-Id"


def respond(data: Any = None, message: str = "", status: int = 200):
    return jsonify({"success": True, "message": message, "data": data}), status


def actor_required(view):
    """Reject the call unless the upstream auth layer supplied an actor id."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        actor_id = (request.headers.get(ACTOR_HEADER) or "").strip()
        if not actor_id:
            raise Unauthorized(f"Missing {ACTOR_HEADER} header")
        g.actor_id = actor_id
        return view(*args, **kwargs)

    return wrapper


def json_body() -> dict:
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def date_arg(value: Optional[str], field_name: str, *, default: Optional[date] = None) -> date:
    if not value:
        if default is not None:
            return default
        raise ValidationError(f"{field_name} is required")
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")


def datetime_arg(value: Optional[str], field_name: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO timestamp")


def int_arg(value: Any, field_name: str, *, default: Optional[int] = None) -> Optional[int]:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
