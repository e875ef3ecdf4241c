"""Flask helpers shared by the JSON controllers.

The external auth layer stores ``user_id`` and ``role`` in the session; these
helpers only read them.
"""

from __future__ import annotations

import logging
from datetime import date
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AlreadyExistsError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from .datetime_utils import parse_iso_date
from .validators import require_int_in_range

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (AlreadyExistsError, 409),
    (StoreError, 502),
)


def error_response(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error_response("Please log in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error_response("Please log in to continue", 401)
        if session.get("role") != Role.ADMIN.value:
            return error_response("Admin access required", 403)
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> str:
    return str(session["user_id"])


def current_role() -> Role:
    try:
        return Role(session.get("role"))
    except ValueError:
        return Role.EMPLOYEE


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def require_field(data: dict[str, Any], name: str) -> Any:
    value = data.get(name)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{name} is required")
    return value


def parse_date_value(value: Any, name: str) -> date:
    try:
        return parse_iso_date(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a date (YYYY-MM-DD)")


def period_from(source: dict[str, Any]) -> tuple[int, int]:
    month = require_int_in_range(require_field(source, "month"), "month", minimum=1, maximum=12)
    year = require_int_in_range(require_field(source, "year"), "year", minimum=1900)
    return month, year


def optional_arg(name: str) -> Optional[str]:
    value = (request.args.get(name) or "").strip()
    return value or None


def register_error_handlers(app: Flask) -> None:
    def handle_domain_error(exc: DomainError):
        for error_type, status in _STATUS_BY_ERROR:
            if isinstance(exc, error_type):
                break
        else:
            status = 500
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, exc, exc_info=exc)
        else:
            logger.info("%s %s rejected (%s): %s", request.method, request.path, status, exc)
        return error_response(str(exc), status)

    app.register_error_handler(DomainError, handle_domain_error)
