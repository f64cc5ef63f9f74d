"""Session guards and the JSON error boundary shared by all controllers."""

from __future__ import annotations

import logging
from datetime import date, datetime
from functools import wraps
from typing import Optional

from flask import current_app, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, StoreError, ValidationError
from .datetime_utils import now_local, parse_iso_date, parse_iso_datetime

logger = logging.getLogger(__name__)


def json_ok(status_code: int = 200, **payload):
    return jsonify({"success": True, **payload}), status_code


def json_fail(message: str, status_code: int):
    return jsonify({"success": False, "error": message}), status_code


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Role:
    return Role(session["role"])


def json_body() -> dict:
    return request.get_json(silent=True) or {}


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return json_fail("Please sign in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return json_fail("Please sign in to continue", 401)
            if session.get("role") not in allowed:
                return json_fail("You need admin privileges to access this page", 403)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def domain_errors(view):
    """Translate service exceptions into JSON failures; nothing escapes."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return json_fail(str(e), 400)
        except AuthenticationError as e:
            return json_fail(str(e), 401)
        except AuthorizationError as e:
            return json_fail(str(e), 403)
        except StoreError as e:
            logger.warning("Store error in %s: %s", request.path, e)
            return json_fail(str(e), 503)
        except Exception:
            logger.exception("Unexpected error in %s", request.path)
            return json_fail("An unexpected error occurred", 500)

    return wrapper


def request_now() -> datetime:
    """Operating local time for the current request (``CLOCK`` config overrides)."""
    return current_app.config.get("CLOCK", now_local)()


def optional_datetime(value: Optional[str], field_name: str) -> Optional[datetime]:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field_name} is not a valid ISO-8601 timestamp")
    v = (value or "").strip()
    if not v:
        return None
    try:
        return parse_iso_datetime(v)
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid ISO-8601 timestamp")


def optional_date(value: Optional[str], field_name: str) -> Optional[date]:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a YYYY-MM-DD date")
    v = (value or "").strip()
    if not v:
        return None
    try:
        return parse_iso_date(v)
    except ValueError:
        raise ValidationError(f"{field_name} must be a YYYY-MM-DD date")
