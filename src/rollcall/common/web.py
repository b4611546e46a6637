from __future__ import annotations

from functools import wraps
from typing import Any

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import ValidationError


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "Authentication required"}), 401
        return view(*args, **kwargs)

    return wrapper


def principal_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "Authentication required"}), 401
        if session.get("role") != Role.PRINCIPAL.value:
            return jsonify({"success": False, "error": "Principal access required"}), 403
        return view(*args, **kwargs)

    return wrapper


def current_user() -> tuple[int, Role]:
    """(user_id, role) of the logged-in user, read from the Flask session."""
    return int(session["user_id"]), Role(session["role"])


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def ok(payload: Any = None, status: int = 200, **extra):
    body: dict[str, Any] = {"success": True}
    if payload is not None:
        body["data"] = payload
    body.update(extra)
    return jsonify(body), status
