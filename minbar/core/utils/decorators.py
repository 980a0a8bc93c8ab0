"""Reusable decorators for controllers."""

from __future__ import annotations

from functools import wraps
from typing import Callable, Iterable, TypeVar

from flask import jsonify
from flask_login import current_user

from minbar.core.users.models import Role

F = TypeVar("F", bound=Callable)


def require_roles(allowed_roles: Iterable[Role]):
    """Allow the view only for signed-in users holding one of ``allowed_roles``."""
    allowed = frozenset(allowed_roles)

    def decorator(fn: F) -> F:
        @wraps(fn)
        def wrapper(*args, **kwargs):  # type: ignore[misc]
            if not current_user.is_authenticated:
                return jsonify({"ok": False, "error": "unauthorized"}), 401
            if current_user.role not in allowed:
                return jsonify({"ok": False, "error": "forbidden"}), 403
            return fn(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
