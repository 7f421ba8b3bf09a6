from __future__ import annotations

from functools import wraps
from typing import Callable, Optional

from flask import g, jsonify, request

from ..core.enums import Role
from .store import SessionAuth


def bearer_from_request() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def bearer_required(auth: SessionAuth, role: Role) -> Callable:
    """Build a view decorator that admits only principals of ``role``.

    The resolved principal is available as ``flask.g.principal``.
    """

    error = "admin_unauthorized" if role == Role.ADMIN else "unauthorized"

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            bearer = bearer_from_request()
            principal = auth.resolve(bearer)
            if principal is None or principal.role != role:
                return jsonify({"error": error}), 401

            g.principal = principal
            g.bearer = bearer
            return view(*args, **kwargs)

        return wrapper

    return decorator
