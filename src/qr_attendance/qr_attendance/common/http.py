from __future__ import annotations

from flask import request


def json_body() -> dict:
    """Request JSON as a dict. A missing body or a non-object reads as empty."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
