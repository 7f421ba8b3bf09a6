from __future__ import annotations

from flask import Flask, jsonify

from ..auth.decorators import bearer_required
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    admin_required = bearer_required(container.session_auth, Role.ADMIN)

    @app.route("/api/admin/stats/summary", methods=["GET"], endpoint="stats_summary")
    @admin_required
    def stats_summary():
        return jsonify(container.stats_service.summary().to_dict())
