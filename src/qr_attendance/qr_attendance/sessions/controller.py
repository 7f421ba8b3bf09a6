from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..auth.decorators import bearer_required
from ..common.datetime_utils import now_utc
from ..common.http import json_body
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import SessionNotFound, ValidationError
from ..tokens.qr import QrPayload, render_png, to_data_url


def register(app: Flask, container: Container) -> None:
    admin_required = bearer_required(container.session_auth, Role.ADMIN)
    sessions = container.session_service
    ledger = container.token_ledger

    @app.route("/api/sessions", methods=["GET"], endpoint="list_sessions")
    def list_sessions():
        return jsonify({"sessions": [s.to_dict() for s in sessions.list_all()]})

    @app.route("/api/sessions/<session_id>", methods=["GET"], endpoint="get_session")
    def get_session(session_id: str):
        try:
            return jsonify({"session": sessions.get(session_id).to_dict()})
        except SessionNotFound:
            return jsonify({"error": "not_found"}), 404

    @app.route("/api/admin/sessions", methods=["POST"], endpoint="create_session")
    @admin_required
    def create_session():
        data = json_body()
        if not data.get("date") or not data.get("startTime") or not data.get("endTime"):
            return jsonify({"error": "missing_fields"}), 400
        try:
            session = sessions.create(date=data["date"], start_time=data["startTime"], end_time=data["endTime"])
            return jsonify({"session": session.to_dict()}), 201
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except Exception:
            app.logger.exception("create session failed")
            return jsonify({"error": "server_error"}), 500

    @app.route("/api/admin/sessions/<session_id>", methods=["PUT"], endpoint="update_session")
    @admin_required
    def update_session(session_id: str):
        data = json_body()
        try:
            session = sessions.update(
                session_id,
                date=data.get("date"),
                start_time=data.get("startTime"),
                end_time=data.get("endTime"),
            )
            return jsonify({"session": session.to_dict()})
        except SessionNotFound:
            return jsonify({"error": "not_found"}), 404
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except Exception:
            app.logger.exception("update session failed")
            return jsonify({"error": "server_error"}), 500

    def _current_token(session_id: str):
        session = sessions.get(session_id)
        return session, ledger.current_or_new_token(session, now_utc())

    @app.route("/api/admin/sessions/<session_id>/token", methods=["POST"], endpoint="issue_session_token")
    @admin_required
    def issue_session_token(session_id: str):
        try:
            _, issued = _current_token(session_id)
            return jsonify(issued.to_dict())
        except SessionNotFound:
            return jsonify({"error": "not_found"}), 404
        except Exception:
            app.logger.exception("token issuance failed")
            return jsonify({"error": "server_error"}), 500

    @app.route("/api/admin/sessions/<session_id>/qr", methods=["GET"], endpoint="session_qr")
    @admin_required
    def session_qr(session_id: str):
        try:
            session, issued = _current_token(session_id)
            payload = QrPayload(session_id=session.session_id, token=issued.token).to_json()
            body = issued.to_dict()
            body["payload"] = payload
            body["qrDataUrl"] = to_data_url(render_png(payload))
            return jsonify(body)
        except SessionNotFound:
            return jsonify({"error": "not_found"}), 404
        except Exception:
            app.logger.exception("qr generation failed")
            return jsonify({"error": "server_error"}), 500

    @app.route("/api/admin/sessions/<session_id>/qr.png", methods=["GET"], endpoint="session_qr_image")
    @admin_required
    def session_qr_image(session_id: str):
        try:
            session, issued = _current_token(session_id)
            payload = QrPayload(session_id=session.session_id, token=issued.token).to_json()
            buf = io.BytesIO(render_png(payload))
            response = send_file(buf, mimetype="image/png")
            # A cached image must not outlive its window.
            response.headers["Cache-Control"] = "no-store"
            return response
        except SessionNotFound:
            return jsonify({"error": "not_found"}), 404
        except Exception:
            app.logger.exception("qr image generation failed")
            return jsonify({"error": "server_error"}), 500

    @app.route("/api/admin/sessions/<session_id>/tokens", methods=["GET"], endpoint="session_token_history")
    @admin_required
    def session_token_history(session_id: str):
        try:
            sessions.get(session_id)
        except SessionNotFound:
            return jsonify({"error": "not_found"}), 404
        limit = request.args.get("limit", type=int) or 50
        return jsonify({"tokens": [t.to_dict() for t in ledger.history(session_id, limit=limit)]})
