from __future__ import annotations

import io

from flask import Flask, g, jsonify, request, send_file

from ..auth.decorators import bearer_required
from ..common.http import json_body
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import InvalidToken, SessionNotFound, ValidationError
from ..tokens.qr import decode_image, parse_payload
from .export import attendance_csv


def register(app: Flask, container: Container) -> None:
    user_required = bearer_required(container.session_auth, Role.USER)
    admin_required = bearer_required(container.session_auth, Role.ADMIN)
    recorder = container.attendance_recorder

    def _invalid_code():
        # Unknown session and bad token look the same to a scanner.
        return jsonify({"error": "invalid_code"}), 400

    def _mark(session_id, token, device_id):
        result = recorder.mark_attendance(g.principal.principal_id, session_id, token, device_id)
        return jsonify(result.to_dict())

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="mark_attendance")
    @user_required
    def mark_attendance():
        """Accepts {sessionId, token, deviceId?} or the raw scanned text as {payload, deviceId?}."""

        raw = request.get_json(silent=True)
        if raw is not None and not isinstance(raw, dict):
            return _invalid_code()
        data = raw or {}
        try:
            if data.get("payload"):
                scanned = parse_payload(data["payload"])
                session_id, token = scanned.session_id, scanned.token
            else:
                session_id, token = data.get("sessionId"), data.get("token")
                if not session_id or not token:
                    return jsonify({"error": "missing_fields"}), 400
                if not isinstance(session_id, str) or not isinstance(token, str):
                    return _invalid_code()

            return _mark(session_id, token, data.get("deviceId"))
        except (SessionNotFound, InvalidToken):
            return _invalid_code()
        except Exception:
            app.logger.exception("mark attendance failed")
            return jsonify({"error": "server_error"}), 500

    @app.route("/api/attendance/mark/image", methods=["POST"], endpoint="mark_attendance_image")
    @user_required
    def mark_attendance_image():
        """Accepts a photo of the QR code as multipart field ``image``."""

        if "image" not in request.files:
            return jsonify({"error": "image_required"}), 400
        try:
            scanned = parse_payload(decode_image(request.files["image"].stream))
            return _mark(scanned.session_id, scanned.token, request.form.get("deviceId"))
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except (SessionNotFound, InvalidToken):
            return _invalid_code()
        except Exception:
            app.logger.exception("mark attendance from image failed")
            return jsonify({"error": "server_error"}), 500

    @app.route("/api/admin/attendance/manual", methods=["POST"], endpoint="mark_attendance_manual")
    @admin_required
    def mark_attendance_manual():
        data = json_body()
        if not data.get("sessionId") or not data.get("userId"):
            return jsonify({"error": "missing_fields"}), 400
        try:
            result = recorder.mark_attendance_manual(data["userId"], data["sessionId"])
            app.logger.info("manual attendance by admin %s: %s", g.principal.principal_id, result.status.value)
            return jsonify(result.to_dict())
        except SessionNotFound:
            return jsonify({"error": "session_not_found"}), 404
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except Exception:
            app.logger.exception("manual attendance failed")
            return jsonify({"error": "server_error"}), 500

    @app.route("/api/admin/attendance/session/<session_id>", methods=["GET"], endpoint="session_attendance")
    @admin_required
    def session_attendance(session_id: str):
        try:
            rows = recorder.list_for_session(session_id)
            return jsonify({"attendance": [r.to_dict() for r in rows]})
        except SessionNotFound:
            return jsonify({"error": "not_found"}), 404

    @app.route("/api/admin/attendance/export", methods=["GET"], endpoint="export_attendance")
    @admin_required
    def export_attendance():
        session_id = request.args.get("sessionId", "").strip()
        if not session_id:
            return jsonify({"error": "sessionId_required"}), 400
        try:
            rows = recorder.list_for_session(session_id)
        except SessionNotFound:
            return jsonify({"error": "not_found"}), 404

        buf = io.BytesIO(attendance_csv(rows))
        return send_file(
            buf,
            mimetype="text/csv",
            as_attachment=True,
            download_name=f"attendance-{session_id}.csv",
        )
