from __future__ import annotations

from flask import Flask, g, jsonify

from ..auth.decorators import bearer_required
from ..common.http import json_body
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError


def _text(data: dict, key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


def register(app: Flask, container: Container) -> None:
    user_required = bearer_required(container.session_auth, Role.USER)
    admin_required = bearer_required(container.session_auth, Role.ADMIN)
    auth = container.auth_service

    @app.route("/api/auth/request-otp", methods=["POST"], endpoint="request_otp")
    def request_otp():
        data = json_body()
        if not data.get("phone"):
            return jsonify({"error": "phone_required"}), 400
        try:
            return jsonify(auth.request_otp(data["phone"]))
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except Exception:
            app.logger.exception("request-otp failed")
            return jsonify({"error": "server_error"}), 500

    @app.route("/api/auth/verify-otp", methods=["POST"], endpoint="verify_otp")
    def verify_otp():
        data = json_body()
        try:
            bearer, user = auth.verify_otp(_text(data, "phone"), _text(data, "code"))
            return jsonify({"token": bearer, "user": user.to_dict()})
        except AuthenticationError:
            return jsonify({"error": "invalid_otp"}), 401
        except Exception:
            app.logger.exception("verify-otp failed")
            return jsonify({"error": "server_error"}), 500

    @app.route("/api/auth/register", methods=["POST"], endpoint="register_user")
    def register_user():
        data = json_body()
        try:
            bearer, user = auth.register(
                password=_text(data, "password"),
                phone=_text(data, "phone") or None,
                email=_text(data, "email") or None,
                external_id=_text(data, "externalId") or None,
                name=_text(data, "name") or None,
                age=data.get("age"),
                gender=_text(data, "gender") or None,
                location=_text(data, "location") or None,
            )
            return jsonify({"token": bearer, "user": user.to_dict()}), 201
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except Exception:
            app.logger.exception("register failed")
            return jsonify({"error": "server_error"}), 500

    @app.route("/api/auth/login", methods=["POST"], endpoint="login_user")
    def login_user():
        data = json_body()
        try:
            bearer, user = auth.login(_text(data, "identifier"), _text(data, "password"))
            return jsonify({"token": bearer, "user": user.to_dict()})
        except AuthenticationError:
            return jsonify({"error": "invalid_credentials"}), 401
        except Exception:
            app.logger.exception("login failed")
            return jsonify({"error": "server_error"}), 500

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout_user")
    @user_required
    def logout_user():
        auth.logout(g.bearer)
        return jsonify({"status": "ok"})

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @user_required
    def me():
        return jsonify({"principal": g.principal.to_dict()})

    @app.route("/api/admin/login", methods=["POST"], endpoint="admin_login")
    def admin_login():
        data = json_body()
        username, password = _text(data, "username"), _text(data, "password")
        if not username or not password:
            return jsonify({"error": "missing_fields"}), 400
        try:
            bearer, admin = auth.admin_login(username, password)
            return jsonify({"token": bearer, "admin": {"id": admin.admin_id, "username": admin.username}})
        except AuthenticationError:
            return jsonify({"error": "invalid_credentials"}), 401
        except Exception:
            app.logger.exception("admin login failed")
            return jsonify({"error": "server_error"}), 500

    @app.route("/api/admin/logout", methods=["POST"], endpoint="admin_logout")
    @admin_required
    def admin_logout():
        auth.logout(g.bearer)
        return jsonify({"status": "ok"})
