# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, Response, jsonify, redirect, request
from pydantic import ValidationError

from ctr_reactor.application.use_cases.users.store_boundary import store_boundary
from ctr_reactor.domain.users.exceptions import InvalidInputError
from ctr_reactor.domain.users.repositories import AuthStore
from ctr_reactor.infrastructure.admin import AdminGate
from ctr_reactor.interfaces.http.dto.auth import AdminPasswordDTO
from ctr_reactor.shared.config import AppConfig
from ctr_reactor.shared.errors import AppError, ForbiddenError
from ctr_reactor.shared.logging import logger
from ctr_reactor.shared.middleware.request_logger import get_client_ip

ADMIN_PASSWORD_HEADER = "x-admin-password"


class AdminPasswordRejectedError(AppError):
    def __init__(self) -> None:
        super().__init__(
            code="unauthorized",
            status=HTTPStatus.UNAUTHORIZED,
            message="invalid admin password",
        )


class SecureController:
    """Shared-secret entry points and diagnostics for the admin console."""

    def __init__(self, *, config: AppConfig, admin_gate: AdminGate, store: AuthStore) -> None:
        self._config = config
        self._gate = admin_gate
        self._store = store

    def _provided_password(self) -> str:
        return request.headers.get(ADMIN_PASSWORD_HEADER, "")

    def _redirect_to_admin(self) -> Response:
        response = redirect("/admin", code=302)
        return self._gate.set_admin_cookie(
            response,
            secure=self._config.cookie_secure,
            samesite=self._config.security.cookie_samesite,
        )

    def _require_password_outside_development(self) -> None:
        if self._config.is_development() or not self._gate.config.password_required:
            return
        if not self._gate.password_matches(self._provided_password()):
            raise ForbiddenError()

    def enter(self, key: str) -> Response:
        ip_address = get_client_ip()
        self._gate.authorize(key, ip_address, self._provided_password())
        logger.info(f"secure.enter: admin cookie issued to {ip_address}")
        return self._redirect_to_admin()

    def emergency(self) -> Response:
        if not self._gate.config.password_required:
            raise ForbiddenError(message="admin password not configured")
        if not self._gate.password_matches(self._provided_password()):
            logger.warning(f"secure.emergency: rejected from {get_client_ip()}")
            raise AdminPasswordRejectedError()
        logger.info(f"secure.emergency: admin cookie issued to {get_client_ip()}")
        return self._redirect_to_admin()

    def validate_password(self) -> tuple[Response, int]:
        if not self._gate.config.password_required:
            raise ForbiddenError(message="server not configured")
        try:
            dto = AdminPasswordDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise InvalidInputError(message="invalid request") from exc
        if not self._gate.password_matches(dto.password):
            raise AdminPasswordRejectedError()
        return jsonify({"ok": True}), 200

    def ping(self) -> tuple[Response, int]:
        return jsonify({"ok": True, "message": "pong"}), 200

    def status(self) -> tuple[Response, int]:
        admin = self._gate.config
        return jsonify(
            {
                "ok": True,
                "secretSet": self._gate.secret_count > 0,
                "allowedCount": self._gate.secret_count,
                "ipAllowlistSet": self._gate.allowlist_count > 0,
                "ipAllowlistCount": self._gate.allowlist_count,
                "requirePassword": admin.password_required,
                "backend": self._store.name,
            }
        ), 200

    def diagnostic(self) -> tuple[Response, int]:
        self._require_password_outside_development()
        key = request.args.get("key")
        client_ip = get_client_ip()
        return jsonify(
            {
                "ok": True,
                "secretSet": self._gate.secret_count > 0,
                "allowedCount": self._gate.secret_count,
                "keyMatches": self._gate.secret_matches(key) if key else None,
                "ipAllowlistCount": self._gate.allowlist_count,
                "ipAllowed": self._gate.ip_allowed(client_ip),
                "clientIp": client_ip if client_ip != "unknown" else None,
            }
        ), 200

    def admin_exists(self) -> tuple[Response, int]:
        self._require_password_outside_development()
        admin_email = self._gate.config.email.strip()
        if not admin_email:
            return jsonify({"ok": True, "configured": False, "exists": False, "backend": "none"}), 200

        try:
            with store_boundary("admin_exists"):
                found = self._store.find_user_by_email(admin_email)
        except InvalidInputError:
            logger.warning("secure.admin_exists: ADMIN_EMAIL is not a valid address")
            found = None
        exists = found is not None
        return jsonify(
            {
                "ok": True,
                "configured": True,
                "exists": exists,
                "backend": self._store.name if exists else "none",
            }
        ), 200

    def console(self) -> tuple[Response, int]:
        return jsonify({"ok": True, "console": "admin", "backend": self._store.name}), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("secure", __name__)
        bp.add_url_rule("/secure/<path:key>", view_func=self.enter, methods=["GET"])
        bp.add_url_rule("/admin", view_func=self.console, methods=["GET"])
        bp.add_url_rule("/api/secure/ping", view_func=self.ping, methods=["GET"])
        bp.add_url_rule("/api/secure/status", view_func=self.status, methods=["GET"])
        bp.add_url_rule("/api/secure/diagnostic", view_func=self.diagnostic, methods=["POST"])
        bp.add_url_rule(
            "/api/secure/validate-password", view_func=self.validate_password, methods=["POST"]
        )
        bp.add_url_rule("/api/secure/emergency", view_func=self.emergency, methods=["GET"])
        bp.add_url_rule("/api/secure/admin-exists", view_func=self.admin_exists, methods=["GET"])
        return bp
