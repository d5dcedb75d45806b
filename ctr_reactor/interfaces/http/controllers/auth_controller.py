# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify, request
from pydantic import ValidationError

from ctr_reactor.application.use_cases.users.login_user import LoginUserUseCase
from ctr_reactor.application.use_cases.users.logout_user import LogoutUserUseCase
from ctr_reactor.application.use_cases.users.register_user import RegisterUserUseCase
from ctr_reactor.application.use_cases.users.resolve_session import ResolveSessionUseCase
from ctr_reactor.infrastructure.admin import AdminGate
from ctr_reactor.interfaces.http.dto.auth import (AuthSuccessDTO, LoginRequestDTO,
                                                  SignupRequestDTO, UserDTO)
from ctr_reactor.shared.config import AppConfig
from ctr_reactor.shared.errors import BackendUnavailableError
from ctr_reactor.shared.errors.validation import raise_validation_error
from ctr_reactor.shared.logging import logger
from ctr_reactor.shared.middleware.rate_limit import rate_limit


class AuthController:
    def __init__(
        self,
        *,
        config: AppConfig,
        admin_gate: AdminGate,
        register_use_case: RegisterUserUseCase,
        login_use_case: LoginUserUseCase,
        logout_use_case: LogoutUserUseCase,
        resolve_session_use_case: ResolveSessionUseCase,
    ) -> None:
        self._config = config
        self._admin_gate = admin_gate
        self._register_use_case = register_use_case
        self._login_use_case = login_use_case
        self._logout_use_case = logout_use_case
        self._resolve_session_use_case = resolve_session_use_case

    def _session_token(self) -> str:
        return request.cookies.get(self._config.session.cookie_name, "")

    def _set_session_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            self._config.session.cookie_name,
            token,
            max_age=self._config.session.max_age,
            path="/",
            httponly=True,
            secure=self._config.cookie_secure,
            samesite=self._config.security.cookie_samesite,
        )

    def _clear_session_cookie(self, response: Response) -> None:
        response.set_cookie(
            self._config.session.cookie_name,
            "",
            max_age=0,
            expires=0,
            path="/",
            httponly=True,
            secure=self._config.cookie_secure,
            samesite=self._config.security.cookie_samesite,
        )

    @rate_limit(limit=4, window_seconds=60.0)
    def signup(self) -> tuple[Response, int]:
        try:
            dto = SignupRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        user, token = self._register_use_case.execute(dto.name, dto.email, dto.password)

        payload = AuthSuccessDTO(user=UserDTO.from_user(user), session_token=token)
        response = jsonify(payload.to_payload())
        if token:
            self._set_session_cookie(response, token)
        return response, 201

    @rate_limit(limit=8, window_seconds=60.0, key_field="email")
    def login(self) -> tuple[Response, int]:
        try:
            dto = LoginRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        user, token = self._login_use_case.execute(dto.email, dto.password)

        payload = AuthSuccessDTO(user=UserDTO.from_user(user), session_token=token)
        response = jsonify(payload.to_payload())
        self._set_session_cookie(response, token)
        if self._admin_gate.is_admin_email(user.email):
            self._admin_gate.set_admin_cookie(
                response,
                secure=self._config.cookie_secure,
                samesite=self._config.security.cookie_samesite,
            )
            logger.info(f"auth.login: admin cookie issued for user={user.id}")
        return response, 200

    def logout(self) -> tuple[Response, int]:
        try:
            self._logout_use_case.execute(self._session_token())
        except BackendUnavailableError:
            # the cookie is cleared regardless; the row expires on its own
            logger.warning("auth.logout: session revocation failed, clearing cookie only")

        response = jsonify(AuthSuccessDTO().to_payload())
        self._clear_session_cookie(response)
        self._admin_gate.clear_admin_cookie(
            response,
            secure=self._config.cookie_secure,
            samesite=self._config.security.cookie_samesite,
        )
        return response, 200

    def me(self) -> tuple[Response, int]:
        user = self._resolve_session_use_case.execute(self._session_token())
        g.user_id = user.id
        payload = AuthSuccessDTO(user=UserDTO.from_user(user))
        return jsonify(payload.model_dump(by_alias=True, exclude={"session_token"})), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__, url_prefix="/api/auth")
        bp.add_url_rule("/signup", view_func=self.signup, methods=["POST"])
        bp.add_url_rule("/login", view_func=self.login, methods=["POST"])
        bp.add_url_rule("/logout", view_func=self.logout, methods=["POST"])
        bp.add_url_rule("/me", view_func=self.me, methods=["GET"])
        return bp
