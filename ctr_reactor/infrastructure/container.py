# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from functools import cached_property

from ctr_reactor.application.services.password_hashing import ScryptPasswordHasher
from ctr_reactor.application.services.tokens import SessionTokenService
from ctr_reactor.application.use_cases.users.login_user import LoginUserUseCase
from ctr_reactor.application.use_cases.users.logout_user import LogoutUserUseCase
from ctr_reactor.application.use_cases.users.purge_sessions import \
    PurgeExpiredSessionsUseCase
from ctr_reactor.application.use_cases.users.register_user import \
    RegisterUserUseCase
from ctr_reactor.application.use_cases.users.resolve_session import \
    ResolveSessionUseCase
from ctr_reactor.domain.users.repositories import AuthStore
from ctr_reactor.infrastructure.admin import AdminGate
from ctr_reactor.infrastructure.stores import build_auth_store
from ctr_reactor.interfaces.http.controllers.auth_controller import AuthController
from ctr_reactor.interfaces.http.controllers.misc_controller import MiscController
from ctr_reactor.interfaces.http.controllers.secure_controller import \
    SecureController
from ctr_reactor.shared.config import AppConfig


class Container:
    def __init__(self, config: AppConfig, *, store: AuthStore | None = None) -> None:
        self._config = config
        if store is not None:
            self.__dict__["auth_store"] = store

    @property
    def config(self) -> AppConfig:
        return self._config

    @cached_property
    def auth_store(self) -> AuthStore:
        return build_auth_store(self._config)

    @cached_property
    def password_hasher(self) -> ScryptPasswordHasher:
        return ScryptPasswordHasher()

    @cached_property
    def token_service(self) -> SessionTokenService:
        return SessionTokenService(secret=self._config.session.token_secret)

    @cached_property
    def register_user_use_case(self) -> RegisterUserUseCase:
        return RegisterUserUseCase(
            store=self.auth_store,
            password_hasher=self.password_hasher,
            tokens=self.token_service,
            session_max_age=self._config.session.max_age,
        )

    @cached_property
    def login_user_use_case(self) -> LoginUserUseCase:
        return LoginUserUseCase(
            store=self.auth_store,
            password_hasher=self.password_hasher,
            tokens=self.token_service,
            session_max_age=self._config.session.max_age,
        )

    @cached_property
    def logout_user_use_case(self) -> LogoutUserUseCase:
        return LogoutUserUseCase(store=self.auth_store, tokens=self.token_service)

    @cached_property
    def resolve_session_use_case(self) -> ResolveSessionUseCase:
        return ResolveSessionUseCase(store=self.auth_store, tokens=self.token_service)

    @cached_property
    def purge_sessions_use_case(self) -> PurgeExpiredSessionsUseCase:
        return PurgeExpiredSessionsUseCase(store=self.auth_store)

    @cached_property
    def admin_gate(self) -> AdminGate:
        return AdminGate(self._config.admin, secret_key=self._config.secret_key)

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            config=self._config,
            admin_gate=self.admin_gate,
            register_use_case=self.register_user_use_case,
            login_use_case=self.login_user_use_case,
            logout_use_case=self.logout_user_use_case,
            resolve_session_use_case=self.resolve_session_use_case,
        )

    @cached_property
    def secure_controller(self) -> SecureController:
        return SecureController(
            config=self._config, admin_gate=self.admin_gate, store=self.auth_store
        )

    @cached_property
    def misc_controller(self) -> MiscController:
        return MiscController(store=self.auth_store)
