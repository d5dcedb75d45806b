# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import timedelta
from functools import cached_property

from ctr_reactor.domain.users.entities import User
from ctr_reactor.domain.users.exceptions import InvalidCredentialsError, InvalidInputError
from ctr_reactor.domain.users.repositories import AuthStore, PasswordHasher, TokenService
from ctr_reactor.domain.users.validation import normalize_email
from ctr_reactor.shared.logging import logger

from .store_boundary import Clock, store_boundary, utc_now


class LoginUserUseCase:
    def __init__(
        self,
        *,
        store: AuthStore,
        password_hasher: PasswordHasher,
        tokens: TokenService,
        session_max_age: int,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self._password_hasher = password_hasher
        self._tokens = tokens
        self._session_max_age = session_max_age
        self._clock = clock

    @cached_property
    def _dummy_hash(self) -> str:
        return self._password_hasher.hash("ctr-reactor-unknown-account")

    def execute(self, email: str, password: str) -> tuple[User, str]:
        try:
            normalized = normalize_email(email)
        except InvalidInputError:
            raise InvalidCredentialsError() from None

        with store_boundary("login"):
            user = self._store.find_user_by_email(normalized)

        if user is None:
            # keeps response time independent of whether the email is registered
            self._password_hasher.verify(password, self._dummy_hash)
            logger.info("auth.login: rejected (unknown account)")
            raise InvalidCredentialsError()

        if not self._password_hasher.verify(password, user.password_hash):
            logger.info(f"auth.login: rejected user={user.id}")
            raise InvalidCredentialsError()

        raw_token = self._tokens.generate()
        expires_at = self._clock() + timedelta(seconds=self._session_max_age)
        with store_boundary("login"):
            self._store.create_session(user.id, self._tokens.hash(raw_token), expires_at)

        logger.info(f"auth.login: ok user={user.id} exp={expires_at.isoformat()}")
        return user, raw_token
