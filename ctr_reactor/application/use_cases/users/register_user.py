# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import timedelta

from ctr_reactor.domain.users.entities import User
from ctr_reactor.domain.users.exceptions import InvalidInputError, StoreError
from ctr_reactor.domain.users.repositories import AuthStore, PasswordHasher, TokenService
from ctr_reactor.domain.users.validation import normalize_email
from ctr_reactor.shared.logging import logger

from .store_boundary import Clock, store_boundary, utc_now


class RegisterUserUseCase:
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

    def execute(self, name: str | None, email: str, password: str) -> tuple[User, str | None]:
        """Create the account, then try to open its first session.

        The user row survives a failed session insert; the caller gets
        ``None`` instead of a token and can recover through a normal login.
        """
        normalized = normalize_email(email)
        if not password:
            raise InvalidInputError(message="password required", context={"field": "password"})
        display_name = (name or "").strip() or None

        hashed = self._password_hasher.hash(password)
        with store_boundary("signup"):
            user = self._store.create_user(display_name, normalized, hashed)

        raw_token = self._tokens.generate()
        expires_at = self._clock() + timedelta(seconds=self._session_max_age)
        try:
            self._store.create_session(user.id, self._tokens.hash(raw_token), expires_at)
        except StoreError as exc:
            logger.warning(
                f"auth.signup: user={user.id} created without a session "
                f"({type(exc).__name__}: {exc})"
            )
            return user, None

        logger.info(f"auth.signup: ok user={user.id} backend={self._store.name}")
        return user, raw_token
