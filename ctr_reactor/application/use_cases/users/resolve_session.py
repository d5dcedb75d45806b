# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from ctr_reactor.application.services.tokens import token_fingerprint
from ctr_reactor.domain.users.entities import User
from ctr_reactor.domain.users.exceptions import StoreError, UnauthenticatedError
from ctr_reactor.domain.users.repositories import AuthStore, TokenService
from ctr_reactor.shared.logging import logger

from .store_boundary import Clock, store_boundary, utc_now


class ResolveSessionUseCase:
    def __init__(self, *, store: AuthStore, tokens: TokenService, clock: Clock = utc_now) -> None:
        self._store = store
        self._tokens = tokens
        self._clock = clock

    def execute(self, raw_token: str | None) -> User:
        if not raw_token or not isinstance(raw_token, str):
            raise UnauthenticatedError()

        token_hash = self._tokens.hash(raw_token)
        with store_boundary("resolve"):
            session = self._store.find_session_by_token_hash(token_hash)
        if session is None:
            logger.debug(f"auth.resolve: unknown session <hash:{token_fingerprint(token_hash)}>")
            raise UnauthenticatedError()

        if not session.is_valid(self._clock()):
            logger.debug(f"auth.resolve: expired session <hash:{token_fingerprint(token_hash)}>")
            self._discard(token_hash)
            raise UnauthenticatedError()

        with store_boundary("resolve"):
            user = self._store.find_user_by_id(session.user_id)

        if user is None:
            logger.warning(f"auth.resolve: session without user <hash:{token_fingerprint(token_hash)}>")
            raise UnauthenticatedError()
        return user

    def _discard(self, token_hash: str) -> None:
        try:
            self._store.delete_session(token_hash)
        except StoreError as exc:
            logger.warning(
                f"auth.resolve: could not drop expired session "
                f"<hash:{token_fingerprint(token_hash)}>: {exc}"
            )
