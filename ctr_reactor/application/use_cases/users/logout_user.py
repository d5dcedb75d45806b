"""Use-case for revoking sessions."""

from __future__ import annotations

from ctr_reactor.application.services.tokens import token_fingerprint
from ctr_reactor.domain.users.repositories import AuthStore, TokenService
from ctr_reactor.shared.logging import logger

from .store_boundary import store_boundary


class LogoutUserUseCase:
    def __init__(self, *, store: AuthStore, tokens: TokenService) -> None:
        self._store = store
        self._tokens = tokens

    def execute(self, raw_token: str | None) -> None:
        if not raw_token:
            return
        token_hash = self._tokens.hash(raw_token)
        with store_boundary("logout"):
            self._store.delete_session(token_hash)
        logger.info(f"auth.logout: revoked <hash:{token_fingerprint(token_hash)}>")
