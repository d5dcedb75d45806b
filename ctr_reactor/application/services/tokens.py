# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import hashlib
import hmac
import secrets

from ctr_reactor.domain.users.repositories import TokenService

TOKEN_BYTES = 32


class SessionTokenService(TokenService):
    """Opaque bearer tokens and the one-way digest that the stores persist.

    With a secret configured the digest is HMAC-SHA256, otherwise plain
    SHA-256; tokens are high-entropy so a fast hash is sufficient.
    """

    def __init__(self, secret: str = "") -> None:
        self._secret = secret.encode("utf-8") if secret else b""

    def generate(self) -> str:
        return secrets.token_hex(TOKEN_BYTES)

    def hash(self, token: str) -> str:
        data = token.encode("utf-8")
        if self._secret:
            return hmac.new(self._secret, data, hashlib.sha256).hexdigest()
        return hashlib.sha256(data).hexdigest()


def token_fingerprint(token_hash: str) -> str:
    return token_hash[:8]
