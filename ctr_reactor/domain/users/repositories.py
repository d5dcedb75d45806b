# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .entities import Session, User, UserId


class AuthStore(Protocol):
    name: str

    def ping(self) -> None: ...
    def create_user(self, name: str | None, email: str, password_hash: str) -> User: ...
    def find_user_by_email(self, email: str) -> User | None: ...
    def find_user_by_id(self, user_id: UserId) -> User | None: ...
    def create_session(
        self, user_id: UserId, token_hash: str, expires_at: datetime
    ) -> Session: ...
    def find_session_by_token_hash(self, token_hash: str) -> Session | None: ...
    def delete_session(self, token_hash: str) -> None: ...
    def purge_expired_sessions(self, now: datetime) -> int: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...


class TokenService(Protocol):
    def generate(self) -> str: ...
    def hash(self, token: str) -> str: ...
