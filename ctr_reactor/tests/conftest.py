from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from flask import Flask

from ctr_reactor.app import create_app
from ctr_reactor.domain.users.entities import Session, User, UserId
from ctr_reactor.domain.users.exceptions import DuplicateEmailError, StoreError
from ctr_reactor.domain.users.repositories import AuthStore, PasswordHasher
from ctr_reactor.shared.config import (AdminConfig, AppConfig, DatabaseConfig,
                                       ManagedStoreConfig, SecurityConfig,
                                       SessionConfig)


class InMemoryAuthStore(AuthStore):
    name = "memory"

    def __init__(self) -> None:
        self.users: dict[int, User] = {}
        self.sessions: dict[str, Session] = {}
        self._seq = 1
        self.fail_sessions = False
        self.fail_everything = False
        self.fail_deletes = False

    def _check(self) -> None:
        if self.fail_everything:
            raise StoreError("store offline")

    def ping(self) -> None:
        self._check()

    def create_user(self, name: str | None, email: str, password_hash: str) -> User:
        self._check()
        if any(u.email == email for u in self.users.values()):
            raise DuplicateEmailError()
        user = User(
            id=self._seq,
            email=email,
            name=name,
            password_hash=password_hash,
            created_at=datetime.now(UTC),
        )
        self.users[user.id] = user
        self._seq += 1
        return user

    def find_user_by_email(self, email: str) -> User | None:
        self._check()
        return next((u for u in self.users.values() if u.email == email.lower()), None)

    def find_user_by_id(self, user_id: UserId) -> User | None:
        self._check()
        return self.users.get(int(user_id))

    def create_session(self, user_id: UserId, token_hash: str, expires_at: datetime) -> Session:
        self._check()
        if self.fail_sessions:
            raise StoreError("sessions table unavailable")
        session = Session(
            token_hash=token_hash,
            user_id=user_id,
            created_at=datetime.now(UTC),
            expires_at=expires_at,
        )
        self.sessions[token_hash] = session
        return session

    def find_session_by_token_hash(self, token_hash: str) -> Session | None:
        self._check()
        return self.sessions.get(token_hash)

    def delete_session(self, token_hash: str) -> None:
        self._check()
        if self.fail_deletes:
            raise StoreError("delete rejected")
        self.sessions.pop(token_hash, None)

    def purge_expired_sessions(self, now: datetime) -> int:
        self._check()
        expired = [h for h, s in self.sessions.items() if s.expires_at <= now]
        for token_hash in expired:
            del self.sessions[token_hash]
        return len(expired)


class DeterministicHasher(PasswordHasher):
    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password: str, hashed: str) -> bool:
        return hashed == f"hashed:{password}"


class FrozenClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def make_config(
    tmp_path: Path,
    *,
    admin: AdminConfig | None = None,
    rate_limit: bool = False,
    app_env: str = "development",
    proxy_hops: int = 0,
) -> AppConfig:
    return AppConfig(
        app_env=app_env,
        secret_key="test-secret-key",
        session=SessionConfig(cookie_name="session", max_age=3600, token_secret=""),
        database=DatabaseConfig(backend="embedded", sqlite_path=tmp_path / "auth.db"),
        managed=ManagedStoreConfig(url="", api_key=""),
        admin=admin or AdminConfig(secret="", ip_allowlist="", password="", email=""),
        security=SecurityConfig(
            cookie_samesite="Lax",
            allowed_origins="*",
            enable_rate_limit=rate_limit,
            enable_hsts=False,
            trusted_proxy_hops=proxy_hops,
        ),
    )


@pytest.fixture()
def memory_store() -> InMemoryAuthStore:
    return InMemoryAuthStore()


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def app_config(tmp_path: Path) -> AppConfig:
    return make_config(tmp_path)


@pytest.fixture()
def app(app_config: AppConfig) -> Flask:
    flask_app = create_app(app_config)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture()
def hasher() -> DeterministicHasher:
    return DeterministicHasher()


@pytest.fixture()
def config_factory(tmp_path: Path):
    def _factory(**kwargs) -> AppConfig:
        return make_config(tmp_path, **kwargs)

    return _factory
