from __future__ import annotations

import time
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from ctr_reactor.application.services.tokens import SessionTokenService
from ctr_reactor.application.use_cases.users.register_user import RegisterUserUseCase
from ctr_reactor.application.use_cases.users.resolve_session import \
    ResolveSessionUseCase
from ctr_reactor.domain.users.exceptions import (DuplicateEmailError,
                                                 InvalidInputError,
                                                 UnauthenticatedError)
from ctr_reactor.infrastructure.db import Database
from ctr_reactor.infrastructure.stores import SqlAlchemyAuthStore


@pytest.fixture()
def store(tmp_path: Path) -> SqlAlchemyAuthStore:
    database = Database(tmp_path / "nested" / "auth.db")
    database.init_schema()
    yield SqlAlchemyAuthStore(database)
    database.dispose()


def test_database_file_is_created(tmp_path: Path, store: SqlAlchemyAuthStore) -> None:
    store.ping()
    assert (tmp_path / "nested" / "auth.db").exists()


def test_create_and_find_user(store: SqlAlchemyAuthStore) -> None:
    user = store.create_user("Alice", "alice@example.com", "scrypt:1$salt$hash")

    assert isinstance(user.id, int)
    assert user.created_at.tzinfo is not None
    assert store.find_user_by_email("ALICE@example.com") == user
    assert store.find_user_by_id(user.id) == user
    assert store.find_user_by_id(str(user.id)) == user


def test_unknown_lookups_return_none(store: SqlAlchemyAuthStore) -> None:
    assert store.find_user_by_email("nobody@example.com") is None
    assert store.find_user_by_id(9999) is None
    assert store.find_user_by_id("not-a-number") is None
    assert store.find_session_by_token_hash("f" * 64) is None


def test_duplicate_email_is_case_insensitive(store: SqlAlchemyAuthStore) -> None:
    store.create_user(None, "dup@example.com", "h")

    with pytest.raises(DuplicateEmailError):
        store.create_user(None, "DUP@Example.com", "h2")


def test_create_user_rejects_malformed_email(store: SqlAlchemyAuthStore) -> None:
    with pytest.raises(InvalidInputError):
        store.create_user(None, "nope", "h")


def test_session_round_trip_and_delete(store: SqlAlchemyAuthStore) -> None:
    user = store.create_user(None, "s@example.com", "h")
    expires = datetime.now(UTC) + timedelta(hours=1)

    store.create_session(user.id, "a" * 64, expires)
    found = store.find_session_by_token_hash("a" * 64)

    assert found is not None
    assert found.user_id == user.id
    assert found.expires_at == expires

    store.delete_session("a" * 64)
    store.delete_session("a" * 64)
    assert store.find_session_by_token_hash("a" * 64) is None


def test_expired_session_is_deleted_on_resolve(store: SqlAlchemyAuthStore) -> None:
    tokens = SessionTokenService()
    user = store.create_user(None, "late@example.com", "h")
    raw = tokens.generate()
    store.create_session(user.id, tokens.hash(raw), datetime.now(UTC) - timedelta(seconds=1))

    with pytest.raises(UnauthenticatedError):
        ResolveSessionUseCase(store=store, tokens=tokens).execute(raw)

    assert store.find_session_by_token_hash(tokens.hash(raw)) is None


def test_purge_expired_sessions(store: SqlAlchemyAuthStore) -> None:
    user = store.create_user(None, "p@example.com", "h")
    now = datetime.now(UTC)
    store.create_session(user.id, "1" * 64, now - timedelta(minutes=5))
    store.create_session(user.id, "2" * 64, now - timedelta(seconds=1))
    store.create_session(user.id, "3" * 64, now + timedelta(hours=1))

    assert store.purge_expired_sessions(now) == 2
    assert store.find_session_by_token_hash("3" * 64) is not None
    assert store.purge_expired_sessions(now) == 0


def test_name_is_embedded(store: SqlAlchemyAuthStore) -> None:
    assert store.name == "embedded"


def test_one_second_session_expires_in_real_time(store: SqlAlchemyAuthStore, hasher) -> None:
    tokens = SessionTokenService()
    register = RegisterUserUseCase(
        store=store, password_hasher=hasher, tokens=tokens, session_max_age=1
    )
    resolve = ResolveSessionUseCase(store=store, tokens=tokens)
    _, token = register.execute(None, "brief@example.com", "secret123")
    assert resolve.execute(token).email == "brief@example.com"

    time.sleep(1.2)

    with pytest.raises(UnauthenticatedError):
        resolve.execute(token)
