from __future__ import annotations

import pytest

from ctr_reactor.application.services.tokens import SessionTokenService
from ctr_reactor.application.use_cases.users.login_user import LoginUserUseCase
from ctr_reactor.application.use_cases.users.logout_user import LogoutUserUseCase
from ctr_reactor.application.use_cases.users.purge_sessions import \
    PurgeExpiredSessionsUseCase
from ctr_reactor.application.use_cases.users.register_user import RegisterUserUseCase
from ctr_reactor.application.use_cases.users.resolve_session import \
    ResolveSessionUseCase
from ctr_reactor.domain.users.exceptions import (DuplicateEmailError,
                                                 InvalidCredentialsError,
                                                 InvalidInputError,
                                                 UnauthenticatedError)
from ctr_reactor.shared.errors import BackendUnavailableError

MAX_AGE = 3600


@pytest.fixture()
def tokens() -> SessionTokenService:
    return SessionTokenService()


@pytest.fixture()
def use_cases(memory_store, hasher, tokens, clock):
    common = {"store": memory_store, "password_hasher": hasher, "tokens": tokens}
    return {
        "register": RegisterUserUseCase(**common, session_max_age=MAX_AGE, clock=clock),
        "login": LoginUserUseCase(**common, session_max_age=MAX_AGE, clock=clock),
        "resolve": ResolveSessionUseCase(store=memory_store, tokens=tokens, clock=clock),
        "logout": LogoutUserUseCase(store=memory_store, tokens=tokens),
        "purge": PurgeExpiredSessionsUseCase(store=memory_store, clock=clock),
    }


def test_signup_creates_user_and_resolvable_session(use_cases, memory_store) -> None:
    user, token = use_cases["register"].execute("Alice", "Alice@Example.com", "secret123")

    assert user.email == "alice@example.com"
    assert user.name == "Alice"
    assert token is not None
    assert token not in memory_store.sessions
    assert use_cases["resolve"].execute(token).id == user.id


def test_signup_stores_hash_not_password(use_cases, memory_store) -> None:
    user, _ = use_cases["register"].execute(None, "bob@example.com", "secret123")

    stored = memory_store.users[user.id]
    assert stored.password_hash != "secret123"
    assert stored.name is None


def test_signup_rejects_malformed_email(use_cases) -> None:
    with pytest.raises(InvalidInputError):
        use_cases["register"].execute("x", "not-an-email", "secret123")


def test_duplicate_signup_leaves_existing_session_valid(use_cases) -> None:
    _, token = use_cases["register"].execute("a", "dup@example.com", "secret123")

    with pytest.raises(DuplicateEmailError):
        use_cases["register"].execute("b", "DUP@example.com", "other-pass")

    assert use_cases["resolve"].execute(token).email == "dup@example.com"


def test_signup_without_session_keeps_user(use_cases, memory_store) -> None:
    memory_store.fail_sessions = True

    user, token = use_cases["register"].execute("c", "nosession@example.com", "secret123")

    assert token is None
    assert memory_store.find_user_by_email("nosession@example.com") == user

    memory_store.fail_sessions = False
    logged_in, login_token = use_cases["login"].execute("nosession@example.com", "secret123")
    assert logged_in.id == user.id
    assert use_cases["resolve"].execute(login_token).id == user.id


def test_login_returns_fresh_token_each_time(use_cases) -> None:
    use_cases["register"].execute("d", "dana@example.com", "secret123")

    _, first = use_cases["login"].execute("dana@example.com", "secret123")
    _, second = use_cases["login"].execute(" DANA@example.com ", "secret123")

    assert first != second
    assert use_cases["resolve"].execute(first).email == "dana@example.com"
    assert use_cases["resolve"].execute(second).email == "dana@example.com"


@pytest.mark.parametrize(
    ("email", "password"),
    [
        ("erin@example.com", "wrong-pass"),
        ("ghost@example.com", "secret123"),
        ("not-an-email", "secret123"),
    ],
)
def test_login_failures_are_indistinguishable(use_cases, email: str, password: str) -> None:
    use_cases["register"].execute("e", "erin@example.com", "secret123")

    with pytest.raises(InvalidCredentialsError) as excinfo:
        use_cases["login"].execute(email, password)

    assert excinfo.value.code == "invalid_credentials"
    assert excinfo.value.message == "invalid credentials"


def test_resolve_rejects_missing_and_unknown_tokens(use_cases) -> None:
    with pytest.raises(UnauthenticatedError):
        use_cases["resolve"].execute("")
    with pytest.raises(UnauthenticatedError):
        use_cases["resolve"].execute(None)
    with pytest.raises(UnauthenticatedError):
        use_cases["resolve"].execute("0" * 64)


def test_expired_session_is_rejected_and_removed(use_cases, memory_store, clock) -> None:
    _, token = use_cases["register"].execute("f", "frank@example.com", "secret123")
    assert len(memory_store.sessions) == 1

    clock.advance(MAX_AGE)

    with pytest.raises(UnauthenticatedError):
        use_cases["resolve"].execute(token)
    assert memory_store.sessions == {}


def test_expired_session_rejected_even_when_cleanup_fails(use_cases, memory_store, clock) -> None:
    _, token = use_cases["register"].execute("f", "fred@example.com", "secret123")
    clock.advance(MAX_AGE)
    memory_store.fail_deletes = True

    with pytest.raises(UnauthenticatedError):
        use_cases["resolve"].execute(token)
    assert len(memory_store.sessions) == 1


def test_session_valid_until_the_last_second(use_cases, clock) -> None:
    _, token = use_cases["register"].execute("g", "gina@example.com", "secret123")

    clock.advance(MAX_AGE - 1)

    assert use_cases["resolve"].execute(token).email == "gina@example.com"


def test_logout_revokes_only_that_session_and_is_idempotent(use_cases) -> None:
    _, first = use_cases["register"].execute("h", "hank@example.com", "secret123")
    _, second = use_cases["login"].execute("hank@example.com", "secret123")

    use_cases["logout"].execute(first)
    use_cases["logout"].execute(first)
    use_cases["logout"].execute("")

    with pytest.raises(UnauthenticatedError):
        use_cases["resolve"].execute(first)
    assert use_cases["resolve"].execute(second).email == "hank@example.com"


def test_purge_removes_only_expired_sessions(use_cases, memory_store, clock) -> None:
    _, old = use_cases["register"].execute("i", "ivy@example.com", "secret123")
    clock.advance(MAX_AGE - 10)
    _, fresh = use_cases["login"].execute("ivy@example.com", "secret123")
    clock.advance(10)

    assert use_cases["purge"].execute() == 1
    assert len(memory_store.sessions) == 1
    assert use_cases["resolve"].execute(fresh).email == "ivy@example.com"


def test_store_failure_surfaces_as_backend_unavailable(use_cases, memory_store) -> None:
    use_cases["register"].execute("j", "jack@example.com", "secret123")
    memory_store.fail_everything = True

    with pytest.raises(BackendUnavailableError):
        use_cases["login"].execute("jack@example.com", "secret123")
    with pytest.raises(BackendUnavailableError):
        use_cases["register"].execute("k", "kate@example.com", "secret123")
    with pytest.raises(BackendUnavailableError):
        use_cases["resolve"].execute("a" * 64)
    with pytest.raises(BackendUnavailableError):
        use_cases["logout"].execute("a" * 64)
