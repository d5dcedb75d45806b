from __future__ import annotations

from pathlib import Path

import pytest

from ctr_reactor.shared.config import (AdminConfig, AppConfig, DatabaseConfig,
                                       SecurityConfig, SessionConfig)


def test_defaults() -> None:
    session = SessionConfig(cookie_name="session", max_age=604800, token_secret="")
    database = DatabaseConfig(backend="auto", sqlite_path=Path("data/auth.db"))

    assert session.max_age == 7 * 24 * 3600
    assert database.pool_timeout == 30.0


def test_values_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AUTH_BACKEND", "embedded")
    monkeypatch.setenv("SQLITE_DB_PATH", "/tmp/ctr/auth.db")
    monkeypatch.setenv("SESSION_MAX_AGE", "60")
    monkeypatch.setenv("ADMIN_IP_ALLOWLIST", "10.0.0.1, 10.0.0.2")

    assert DatabaseConfig().backend == "embedded"
    assert DatabaseConfig().sqlite_path == Path("/tmp/ctr/auth.db")
    assert SessionConfig().max_age == 60
    assert AdminConfig().allowed_ips == ("10.0.0.1", "10.0.0.2")


def test_unknown_backend_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AUTH_BACKEND", "mysql")

    with pytest.raises(ValueError):
        DatabaseConfig()


def test_admin_password_flag() -> None:
    assert AdminConfig(password="pw").password_required
    assert not AdminConfig(password="").password_required


def test_trusted_proxy_hops(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TRUSTED_PROXY_HOPS", raising=False)
    assert SecurityConfig().trusted_proxy_hops == 0

    monkeypatch.setenv("TRUSTED_PROXY_HOPS", "2")
    assert SecurityConfig().trusted_proxy_hops == 2

    monkeypatch.setenv("TRUSTED_PROXY_HOPS", "-1")
    with pytest.raises(ValueError):
        SecurityConfig()


def test_origins_default_to_wildcard() -> None:
    assert SecurityConfig(allowed_origins="").origins == ("*",)
    assert SecurityConfig(allowed_origins="https://a.example, https://b.example").origins == (
        "https://a.example",
        "https://b.example",
    )


def test_production_refuses_insecure_secret_key() -> None:
    with pytest.raises(SystemExit):
        AppConfig(app_env="production", secret_key="dev")


def test_cookies_are_secure_only_in_production() -> None:
    assert not AppConfig(app_env="development").cookie_secure
    assert AppConfig(app_env="production", secret_key="x" * 32).cookie_secure
