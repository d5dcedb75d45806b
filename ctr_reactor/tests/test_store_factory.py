from __future__ import annotations

from pathlib import Path

import pytest

from ctr_reactor.domain.users.exceptions import StoreError
from ctr_reactor.infrastructure.stores import (SqlAlchemyAuthStore,
                                               SupabaseAuthStore,
                                               build_auth_store)
from ctr_reactor.shared.config import AppConfig, DatabaseConfig, ManagedStoreConfig
from ctr_reactor.shared.errors import BackendUnavailableError


def _config(tmp_path: Path, backend: str, *, managed: bool) -> AppConfig:
    return AppConfig(
        database=DatabaseConfig(backend=backend, sqlite_path=tmp_path / "auth.db"),
        managed=ManagedStoreConfig(
            url="https://project.example.co" if managed else "",
            api_key="service-key" if managed else "",
        ),
    )


def test_auto_without_managed_config_uses_embedded(tmp_path: Path) -> None:
    store = build_auth_store(_config(tmp_path, "auto", managed=False))

    assert isinstance(store, SqlAlchemyAuthStore)
    assert (tmp_path / "auth.db").exists()


def test_auto_falls_back_when_managed_unreachable(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _unreachable(self) -> None:
        raise StoreError("connect timeout")

    monkeypatch.setattr(SupabaseAuthStore, "ping", _unreachable)

    store = build_auth_store(_config(tmp_path, "auto", managed=True))

    assert store.name == "embedded"


def test_auto_prefers_reachable_managed_store(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(SupabaseAuthStore, "ping", lambda self: None)

    store = build_auth_store(_config(tmp_path, "auto", managed=True))

    assert store.name == "managed"
    assert not (tmp_path / "auth.db").exists()


def test_forced_managed_without_config_fails_startup(tmp_path: Path) -> None:
    with pytest.raises(BackendUnavailableError):
        build_auth_store(_config(tmp_path, "managed", managed=False))


def test_forced_embedded_ignores_managed_config(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(SupabaseAuthStore, "ping", lambda self: None)

    store = build_auth_store(_config(tmp_path, "embedded", managed=True))

    assert store.name == "embedded"


def test_unwritable_embedded_path_fails_startup(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    config = AppConfig(
        database=DatabaseConfig(backend="embedded", sqlite_path=blocker / "auth.db"),
        managed=ManagedStoreConfig(url="", api_key=""),
    )

    with pytest.raises(BackendUnavailableError):
        build_auth_store(config)
