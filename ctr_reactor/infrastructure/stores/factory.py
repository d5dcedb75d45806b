# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from ctr_reactor.domain.users.exceptions import StoreError
from ctr_reactor.domain.users.repositories import AuthStore
from ctr_reactor.infrastructure.db import Database
from ctr_reactor.shared.config import AppConfig
from ctr_reactor.shared.errors import BackendUnavailableError
from ctr_reactor.shared.logging import logger

from .sqlalchemy_store import SqlAlchemyAuthStore
from .supabase_store import SupabaseAuthStore


def _managed_store(config: AppConfig) -> SupabaseAuthStore | None:
    if not config.managed.configured:
        return None
    store = SupabaseAuthStore(config.managed)
    try:
        store.ping()
    except StoreError as exc:
        logger.warning(f"store_factory: managed backend unreachable ({exc})")
        store.close()
        return None
    return store


def _embedded_store(config: AppConfig) -> SqlAlchemyAuthStore:
    try:
        database = Database(config.database.sqlite_path, pool_timeout=config.database.pool_timeout)
        database.init_schema()
    except (OSError, SQLAlchemyError) as exc:
        logger.error(f"store_factory: embedded backend failed to start ({type(exc).__name__})")
        raise BackendUnavailableError(context={"backend": "embedded"}) from exc
    return SqlAlchemyAuthStore(database)


def build_auth_store(config: AppConfig) -> AuthStore:
    """Pick the single backend this process will use for its whole lifetime."""
    mode = config.database.backend

    if mode in ("auto", "managed"):
        managed = _managed_store(config)
        if managed is not None:
            logger.info("store_factory: using managed backend")
            return managed
        if mode == "managed":
            logger.error("store_factory: AUTH_BACKEND=managed but managed backend is unavailable")
            raise BackendUnavailableError(context={"backend": "managed"})

    store = _embedded_store(config)
    logger.info(f"store_factory: using embedded backend at {config.database.sqlite_path}")
    return store


__all__ = ["build_auth_store"]
