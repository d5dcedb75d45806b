# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from ctr_reactor.domain.users.repositories import AuthStore
from ctr_reactor.shared.logging import logger

from .store_boundary import Clock, store_boundary, utc_now


class PurgeExpiredSessionsUseCase:
    def __init__(self, *, store: AuthStore, clock: Clock = utc_now) -> None:
        self._store = store
        self._clock = clock

    def execute(self) -> int:
        with store_boundary("purge"):
            removed = self._store.purge_expired_sessions(self._clock())
        logger.info(f"auth.purge: removed {removed} expired sessions from {self._store.name}")
        return removed
