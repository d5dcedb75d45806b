# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

from ctr_reactor.domain.users.exceptions import StoreError
from ctr_reactor.shared.errors import BackendUnavailableError
from ctr_reactor.shared.logging import logger

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


@contextmanager
def store_boundary(operation: str) -> Iterator[None]:
    """Translate raw storage failures into ``BackendUnavailableError``."""
    try:
        yield
    except StoreError as exc:
        logger.error(f"auth.{operation}: store failure {type(exc).__name__}: {exc}")
        raise BackendUnavailableError() from exc
