# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import wraps
from threading import Lock
from typing import Any

from flask import current_app, request

from ctr_reactor.shared.errors import RateLimitedError
from ctr_reactor.shared.middleware.request_logger import get_client_ip


RATE_LIMIT_ENABLED_KEY = "CTR_RATE_LIMIT_ENABLED"


@dataclass
class Bucket:
    timestamps: deque[float] = field(default_factory=deque)


class InMemoryRateLimiter:
    """Sliding-window counter keyed by an arbitrary string.

    Buckets with no hits inside the window are dropped, both on access and
    in a sweep that runs at most once per window.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._limit = max(1, int(limit))
        self._window = max(0.1, float(window_seconds))
        self._clock = clock
        self._buckets: dict[str, Bucket] = {}
        self._lock = Lock()
        self._last_sweep = clock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    def _expire(self, bucket: Bucket, now: float) -> None:
        while bucket.timestamps and (now - bucket.timestamps[0]) > self._window:
            bucket.timestamps.popleft()

    def _sweep(self, now: float) -> None:
        for key in list(self._buckets):
            bucket = self._buckets[key]
            self._expire(bucket, now)
            if not bucket.timestamps:
                del self._buckets[key]
        self._last_sweep = now

    def allow(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self._window:
                self._sweep(now)

            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = self._buckets[key] = Bucket()
            self._expire(bucket, now)
            if len(bucket.timestamps) >= self._limit:
                return False
            bucket.timestamps.append(now)
            return True


def _body_field(name: str) -> str:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return ""
    value = payload.get(name)
    return value.strip().lower() if isinstance(value, str) else ""


def rate_limit(limit: int, window_seconds: float = 60.0, *, key_field: str | None = None):
    """Per-route sliding window keyed by client address.

    With ``key_field`` the normalised value of that JSON body field joins the
    key, so ``login`` is limited per address and account.
    Toggled at runtime by the ``CTR_RATE_LIMIT_ENABLED`` flag on the app config.
    """
    limiter = InMemoryRateLimiter(limit, window_seconds)

    def decorator(f: Callable[..., Any]):
        @wraps(f)
        def wrapper(*args: Any, **kwargs: Any):
            if current_app.config.get(RATE_LIMIT_ENABLED_KEY, True):
                key = f"{request.path}:{get_client_ip()}"
                if key_field:
                    key = f"{key}:{_body_field(key_field)}"
                if not limiter.allow(key):
                    raise RateLimitedError()
            return f(*args, **kwargs)

        return wrapper

    return decorator


__all__ = ["InMemoryRateLimiter", "RATE_LIMIT_ENABLED_KEY", "rate_limit"]
