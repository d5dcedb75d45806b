# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import hashlib
import secrets
import time
from collections.abc import Mapping
from typing import Any

from flask import Flask, Response, g, request

from ctr_reactor.shared.logging import (clear_correlation_id,
                                        get_correlation_id, logger,
                                        set_correlation_id)

REQUEST_ID_HEADER = "X-Request-ID"
HASHED_HEADERS = frozenset({"authorization", "cookie", "x-admin-password", "apikey"})
REDACTED_PARAM_HINTS = ("password", "token", "key", "secret")


def get_client_ip() -> str:
    """Peer address as seen by the WSGI server.

    Forwarded headers are honoured only through ``ProxyFix``, which
    ``create_app`` installs when ``TRUSTED_PROXY_HOPS`` is set.
    """
    return request.remote_addr or "unknown"


def _digest(value: str) -> str:
    return f"<hashed:{hashlib.sha256(value.encode()).hexdigest()[:8]}>"


def _safe_headers(headers: Mapping[str, str]) -> dict[str, str]:
    return {k: _digest(v) if k.lower() in HASHED_HEADERS else v for k, v in headers.items()}


def _safe_params(params: Mapping[str, Any]) -> dict[str, Any]:
    return {
        k: "<redacted>" if any(hint in k.lower() for hint in REDACTED_PARAM_HINTS) else v
        for k, v in params.items()
    }


def configure_request_logging(app: Flask, *, debug_mode: bool = False) -> None:

    @app.before_request
    def _open_request() -> None:
        set_correlation_id(request.headers.get(REQUEST_ID_HEADER) or secrets.token_urlsafe(8))
        g.request_started = time.perf_counter()
        if debug_mode:
            logger.debug(
                f"-> {request.method} {request.path} from {get_client_ip()} "
                f"query={_safe_params(request.args)} headers={_safe_headers(request.headers)}"
            )

    @app.after_request
    def _close_request(response: Response) -> Response:
        elapsed = time.perf_counter() - getattr(g, "request_started", time.perf_counter())
        user = getattr(g, "user_id", None)
        logger.info(
            f"{request.method} {request.path} -> {response.status_code} "
            f"in {elapsed * 1000:.1f}ms ip={get_client_ip()}"
            + (f" user={user}" if user is not None else "")
        )
        response.headers.setdefault(REQUEST_ID_HEADER, get_correlation_id())
        return response

    @app.teardown_request
    def _teardown_request(exc: BaseException | None) -> None:
        if exc is not None:
            logger.error(f"{request.method} {request.path} failed: {type(exc).__name__}")
        clear_correlation_id()


__all__ = ["configure_request_logging", "get_client_ip"]
