# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from flask import Flask, Response, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ctr_reactor.shared.logging import get_correlation_id, logger

from .base import AppError


def _error_body(code: str, message: str) -> dict[str, object]:
    return {"ok": False, "error": code, "message": message}


def handle_app_error(error: AppError) -> tuple[Response, HTTPStatus]:
    return jsonify(error.to_dict()), error.status


def handle_http_exception(exc: HTTPException) -> tuple[Response, int]:
    """Render werkzeug's own errors (unknown route, bad method) in the app's shape."""
    status = HTTPStatus(exc.code or HTTPStatus.INTERNAL_SERVER_ERROR)
    code = status.phrase.lower().replace(" ", "_")
    return jsonify(_error_body(code, status.phrase)), status.value


def register_error_handler(app: Flask, *, debug_mode: bool = False) -> None:

    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        if exc.status >= HTTPStatus.INTERNAL_SERVER_ERROR:
            logger.error(f"{exc.code} on {request.method} {request.path} context={exc.context}")
        return handle_app_error(exc)

    @app.errorhandler(HTTPException)
    def _handle_http(exc: HTTPException):
        return handle_http_exception(exc)

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        where = f"{request.method} {request.path} user={getattr(g, 'user_id', None)}"
        if debug_mode:
            logger.exception(f"Unhandled {type(exc).__name__} on {where}")
        else:
            logger.error(f"Unhandled {type(exc).__name__} on {where}")

        body = _error_body("internal_error", "server error")
        body["requestId"] = get_correlation_id()
        return jsonify(body), HTTPStatus.INTERNAL_SERVER_ERROR
