# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, jsonify

from ctr_reactor.domain.users.exceptions import StoreError
from ctr_reactor.domain.users.repositories import AuthStore


class MiscController:
    def __init__(self, *, store: AuthStore) -> None:
        self._store = store

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("misc", __name__)
        bp.add_url_rule("/api/health", view_func=self.health, methods=["GET"])
        return bp

    def health(self):
        status: dict[str, object] = {"ok": True, "backend": self._store.name}
        try:
            self._store.ping()
            status["database"] = "ok"
        except StoreError as exc:
            status["ok"] = False
            status["database"] = f"error: {exc}"
            return jsonify(status), 503
        return jsonify(status)
