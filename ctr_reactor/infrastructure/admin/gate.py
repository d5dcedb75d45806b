# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import hmac
import ipaddress
from urllib.parse import unquote

from flask import Flask, Response, redirect, request
from itsdangerous import BadSignature, URLSafeTimedSerializer

from ctr_reactor.shared.config import AdminConfig
from ctr_reactor.shared.errors import ForbiddenError, NotFoundError
from ctr_reactor.shared.logging import logger

ADMIN_PATH_PREFIX = "/admin"
ADMIN_COOKIE_SALT = "ctr-reactor.admin.v1"
ADMIN_COOKIE_SUBJECT = "admin"

IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network


def _safe_equals(left: str, right: str) -> bool:
    return hmac.compare_digest(left.encode("utf-8"), right.encode("utf-8"))


def _parse_allowlist(entries: tuple[str, ...]) -> tuple[IPNetwork, ...]:
    networks: list[IPNetwork] = []
    for entry in entries:
        try:
            networks.append(ipaddress.ip_network(entry, strict=False))
        except ValueError:
            logger.warning(f"admin_gate: ignoring malformed allowlist entry {entry!r}")
    return tuple(networks)


class AdminGate:
    """Shared-secret / IP / password checks guarding the admin surface.

    Secret and IP failures surface as 404 so the route looks nonexistent;
    a wrong password is a 403.
    """

    def __init__(self, config: AdminConfig, *, secret_key: str) -> None:
        self._config = config
        self._signer = URLSafeTimedSerializer(secret_key, salt=ADMIN_COOKIE_SALT)
        self._secrets = config.secrets
        self._networks = _parse_allowlist(config.allowed_ips)

    @property
    def config(self) -> AdminConfig:
        return self._config

    @property
    def secret_count(self) -> int:
        return len(self._secrets)

    @property
    def allowlist_count(self) -> int:
        return len(self._config.allowed_ips)

    def secret_matches(self, key: str | None) -> bool:
        if not self._secrets or not key:
            return False
        candidate = unquote(key).strip()
        # compare against every entry so timing does not depend on list position
        matched = False
        for secret in self._secrets:
            matched |= _safe_equals(candidate, secret)
        return matched

    def ip_allowed(self, ip: str | None) -> bool:
        if not self._config.allowed_ips:
            return True
        if not ip:
            return False
        try:
            address = ipaddress.ip_address(ip.strip())
        except ValueError:
            return False
        return any(address in network for network in self._networks)

    def password_matches(self, provided: str | None) -> bool:
        if not self._config.password_required or not provided:
            return False
        return _safe_equals(provided, self._config.password)

    def authorize(self, key: str | None, ip: str | None, password: str | None) -> None:
        if not self.secret_matches(key):
            logger.warning("admin_gate: secret mismatch")
            raise NotFoundError()
        if not self.ip_allowed(ip):
            logger.warning(f"admin_gate: address {ip} outside allowlist")
            raise NotFoundError()
        if self._config.password_required and not self.password_matches(password):
            logger.warning("admin_gate: admin password mismatch")
            raise ForbiddenError()

    def is_admin_email(self, email: str) -> bool:
        configured = self._config.email.strip().lower()
        return bool(configured) and _safe_equals(email.strip().lower(), configured)

    def set_admin_cookie(self, response: Response, *, secure: bool, samesite: str) -> Response:
        response.set_cookie(
            self._config.cookie_name,
            self._signer.dumps(ADMIN_COOKIE_SUBJECT),
            max_age=self._config.cookie_max_age,
            path="/",
            httponly=True,
            secure=secure,
            samesite=samesite,
        )
        return response

    def clear_admin_cookie(self, response: Response, *, secure: bool, samesite: str) -> Response:
        response.set_cookie(
            self._config.cookie_name,
            "",
            max_age=0,
            expires=0,
            path="/",
            httponly=True,
            secure=secure,
            samesite=samesite,
        )
        return response

    def has_admin_cookie(self) -> bool:
        token = request.cookies.get(self._config.cookie_name)
        if not token:
            return False
        # SignatureExpired is a BadSignature
        try:
            subject = self._signer.loads(token, max_age=self._config.cookie_max_age)
        except BadSignature:
            logger.warning("admin_gate: rejected unsigned or expired admin cookie")
            return False
        return subject == ADMIN_COOKIE_SUBJECT


def install_admin_filter(app: Flask, gate: AdminGate) -> None:
    """Redirect unauthenticated ``/admin`` requests to the site root."""

    @app.before_request
    def _admin_cookie_filter():
        path = request.path
        if path != ADMIN_PATH_PREFIX and not path.startswith(f"{ADMIN_PATH_PREFIX}/"):
            return None
        if gate.has_admin_cookie():
            return None
        logger.info(f"admin_filter: redirecting {request.method} {path} to /")
        return redirect("/", code=302)


__all__ = ["AdminGate", "install_admin_filter"]
