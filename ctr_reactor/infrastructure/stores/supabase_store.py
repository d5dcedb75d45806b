# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Managed backend: hosted Postgres reached through its PostgREST interface."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import httpx

from ctr_reactor.domain.users.entities import Session as DomainSession
from ctr_reactor.domain.users.entities import User as DomainUser
from ctr_reactor.domain.users.entities import UserId
from ctr_reactor.domain.users.exceptions import DuplicateEmailError, StoreError
from ctr_reactor.domain.users.repositories import AuthStore
from ctr_reactor.domain.users.validation import normalize_email
from ctr_reactor.shared.config import ManagedStoreConfig
from ctr_reactor.shared.logging import logger

USERS_TABLE = "users"
SESSIONS_TABLE = "sessions"
UNIQUE_VIOLATION = "23505"


def _parse_ts(value: str | None) -> datetime:
    if not value:
        return datetime.now(UTC)
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _to_user(row: dict[str, Any]) -> DomainUser:
    return DomainUser(
        id=row["id"],
        email=row["email"],
        name=row.get("name"),
        password_hash=row.get("password_hash") or "",
        avatar=row.get("avatar"),
        is_verified=bool(row.get("is_verified", False)),
        created_at=_parse_ts(row.get("created_at")),
    )


def _to_session(row: dict[str, Any]) -> DomainSession:
    return DomainSession(
        token_hash=row["token_hash"],
        user_id=row["user_id"],
        created_at=_parse_ts(row.get("created_at")),
        expires_at=_parse_ts(row["expires_at"]),
    )


class SupabaseAuthStore(AuthStore):
    name = "managed"

    def __init__(self, config: ManagedStoreConfig, *, client: httpx.Client | None = None) -> None:
        self._client = client or httpx.Client(
            base_url=f"{config.url.rstrip('/')}/rest/v1",
            timeout=config.timeout,
        )
        self._headers = {
            "apikey": config.api_key,
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def close(self) -> None:
        self._client.close()

    def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        prefer: str | None = None,
    ) -> httpx.Response:
        headers = dict(self._headers)
        if prefer:
            headers["Prefer"] = prefer
        try:
            response = self._client.request(
                method, f"/{table}", params=params, json=json, headers=headers
            )
        except httpx.HTTPError as exc:
            raise StoreError(f"{method} {table}: {type(exc).__name__}") from exc

        if table == USERS_TABLE and (
            response.status_code == httpx.codes.CONFLICT
            or self._error_code(response) == UNIQUE_VIOLATION
        ):
            raise DuplicateEmailError()
        if response.is_error:
            logger.warning(f"managed_store: {method} {table} -> {response.status_code}")
            raise StoreError(f"{method} {table}: HTTP {response.status_code}")
        return response

    @staticmethod
    def _error_code(response: httpx.Response) -> str | None:
        if not response.is_error:
            return None
        try:
            payload = response.json()
        except ValueError:
            return None
        return str(payload.get("code")) if isinstance(payload, dict) else None

    @staticmethod
    def _rows(response: httpx.Response) -> list[dict[str, Any]]:
        if not response.content:
            return []
        try:
            payload = response.json()
        except ValueError as exc:
            raise StoreError("managed store returned invalid JSON") from exc
        if isinstance(payload, dict):
            return [payload]
        return list(payload or [])

    def ping(self) -> None:
        self._request("GET", USERS_TABLE, params={"select": "id", "limit": "1"})

    def create_user(self, name: str | None, email: str, password_hash: str) -> DomainUser:
        normalized = normalize_email(email)
        response = self._request(
            "POST",
            USERS_TABLE,
            json={"email": normalized, "name": name, "password_hash": password_hash},
            prefer="return=representation",
        )
        rows = self._rows(response)
        if not rows:
            raise StoreError("create_user returned no row")
        return _to_user(rows[0])

    def find_user_by_email(self, email: str) -> DomainUser | None:
        normalized = normalize_email(email)
        rows = self._rows(
            self._request(
                "GET",
                USERS_TABLE,
                params={"select": "*", "email": f"eq.{normalized}", "limit": "1"},
            )
        )
        return _to_user(rows[0]) if rows else None

    def find_user_by_id(self, user_id: UserId) -> DomainUser | None:
        rows = self._rows(
            self._request(
                "GET",
                USERS_TABLE,
                params={"select": "*", "id": f"eq.{user_id}", "limit": "1"},
            )
        )
        return _to_user(rows[0]) if rows else None

    def create_session(
        self, user_id: UserId, token_hash: str, expires_at: datetime
    ) -> DomainSession:
        now = datetime.now(UTC)
        self._request(
            "POST",
            SESSIONS_TABLE,
            json={
                "token_hash": token_hash,
                "user_id": user_id,
                "created_at": now.isoformat(),
                "expires_at": expires_at.isoformat(),
            },
            prefer="return=minimal",
        )
        return DomainSession(
            token_hash=token_hash, user_id=user_id, created_at=now, expires_at=expires_at
        )

    def find_session_by_token_hash(self, token_hash: str) -> DomainSession | None:
        rows = self._rows(
            self._request(
                "GET",
                SESSIONS_TABLE,
                params={"select": "*", "token_hash": f"eq.{token_hash}", "limit": "1"},
            )
        )
        return _to_session(rows[0]) if rows else None

    def delete_session(self, token_hash: str) -> None:
        self._request(
            "DELETE",
            SESSIONS_TABLE,
            params={"token_hash": f"eq.{token_hash}"},
            prefer="return=minimal",
        )

    def purge_expired_sessions(self, now: datetime) -> int:
        response = self._request(
            "DELETE",
            SESSIONS_TABLE,
            params={"expires_at": f"lte.{now.isoformat()}", "select": "token_hash"},
            prefer="return=representation",
        )
        return len(self._rows(response))
