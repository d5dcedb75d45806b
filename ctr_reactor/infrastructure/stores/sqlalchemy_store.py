# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import UTC, datetime
from threading import Lock

from sqlalchemy import delete, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ctr_reactor.domain.users.entities import Session as DomainSession
from ctr_reactor.domain.users.entities import User as DomainUser
from ctr_reactor.domain.users.entities import UserId
from ctr_reactor.domain.users.exceptions import DuplicateEmailError, StoreError
from ctr_reactor.domain.users.repositories import AuthStore
from ctr_reactor.domain.users.validation import normalize_email
from ctr_reactor.infrastructure.db import Database, SessionRow, UserRow


def _aware(value: datetime) -> datetime:
    # SQLite hands datetimes back without tzinfo; everything is stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _to_user(row: UserRow) -> DomainUser:
    return DomainUser(
        id=row.id,
        email=row.email,
        name=row.name,
        password_hash=row.password_hash,
        avatar=row.avatar,
        is_verified=row.is_verified,
        created_at=_aware(row.created_at),
    )


def _to_session(row: SessionRow) -> DomainSession:
    return DomainSession(
        token_hash=row.token_hash,
        user_id=row.user_id,
        created_at=_aware(row.created_at),
        expires_at=_aware(row.expires_at),
    )


class SqlAlchemyAuthStore(AuthStore):
    """Embedded backend: one local SQLite file, writes serialised per process."""

    name = "embedded"

    def __init__(self, database: Database) -> None:
        self._db = database
        self._write_lock = Lock()

    def ping(self) -> None:
        try:
            with self._db.session_scope() as session:
                session.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise StoreError(f"embedded store unreachable: {type(exc).__name__}") from exc

    def create_user(self, name: str | None, email: str, password_hash: str) -> DomainUser:
        normalized = normalize_email(email)
        try:
            with self._write_lock, self._db.session_scope() as session:
                row = UserRow(
                    email=normalized,
                    name=name,
                    password_hash=password_hash,
                    created_at=datetime.now(UTC),
                )
                session.add(row)
                session.flush()
                session.refresh(row)
                return _to_user(row)
        except IntegrityError as exc:
            raise DuplicateEmailError() from exc
        except SQLAlchemyError as exc:
            raise StoreError(f"create_user failed: {type(exc).__name__}") from exc

    def find_user_by_email(self, email: str) -> DomainUser | None:
        normalized = normalize_email(email)
        try:
            with self._db.session_scope() as session:
                row = session.scalars(select(UserRow).where(UserRow.email == normalized)).first()
                return _to_user(row) if row else None
        except SQLAlchemyError as exc:
            raise StoreError(f"find_user_by_email failed: {type(exc).__name__}") from exc

    def find_user_by_id(self, user_id: UserId) -> DomainUser | None:
        try:
            key = int(user_id)
        except (TypeError, ValueError):
            return None
        try:
            with self._db.session_scope() as session:
                row = session.get(UserRow, key)
                return _to_user(row) if row else None
        except SQLAlchemyError as exc:
            raise StoreError(f"find_user_by_id failed: {type(exc).__name__}") from exc

    def create_session(
        self, user_id: UserId, token_hash: str, expires_at: datetime
    ) -> DomainSession:
        try:
            with self._write_lock, self._db.session_scope() as session:
                row = SessionRow(
                    token_hash=token_hash,
                    user_id=int(user_id),
                    created_at=datetime.now(UTC),
                    expires_at=expires_at,
                )
                session.add(row)
                session.flush()
                return _to_session(row)
        except SQLAlchemyError as exc:
            raise StoreError(f"create_session failed: {type(exc).__name__}") from exc

    def find_session_by_token_hash(self, token_hash: str) -> DomainSession | None:
        try:
            with self._db.session_scope() as session:
                row = session.get(SessionRow, token_hash)
                return _to_session(row) if row else None
        except SQLAlchemyError as exc:
            raise StoreError(f"find_session failed: {type(exc).__name__}") from exc

    def delete_session(self, token_hash: str) -> None:
        try:
            with self._write_lock, self._db.session_scope() as session:
                session.execute(delete(SessionRow).where(SessionRow.token_hash == token_hash))
        except SQLAlchemyError as exc:
            raise StoreError(f"delete_session failed: {type(exc).__name__}") from exc

    def purge_expired_sessions(self, now: datetime) -> int:
        try:
            with self._write_lock, self._db.session_scope() as session:
                result = session.execute(delete(SessionRow).where(SessionRow.expires_at <= now))
                return int(result.rowcount or 0)
        except SQLAlchemyError as exc:
            raise StoreError(f"purge_expired_sessions failed: {type(exc).__name__}") from exc
