# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Database layer helpers and session utilities."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from ctr_reactor.shared.logging import logger


class Base(DeclarativeBase):
    """Declarative base for ORM models."""


def _set_sqlite_pragmas(dbapi_conn, _) -> None:
    cur = dbapi_conn.cursor()
    try:
        cur.execute("PRAGMA journal_mode=WAL;")
        cur.execute("PRAGMA synchronous=NORMAL;")
        cur.execute("PRAGMA foreign_keys=ON;")
        cur.execute("PRAGMA busy_timeout=30000;")
    finally:
        cur.close()


class Database:
    """Engine plus session factory for one embedded SQLite file."""

    def __init__(self, path: Path, *, pool_timeout: float = 30.0) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self.path = path
        self.engine: Engine = create_engine(
            f"sqlite:///{path}",
            echo=False,
            pool_pre_ping=True,
            connect_args={"check_same_thread": False, "timeout": int(pool_timeout)},
        )
        event.listen(self.engine, "connect", _set_sqlite_pragmas)
        self._sessions = sessionmaker(
            bind=self.engine, autoflush=False, autocommit=False, expire_on_commit=False
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope: commit on success, roll back on error."""

        session = self._sessions()
        logger.debug("db.session: opened session")
        try:
            yield session
            session.commit()
            logger.debug("db.session: committed session")
        except Exception:
            logger.debug("db.session: error, rolling back")
            session.rollback()
            raise
        finally:
            session.close()

    def init_schema(self) -> None:
        """Ensure database schema exists."""

        Base.metadata.create_all(bind=self.engine)
        logger.info(f"db: schema ensured at {self.path}")

    def dispose(self) -> None:
        self.engine.dispose()
