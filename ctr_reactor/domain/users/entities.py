# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

UserId = int | str


@dataclass(slots=True, frozen=True)
class User:

    id: UserId
    email: str
    password_hash: str
    created_at: datetime
    name: str | None = None
    avatar: str | None = None
    is_verified: bool = False


@dataclass(slots=True, frozen=True)
class Session:
    """A stored session; keyed by the hash of its bearer token, never the token."""

    token_hash: str
    user_id: UserId
    created_at: datetime
    expires_at: datetime

    def is_valid(self, now: datetime) -> bool:
        return now < self.expires_at
