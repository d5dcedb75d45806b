# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .entities import Session, User, UserId
from .exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidInputError,
    StoreError,
    UnauthenticatedError,
)
from .repositories import AuthStore, PasswordHasher, TokenService
from .validation import normalize_email

__all__ = [
    "AuthStore",
    "DuplicateEmailError",
    "InvalidCredentialsError",
    "InvalidInputError",
    "PasswordHasher",
    "Session",
    "StoreError",
    "TokenService",
    "UnauthenticatedError",
    "User",
    "UserId",
    "normalize_email",
]
