# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re

from .exceptions import InvalidInputError

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
MAX_EMAIL_LENGTH = 254


def normalize_email(email: str | None) -> str:
    """Trim and lower-case an email, rejecting anything that is not shaped like one."""
    value = (email or "").strip().lower()
    if not value or len(value) > MAX_EMAIL_LENGTH or not EMAIL_PATTERN.match(value):
        raise InvalidInputError(message="invalid email", context={"field": "email"})
    return value
