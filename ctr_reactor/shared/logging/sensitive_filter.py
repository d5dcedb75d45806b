# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Scrubs credentials out of log records before any sink sees them."""

from __future__ import annotations

import re
from typing import Any

REDACTED = "***REDACTED***"

_I = re.IGNORECASE

RedactionRule = tuple[re.Pattern[str], str]

REDACTION_RULES: tuple[RedactionRule, ...] = (
    # the admin secret travels in the path of the gate route
    (re.compile(r"(?<!/api)(/secure/)[^\s/?#]+"), rf"\1{REDACTED}"),
    (re.compile(r"(\b(?:session|is_admin)\s*=\s*)[^\s;,]+", _I), rf"\1{REDACTED}"),
    (re.compile(r"(sessionToken['\"]?\s*[:=]\s*['\"]?)[A-Za-z0-9]+", _I), rf"\1{REDACTED}"),
    (re.compile(r"\b[a-f0-9]{64}\b"), REDACTED),
    (re.compile(r"(bearer\s+)[A-Za-z0-9_\-\.]{16,}", _I), rf"\1{REDACTED}"),
    (re.compile(r"(api[_-]?key['\"]?\s*[:=]\s*['\"]?)[A-Za-z0-9_\-\.]{16,}", _I), rf"\1{REDACTED}"),
    (re.compile(r"\beyJ[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+"), REDACTED),
    (re.compile(r"((?:x-admin-)?password['\"]?\s*[:=]\s*['\"]?)[^'\"\s,}]+", _I), rf"\1{REDACTED}"),
    (re.compile(r"\b(postgres(?:ql)?://[^:/\s]+):[^@\s]+@", _I), rf"\1:{REDACTED}@"),
    (re.compile(r"[A-Za-z0-9._%+-]+@([A-Za-z0-9.-]+\.[A-Za-z]{2,})"), r"***@\1"),
)


def sanitize_message(message: str) -> str:
    for pattern, replacement in REDACTION_RULES:
        message = pattern.sub(replacement, message)
    return message


def sanitize_record(record: dict[str, Any]) -> bool:
    """Loguru filter; rewrites the message in place and never drops the record."""
    record["message"] = sanitize_message(record["message"])
    return True
