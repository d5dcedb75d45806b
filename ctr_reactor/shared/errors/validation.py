# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any, NoReturn

from pydantic import ValidationError as PydanticValidationError

from .base import ValidationError

_VALUE_ERROR_PREFIX = "Value error, "


def _clean_message(message: str) -> str:
    return message.removeprefix(_VALUE_ERROR_PREFIX)


def format_pydantic_errors(exc: PydanticValidationError) -> dict[str, Any]:
    """Flatten pydantic errors into ``{"fields": [...], "errors": [...]}``.

    Inputs are left out so rejected passwords never reach a response body.
    """
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())) or "body",
            "type": err.get("type", "value_error"),
            "message": _clean_message(err.get("msg", "")),
        }
        for err in exc.errors(include_input=False, include_url=False, include_context=False)
    ]
    return {"fields": sorted({e["field"] for e in errors}), "errors": errors}


def raise_validation_error(exc: PydanticValidationError) -> NoReturn:
    context = format_pydantic_errors(exc)
    message = context["errors"][0]["message"] if context["errors"] else "invalid request"
    raise ValidationError(message=message, context=context) from exc


__all__ = ["format_pydantic_errors", "raise_validation_error"]
