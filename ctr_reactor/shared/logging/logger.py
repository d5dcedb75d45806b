# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Loguru setup: one formatted stderr sink, an optional file sink, request ids."""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from loguru import logger

from .sensitive_filter import sanitize_record

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<lvl>{level:<8}</lvl> | "
    "<magenta>{extra[correlation_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<lvl>{message}</lvl>"
)

NOISY_LOGGERS = {
    "werkzeug": logging.INFO,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
}

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="-")


def _attach_correlation_id(record: dict[str, Any]) -> None:
    record["extra"]["correlation_id"] = _correlation_id.get()


class _StdlibBridge(logging.Handler):
    """Forwards records from libraries using ``logging`` into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def set_correlation_id(value: str | None) -> None:
    _correlation_id.set(value or "-")


def get_correlation_id() -> str:
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set("-")


def setup_logging(level: str | None = None, *, log_file: Path | None = None) -> None:
    level = (level or "INFO").upper()
    common: dict[str, Any] = {
        "level": level,
        "format": LOG_FORMAT,
        "filter": sanitize_record,
        "backtrace": False,
        "diagnose": False,
    }

    handlers: list[dict[str, Any]] = [{"sink": sys.stderr, "colorize": True, **common}]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            {
                "sink": str(log_file),
                "colorize": False,
                "enqueue": True,
                "encoding": "utf-8",
                "rotation": "10 MB",
                "retention": 5,
                **common,
            }
        )

    logger.configure(handlers=handlers, patcher=_attach_correlation_id)

    logging.basicConfig(handlers=[_StdlibBridge()], level=0, force=True)
    for name, lib_level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(lib_level)


logger.configure(extra={"correlation_id": "-"}, patcher=_attach_correlation_id)

__all__ = [
    "clear_correlation_id",
    "get_correlation_id",
    "logger",
    "set_correlation_id",
    "setup_logging",
]
