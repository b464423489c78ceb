# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Loguru setup for the userhub service.

Every line carries the request's correlation id and goes through the
redaction filter, so access/refresh tokens and passwords never reach a sink.
"""

from __future__ import annotations

import logging
import os
import sys
from contextvars import ContextVar
from pathlib import Path

from loguru import logger as _logger

from .sensitive_filter import sanitize_record

NO_CORRELATION_ID = "-"
DEFAULT_LOG_FILE = Path(__file__).resolve().parents[2] / "instance" / "userhub.log"

_FMT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<lvl>{level:<8}</lvl> | "
    "<magenta>{extra[correlation_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<lvl>{message}</lvl>"
)

# Libraries that are chatty at INFO/DEBUG.
_QUIET_LOGGERS = {
    "werkzeug": logging.INFO,
    "urllib3": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
}

_CORRELATION_ID: ContextVar[str] = ContextVar("correlation_id", default=NO_CORRELATION_ID)

_logger.configure(extra={"correlation_id": NO_CORRELATION_ID})


class _InterceptHandler(logging.Handler):
    """Forwards stdlib records (Flask, SQLAlchemy, urllib3) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = _logger.level(record.levelname).name
        except ValueError:
            level = str(record.levelno)
        _logger.opt(depth=6, exception=record.exc_info).log(
            level,
            record.getMessage(),
            correlation_id=_CORRELATION_ID.get(),
        )


class ContextualLogger:
    """Module-level ``logger``; binds the current correlation id on each call."""

    def __getattr__(self, name):  # pragma: no cover
        bound = _logger.bind(correlation_id=_CORRELATION_ID.get())
        return getattr(bound, name)


def set_correlation_id(value: str | None) -> None:
    _CORRELATION_ID.set(value or NO_CORRELATION_ID)


def get_correlation_id() -> str:
    return _CORRELATION_ID.get()


def clear_correlation_id() -> None:
    _CORRELATION_ID.set(NO_CORRELATION_ID)


def setup_logging(
    level: str | None = None,
    *,
    debug_mode: bool = False,
    log_file: str | os.PathLike[str] | None = None,
) -> Path:
    """Install the stderr and file sinks and return the log file path.

    ``debug_mode`` forces DEBUG. Calling it again replaces the previous sinks.
    """
    level = "DEBUG" if debug_mode else (level or "INFO").upper()
    log_path = Path(log_file or os.getenv("LOG_FILE") or DEFAULT_LOG_FILE)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    _logger.remove()
    sink_options = {
        "level": level,
        "format": _FMT,
        "filter": sanitize_record,
        "backtrace": False,
        "diagnose": False,
    }
    _logger.add(sys.stderr, colorize=True, **sink_options)
    _logger.add(log_path, colorize=False, enqueue=True, encoding="utf-8", **sink_options)

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)

    return log_path


logger = ContextualLogger()

__all__ = [
    "NO_CORRELATION_ID",
    "clear_correlation_id",
    "get_correlation_id",
    "logger",
    "set_correlation_id",
    "setup_logging",
]
