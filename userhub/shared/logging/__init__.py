# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Logging for userhub: ``logger``, correlation ids and secret redaction."""

from .logger import (NO_CORRELATION_ID, clear_correlation_id,
                     get_correlation_id, logger, set_correlation_id,
                     setup_logging)
from .sensitive_filter import sanitize_message, sanitize_record

__all__ = [
    "NO_CORRELATION_ID",
    "clear_correlation_id",
    "get_correlation_id",
    "logger",
    "sanitize_message",
    "sanitize_record",
    "set_correlation_id",
    "setup_logging",
]
