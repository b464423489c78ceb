# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import json
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from userhub.infrastructure.db.models import AuditLog
from userhub.infrastructure.db.session import Database
from userhub.shared.logging import logger


class AuditAction(str, Enum):
    REGISTER = "register"
    REGISTER_FAILED = "register_failed"
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    TOKEN_REFRESHED = "token_refreshed"
    TOKEN_REFRESH_FAILED = "token_refresh_failed"
    LOGOUT = "logout"


_SENSITIVE_KEYS = {
    "password",
    "token",
    "secret",
    "key",
    "authorization",
    "cookie",
}


def _sanitize_details(details: dict[str, Any]) -> dict[str, Any]:
    sanitized = {}
    for key, value in details.items():
        key_lower = key.lower()

        if any(sensitive in key_lower for sensitive in _SENSITIVE_KEYS):
            sanitized[key] = "***REDACTED***"
        else:
            sanitized[key] = value

    return sanitized


class AuditLogger:
    def __init__(self, database: Database | None = None) -> None:
        self._db = database

    def log(
        self,
        action: AuditAction,
        user_id: int | None = None,
        ip_address: str | None = None,
        details: dict[str, Any] | None = None,
        success: bool = True,
    ) -> None:
        safe_details = _sanitize_details(details) if details else {}

        log_message = (
            f"AUDIT: {action.value} | "
            f"user_id={user_id} | "
            f"ip={ip_address} | "
            f"success={success}"
        )
        if safe_details:
            log_message += f" | details={safe_details}"

        if success:
            logger.info(log_message)
        else:
            logger.warning(log_message)

        if self._db is not None:
            self._store(self._db, action, user_id, ip_address, success, safe_details)

    def _store(
        self,
        database: Database,
        action: AuditAction,
        user_id: int | None,
        ip_address: str | None,
        success: bool,
        details: dict[str, Any],
    ) -> None:
        try:
            with database.session_scope() as session:
                session.add(
                    AuditLog(
                        timestamp=datetime.now(UTC),
                        action=action.value,
                        user_id=user_id,
                        ip_address=ip_address,
                        success=success,
                        details_json=json.dumps(details, default=str)[:2048] if details else None,
                    )
                )
        except SQLAlchemyError as db_error:
            # The request outcome never depends on the audit row.
            logger.warning(f"Failed to store audit log in database: {type(db_error).__name__}")


__all__ = [
    "AuditAction",
    "AuditLogger",
]
