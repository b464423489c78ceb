# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, cast


@dataclass(slots=True)
class AppError(Exception):
    code: str
    status: HTTPStatus
    message: str = ""
    context: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message or self.code)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "statusCode": int(self.status),
            "success": False,
            "data": None,
            "message": self.message or self.status.phrase,
            "error": self.code,
        }
        if self.context:
            payload["context"] = dict(self.context)
        return payload


class DomainError(AppError):
    """Error kind whose code, status and default message live on the class."""

    default_message = ""

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status: HTTPStatus | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        resolved_code = code or cast(str, getattr(self, "code", "domain_error"))
        resolved_status = status or cast(
            HTTPStatus, getattr(self, "status", HTTPStatus.BAD_REQUEST)
        )
        super().__init__(
            code=resolved_code,
            status=resolved_status,
            message=message or self.default_message,
            context=context,
        )


class ValidationError(DomainError):
    code = "validation_error"
    status = HTTPStatus.BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationError(DomainError):
    code = "unauthorized"
    status = HTTPStatus.UNAUTHORIZED
    default_message = "Unauthorized request"


class NotFoundError(DomainError):
    code = "not_found"
    status = HTTPStatus.NOT_FOUND
    default_message = "Resource not found"


class ConflictError(DomainError):
    code = "conflict"
    status = HTTPStatus.CONFLICT
    default_message = "Resource already exists"


class UploadError(DomainError):
    code = "upload_failed"
    status = HTTPStatus.BAD_REQUEST
    default_message = "File upload failed"


class PersistenceError(DomainError):
    code = "persistence_error"
    status = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message = "Something went wrong while saving data"


class SigningError(DomainError):
    code = "signing_error"
    status = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message = "Something went wrong while generating tokens"


class RateLimitedError(DomainError):
    code = "rate_limited"
    status = HTTPStatus.TOO_MANY_REQUESTS
    default_message = "Too many requests"

