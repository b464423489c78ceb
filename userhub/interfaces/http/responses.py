# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Uniform success envelope: ``{statusCode, success, data, message}``."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

from flask import Response, jsonify


@dataclass(slots=True)
class ApiResponse:
    status_code: int
    data: Any
    message: str = "Success"

    @property
    def success(self) -> bool:
        return self.status_code < HTTPStatus.BAD_REQUEST

    def to_dict(self) -> dict[str, Any]:
        return {
            "statusCode": self.status_code,
            "success": self.success,
            "data": self.data,
            "message": self.message,
        }


def api_response(
    status: HTTPStatus | int, data: Any, message: str = "Success"
) -> tuple[Response, int]:
    payload = ApiResponse(status_code=int(status), data=data, message=message)
    return jsonify(payload.to_dict()), payload.status_code


__all__ = ["ApiResponse", "api_response"]
