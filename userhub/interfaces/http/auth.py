# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from functools import wraps

from flask import g, request

from userhub.domain.users.exceptions import TokenVerificationError
from userhub.domain.users.repositories import TokenIssuer
from userhub.shared.errors.base import AuthenticationError
from userhub.shared.logging import logger

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def access_token_from_request() -> str:
    auth = request.headers.get("Authorization", "")
    token = ""
    if auth.startswith("Bearer "):
        token = auth[7:].strip()
    if not token:
        token = request.cookies.get(ACCESS_COOKIE, "")
    return token


def auth_required(tokens: TokenIssuer) -> Callable[[Callable], Callable]:
    """Verify the access token and expose the caller's id as ``g.user_id``."""

    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def inner(*a, **kw):
            token = access_token_from_request()
            if not token:
                logger.info(
                    f"No Authorization header/cookie on {request.method} {request.path}"
                )
                raise AuthenticationError()

            try:
                claims = tokens.verify_access(token)
            except TokenVerificationError as exc:
                logger.info(f"Auth failed (invalid access token) on {request.method} {request.path}")
                raise AuthenticationError("Invalid access token") from exc

            g.user_id = claims.user_id
            logger.debug(f"Auth OK: user={claims.user_id} {request.method} {request.path}")
            return f(*a, **kw)

        return inner

    return decorator


__all__ = ["ACCESS_COOKIE", "REFRESH_COOKIE", "access_token_from_request", "auth_required"]
