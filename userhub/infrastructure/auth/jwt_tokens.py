# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Signed access/refresh tokens backed by PyJWT."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from userhub.domain.users.entities import TokenClaims, TokenPair, User
from userhub.domain.users.exceptions import TokenVerificationError
from userhub.domain.users.repositories import TokenIssuer
from userhub.shared.config import TokenConfig
from userhub.shared.errors.base import SigningError
from userhub.shared.logging import logger

ACCESS = "access"
REFRESH = "refresh"


class JwtTokenIssuer(TokenIssuer):
    """Mints and verifies the access/refresh pair.

    Each token type has its own secret and lifetime, and carries a ``type``
    claim, so a refresh token never passes as an access token. A random
    ``jti`` keeps two pairs minted within the same second distinct.
    """

    def __init__(
        self,
        config: TokenConfig,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config
        self._clock = clock or (lambda: datetime.now(UTC))

    def issue(self, user: User) -> TokenPair:
        access = self._encode(
            {
                "sub": str(user.id),
                "username": user.username,
                "email": user.email,
                "full_name": user.full_name,
            },
            token_type=ACCESS,
            secret=self._config.access_token_secret,
            lifetime=self._config.access_token_expiry,
        )
        refresh = self._encode(
            {"sub": str(user.id)},
            token_type=REFRESH,
            secret=self._config.refresh_token_secret,
            lifetime=self._config.refresh_token_expiry,
        )
        logger.debug(f"tokens.issue: pair minted user_id={user.id}")
        return TokenPair(access_token=access, refresh_token=refresh)

    def verify_access(self, token: str) -> TokenClaims:
        return self._decode(token, token_type=ACCESS, secret=self._config.access_token_secret)

    def verify_refresh(self, token: str) -> TokenClaims:
        return self._decode(token, token_type=REFRESH, secret=self._config.refresh_token_secret)

    def _encode(
        self, claims: dict[str, Any], *, token_type: str, secret: str, lifetime: int
    ) -> str:
        if not secret:
            logger.error(f"tokens.issue: {token_type} secret is not configured")
            raise SigningError()
        now = self._clock()
        payload = {
            **claims,
            "type": token_type,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + timedelta(seconds=lifetime),
        }
        try:
            return jwt.encode(payload, secret, algorithm=self._config.algorithm)
        except (jwt.PyJWTError, NotImplementedError, TypeError, ValueError) as exc:
            logger.error(f"tokens.issue: signing failed ({type(exc).__name__})")
            raise SigningError() from exc

    def _decode(self, token: str, *, token_type: str, secret: str) -> TokenClaims:
        if not secret:
            raise TokenVerificationError(f"{token_type} secret is not configured")
        try:
            data = jwt.decode(
                token,
                secret,
                algorithms=[self._config.algorithm],
                options={"require": ["sub", "exp", "iat", "jti"]},
            )
        except jwt.PyJWTError as exc:
            raise TokenVerificationError(str(exc)) from exc

        if data.get("type") != token_type:
            raise TokenVerificationError(f"expected a {token_type} token")
        try:
            user_id = int(data["sub"])
        except (TypeError, ValueError) as exc:
            raise TokenVerificationError("subject is not a user id") from exc

        return TokenClaims(
            user_id=user_id,
            token_type=token_type,
            token_id=str(data["jti"]),
            issued_at=datetime.fromtimestamp(data["iat"], UTC),
            expires_at=datetime.fromtimestamp(data["exp"], UTC),
        )


__all__ = ["ACCESS", "REFRESH", "JwtTokenIssuer"]
