# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Use-case for rotating a refresh token into a new token pair."""

from __future__ import annotations

import hmac

from userhub.domain.users.entities import TokenPair
from userhub.domain.users.exceptions import (InvalidRefreshTokenError,
                                             RefreshTokenMissingError,
                                             RefreshTokenReusedError,
                                             TokenVerificationError,
                                             UserNotFoundError)
from userhub.domain.users.repositories import TokenIssuer, UserRepository
from userhub.shared.logging import logger


class RefreshSessionUseCase:
    def __init__(self, *, users: UserRepository, tokens: TokenIssuer) -> None:
        self._users = users
        self._tokens = tokens

    def execute(self, refresh_token: str | None) -> TokenPair:
        if not refresh_token:
            raise RefreshTokenMissingError()

        try:
            claims = self._tokens.verify_refresh(refresh_token)
        except TokenVerificationError as exc:
            logger.info("users.refresh: token rejected by verifier")
            raise InvalidRefreshTokenError() from exc

        user = self._users.find_by_id(claims.user_id)
        if user is None:
            raise UserNotFoundError()

        stored = user.refresh_token or ""
        if not hmac.compare_digest(stored.encode(), refresh_token.encode()):
            logger.warning(f"users.refresh: superseded token presented user_id={user.id}")
            raise RefreshTokenReusedError()

        pair = self._tokens.issue(user)
        if not self._users.rotate_refresh_token(user.id, refresh_token, pair.refresh_token):
            # Another request rotated the same token first.
            logger.warning(f"users.refresh: lost rotation race user_id={user.id}")
            raise RefreshTokenReusedError()

        logger.info(f"users.refresh: ok user_id={user.id}")
        return pair
