# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass

from userhub.domain.users.entities import PublicUser, TokenPair
from userhub.domain.users.exceptions import (InvalidCredentialsError,
                                             UserNotFoundError)
from userhub.domain.users.repositories import (PasswordHasher, TokenIssuer,
                                               UserRepository)
from userhub.shared.errors.base import ValidationError
from userhub.shared.logging import logger


@dataclass(slots=True, frozen=True)
class LoginResult:
    user: PublicUser
    tokens: TokenPair


class LoginUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        password_hasher: PasswordHasher,
        tokens: TokenIssuer,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher
        self._tokens = tokens

    def execute(
        self,
        *,
        password: str,
        username: str | None = None,
        email: str | None = None,
    ) -> LoginResult:
        username = (username or "").strip().lower() or None
        email = (email or "").strip().lower() or None

        if not username and not email:
            raise ValidationError("username or email is required")
        if not password:
            raise ValidationError("Password is required")

        user = self._users.find_by_identity(username=username, email=email)
        if user is None:
            logger.info("users.login: unknown identity")
            raise UserNotFoundError()

        if not self._password_hasher.verify(password, user.password_hash):
            logger.info(f"users.login: bad password user_id={user.id}")
            raise InvalidCredentialsError()

        pair = self._tokens.issue(user)
        # Overwriting the slot supersedes any earlier session's refresh token.
        if not self._users.update_refresh_token(user.id, pair.refresh_token):
            raise UserNotFoundError()

        logger.info(f"users.login: ok user_id={user.id}")
        return LoginResult(user=user.public(), tokens=pair)
