"""Use-case for revoking the stored refresh token."""

from __future__ import annotations

from userhub.domain.users.exceptions import UserNotFoundError
from userhub.domain.users.repositories import UserRepository
from userhub.shared.logging import logger


class LogoutUserUseCase:
    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    def execute(self, user_id: int) -> None:
        if not self._users.update_refresh_token(user_id, None):
            raise UserNotFoundError()
        logger.info(f"users.logout: ok user_id={user_id}")
