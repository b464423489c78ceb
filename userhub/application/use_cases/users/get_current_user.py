from __future__ import annotations

from userhub.domain.users.entities import PublicUser
from userhub.domain.users.exceptions import UserNotFoundError
from userhub.domain.users.repositories import UserRepository


class GetCurrentUserUseCase:
    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    def execute(self, user_id: int) -> PublicUser:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        return user.public()
