# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from userhub.domain.users.entities import NewUser, PublicUser, UploadedMedia
from userhub.domain.users.exceptions import (AvatarRequiredError,
                                             AvatarUploadError,
                                             MissingFieldsError,
                                             RegistrationFailedError,
                                             UserAlreadyExistsError)
from userhub.domain.users.repositories import (MediaUploader, PasswordHasher,
                                               UserRepository)
from userhub.shared.logging import logger


@dataclass(slots=True, frozen=True)
class RegisterUserInput:
    full_name: str
    email: str
    username: str
    password: str
    avatar_path: str | None
    cover_image_path: str | None = None


def _discard(local_path: str) -> None:
    try:
        Path(local_path).unlink(missing_ok=True)
    except OSError as exc:
        logger.warning(f"users.register: could not remove temp file ({type(exc).__name__})")


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        password_hasher: PasswordHasher,
        uploader: MediaUploader,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher
        self._uploader = uploader

    def _upload(self, local_path: str) -> UploadedMedia | None:
        try:
            return self._uploader.upload(local_path)
        finally:
            _discard(local_path)

    def execute(self, data: RegisterUserInput) -> PublicUser:
        fields = (data.full_name, data.email, data.username, data.password)
        if any(not (value or "").strip() for value in fields):
            self._discard_inputs(data)
            raise MissingFieldsError()

        username = data.username.strip().lower()
        email = data.email.strip().lower()

        if self._users.find_by_identity(username=username, email=email):
            self._discard_inputs(data)
            raise UserAlreadyExistsError()

        if not data.avatar_path:
            self._discard_inputs(data)
            raise AvatarRequiredError()

        # The cover image is optional; only the avatar gates registration.
        avatar = self._upload(data.avatar_path)
        if avatar is None or not avatar.url:
            if data.cover_image_path:
                _discard(data.cover_image_path)
            logger.warning(f"users.register: avatar upload failed username={username}")
            raise AvatarUploadError()

        cover_url = ""
        if data.cover_image_path:
            cover = self._upload(data.cover_image_path)
            if cover is not None and cover.url:
                cover_url = cover.url
            else:
                logger.warning(f"users.register: cover upload failed username={username}")

        created = self._users.add(
            NewUser(
                username=username,
                email=email,
                full_name=data.full_name.strip(),
                avatar=avatar.url,
                cover_image=cover_url,
                password_hash=self._password_hasher.hash(data.password),
            )
        )

        persisted = self._users.find_by_id(created.id)
        if persisted is None:
            logger.error(f"users.register: record missing after insert user_id={created.id}")
            raise RegistrationFailedError()

        logger.info(f"users.register: ok user_id={persisted.id}")
        return persisted.public()

    @staticmethod
    def _discard_inputs(data: RegisterUserInput) -> None:
        for path in (data.avatar_path, data.cover_image_path):
            if path:
                _discard(path)
