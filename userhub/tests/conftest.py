from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path

import pytest

from userhub.domain.users.entities import NewUser, UploadedMedia, User
from userhub.domain.users.exceptions import UserAlreadyExistsError
from userhub.domain.users.repositories import (MediaUploader, PasswordHasher,
                                               UserRepository)
from userhub.infrastructure.auth.jwt_tokens import JwtTokenIssuer
from userhub.shared.config import TokenConfig

ACCESS_SECRET = "access-secret-for-tests-0123456789abcdef"
REFRESH_SECRET = "refresh-secret-for-tests-0123456789abcdef"


class InMemoryUserRepository(UserRepository):
    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._seq = 1
        self.refresh_writes = 0

    def find_by_identity(
        self, *, username: str | None = None, email: str | None = None
    ) -> User | None:
        for user in self._users.values():
            if username and user.username == username.lower():
                return user
            if email and user.email == email.lower():
                return user
        return None

    def find_by_id(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def add(self, user: NewUser) -> User:
        if self.find_by_identity(username=user.username, email=user.email):
            raise UserAlreadyExistsError()
        now = datetime.now(UTC)
        new_user = User(
            id=self._seq,
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            avatar=user.avatar,
            cover_image=user.cover_image,
            password_hash=user.password_hash,
            refresh_token=None,
            created_at=now,
            updated_at=now,
        )
        self._seq += 1
        self._users[new_user.id] = new_user
        return new_user

    def update_refresh_token(self, user_id: int, token: str | None) -> bool:
        user = self._users.get(user_id)
        if user is None:
            return False
        self._users[user_id] = replace(user, refresh_token=token)
        self.refresh_writes += 1
        return True

    def rotate_refresh_token(self, user_id: int, expected: str, replacement: str) -> bool:
        user = self._users.get(user_id)
        if user is None or user.refresh_token != expected:
            return False
        self._users[user_id] = replace(user, refresh_token=replacement)
        self.refresh_writes += 1
        return True

    def count(self) -> int:
        return len(self._users)


class DeterministicHasher(PasswordHasher):
    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password: str, hashed: str) -> bool:
        return hashed == f"hashed:{password}"


class StubUploader(MediaUploader):
    def __init__(self, fail_names: tuple[str, ...] = ()) -> None:
        self.fail_names = fail_names
        self.uploaded: list[str] = []

    def upload(self, local_path: str) -> UploadedMedia | None:
        name = Path(local_path).name
        self.uploaded.append(name)
        if any(marker in name for marker in self.fail_names):
            return None
        return UploadedMedia(url=f"https://media.example.test/{name}", public_id=name)


@pytest.fixture()
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture()
def hasher() -> DeterministicHasher:
    return DeterministicHasher()


@pytest.fixture()
def uploader() -> StubUploader:
    return StubUploader(fail_names=("broken",))


@pytest.fixture()
def token_config() -> TokenConfig:
    return TokenConfig(
        access_token_secret=ACCESS_SECRET,
        access_token_expiry=900,
        refresh_token_secret=REFRESH_SECRET,
        refresh_token_expiry=864000,
    )


@pytest.fixture()
def issuer(token_config: TokenConfig) -> JwtTokenIssuer:
    return JwtTokenIssuer(token_config)


@pytest.fixture()
def make_file(tmp_path: Path):
    def _make(name: str, content: bytes = b"\x89PNG\r\n\x1a\nfake") -> str:
        path = tmp_path / name
        path.write_bytes(content)
        return str(path)

    return _make
