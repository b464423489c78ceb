# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Protocol

from .entities import NewUser, TokenClaims, TokenPair, UploadedMedia, User


class UserRepository(Protocol):
    def find_by_identity(
        self, *, username: str | None = None, email: str | None = None
    ) -> User | None: ...
    def find_by_id(self, user_id: int) -> User | None: ...
    def add(self, user: NewUser) -> User: ...
    def update_refresh_token(self, user_id: int, token: str | None) -> bool: ...
    def rotate_refresh_token(self, user_id: int, expected: str, replacement: str) -> bool: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...


class TokenIssuer(Protocol):
    def issue(self, user: User) -> TokenPair: ...
    def verify_access(self, token: str) -> TokenClaims: ...
    def verify_refresh(self, token: str) -> TokenClaims: ...


class MediaUploader(Protocol):
    def upload(self, local_path: str) -> UploadedMedia | None: ...
