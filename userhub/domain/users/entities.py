# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class User:

    id: int
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str
    password_hash: str
    refresh_token: str | None
    created_at: datetime
    updated_at: datetime

    def public(self) -> PublicUser:
        return PublicUser(
            id=self.id,
            username=self.username,
            email=self.email,
            full_name=self.full_name,
            avatar=self.avatar,
            cover_image=self.cover_image,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


@dataclass(slots=True, frozen=True)
class PublicUser:
    """User record as returned to callers: no verifier, no refresh token."""

    id: int
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True, frozen=True)
class NewUser:

    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str
    password_hash: str


@dataclass(slots=True, frozen=True)
class TokenPair:

    access_token: str
    refresh_token: str


@dataclass(slots=True, frozen=True)
class TokenClaims:

    user_id: int
    token_type: str
    token_id: str
    issued_at: datetime
    expires_at: datetime


@dataclass(slots=True, frozen=True)
class UploadedMedia:

    url: str
    public_id: str | None = None
