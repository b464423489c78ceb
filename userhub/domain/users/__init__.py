# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .entities import (NewUser, PublicUser, TokenClaims, TokenPair,
                       UploadedMedia, User)
from .repositories import (MediaUploader, PasswordHasher, TokenIssuer,
                           UserRepository)

__all__ = [
    "MediaUploader",
    "NewUser",
    "PasswordHasher",
    "PublicUser",
    "TokenClaims",
    "TokenIssuer",
    "TokenPair",
    "UploadedMedia",
    "User",
    "UserRepository",
]
