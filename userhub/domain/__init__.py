# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .users import (MediaUploader, NewUser, PasswordHasher, PublicUser,
                    TokenClaims, TokenIssuer, TokenPair, UploadedMedia, User,
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
