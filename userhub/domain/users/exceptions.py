# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from userhub.shared.errors.base import (AuthenticationError, ConflictError,
                                        NotFoundError, PersistenceError,
                                        UploadError, ValidationError)


class MissingFieldsError(ValidationError):
    default_message = "All fields are required"


class AvatarRequiredError(ValidationError):
    default_message = "Avatar file is required"


class UserAlreadyExistsError(ConflictError):
    default_message = "User with email or username already exists"


class AvatarUploadError(UploadError):
    default_message = "Avatar upload failed"


class RegistrationFailedError(PersistenceError):
    default_message = "Something went wrong while registering the user"


class UserNotFoundError(NotFoundError):
    default_message = "User does not exist"


class InvalidCredentialsError(AuthenticationError):
    default_message = "Invalid user credentials"


class RefreshTokenMissingError(AuthenticationError):
    default_message = "Unauthorized request"


class InvalidRefreshTokenError(AuthenticationError):
    default_message = "Invalid refresh token"


class RefreshTokenReusedError(AuthenticationError):
    default_message = "Refresh token is expired or used"


class TokenVerificationError(Exception):
    """Raised by token issuers when a token fails signature, expiry or type checks."""
