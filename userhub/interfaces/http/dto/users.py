from __future__ import annotations

import re
from datetime import datetime

from pydantic import (AliasChoices, BaseModel, ConfigDict, EmailStr, Field,
                      TypeAdapter, field_validator)
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from userhub.shared.errors.validation_types import ValidationErrorType

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_.\-]+$")
_EMAIL = TypeAdapter(EmailStr)


def _check_username(value: str | None) -> str | None:
    if not value or not value.strip():
        return value
    value = value.strip()
    if len(value) < 3:
        raise PydanticCustomError(
            ValidationErrorType.USERNAME_TOO_SHORT,
            "Username must be at least 3 characters long",
            {"min_length": 3},
        )
    if not _USERNAME_RE.match(value):
        raise PydanticCustomError(
            ValidationErrorType.USERNAME_INVALID_CHARS,
            "Username may contain only letters, digits, '.', '_' and '-'",
            {"pattern": _USERNAME_RE.pattern},
        )
    return value


def _check_email(value: str | None) -> str | None:
    if not value or not value.strip():
        return value
    value = value.strip()
    try:
        return _EMAIL.validate_python(value)
    except PydanticValidationError as exc:
        raise PydanticCustomError(
            ValidationErrorType.EMAIL_INVALID,
            "Email address is not valid",
            {},
        ) from exc


class RegisterRequestDTO(BaseModel):
    """Text part of the registration form.

    Empty or missing fields are let through so the use case can report them
    together as one "All fields are required" failure.
    """

    model_config = ConfigDict(validate_by_name=True)

    full_name: str = Field(
        "",
        max_length=128,
        validation_alias=AliasChoices("fullName", "full_name", "fullname"),
    )
    email: str = Field("", max_length=320)
    username: str = Field(
        "", max_length=64, validation_alias=AliasChoices("username", "userName")
    )
    password: str = Field("", max_length=128)

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        return _check_username(value) or ""

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _check_email(value) or ""


class LoginRequestDTO(BaseModel):
    username: str | None = Field(None, max_length=64)
    email: str | None = Field(None, max_length=320)
    password: str = Field("", max_length=128)  # No strength check on login


class RefreshRequestDTO(BaseModel):
    model_config = ConfigDict(validate_by_name=True)

    refresh_token: str | None = Field(
        None,
        max_length=4096,
        validation_alias=AliasChoices("refreshToken", "refresh_token"),
    )


class UserDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True, serialize_by_alias=True)

    id: int
    username: str
    email: str
    full_name: str = Field(serialization_alias="fullName")
    avatar: str
    cover_image: str = Field(serialization_alias="coverImage")
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")


class TokensDTO(BaseModel):
    model_config = ConfigDict(serialize_by_alias=True)

    access_token: str = Field(serialization_alias="accessToken")
    refresh_token: str = Field(serialization_alias="refreshToken")
