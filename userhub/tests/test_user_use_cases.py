from __future__ import annotations

from dataclasses import fields
from pathlib import Path

import pytest

from userhub.application.use_cases.users.get_current_user import \
    GetCurrentUserUseCase
from userhub.application.use_cases.users.login_user import LoginUserUseCase
from userhub.application.use_cases.users.logout_user import LogoutUserUseCase
from userhub.application.use_cases.users.refresh_session import \
    RefreshSessionUseCase
from userhub.application.use_cases.users.register_user import (
    RegisterUserInput, RegisterUserUseCase)
from userhub.domain.users.exceptions import (AvatarRequiredError,
                                             AvatarUploadError,
                                             InvalidCredentialsError,
                                             InvalidRefreshTokenError,
                                             MissingFieldsError,
                                             RefreshTokenMissingError,
                                             RefreshTokenReusedError,
                                             UserAlreadyExistsError,
                                             UserNotFoundError)
from userhub.shared.errors.base import (AuthenticationError, ConflictError,
                                        ValidationError)


@pytest.fixture()
def register(users, hasher, uploader) -> RegisterUserUseCase:
    return RegisterUserUseCase(users=users, password_hasher=hasher, uploader=uploader)


@pytest.fixture()
def login(users, hasher, issuer) -> LoginUserUseCase:
    return LoginUserUseCase(users=users, password_hasher=hasher, tokens=issuer)


@pytest.fixture()
def refresh(users, issuer) -> RefreshSessionUseCase:
    return RefreshSessionUseCase(users=users, tokens=issuer)


def _input(make_file, **overrides) -> RegisterUserInput:
    values = {
        "full_name": "Alice Liddell",
        "email": "a@x.com",
        "username": "alice",
        "password": "p1",
        "avatar_path": make_file("avatar.png"),
        "cover_image_path": None,
    }
    values.update(overrides)
    return RegisterUserInput(**values)


def test_register_user_success(register, users, make_file) -> None:
    avatar = make_file("avatar.png")
    cover = make_file("cover.png")

    user = register.execute(_input(make_file, avatar_path=avatar, cover_image_path=cover))

    assert user.username == "alice"
    assert user.avatar.endswith("avatar.png")
    assert user.cover_image.endswith("cover.png")
    names = {f.name for f in fields(user)}
    assert "password_hash" not in names
    assert "refresh_token" not in names

    stored = users.find_by_id(user.id)
    assert stored is not None
    assert stored.password_hash != "p1"
    assert stored.refresh_token is None
    assert not Path(avatar).exists()
    assert not Path(cover).exists()


def test_register_normalizes_username_case(register, users, make_file) -> None:
    user = register.execute(_input(make_file, username="  Alice ", email="A@X.com"))

    assert user.username == "alice"
    assert user.email == "a@x.com"


@pytest.mark.parametrize("field", ["full_name", "email", "username", "password"])
def test_register_requires_every_text_field(register, users, make_file, field) -> None:
    with pytest.raises(MissingFieldsError) as exc_info:
        register.execute(_input(make_file, **{field: "   "}))

    assert isinstance(exc_info.value, ValidationError)
    assert exc_info.value.status == 400
    assert users.count() == 0


def test_register_requires_avatar(register, users, make_file) -> None:
    with pytest.raises(AvatarRequiredError):
        register.execute(_input(make_file, avatar_path=None))
    assert users.count() == 0


@pytest.mark.parametrize(
    "username, email",
    [("alice", "b@y.com"), ("ALICE", "b@y.com"), ("bob", "a@x.com")],
)
def test_register_duplicate_identity_raises(register, users, make_file, username, email) -> None:
    register.execute(_input(make_file))

    with pytest.raises(UserAlreadyExistsError) as exc_info:
        register.execute(
            _input(make_file, username=username, email=email, avatar_path=make_file("b.png"))
        )

    assert isinstance(exc_info.value, ConflictError)
    assert exc_info.value.status == 409
    assert users.count() == 1


def test_register_failed_avatar_upload_creates_nothing(register, users, uploader, make_file) -> None:
    avatar = make_file("broken-avatar.png")
    cover = make_file("cover.png")

    with pytest.raises(AvatarUploadError) as exc_info:
        register.execute(_input(make_file, avatar_path=avatar, cover_image_path=cover))

    assert exc_info.value.status == 400
    assert users.count() == 0
    assert not Path(avatar).exists()
    assert not Path(cover).exists()
    assert uploader.uploaded == ["broken-avatar.png"]


def test_register_failed_cover_upload_is_not_fatal(register, make_file) -> None:
    user = register.execute(_input(make_file, cover_image_path=make_file("broken-cover.png")))

    assert user.cover_image == ""


def test_login_user_success(register, login, users, issuer, make_file) -> None:
    register.execute(_input(make_file))

    result = login.execute(username="alice", password="p1")

    assert result.user.username == "alice"
    stored = users.find_by_id(result.user.id)
    assert stored is not None
    assert stored.refresh_token == result.tokens.refresh_token
    assert issuer.verify_access(result.tokens.access_token).user_id == result.user.id


def test_login_by_email(register, login, make_file) -> None:
    register.execute(_input(make_file))

    result = login.execute(email="A@x.com", password="p1")

    assert result.user.email == "a@x.com"


def test_login_user_invalid_credentials(register, login, users, make_file) -> None:
    register.execute(_input(make_file))

    with pytest.raises(InvalidCredentialsError) as exc_info:
        login.execute(username="alice", password="wrong")

    assert isinstance(exc_info.value, AuthenticationError)
    assert exc_info.value.status == 401
    assert users.refresh_writes == 0
    assert users.find_by_identity(username="alice").refresh_token is None


def test_login_unknown_user(login) -> None:
    with pytest.raises(UserNotFoundError) as exc_info:
        login.execute(username="nobody", password="p1")
    assert exc_info.value.status == 404


def test_login_not_found_and_bad_password_have_distinct_codes(register, login, make_file) -> None:
    register.execute(_input(make_file))

    with pytest.raises(UserNotFoundError) as missing:
        login.execute(username="nobody", password="p1")
    with pytest.raises(InvalidCredentialsError) as wrong:
        login.execute(username="alice", password="nope")

    assert missing.value.code != wrong.value.code


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"password": "p1"}, "username or email is required"),
        ({"username": "alice", "password": ""}, "Password is required"),
    ],
)
def test_login_requires_identity_and_password(login, kwargs, message) -> None:
    with pytest.raises(ValidationError) as exc_info:
        login.execute(**kwargs)
    assert exc_info.value.message == message


def test_second_login_supersedes_first_refresh_token(register, login, refresh, make_file) -> None:
    register.execute(_input(make_file))
    first = login.execute(username="alice", password="p1")
    login.execute(username="alice", password="p1")

    with pytest.raises(RefreshTokenReusedError):
        refresh.execute(first.tokens.refresh_token)


def test_refresh_rotates_exactly_once(register, login, refresh, users, make_file) -> None:
    register.execute(_input(make_file))
    session = login.execute(username="alice", password="p1")

    rotated = refresh.execute(session.tokens.refresh_token)

    assert rotated.refresh_token != session.tokens.refresh_token
    assert users.find_by_id(session.user.id).refresh_token == rotated.refresh_token

    with pytest.raises(RefreshTokenReusedError) as exc_info:
        refresh.execute(session.tokens.refresh_token)
    assert exc_info.value.status == 401
    assert exc_info.value.message == "Refresh token is expired or used"

    assert refresh.execute(rotated.refresh_token).refresh_token != rotated.refresh_token


def test_refresh_requires_token(refresh) -> None:
    with pytest.raises(RefreshTokenMissingError):
        refresh.execute(None)
    with pytest.raises(RefreshTokenMissingError):
        refresh.execute("")


@pytest.mark.parametrize("token", ["garbage", "a.b.c"])
def test_refresh_rejects_unverifiable_token(refresh, token) -> None:
    with pytest.raises(InvalidRefreshTokenError) as exc_info:
        refresh.execute(token)
    assert exc_info.value.message == "Invalid refresh token"


def test_refresh_rejects_access_token(register, login, refresh, make_file) -> None:
    register.execute(_input(make_file))
    session = login.execute(username="alice", password="p1")

    with pytest.raises(InvalidRefreshTokenError):
        refresh.execute(session.tokens.access_token)


def test_refresh_for_vanished_user(register, login, refresh, users, make_file) -> None:
    register.execute(_input(make_file))
    session = login.execute(username="alice", password="p1")
    users._users.clear()

    with pytest.raises(UserNotFoundError):
        refresh.execute(session.tokens.refresh_token)


def test_refresh_loses_concurrent_rotation(register, login, refresh, users, make_file) -> None:
    register.execute(_input(make_file))
    session = login.execute(username="alice", password="p1")
    token = session.tokens.refresh_token

    original_rotate = users.rotate_refresh_token

    def _racing_rotate(user_id: int, expected: str, replacement: str) -> bool:
        # A competing request rotates the same token first.
        original_rotate(user_id, expected, "winner-token")
        return original_rotate(user_id, expected, replacement)

    users.rotate_refresh_token = _racing_rotate

    with pytest.raises(RefreshTokenReusedError):
        refresh.execute(token)
    assert users.find_by_id(session.user.id).refresh_token == "winner-token"


def test_logout_clears_refresh_token(register, login, refresh, users, make_file) -> None:
    register.execute(_input(make_file))
    session = login.execute(username="alice", password="p1")

    LogoutUserUseCase(users=users).execute(session.user.id)

    assert users.find_by_id(session.user.id).refresh_token is None
    with pytest.raises(RefreshTokenReusedError):
        refresh.execute(session.tokens.refresh_token)


def test_logout_unknown_user(users) -> None:
    with pytest.raises(UserNotFoundError):
        LogoutUserUseCase(users=users).execute(42)


def test_get_current_user(register, users, make_file) -> None:
    created = register.execute(_input(make_file))

    user = GetCurrentUserUseCase(users=users).execute(created.id)

    assert user == created
    with pytest.raises(UserNotFoundError):
        GetCurrentUserUseCase(users=users).execute(created.id + 1)
