# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets
from http import HTTPStatus
from pathlib import Path

from flask import Blueprint, Response, g, request
from pydantic import ValidationError
from werkzeug.utils import secure_filename

from userhub.application.use_cases.users.get_current_user import \
    GetCurrentUserUseCase
from userhub.application.use_cases.users.login_user import LoginUserUseCase
from userhub.application.use_cases.users.logout_user import LogoutUserUseCase
from userhub.application.use_cases.users.refresh_session import \
    RefreshSessionUseCase
from userhub.application.use_cases.users.register_user import (
    RegisterUserInput, RegisterUserUseCase)
from userhub.domain.users.entities import PublicUser, TokenPair
from userhub.domain.users.repositories import TokenIssuer
from userhub.infrastructure.audit import AuditAction, AuditLogger
from userhub.interfaces.http.auth import (ACCESS_COOKIE, REFRESH_COOKIE,
                                          auth_required)
from userhub.interfaces.http.dto.users import (LoginRequestDTO,
                                               RefreshRequestDTO,
                                               RegisterRequestDTO, TokensDTO,
                                               UserDTO)
from userhub.interfaces.http.responses import api_response
from userhub.shared.config import AppConfig
from userhub.shared.errors.base import AppError
from userhub.shared.errors.validation import raise_validation_error
from userhub.shared.logging import logger
from userhub.shared.middleware.rate_limit import rate_limit


def _get_client_ip() -> str | None:
    return request.remote_addr


def _discard_temp(path: str | None) -> None:
    if path:
        Path(path).unlink(missing_ok=True)


def _user_payload(user: PublicUser) -> dict:
    return UserDTO.model_validate(user).model_dump(mode="json")


def _tokens_payload(tokens: TokenPair) -> dict:
    return TokensDTO(
        access_token=tokens.access_token, refresh_token=tokens.refresh_token
    ).model_dump()


class UsersController:
    def __init__(
        self,
        *,
        config: AppConfig,
        tokens: TokenIssuer,
        register_use_case: RegisterUserUseCase,
        login_use_case: LoginUserUseCase,
        refresh_use_case: RefreshSessionUseCase,
        logout_use_case: LogoutUserUseCase,
        current_user_use_case: GetCurrentUserUseCase,
        audit: AuditLogger | None = None,
    ) -> None:
        self._config = config
        self._tokens = tokens
        self._register_use_case = register_use_case
        self._login_use_case = login_use_case
        self._refresh_use_case = refresh_use_case
        self._logout_use_case = logout_use_case
        self._current_user_use_case = current_user_use_case
        self._audit = audit or AuditLogger()

    def _save_upload(self, field: str) -> str | None:
        storage = request.files.get(field)
        if storage is None or not storage.filename:
            return None
        temp_dir = Path(self._config.media.upload_temp_dir)
        temp_dir.mkdir(parents=True, exist_ok=True)
        name = f"{secrets.token_hex(8)}-{secure_filename(storage.filename) or 'upload'}"
        path = temp_dir / name
        storage.save(path)
        return str(path)

    def _set_token_cookies(self, response: Response, tokens: TokenPair) -> None:
        for name, value, max_age in (
            (ACCESS_COOKIE, tokens.access_token, self._config.tokens.access_token_expiry),
            (REFRESH_COOKIE, tokens.refresh_token, self._config.tokens.refresh_token_expiry),
        ):
            response.set_cookie(
                name,
                value,
                httponly=True,
                samesite=self._config.security.cookie_samesite,
                secure=self._config.cookies_secure(),
                max_age=max_age,
            )

    def _clear_token_cookies(self, response: Response) -> None:
        for name in (ACCESS_COOKIE, REFRESH_COOKIE):
            response.delete_cookie(
                name,
                httponly=True,
                samesite=self._config.security.cookie_samesite,
                secure=self._config.cookies_secure(),
            )

    @rate_limit(limit=5, window_seconds=60.0)
    def register(self) -> tuple[Response, int]:
        form = request.form.to_dict() or request.get_json(silent=True) or {}
        try:
            dto = RegisterRequestDTO.model_validate(form)
        except ValidationError as exc:
            raise_validation_error(exc)

        avatar_path = cover_path = None
        try:
            avatar_path = self._save_upload("avatar")
            cover_path = self._save_upload("coverImage")
        except Exception:
            _discard_temp(avatar_path)
            logger.error("users.register: could not store uploaded files")
            raise

        data = RegisterUserInput(
            full_name=dto.full_name,
            email=dto.email,
            username=dto.username,
            password=dto.password,
            avatar_path=avatar_path,
            cover_image_path=cover_path,
        )

        try:
            user = self._register_use_case.execute(data)
        except AppError as exc:
            self._audit.log(
                AuditAction.REGISTER_FAILED,
                ip_address=_get_client_ip(),
                details={"username": dto.username, "error": exc.code},
                success=False,
            )
            raise

        self._audit.log(
            AuditAction.REGISTER,
            user_id=user.id,
            ip_address=_get_client_ip(),
            details={"username": user.username},
        )
        logger.info(f"users.register: responded user_id={user.id}")
        return api_response(
            HTTPStatus.CREATED, _user_payload(user), "User registered successfully"
        )

    @rate_limit(limit=10, window_seconds=60.0)
    def login(self) -> tuple[Response, int]:
        try:
            dto = LoginRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        ip_address = _get_client_ip()

        try:
            result = self._login_use_case.execute(
                username=dto.username, email=dto.email, password=dto.password
            )
        except AppError as exc:
            self._audit.log(
                AuditAction.LOGIN_FAILED,
                ip_address=ip_address,
                details={"username": dto.username, "error": exc.code},
                success=False,
            )
            raise

        self._audit.log(
            AuditAction.LOGIN_SUCCESS,
            user_id=result.user.id,
            ip_address=ip_address,
            details={"username": result.user.username},
        )

        response, status = api_response(
            HTTPStatus.OK,
            {"user": _user_payload(result.user), **_tokens_payload(result.tokens)},
            "User logged in successfully",
        )
        self._set_token_cookies(response, result.tokens)
        return response, status

    @rate_limit(limit=20, window_seconds=60.0)
    def refresh_token(self) -> tuple[Response, int]:
        try:
            dto = RefreshRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        presented = request.cookies.get(REFRESH_COOKIE) or dto.refresh_token

        try:
            tokens = self._refresh_use_case.execute(presented)
        except AppError as exc:
            self._audit.log(
                AuditAction.TOKEN_REFRESH_FAILED,
                ip_address=_get_client_ip(),
                details={"error": exc.code},
                success=False,
            )
            raise

        self._audit.log(AuditAction.TOKEN_REFRESHED, ip_address=_get_client_ip())

        response, status = api_response(
            HTTPStatus.OK, _tokens_payload(tokens), "Access token refreshed"
        )
        self._set_token_cookies(response, tokens)
        return response, status

    def logout(self) -> tuple[Response, int]:
        user_id = g.user_id
        self._logout_use_case.execute(user_id)

        self._audit.log(AuditAction.LOGOUT, user_id=user_id, ip_address=_get_client_ip())

        response, status = api_response(HTTPStatus.OK, {}, "User logged out")
        self._clear_token_cookies(response)
        return response, status

    def current_user(self) -> tuple[Response, int]:
        user = self._current_user_use_case.execute(g.user_id)
        return api_response(HTTPStatus.OK, _user_payload(user), "Current user fetched")

    def as_blueprint(self) -> Blueprint:
        guard = auth_required(self._tokens)
        bp = Blueprint("users", __name__, url_prefix="/api/v1/users")
        bp.add_url_rule("/register", view_func=self.register, methods=["POST"])
        bp.add_url_rule("/login", view_func=self.login, methods=["POST"])
        bp.add_url_rule("/refresh-token", view_func=self.refresh_token, methods=["POST"])
        bp.add_url_rule("/logout", view_func=guard(self.logout), methods=["POST"])
        bp.add_url_rule("/current-user", view_func=guard(self.current_user), methods=["GET"])
        return bp
