"""Application dependency container."""

from __future__ import annotations

from functools import cached_property

from userhub.application.services.password_hashing import WerkzeugPasswordHasher
from userhub.application.use_cases.users.get_current_user import GetCurrentUserUseCase
from userhub.application.use_cases.users.login_user import LoginUserUseCase
from userhub.application.use_cases.users.logout_user import LogoutUserUseCase
from userhub.application.use_cases.users.refresh_session import RefreshSessionUseCase
from userhub.application.use_cases.users.register_user import RegisterUserUseCase
from userhub.domain.users.repositories import MediaUploader
from userhub.infrastructure.audit import AuditLogger
from userhub.infrastructure.auth.jwt_tokens import JwtTokenIssuer
from userhub.infrastructure.db import Database
from userhub.infrastructure.media import build_uploader
from userhub.infrastructure.repositories.users import SqlAlchemyUserRepository
from userhub.interfaces.http.controllers.users_controller import UsersController
from userhub.shared.config import AppConfig


class Container:
    def __init__(self, config: AppConfig) -> None:
        self.config = config

    @cached_property
    def database(self) -> Database:
        return Database(self.config.database)

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher()

    @cached_property
    def token_issuer(self) -> JwtTokenIssuer:
        return JwtTokenIssuer(self.config.tokens)

    @cached_property
    def media_uploader(self) -> MediaUploader:
        return build_uploader(self.config.media)

    @cached_property
    def user_repository(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository(self.database)

    @cached_property
    def audit(self) -> AuditLogger:
        return AuditLogger(self.database)

    @cached_property
    def register_user_use_case(self) -> RegisterUserUseCase:
        return RegisterUserUseCase(
            users=self.user_repository,
            password_hasher=self.password_hasher,
            uploader=self.media_uploader,
        )

    @cached_property
    def login_user_use_case(self) -> LoginUserUseCase:
        return LoginUserUseCase(
            users=self.user_repository,
            password_hasher=self.password_hasher,
            tokens=self.token_issuer,
        )

    @cached_property
    def refresh_session_use_case(self) -> RefreshSessionUseCase:
        return RefreshSessionUseCase(users=self.user_repository, tokens=self.token_issuer)

    @cached_property
    def logout_user_use_case(self) -> LogoutUserUseCase:
        return LogoutUserUseCase(users=self.user_repository)

    @cached_property
    def current_user_use_case(self) -> GetCurrentUserUseCase:
        return GetCurrentUserUseCase(users=self.user_repository)

    @cached_property
    def users_controller(self) -> UsersController:
        return UsersController(
            config=self.config,
            tokens=self.token_issuer,
            register_use_case=self.register_user_use_case,
            login_use_case=self.login_user_use_case,
            refresh_use_case=self.refresh_session_use_case,
            logout_use_case=self.logout_user_use_case,
            current_user_use_case=self.current_user_use_case,
            audit=self.audit,
        )
