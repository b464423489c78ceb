# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .use_cases.users.get_current_user import GetCurrentUserUseCase
from .use_cases.users.login_user import LoginResult, LoginUserUseCase
from .use_cases.users.logout_user import LogoutUserUseCase
from .use_cases.users.refresh_session import RefreshSessionUseCase
from .use_cases.users.register_user import (RegisterUserInput,
                                            RegisterUserUseCase)

__all__ = [
    "GetCurrentUserUseCase",
    "LoginResult",
    "LoginUserUseCase",
    "LogoutUserUseCase",
    "RefreshSessionUseCase",
    "RegisterUserInput",
    "RegisterUserUseCase",
]
