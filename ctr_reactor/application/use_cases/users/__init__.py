from .login_user import LoginUserUseCase
from .logout_user import LogoutUserUseCase
from .purge_sessions import PurgeExpiredSessionsUseCase
from .register_user import RegisterUserUseCase
from .resolve_session import ResolveSessionUseCase

__all__ = [
    "LoginUserUseCase",
    "LogoutUserUseCase",
    "PurgeExpiredSessionsUseCase",
    "RegisterUserUseCase",
    "ResolveSessionUseCase",
]
