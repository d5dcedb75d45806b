from .auth import (
    AdminPasswordDTO,
    AuthSuccessDTO,
    LoginRequestDTO,
    SignupRequestDTO,
    UserDTO,
)

__all__ = [
    "AdminPasswordDTO",
    "AuthSuccessDTO",
    "LoginRequestDTO",
    "SignupRequestDTO",
    "UserDTO",
]
