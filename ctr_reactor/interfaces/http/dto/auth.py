from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ctr_reactor.domain.users.entities import User

EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")
MIN_PASSWORD_LENGTH = 8


def _check_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_RE.match(value):
        raise ValueError("Invalid email")
    return value


class SignupRequestDTO(BaseModel):
    name: str | None = Field(None, max_length=128)
    email: str = Field(min_length=3, max_length=254)
    password: str = Field(max_length=128)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _check_email(value)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be {MIN_PASSWORD_LENGTH}+ characters")
        return value


class LoginRequestDTO(BaseModel):
    email: str = Field(min_length=3, max_length=254)
    password: str = Field(min_length=1, max_length=128)  # no strength check on login

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _check_email(value)


class AdminPasswordDTO(BaseModel):
    password: str


class UserDTO(BaseModel):
    id: int | str
    email: str
    name: str | None = None
    avatar: str | None = None
    is_verified: bool = Field(False, serialization_alias="isVerified")
    created_at: str = Field(serialization_alias="createdAt")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_user(cls, user: User) -> "UserDTO":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            avatar=user.avatar,
            is_verified=user.is_verified,
            created_at=user.created_at.isoformat(),
        )


class AuthSuccessDTO(BaseModel):
    ok: bool = True
    user: UserDTO | None = None
    session_token: str | None = Field(None, serialization_alias="sessionToken")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
