# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _parse_bool(value: str | bool) -> bool:
    if isinstance(value, str):
        return value.lower() in ("1", "true", "yes")
    return bool(value)


_SECTION_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    validate_by_name=True,
    frozen=True,
    extra="ignore",
)


class SessionConfig(BaseSettings):
    cookie_name: str = Field("session", alias="SESSION_COOKIE_NAME")
    max_age: int = Field(60 * 60 * 24 * 7, ge=1, alias="SESSION_MAX_AGE")
    token_secret: str = Field("", alias="SESSION_TOKEN_SECRET")

    model_config = _SECTION_CONFIG


class DatabaseConfig(BaseSettings):
    backend: Literal["auto", "managed", "embedded"] = Field("auto", alias="AUTH_BACKEND")
    sqlite_path: Path = Field(Path("data/auth.db"), alias="SQLITE_DB_PATH")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = _SECTION_CONFIG


class ManagedStoreConfig(BaseSettings):
    url: str = Field("", alias="SUPABASE_URL")
    api_key: str = Field(
        "",
        validation_alias=AliasChoices(
            "SUPABASE_SERVICE_ROLE_KEY", "SUPABASE_ANON_KEY"
        ),
    )
    timeout: float = Field(10.0, ge=0.1, alias="SUPABASE_TIMEOUT")

    model_config = _SECTION_CONFIG

    @property
    def configured(self) -> bool:
        return bool(self.url and self.api_key)


class AdminConfig(BaseSettings):
    secret: str = Field("", alias="ADMIN_SECRET")
    ip_allowlist: str = Field("", alias="ADMIN_IP_ALLOWLIST")
    password: str = Field("", alias="ADMIN_PASSWORD")
    email: str = Field("", alias="ADMIN_EMAIL")
    cookie_name: str = Field("is_admin", alias="ADMIN_COOKIE_NAME")
    cookie_max_age: int = Field(60 * 60, ge=1, alias="ADMIN_COOKIE_MAX_AGE")

    model_config = _SECTION_CONFIG

    @property
    def secrets(self) -> tuple[str, ...]:
        return _split_csv(self.secret)

    @property
    def allowed_ips(self) -> tuple[str, ...]:
        return _split_csv(self.ip_allowlist)

    @property
    def password_required(self) -> bool:
        return bool(self.password)


class SecurityConfig(BaseSettings):
    cookie_samesite: str = Field("Lax", alias="COOKIE_SAMESITE")
    allowed_origins: str = Field("*", alias="ALLOWED_ORIGINS")
    enable_rate_limit: bool = Field(True, alias="ENABLE_RATE_LIMIT")
    enable_hsts: bool = Field(False, alias="ENABLE_HSTS")
    trusted_proxy_hops: int = Field(0, ge=0, alias="TRUSTED_PROXY_HOPS")

    model_config = _SECTION_CONFIG

    @field_validator("enable_rate_limit", "enable_hsts", mode="before")
    @classmethod
    def _parse_flags(cls, value: str | bool) -> bool:
        return _parse_bool(value)

    @property
    def origins(self) -> tuple[str, ...]:
        return _split_csv(self.allowed_origins) or ("*",)


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    secret_key: str = Field("dev", alias="SECRET_KEY")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_file: Path | None = Field(None, alias="LOG_FILE")

    session: SessionConfig = Field(default_factory=SessionConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    managed: ManagedStoreConfig = Field(default_factory=ManagedStoreConfig)
    admin: AdminConfig = Field(default_factory=AdminConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        return _parse_bool(value)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        if self.secret_key in ("dev", "development", "test", ""):
            print(
                "\n❌ CRITICAL SECURITY ERROR: Insecure SECRET_KEY detected in production!\n"
                "   SECRET_KEY must be a strong random value in production.\n",
                file=sys.stderr,
            )
            sys.exit(1)

        warnings = []
        if not self.session.token_secret:
            warnings.append("⚠️  SESSION_TOKEN_SECRET is not set (session hashes are unkeyed)")
        if "*" in self.security.origins:
            warnings.append("⚠️  CORS allows wildcard (*) origins")
        if not self.security.enable_hsts:
            warnings.append("⚠️  HSTS is DISABLED (recommended for HTTPS)")

        if warnings:
            print("\n⚠️  PRODUCTION SECURITY WARNINGS:", file=sys.stderr)
            for warning in warnings:
                print(f"   {warning}", file=sys.stderr)

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")

    def is_development(self) -> bool:
        return self.app_env.lower() in ("development", "dev")

    @property
    def cookie_secure(self) -> bool:
        return self.is_production()


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()


__all__ = [
    "AdminConfig",
    "AppConfig",
    "DatabaseConfig",
    "ManagedStoreConfig",
    "SecurityConfig",
    "SessionConfig",
    "load_config",
]
