# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_INSECURE_SECRETS = ("dev", "development", "test", "")

_SECTION_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    validate_by_name=True,
    extra="ignore",
)


def _parse_bool_value(value: str | bool) -> bool:
    if isinstance(value, str):
        return value.lower() in ("1", "true", "yes")
    return bool(value)


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///userhub.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = _SECTION_CONFIG


class TokenConfig(BaseSettings):
    access_token_secret: str = Field("dev-access", alias="ACCESS_TOKEN_SECRET")
    access_token_expiry: int = Field(15 * 60, ge=1, alias="ACCESS_TOKEN_EXPIRY")
    refresh_token_secret: str = Field("dev-refresh", alias="REFRESH_TOKEN_SECRET")
    refresh_token_expiry: int = Field(10 * 24 * 60 * 60, ge=1, alias="REFRESH_TOKEN_EXPIRY")
    algorithm: str = Field("HS256", alias="JWT_ALGORITHM")

    model_config = _SECTION_CONFIG


class MediaConfig(BaseSettings):
    backend: str = Field("local", alias="MEDIA_BACKEND")
    upload_temp_dir: Path = Field(Path("public/temp"), alias="UPLOAD_TEMP_DIR")
    media_root: Path = Field(Path("public/media"), alias="MEDIA_ROOT")
    media_base_url: str = Field("/media", alias="MEDIA_BASE_URL")
    cloudinary_cloud_name: str | None = Field(None, alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: str | None = Field(None, alias="CLOUDINARY_API_KEY")
    cloudinary_api_secret: str | None = Field(None, alias="CLOUDINARY_API_SECRET")
    upload_timeout: float = Field(30.0, ge=0.1, alias="MEDIA_UPLOAD_TIMEOUT")

    model_config = _SECTION_CONFIG

    @field_validator("backend")
    @classmethod
    def _check_backend(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ("local", "cloudinary"):
            raise ValueError("MEDIA_BACKEND must be 'local' or 'cloudinary'")
        return value


class SecurityConfig(BaseSettings):
    # Cookie security
    cookie_secure: bool = Field(False, alias="COOKIE_SECURE")
    cookie_samesite: str = Field("Strict", alias="COOKIE_SAMESITE")

    # CORS
    allowed_origins: Annotated[list[str], NoDecode] = Field(["*"], alias="ALLOWED_ORIGINS")

    # Rate limiting
    enable_rate_limit: bool = Field(True, alias="ENABLE_RATE_LIMIT")

    # Reverse proxies in front of the app; their X-Forwarded-For hops are trusted
    trusted_proxy_count: int = Field(0, ge=0, alias="TRUSTED_PROXY_COUNT")

    # HSTS
    enable_hsts: bool = Field(False, alias="ENABLE_HSTS")

    model_config = _SECTION_CONFIG

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("cookie_secure", "enable_rate_limit", "enable_hsts", mode="before")
    @classmethod
    def _parse_bool(cls, value: str | bool) -> bool:
        return _parse_bool_value(value)


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _token_config_factory() -> TokenConfig:
    return TokenConfig()  # type: ignore[call-arg]


def _media_config_factory() -> MediaConfig:
    return MediaConfig()  # type: ignore[call-arg]


def _security_config_factory() -> SecurityConfig:
    return SecurityConfig()  # type: ignore[call-arg]


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    secret_key: str = Field("dev", alias="SECRET_KEY")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_file: Path | None = Field(None, alias="LOG_FILE")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    tokens: TokenConfig = Field(default_factory=_token_config_factory)
    media: MediaConfig = Field(default_factory=_media_config_factory)
    security: SecurityConfig = Field(default_factory=_security_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        validate_by_name=True,
        arbitrary_types_allowed=True,
        extra="ignore",
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        return _parse_bool_value(value)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        insecure = [
            name
            for name, value in (
                ("SECRET_KEY", self.secret_key),
                ("ACCESS_TOKEN_SECRET", self.tokens.access_token_secret),
                ("REFRESH_TOKEN_SECRET", self.tokens.refresh_token_secret),
            )
            if value in _INSECURE_SECRETS or value.startswith("dev-")
        ]
        if insecure:
            print(
                "\n❌ CRITICAL SECURITY ERROR: Insecure secrets detected in production!\n"
                f"   Set strong random values for: {', '.join(insecure)}\n"
                "   Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\"\n",
                file=sys.stderr,
            )
            sys.exit(1)

        if self.tokens.access_token_secret == self.tokens.refresh_token_secret:
            print(
                "\n❌ CRITICAL SECURITY ERROR: ACCESS_TOKEN_SECRET and "
                "REFRESH_TOKEN_SECRET must differ.\n",
                file=sys.stderr,
            )
            sys.exit(1)

        warnings = []
        if "*" in self.security.allowed_origins:
            warnings.append("⚠️  CORS allows wildcard (*) origins")
        if not self.security.enable_hsts:
            warnings.append("⚠️  HSTS is DISABLED (recommended for HTTPS)")
        if self.media.backend == "local":
            warnings.append("⚠️  MEDIA_BACKEND=local stores uploads on this host")

        if warnings:
            print("\n⚠️  PRODUCTION SECURITY WARNINGS:", file=sys.stderr)
            for warning in warnings:
                print(f"   {warning}", file=sys.stderr)
            print(
                "   Consider enabling these security features in production.\n",
                file=sys.stderr,
            )

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")

    def cookies_secure(self) -> bool:
        return self.security.cookie_secure or self.is_production()

    def ensure_directories(self) -> None:
        for path in (self.media.upload_temp_dir, self.media.media_root):
            path.mkdir(parents=True, exist_ok=True)


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()  # type: ignore[call-arg]


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "MediaConfig",
    "SecurityConfig",
    "TokenConfig",
    "load_config",
]
