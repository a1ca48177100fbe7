"""Centralized configuration for iREVA.

Uses Pydantic BaseSettings with environment variable loading and validation.
All IREVA_* environment variables are validated when :func:`get_settings`
is first called.  There is no default signing secret: a process without
``IREVA_JWT_SECRET`` refuses to start.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Placeholder secrets that shipped in sample .env files.
_PLACEHOLDER_SECRETS: frozenset[str] = frozenset(
    {
        "change-me",
        "changeme",
        "secret",
        "your-secret-key-here",
        "your_jwt_secret_change_in_production",
        "ireva-super-secret-key-change-in-production",
    }
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_prefix="IREVA_", case_sensitive=False, extra="ignore")

    # Auth
    jwt_secret: str = Field(description="HMAC secret used to sign and verify access tokens")
    jwt_algorithm: str = Field(default="HS256", description="HS256, HS384 or HS512")
    token_ttl_seconds: int = Field(default=86400, ge=60, description="Lifetime of issued tokens")
    clock_skew_seconds: int = Field(
        default=0, ge=0, le=300, description="Leeway applied to exp/nbf checks"
    )

    # Logging
    log_format: str = Field(default="text", description="Log format: text or json")
    log_level: str = Field(default="INFO", description="Python log level")

    # Server
    host: str = Field(default="0.0.0.0", description="Server bind host")  # noqa: S104
    port: int = Field(default=8000, ge=1, le=65535, description="Server bind port")

    # CORS
    cors_origins: str = Field(default="*", description="Comma-separated CORS origins")

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "IREVA_JWT_SECRET must not be empty"
            raise ValueError(msg)
        if v.lower() in _PLACEHOLDER_SECRETS:
            msg = "IREVA_JWT_SECRET is a placeholder value; set a real secret"
            raise ValueError(msg)
        return v

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        v = v.upper()
        if v not in ("HS256", "HS384", "HS512"):
            msg = f"IREVA_JWT_ALGORITHM must be HS256, HS384 or HS512, got '{v}'"
            raise ValueError(msg)
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("text", "json"):
            msg = f"IREVA_LOG_FORMAT must be 'text' or 'json', got '{v}'"
            raise ValueError(msg)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if not isinstance(getattr(logging, v, None), int):
            msg = f"IREVA_LOG_LEVEL must be a valid Python log level, got '{v}'"
            raise ValueError(msg)
        return v

    @property
    def cors_origin_list(self) -> list[str]:
        """Return parsed list of CORS origins."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and validate settings once per process."""
    return Settings()
