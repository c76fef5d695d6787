"""Centralized client configuration with environment-aware defaults.

This module implements the configuration layer of the client using Pydantic
Settings, providing type-safe configuration with validation and
environment variable support.

Features:
- **Type safety**: All configuration values are validated and typed
- **Environment variables**: ``AVATAX_*`` variables and .env files
- **Nested configuration**: Uses __ delimiter for the log configuration
- **Credentials**: Optional username/password, license key or bearer token
- **Caching**: Configuration is cached for performance

Configuration sources (in order of precedence):
1. Keyword arguments
2. Environment variables
3. .env file in the working directory
4. Default values in model definitions
"""

import os
from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ErrorMode(Enum):
    """How the dispatcher reports failed calls to the caller."""

    CAPTURE = "capture"
    """Return a CapturedFailure value (primary contract)."""

    RAISE = "raise"
    """Re-raise the native transport exception."""

    MESSAGE = "message"
    """Return the failure message as a plain string (compatibility shim)."""


class LogConfig(BaseModel):
    """Client logging configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_formatter_type: Literal["console", "json"] | None = Field(
        default=None,
        description="Log output formatter. Auto-detected if not specified.",
    )
    log_request_and_response_body: bool = Field(
        default=False,
        description="Include raw request and response bodies in call logs",
    )
    sensitive_fields: list[str] = Field(
        default_factory=lambda: [
            "password",
            "token",
            "secret",
            "license_key",
            "authorization",
        ],
        description="Field names to redact",
    )


class ClientSettings(BaseSettings):
    """Settings for an AvaTax client instance."""

    model_config = SettingsConfigDict(
        env_prefix="AVATAX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Client identity
    app_name: str = Field(default="", description="Application name")
    app_version: str = Field(default="", description="Application version")
    machine_name: str = Field(default="", description="Machine name")

    # Transport settings
    environment: str = Field(
        default="sandbox",
        description="'sandbox', 'production' or the full URL of an AvaTax instance",
    )
    timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Connect and request timeout. Falls back to 20 minutes.",
    )
    error_mode: ErrorMode = Field(
        default=ErrorMode.CAPTURE,
        description="How failed calls are reported",
    )

    # Credentials
    username: str | None = Field(default=None, description="AvaTax username")
    password: str | None = Field(default=None, description="AvaTax password")
    account_id: str | None = Field(default=None, description="AvaTax account id")
    license_key: str | None = Field(default=None, description="AvaTax license key")
    bearer_token: str | None = Field(default=None, description="OAuth bearer token")

    # Logging configuration
    log_config: LogConfig = Field(
        default_factory=LogConfig, description="Logging configuration"
    )

    def model_post_init(self, __context: object) -> None:
        """Post initialization to set environment-based defaults."""
        super().model_post_init(__context)

        if self.log_config.log_formatter_type is None:
            self.log_config.log_formatter_type = self._detect_formatter()

    def _detect_formatter(self) -> Literal["console", "json"]:
        """Auto-detect log formatter based on the runtime environment."""
        if os.getenv("K_SERVICE") or os.getenv("AWS_EXECUTION_ENV"):
            return "json"
        return "console"

    @field_validator(
        "username",
        "password",
        "account_id",
        "license_key",
        "bearer_token",
        "timeout_seconds",
        mode="before",
    )
    @classmethod
    def empty_str_to_none(cls, v: object) -> object:
        """Convert empty strings to None for nullable fields."""
        _ = cls
        if v == "":
            return None
        return v


@lru_cache
def get_settings() -> ClientSettings:
    """Get cached settings instance."""
    return ClientSettings()
