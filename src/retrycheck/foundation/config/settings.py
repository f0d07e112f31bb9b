"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated configuration from environment variables
with sensible defaults. Supports .env files and nested configuration.

Example:
    >>> from retrycheck.foundation.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.retry.timeout)
    2.0
    >>> print(settings.logging.level)
    'WARNING'

    # Or with environment variables:
    # RETRYCHECK_RETRY_TIMEOUT=5
    # RETRYCHECK_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, PositiveFloat, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrySettings(BaseSettings):
    """Default retry timing used by ``run`` and ``Timer.from_settings``."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYCHECK_RETRY_",
        extra="ignore",
    )

    timeout: PositiveFloat = Field(default=2.0, description="Total time budget in seconds")
    wait: PositiveFloat = Field(default=0.025, description="Pause between attempts in seconds")

    @model_validator(mode="after")
    def _wait_within_timeout(self) -> Self:
        if self.wait > self.timeout:
            raise ValueError(f"wait ({self.wait}s) must not exceed timeout ({self.timeout}s)")
        return self


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYCHECK_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["console", "json", "none"] = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class RetrycheckSettings(BaseSettings):
    """Root settings for retrycheck.

    Loads configuration from environment variables with RETRYCHECK_ prefix.
    Supports nested configuration and .env files.

    Example environment variables:
        RETRYCHECK_RETRY_TIMEOUT=10
        RETRYCHECK_RETRY_WAIT=0.1
        RETRYCHECK_LOG_LEVEL=DEBUG
        RETRYCHECK_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="RETRYCHECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> RetrycheckSettings:
    """Get the global settings instance (cached).

    Example:
        >>> get_settings().retry.wait
        0.025
    """
    return RetrycheckSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
