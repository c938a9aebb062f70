"""
Configuration Module using Pydantic Settings

Type-safe, environment-based configuration for the caching engine. Every
variable is read with the PANTRY_ prefix (PANTRY_REDIS_URL,
PANTRY_GLOBAL_KEY_TTL_S, ...) or from a .env file.

Settings are passed explicitly to the engine; there is no global instance.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pantry.core.config.constants import DEFAULT_KEY_PREFIX, DEFAULT_KEY_TTL_S


class PantrySettings(BaseSettings):
    """
    Process-level configuration consumed by the caching engine.

    Usage:
        from pantry.core.config import load_settings

        settings = load_settings(GLOBAL_KEY_VERSION=2)
        pantry = Pantry(settings)
    """

    # Redis connection
    REDIS_URL: str = Field(default="redis://localhost:6379/0", description="Redis connection URL")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, ge=1, description="Maximum pooled connections")
    REDIS_SOCKET_TIMEOUT: float = Field(default=5.0, gt=0, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: float = Field(
        default=5.0, gt=0, description="Connection timeout in seconds"
    )
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(
        default=30, ge=0, description="Health check interval in seconds"
    )

    # Key namespace
    GLOBAL_KEY_PREFIX: str = Field(
        default=DEFAULT_KEY_PREFIX, min_length=1, description="Prefix shared by every cache key"
    )
    GLOBAL_KEY_VERSION: int = Field(
        default=1, ge=0, description="Version shared by every cache key; bump to orphan old keys"
    )
    GLOBAL_KEY_TTL_S: int = Field(
        default=DEFAULT_KEY_TTL_S, gt=0, description="Default TTL in seconds for record keys"
    )

    # Behaviour
    FORCE_CACHE_MISSES: bool = Field(
        default=False, description="Ignore the cache completely on read"
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(
        env_prefix="PANTRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


def load_settings(**overrides) -> PantrySettings:
    """
    Build a fresh settings object from the environment.

    Args:
        **overrides: Field values that take precedence over the environment

    Returns:
        PantrySettings: New settings instance
    """
    return PantrySettings(**overrides)
