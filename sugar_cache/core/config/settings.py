"""
Centralized Configuration Module using Pydantic Settings

Type-safe, environment-based defaults for the cache client. Per-instance
options passed to ``SugarCache`` take precedence over these values.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with ``reload_settings``
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sugar_cache.core.config.constants import (
    DEFAULT_INDEX_SWEEP_INTERVAL,
    DEFAULT_KEY_PREFIX,
    DEFAULT_MEMORY_THRESHOLD,
    DEFAULT_NAMESPACE,
)


class RedisSettings(BaseSettings):
    """
    Redis connection configuration.

    Used by ``ConnectionManager`` when the application lets the library open
    the connection. Applications that already own a client pass it to
    ``SugarCache`` directly and these values are ignored.
    """

    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number (single node only)")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_CLUSTER_MODE: bool = Field(default=False, description="Connect with RedisCluster")

    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum pooled connections")
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: int = Field(default=5, description="Connection timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Health check interval in seconds")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True, extra="ignore")


class CacheSettings(BaseSettings):
    """
    Cache defaults.

    The memory threshold is the fraction of system memory the process may
    hold before the local tier stops accepting writes.
    """

    CACHE_KEY_PREFIX: str = Field(default=DEFAULT_KEY_PREFIX, description="Prefix for every key")
    CACHE_DEFAULT_NAMESPACE: str = Field(default=DEFAULT_NAMESPACE, description="Namespace when omitted")
    CACHE_IN_MEMORY_ENABLED: bool = Field(default=True, description="Enable the local tier")
    CACHE_MEMORY_THRESHOLD: float = Field(
        default=DEFAULT_MEMORY_THRESHOLD,
        description="Memory usage ratio above which local writes are dropped",
    )
    CACHE_INDEX_SWEEP_INTERVAL: int = Field(
        default=DEFAULT_INDEX_SWEEP_INTERVAL,
        description="Seconds between eviction index sweeps (width-bounded mode)",
    )

    @field_validator("CACHE_MEMORY_THRESHOLD")
    @classmethod
    def validate_memory_threshold(cls, v):
        """Threshold is a ratio."""
        if not 0.0 <= v <= 1.0:
            raise ValueError("CACHE_MEMORY_THRESHOLD must be between 0 and 1")
        return v

    @field_validator("CACHE_INDEX_SWEEP_INTERVAL")
    @classmethod
    def validate_sweep_interval(cls, v):
        if v <= 0:
            raise ValueError("CACHE_INDEX_SWEEP_INTERVAL must be positive")
        return v

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True, extra="ignore")


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    Architectural Decision: structlog for production-grade logging
    """

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

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True, extra="ignore")


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    Usage:
        from sugar_cache.core.config.settings import get_settings

        settings = get_settings()
        redis_host = settings.redis.REDIS_HOST
        threshold = settings.cache.CACHE_MEMORY_THRESHOLD
    """

    redis: RedisSettings = Field(default_factory=RedisSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
