# ==============================================================================
# Application Configuration
# ==============================================================================
"""
Configuration management using pydantic-settings.

All configuration is loaded from environment variables, with support for
.env files via python-dotenv.
"""

from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file before any settings are instantiated
load_dotenv()


class RedisSettings(BaseSettings):
    """Redis server settings for a cache store instance."""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    server: str = Field(
        default="",
        description="Server string host[:port[:timeout[:persistentid[:retryinterval]]]]",
    )
    persistent_connection: bool = Field(
        default=False, description="Announce a persistent connection name"
    )
    auth_password: Optional[str] = Field(default=None, description="Redis password")
    database: int = Field(default=0, description="Redis database number")
    test_server: Optional[str] = Field(
        default=None, description="Server string used by integration tests"
    )
    serializer: Literal["json", "pickle"] = Field(
        default="json", description="Value serialization format"
    )


class TuningSettings(BaseSettings):
    """Process-wide knobs for the keyspace interaction."""

    model_config = SettingsConfigDict(env_prefix="CACHESTORE_")

    update_ttl: bool = Field(
        default=False, description="Refresh the TTL of keys whenever they are read"
    )
    gc_freq: int = Field(
        default=500,
        ge=0,
        description="Run garbage collection on roughly 1 in N store initialisations (0 disables)",
    )


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    # Nested settings
    redis: RedisSettings = Field(default_factory=RedisSettings)
    tuning: TuningSettings = Field(default_factory=TuningSettings)

    # General settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and cached for subsequent calls.
    """
    return Settings()
