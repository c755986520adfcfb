"""
Centralized configuration for the Subgate backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., BILLING_*, REDIS_*).
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Subgate API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # Billing backend
    billing_enabled: bool = True
    billing_use_stubs: bool = False
    billing_backend_url: str = ""
    billing_backend_key: str = ""
    billing_backend_timeout: float = 15.0  # seconds
    billing_origin_system: str = "accounts"

    # Plan list cache (disabled when the TTL is 0)
    plans_cache_ttl_seconds: int = 0
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = "subgate:"
    redis_socket_timeout: float = 1.0  # seconds, per cache call


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
