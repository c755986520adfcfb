"""Tests for shared/config.py."""

import pytest
from unittest.mock import patch
import os

from shared.config import Settings, get_settings


class TestSettings:
    def test_default_values(self):
        """Settings should have sensible defaults."""
        settings = Settings()
        assert settings.app_name == "Subgate API"
        assert settings.app_version == "0.1.0"
        assert settings.debug is False
        assert settings.port == 8000
        assert settings.host == "0.0.0.0"
        assert settings.log_level == "INFO"

    def test_billing_defaults(self):
        """Billing is enabled against the live backend by default."""
        settings = Settings()
        assert settings.billing_enabled is True
        assert settings.billing_use_stubs is False
        assert settings.billing_backend_timeout == 15.0
        assert settings.billing_origin_system == "accounts"

    def test_cache_disabled_by_default(self):
        settings = Settings()
        assert settings.plans_cache_ttl_seconds == 0
        assert settings.redis_key_prefix == "subgate:"
        assert settings.redis_socket_timeout == 1.0

    def test_loads_from_env(self):
        """Settings should load from environment variables."""
        with patch.dict(os.environ, {"DEBUG": "true", "PORT": "9000"}):
            settings = Settings()
            assert settings.debug is True
            assert settings.port == 9000

    def test_loads_billing_config_from_env(self):
        """Settings should load billing backend configuration from environment variables."""
        with patch.dict(os.environ, {
            "BILLING_ENABLED": "false",
            "BILLING_BACKEND_URL": "https://billing.example.com",
            "BILLING_BACKEND_KEY": "secret",
            "BILLING_BACKEND_TIMEOUT": "2.5",
            "PLANS_CACHE_TTL_SECONDS": "300",
            "REDIS_URL": "redis://cache:6379/1",
        }):
            settings = Settings()
            assert settings.billing_enabled is False
            assert settings.billing_backend_url == "https://billing.example.com"
            assert settings.billing_backend_key == "secret"
            assert settings.billing_backend_timeout == 2.5
            assert settings.plans_cache_ttl_seconds == 300
            assert settings.redis_url == "redis://cache:6379/1"


class TestGetSettings:
    def test_get_settings_returns_settings_instance(self):
        """get_settings should return a Settings instance."""
        settings = get_settings()
        assert isinstance(settings, Settings)

    def test_get_settings_caches(self):
        """get_settings should return cached instance."""
        settings1 = get_settings()
        settings2 = get_settings()
        assert settings1 is settings2
