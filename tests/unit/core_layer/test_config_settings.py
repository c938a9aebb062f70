"""
Unit Tests for Configuration Settings

Tests defaults, environment loading and validation.
"""

import pytest
from pydantic import ValidationError

from pantry.core.config import PantrySettings, load_settings


@pytest.mark.unit
class TestSettingsDefaults:
    """Test PantrySettings default values."""

    def test_key_namespace_defaults(self, monkeypatch):
        """Test the default global prefix, version and TTL."""
        for name in ("PANTRY_GLOBAL_KEY_PREFIX", "PANTRY_GLOBAL_KEY_VERSION",
                     "PANTRY_GLOBAL_KEY_TTL_S", "PANTRY_FORCE_CACHE_MISSES"):
            monkeypatch.delenv(name, raising=False)

        settings = PantrySettings(_env_file=None)

        assert settings.GLOBAL_KEY_PREFIX == "pantry"
        assert settings.GLOBAL_KEY_VERSION == 1
        assert settings.GLOBAL_KEY_TTL_S == 60 * 60 * 24 * 14
        assert settings.FORCE_CACHE_MISSES is False

    def test_redis_defaults(self, monkeypatch):
        monkeypatch.delenv("PANTRY_REDIS_URL", raising=False)
        settings = PantrySettings(_env_file=None)

        assert settings.REDIS_URL == "redis://localhost:6379/0"
        assert settings.REDIS_MAX_CONNECTIONS > 0


@pytest.mark.unit
class TestSettingsLoading:
    """Test environment and override loading."""

    def test_environment_variables_use_prefix(self, monkeypatch):
        """Test that PANTRY_ variables are read."""
        monkeypatch.setenv("PANTRY_GLOBAL_KEY_VERSION", "3")
        monkeypatch.setenv("PANTRY_FORCE_CACHE_MISSES", "true")

        settings = load_settings()

        assert settings.GLOBAL_KEY_VERSION == 3
        assert settings.FORCE_CACHE_MISSES is True

    def test_overrides_win_over_environment(self, monkeypatch):
        monkeypatch.setenv("PANTRY_GLOBAL_KEY_PREFIX", "from-env")
        settings = load_settings(GLOBAL_KEY_PREFIX="explicit")
        assert settings.GLOBAL_KEY_PREFIX == "explicit"

    def test_load_settings_returns_fresh_instances(self):
        """Test that there is no shared settings singleton."""
        assert load_settings() is not load_settings()


@pytest.mark.unit
class TestSettingsValidation:
    """Test field validation."""

    def test_log_level_is_uppercased(self):
        assert load_settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValidationError):
            load_settings(LOG_LEVEL="LOUD")

    def test_invalid_log_format_rejected(self):
        with pytest.raises(ValidationError):
            load_settings(LOG_FORMAT="xml")

    @pytest.mark.parametrize("ttl", [0, -5])
    def test_ttl_must_be_positive(self, ttl):
        with pytest.raises(ValidationError):
            load_settings(GLOBAL_KEY_TTL_S=ttl)

    def test_empty_prefix_rejected(self):
        with pytest.raises(ValidationError):
            load_settings(GLOBAL_KEY_PREFIX="")
