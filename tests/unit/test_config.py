"""
Unit Tests for Configuration Module

These tests verify that the configuration system works correctly:
- Default values point at the production KuCoin host
- Validation catches invalid configurations
- Property methods work as expected

Run with:
    pytest tests/unit/test_config.py -v
"""

import pytest
from core.config import Settings, settings, validate_configuration


class TestConfigurationLoading:
    """Test that configuration loads correctly"""

    def test_kucoin_base_url_loaded(self):
        """Verify KuCoin API URL is set"""
        assert settings.kucoin_base_url is not None
        assert settings.kucoin_base_url.startswith("http")

    def test_default_host_is_production(self):
        """Verify the default host is the production API"""
        assert Settings(_env_file=None).kucoin_base_url == "https://api.kucoin.com"

    def test_default_key_version(self):
        assert Settings(_env_file=None).kucoin_key_version == "3"

    def test_request_timeout_is_positive_integer(self):
        assert isinstance(settings.request_timeout, int)
        assert settings.request_timeout > 0

    def test_log_level_is_set(self):
        assert isinstance(settings.log_level, str)
        assert len(settings.log_level) > 0

    def test_environment_variables_are_read(self, monkeypatch):
        """Verify credentials come from KUCOIN_* environment variables"""
        monkeypatch.setenv("KUCOIN_API_KEY", "env-key")
        monkeypatch.setenv("KUCOIN_API_SECRET", "env-secret")
        monkeypatch.setenv("KUCOIN_API_PASSPHRASE", "env-pass")

        config = Settings(_env_file=None)

        assert config.kucoin_api_key == "env-key"
        assert config.has_credentials is True


class TestConfigurationProperties:
    """Test property methods and computed values"""

    def test_has_credentials_false_without_values(self):
        config = Settings(_env_file=None, kucoin_api_key="", kucoin_api_secret="", kucoin_api_passphrase="")

        assert config.has_credentials is False

    def test_has_credentials_requires_all_three(self):
        config = Settings(_env_file=None, kucoin_api_key="k", kucoin_api_secret="s", kucoin_api_passphrase="")

        assert config.has_credentials is False


class TestConfigurationValidation:
    """Test configuration validation function"""

    def test_validate_defaults_succeeds(self):
        """Verify validation passes with default configuration"""
        try:
            validate_configuration(Settings(_env_file=None, kucoin_api_key="", kucoin_api_secret="", kucoin_api_passphrase=""))
        except ValueError as e:
            pytest.fail(f"Configuration validation failed: {e}")

    def test_validate_full_credentials_succeeds(self):
        validate_configuration(Settings(
            _env_file=None, kucoin_api_key="k", kucoin_api_secret="s", kucoin_api_passphrase="p"
        ))

    def test_partial_credentials_rejected(self):
        config = Settings(_env_file=None, kucoin_api_key="k", kucoin_api_secret="", kucoin_api_passphrase="")

        with pytest.raises(ValueError, match="must be set together"):
            validate_configuration(config)

    def test_invalid_base_url_rejected(self):
        config = Settings(_env_file=None, kucoin_base_url="api.kucoin.com")

        with pytest.raises(ValueError, match="KUCOIN_BASE_URL"):
            validate_configuration(config)

    def test_invalid_timeout_rejected(self):
        config = Settings(_env_file=None, request_timeout=0)

        with pytest.raises(ValueError, match="REQUEST_TIMEOUT"):
            validate_configuration(config)

    def test_invalid_log_level_rejected(self):
        config = Settings(_env_file=None, log_level="VERBOSE")

        with pytest.raises(ValueError, match="LOG_LEVEL"):
            validate_configuration(config)
