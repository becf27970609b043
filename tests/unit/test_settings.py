"""Tests for configuration settings."""
import pytest
from pydantic import ValidationError

from node_sdk.config import Settings, get_settings, reset_settings


class TestSettings:
    """Test Settings configuration."""

    def test_settings_default_values(self):
        """Test default values are set correctly."""
        settings = Settings()

        # Core settings (env is 'test' under conftest.py)
        assert settings.env in ("development", "test")
        assert settings.log_level == "INFO"

        # HTTP settings
        assert settings.http_timeout == 30.0
        assert settings.user_agent == "saas-nodepack"

        # Vendor endpoints
        assert settings.bitwarden_cloud_api_url == "https://api.bitwarden.com"
        assert settings.bitwarden_cloud_identity_url == "https://identity.bitwarden.com/connect/token"
        assert settings.phantombuster_api_url == "https://api.phantombuster.com/api/v2"
        assert settings.typeform_api_url == "https://api.typeform.com"
        assert settings.formstack_api_url == "https://www.formstack.com/api/v2"

    def test_settings_env_prefix(self, monkeypatch):
        """Test that NODEPACK_ prefix works for environment variables."""
        monkeypatch.setenv("NODEPACK_ENV", "production")
        monkeypatch.setenv("NODEPACK_LOG_LEVEL", "debug")
        monkeypatch.setenv("NODEPACK_WEBHOOK_TAG_PREFIX", "acme")

        settings = Settings()

        assert settings.env == "production"
        assert settings.log_level == "DEBUG"
        assert settings.webhook_tag_prefix == "acme"

    def test_http_timeout_validation(self, monkeypatch):
        """Test that http_timeout must be positive."""
        monkeypatch.setenv("NODEPACK_HTTP_TIMEOUT", "0")

        with pytest.raises(ValidationError) as exc_info:
            Settings()

        assert "http_timeout must be positive" in str(exc_info.value)

    def test_vendor_url_override(self, monkeypatch):
        """Self-hosted or staging endpoints come from the environment."""
        monkeypatch.setenv("NODEPACK_TYPEFORM_API_URL", "https://typeform.staging.example.com")

        assert get_settings().typeform_api_url == "https://typeform.staging.example.com"

    def test_get_settings_singleton(self):
        """Test that get_settings returns singleton instance."""
        reset_settings()
        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2

    def test_reset_settings(self):
        """Test that reset_settings clears the singleton."""
        settings1 = get_settings()
        reset_settings()
        settings2 = get_settings()

        assert settings1 is not settings2
