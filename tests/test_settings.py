"""
Tests for clawconfig settings.
"""

import logging

import pytest

from clawconfig.config import DEFAULT_PROXY_URL, AppSettings, configure_logging, get_settings

ENV_VARS = (
    "ENCRYPTION_KEY",
    "NGROK_DOMAIN",
    "API_URL",
    "CLAWCONFIG_ENVIRONMENT",
    "CLAWCONFIG_DEBUG",
    "CLAWCONFIG_LOG_LEVEL",
    "CLAWCONFIG_GENERATOR_TAG",
    "CLAWCONFIG_INSTANCES_DIR",
    "CLAWCONFIG_API_BASE_URL",
    "CLAWCONFIG_API_TOKEN",
    "CLAWCONFIG_INSTRUCTIONS_DIR",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove settings variables and reset the settings cache."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


class TestProxyBaseUrl:
    """Tests for proxy URL precedence."""

    def test_ngrok_wins(self):
        settings = AppSettings(ngrok_domain="abc.ngrok.app", api_url="https://api.example.com")

        assert settings.proxy_base_url == "https://abc.ngrok.app"

    def test_api_url(self):
        assert AppSettings(api_url="https://api.example.com").proxy_base_url == "https://api.example.com"

    def test_default(self):
        assert AppSettings().proxy_base_url == DEFAULT_PROXY_URL == "http://localhost:3001"


class TestGetSettings:
    """Tests for environment loading."""

    def test_defaults(self, clean_env):
        settings = get_settings()

        assert settings.environment == "development"
        assert settings.debug is False
        assert settings.generator_tag == "fasterclaw"
        assert settings.encryption_key.get_secret_value() == ""
        assert settings.api_token is None
        assert settings.proxy_base_url == DEFAULT_PROXY_URL

    def test_from_environment(self, clean_env):
        clean_env.setenv("ENCRYPTION_KEY", "ab" * 32)
        clean_env.setenv("NGROK_DOMAIN", "abc.ngrok.app")
        clean_env.setenv("CLAWCONFIG_DEBUG", "true")
        clean_env.setenv("CLAWCONFIG_GENERATOR_TAG", "staging")
        clean_env.setenv("CLAWCONFIG_API_TOKEN", "internal-token")

        settings = get_settings()

        assert settings.encryption_key.get_secret_value() == "ab" * 32
        assert settings.proxy_base_url == "https://abc.ngrok.app"
        assert settings.debug is True
        assert settings.generator_tag == "staging"
        assert settings.api_token.get_secret_value() == "internal-token"

    def test_cached(self, clean_env):
        assert get_settings() is get_settings()

    def test_secrets_not_in_repr(self, clean_env):
        clean_env.setenv("ENCRYPTION_KEY", "ab" * 32)

        assert "abab" not in repr(get_settings())


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_accepts_level_name(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

        configure_logging("debug")

        assert calls[0]["level"] == logging.DEBUG
