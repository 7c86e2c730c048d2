"""
Tests for configuration loading from environment.
"""

import os

import pytest
from pydantic import ValidationError

from bridge_client.core.config import BridgeClientConfig
from bridge_client.core.env_config import BridgeClientSettings, get_env_file_path, load_from_env
from bridge_client.core.logging.config import LogFormat, LogLevel


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Run in an empty directory without BRIDGE_CLIENT_* variables."""
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("BRIDGE_CLIENT_"):
            monkeypatch.delenv(name)


class TestGetEnvFilePath:

    def test_default(self):
        assert get_env_file_path() == ".env"

    def test_profile(self):
        assert get_env_file_path("production") == ".env.production"

    def test_profile_from_env(self, monkeypatch):
        monkeypatch.setenv("BRIDGE_CLIENT_ENV", "staging")
        assert get_env_file_path() == ".env.staging"


class TestLoadFromEnv:

    def test_defaults(self):
        config = load_from_env()
        assert isinstance(config, BridgeClientConfig)
        assert config.timeout_ms == 30_000
        assert config.retry.max_retries == 3
        assert config.status_cache.fresh_window_ms == 2500
        assert config.logging is None

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("BRIDGE_CLIENT_BASE_URL", "https://bridge.test/")
        monkeypatch.setenv("BRIDGE_CLIENT_API_KEY", "anon-key")
        monkeypatch.setenv("BRIDGE_CLIENT_TIMEOUT_MS", "5000")
        monkeypatch.setenv("BRIDGE_CLIENT_RETRY_MAX_RETRIES", "1")
        monkeypatch.setenv("BRIDGE_CLIENT_STATUS_FRESH_WINDOW_MS", "1000")

        config = load_from_env()

        assert config.base_url == "https://bridge.test"
        assert config.api_key == "anon-key"
        assert config.timeout_ms == 5000
        assert config.retry.max_retries == 1
        assert config.status_cache.fresh_window_ms == 1000

    def test_env_file(self, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text(
            "BRIDGE_CLIENT_BASE_URL=https://from-file.test\n"
            "BRIDGE_CLIENT_RETRY_BASE_DELAY_MS=200\n"
        )

        config = load_from_env(env_file=str(env_file))

        assert config.base_url == "https://from-file.test"
        assert config.retry.base_delay_ms == 200

    def test_profile_file(self, tmp_path):
        (tmp_path / ".env.staging").write_text("BRIDGE_CLIENT_BASE_URL=https://staging.test\n")
        assert load_from_env(profile="staging").base_url == "https://staging.test"

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("BRIDGE_CLIENT_TIMEOUT_MS", "5000")
        config = load_from_env(timeout_ms=7000, retry_max_retries=0)
        assert config.timeout_ms == 7000
        assert config.retry.max_retries == 0

    def test_logging_enabled(self, monkeypatch):
        monkeypatch.setenv("BRIDGE_CLIENT_LOG_ENABLED", "true")
        monkeypatch.setenv("BRIDGE_CLIENT_LOG_LEVEL", "debug")
        monkeypatch.setenv("BRIDGE_CLIENT_LOG_FORMAT", "json")

        config = load_from_env()

        assert config.logging is not None
        assert config.logging.level == LogLevel.DEBUG
        assert config.logging.format == LogFormat.JSON


class TestValidation:

    def test_invalid_base_url(self):
        with pytest.raises(ValidationError):
            BridgeClientSettings(base_url="ftp://bridge.test")

    def test_max_delay_below_base(self):
        with pytest.raises(ValidationError):
            BridgeClientSettings(retry_base_delay_ms=1000, retry_max_delay_ms=100)

    def test_file_logging_requires_path(self):
        with pytest.raises(ValidationError):
            BridgeClientSettings(log_enable_file=True)

    def test_negative_retries(self):
        with pytest.raises(ValidationError):
            BridgeClientSettings(retry_max_retries=-1)
