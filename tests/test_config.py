"""Tests for ClientConfig dataclass."""

import dataclasses

import pytest

from nutshell_client.config import DEFAULT_BASE_URL, STREAM_PATH, SUMMARIZE_PATH, ClientConfig


class TestDefaultConfig:
    def test_default_config_valid(self):
        config = ClientConfig()
        assert config.base_url == DEFAULT_BASE_URL
        assert config.connect_timeout == 15.0
        assert config.read_timeout == 120.0
        assert config.pacing_delay == 0.03
        assert config.max_attempts == 3
        assert config.retry_base_delay == 1.0
        assert config.retry_max_delay == 5.0

    def test_urls(self):
        config = ClientConfig(base_url="http://localhost:7860/")
        assert config.stream_url == "http://localhost:7860" + STREAM_PATH
        assert config.summarize_url == "http://localhost:7860" + SUMMARIZE_PATH


class TestValidation:
    def test_invalid_base_url(self):
        with pytest.raises(ValueError, match="base_url must start with"):
            ClientConfig(base_url="localhost:7860")

    def test_invalid_connect_timeout(self):
        with pytest.raises(ValueError, match="connect_timeout must be > 0"):
            ClientConfig(connect_timeout=0)

    def test_invalid_pacing_delay(self):
        with pytest.raises(ValueError, match="pacing_delay must be >= 0"):
            ClientConfig(pacing_delay=-0.01)

    def test_zero_pacing_allowed(self):
        assert ClientConfig(pacing_delay=0).pacing_delay == 0

    def test_invalid_max_attempts(self):
        with pytest.raises(ValueError, match="max_attempts must be >= 1"):
            ClientConfig(max_attempts=0)

    def test_max_delay_below_base(self):
        with pytest.raises(ValueError, match="retry_max_delay.*must be >="):
            ClientConfig(retry_base_delay=2.0, retry_max_delay=1.0)

    def test_multiple_errors_reported(self):
        with pytest.raises(ValueError) as exc_info:
            ClientConfig(read_timeout=0, extraction_timeout=0)
        assert "read_timeout" in str(exc_info.value)
        assert "extraction_timeout" in str(exc_info.value)


class TestFrozen:
    def test_cannot_mutate(self):
        config = ClientConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.max_attempts = 10


class TestFromEnv:
    def test_defaults_when_unset(self, monkeypatch):
        for name in ("NUTSHELL_BASE_URL", "NUTSHELL_CONNECT_TIMEOUT", "NUTSHELL_READ_TIMEOUT",
                     "NUTSHELL_PACING_DELAY_MS", "NUTSHELL_MAX_ATTEMPTS"):
            monkeypatch.delenv(name, raising=False)
        assert ClientConfig.from_env() == ClientConfig()

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("NUTSHELL_BASE_URL", "http://localhost:7860")
        monkeypatch.setenv("NUTSHELL_READ_TIMEOUT", "60")
        monkeypatch.setenv("NUTSHELL_PACING_DELAY_MS", "50")
        monkeypatch.setenv("NUTSHELL_MAX_ATTEMPTS", "5")
        config = ClientConfig.from_env()
        assert config.base_url == "http://localhost:7860"
        assert config.read_timeout == 60.0
        assert config.pacing_delay == pytest.approx(0.05)
        assert config.max_attempts == 5

    def test_blank_value_ignored(self, monkeypatch):
        monkeypatch.setenv("NUTSHELL_MAX_ATTEMPTS", "  ")
        assert ClientConfig.from_env().max_attempts == 3

    def test_unparseable_value(self, monkeypatch):
        monkeypatch.setenv("NUTSHELL_MAX_ATTEMPTS", "lots")
        with pytest.raises(ValueError, match="Invalid value for NUTSHELL_MAX_ATTEMPTS"):
            ClientConfig.from_env()

    def test_converted_value_still_validated(self, monkeypatch):
        monkeypatch.setenv("NUTSHELL_MAX_ATTEMPTS", "0")
        with pytest.raises(ValueError, match="Invalid ClientConfig"):
            ClientConfig.from_env()
