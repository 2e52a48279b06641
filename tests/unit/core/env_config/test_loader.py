"""
Tests for environment configuration loading.
"""

import os

import pytest
from pydantic import ValidationError

from http_api_client.core.config import ApiClientOptions
from http_api_client.core.env_config.loader import load_from_env
from http_api_client.core.env_config.validator import ApiClientSettings
from http_api_client.core.error_parsers import ProblemDetailsErrorParser
from http_api_client.core.logging.config import LogFormat, LogLevel


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """No API_CLIENT_* variables and no stray .env from the working directory."""
    for key in list(os.environ):
        if key.startswith("API_CLIENT_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


class TestLoadFromEnv:
    """Test load_from_env function."""

    def test_load_with_defaults(self):
        options = load_from_env()
        assert isinstance(options, ApiClientOptions)
        assert options.base_url is None
        assert options.timeout.connect == 5.0
        assert options.retry.max_attempts == 3
        assert options.logging is None
        assert isinstance(options.known_error_parsers[0], ProblemDetailsErrorParser)

    def test_load_from_environment(self, monkeypatch):
        monkeypatch.setenv("API_CLIENT_BASE_URL", "https://env.example.com/")
        monkeypatch.setenv("API_CLIENT_RETRY_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("API_CLIENT_SERIALIZER_CAMEL_CASE_PROPERTIES", "true")
        monkeypatch.setenv("API_CLIENT_PROBLEM_DETAILS_PARSER", "false")

        options = load_from_env()

        assert options.base_url == "https://env.example.com"
        assert options.retry.max_attempts == 5
        assert options.serializer.camel_case_properties is True
        assert options.known_error_parsers == ()

    def test_load_from_env_file(self, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text(
            "API_CLIENT_BASE_URL=https://file.example.com\n"
            "API_CLIENT_TIMEOUT_CONNECT=15.0\n"
            "API_CLIENT_LOG_LEVEL=debug\n"
            "API_CLIENT_LOG_FORMAT=json\n"
        )

        options = load_from_env(env_file=str(env_file))

        assert options.base_url == "https://file.example.com"
        assert options.timeout.connect == 15.0
        assert options.logging.level == LogLevel.DEBUG
        assert options.logging.format == LogFormat.JSON

    def test_default_dotenv_in_cwd(self, tmp_path):
        (tmp_path / ".env").write_text("API_CLIENT_BASE_URL=https://dotenv.example.com\n")
        assert load_from_env().base_url == "https://dotenv.example.com"

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("API_CLIENT_BASE_URL", "https://env.example.com")
        options = load_from_env(base_url="https://override.example.com", timeout_read=90.0)
        assert options.base_url == "https://override.example.com"
        assert options.timeout.read == 90.0


class TestApiClientSettings:
    """Validation of raw settings."""

    def test_rejects_non_http_base_url(self):
        with pytest.raises(ValidationError):
            ApiClientSettings(base_url="ftp://example.com")

    def test_rejects_out_of_range_retries(self):
        with pytest.raises(ValidationError):
            ApiClientSettings(retry_max_attempts=0)

    def test_file_logging_requires_path(self):
        with pytest.raises(ValidationError):
            ApiClientSettings(log_level="INFO", log_enable_file=True)

    def test_negative_timeout(self):
        with pytest.raises(ValidationError):
            ApiClientSettings(timeout_connect=-1)
