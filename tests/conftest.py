"""
Pytest configuration and fixtures for http-api-client tests.
"""

import httpx
import pytest

from http_api_client.core.api_client import ApiClient
from http_api_client.core.config import ApiClientOptions, RetryConfig
from http_api_client.core.logging.config import LoggingConfig
from http_api_client.core.logging.filters import clear_correlation_id


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return "https://api.example.com"


@pytest.fixture
def fast_retry():
    """RetryConfig without real waiting between attempts."""
    return RetryConfig(max_attempts=3, backoff_base=0.0, backoff_jitter=False)


@pytest.fixture
def make_client(base_url, fast_retry):
    """
    Factory for ApiClient over httpx.MockTransport.

    Example:
        def test_something(make_client):
            client = make_client(lambda request: httpx.Response(200, json={}))
    """
    def factory(handler, **option_kwargs):
        option_kwargs.setdefault("retry", fast_retry)
        transport = httpx.AsyncClient(
            base_url=base_url,
            transport=httpx.MockTransport(handler),
        )
        parsers = option_kwargs.pop(
            "known_error_parsers", ApiClientOptions.create().known_error_parsers
        )
        opts = ApiClientOptions(
            base_url=base_url,
            known_error_parsers=parsers,
            **option_kwargs,
        )
        client = ApiClient(opts, transport=transport)
        return client

    return factory


@pytest.fixture(autouse=True)
def reset_correlation_id():
    clear_correlation_id()
    yield
    clear_correlation_id()


@pytest.fixture
def logging_config():
    """Console DEBUG logging config."""
    return LoggingConfig.create(
        level="DEBUG",
        enable_console=True,
        enable_file=False
    )


@pytest.fixture
def logging_config_with_file(tmp_path):
    """
    LoggingConfig fixture with file logging enabled.

    Uses temporary directory for log files to avoid cleanup issues.
    """
    log_file = tmp_path / "test.log"
    return LoggingConfig.create(
        level="DEBUG",
        enable_console=False,
        enable_file=True,
        file_path=str(log_file)
    )
