"""HTTP API Client - async client for JSON HTTP APIs with uniform responses."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .core.api_client import ApiClient
from .core.api_response import ApiResponse, TransportFailure
from .core.config import (
    ApiClientOptions,
    TimeoutConfig,
    RetryConfig,
    SerializerOptions,
)
from .core.retry_engine import RetryInfo, RetryPolicy, NoRetryPolicy, BackoffRetryPolicy
from .core.context import ExecutionContext
from .core.cancellation import CancellationScope
from .core.json_value import JsonNode, JsonKind
from .core.error_parsers import (
    KnownErrorParser,
    ProblemDetailsErrorParser,
    ERROR_RETURNED_BY_SERVER,
)
from .core.exceptions import (
    ApiClientException,
    TransportError,
    TimeoutError,
    ConnectionError,
    DNSError,
    ProxyError,
    ProtocolError,
    RequestCancelledError,
    SerializationError,
    InvalidPayloadError,
    ConfigurationError,
    ApiResponseError,
)
from .core.logging import ApiClientLogger, LoggingConfig
from .core.env_config import load_from_env, ConfigFileLoader, ConfigValidationError
from .utils.serialization import JsonSerializer

# Set up logging - add NullHandler to prevent "No handler found" warnings
# Users can configure logging themselves using logging.getLogger('http_api_client')
logging.getLogger('http_api_client').addHandler(logging.NullHandler())

# Version info - read from package metadata (single source of truth in pyproject.toml)
try:
    __version__ = version("http-api-client")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__all__ = [
    # Core
    "ApiClient",
    "ApiResponse",
    "TransportFailure",
    "ExecutionContext",
    "CancellationScope",
    "JsonSerializer",

    # Config
    "ApiClientOptions",
    "TimeoutConfig",
    "RetryConfig",
    "SerializerOptions",
    "LoggingConfig",
    "load_from_env",
    "ConfigFileLoader",
    "ConfigValidationError",

    # Retry
    "RetryInfo",
    "RetryPolicy",
    "NoRetryPolicy",
    "BackoffRetryPolicy",

    # JSON
    "JsonNode",
    "JsonKind",

    # Known errors
    "KnownErrorParser",
    "ProblemDetailsErrorParser",
    "ERROR_RETURNED_BY_SERVER",

    # Exceptions
    "ApiClientException",
    "TransportError",
    "TimeoutError",
    "ConnectionError",
    "DNSError",
    "ProxyError",
    "ProtocolError",
    "RequestCancelledError",
    "SerializationError",
    "InvalidPayloadError",
    "ConfigurationError",
    "ApiResponseError",

    # Logging
    "ApiClientLogger",

    # Version
    "__version__",
]
