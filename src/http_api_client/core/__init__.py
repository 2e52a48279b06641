"""Core API Client модули."""

from .exceptions import (
    ApiClientException,
    TransportError,
    TimeoutError,
    ConnectionError,
    DNSError,
    ProxyError,
    ProtocolError,
    RequestCancelledError,
    FatalError,
    SerializationError,
    InvalidPayloadError,
    ConfigurationError,
    ApiResponseError,
    classify_httpx_exception,
)
from .json_value import JsonNode, JsonKind
from .config import (
    TimeoutConfig,
    RetryConfig,
    SerializerOptions,
    ApiClientOptions,
)
from .retry_engine import (
    RetryInfo,
    RetryEngine,
    RetryPolicy,
    NoRetryPolicy,
    BackoffRetryPolicy,
)
from .context import ExecutionContext, ApiRequest
from .api_response import ApiResponse, TransportFailure
from .error_parsers import (
    KnownErrorParser,
    ProblemDetailsErrorParser,
    ERROR_RETURNED_BY_SERVER,
)
from .response_builder import ApiResponseBuilder
from .cancellation import CancellationScope
from .api_client import ApiClient

__all__ = [
    # Client
    "ApiClient",
    "ApiResponse",
    "ApiResponseBuilder",
    "TransportFailure",
    "ApiRequest",
    "ExecutionContext",
    "CancellationScope",
    # Config
    "TimeoutConfig",
    "RetryConfig",
    "SerializerOptions",
    "ApiClientOptions",
    # Retry
    "RetryInfo",
    "RetryEngine",
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
    "FatalError",
    "SerializationError",
    "InvalidPayloadError",
    "ConfigurationError",
    "ApiResponseError",
    "classify_httpx_exception",
]
