"""
Structured logging for HTTP API Client.

Example:
    >>> from http_api_client.core.logging import ApiClientLogger, LoggingConfig
    >>> logger = ApiClientLogger(LoggingConfig.create(level="DEBUG", format="json"))
    >>> logger.info("Request started", method="GET", resource_path="/users")
"""

from .config import LoggingConfig, LogLevel, LogFormat
from .logger import ApiClientLogger, DEFAULT_LOGGER_NAME
from .formatters import JSONFormatter, TextFormatter, get_formatter
from .filters import (
    CorrelationIdFilter,
    ExtraFieldsFilter,
    set_correlation_id,
    reset_correlation_id,
    get_correlation_id,
    clear_correlation_id,
)
from .handlers import create_console_handler, create_file_handler

__all__ = [
    "LoggingConfig",
    "LogLevel",
    "LogFormat",
    "ApiClientLogger",
    "DEFAULT_LOGGER_NAME",
    "JSONFormatter",
    "TextFormatter",
    "get_formatter",
    "CorrelationIdFilter",
    "ExtraFieldsFilter",
    "set_correlation_id",
    "reset_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
    "create_console_handler",
    "create_file_handler",
]
