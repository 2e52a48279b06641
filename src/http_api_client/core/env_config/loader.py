"""
Configuration loader from environment variables and .env files.

Main entry point for loading ApiClientOptions outside of code.
"""

from typing import Any, Optional

from ..config import ApiClientOptions, RetryConfig, SerializerOptions, TimeoutConfig
from ..error_parsers import ProblemDetailsErrorParser
from ..logging.config import LoggingConfig
from .validator import ApiClientSettings


def load_from_env(env_file: Optional[str] = None, **overrides: Any) -> ApiClientOptions:
    """
    Load ApiClientOptions from environment variables.

    Priority (highest to lowest):
    1. **overrides - explicit parameters (same names as ApiClientSettings fields)
    2. Environment variables (API_CLIENT_*)
    3. .env file
    4. Defaults

    Args:
        env_file: Custom .env file path (default: ./.env)
        **overrides: Explicit config overrides

    Returns:
        ApiClientOptions instance

    Raises:
        pydantic.ValidationError: Environment values are invalid

    Example:
        >>> options = load_from_env()
        >>> options = load_from_env(base_url="https://staging.example.com")
        >>> client = ApiClient(options)
    """
    if env_file is not None:
        settings = ApiClientSettings(_env_file=env_file, **overrides)
    else:
        settings = ApiClientSettings(**overrides)
    return settings_to_options(settings)


def settings_to_options(settings: ApiClientSettings) -> ApiClientOptions:
    """Convert validated settings into ApiClientOptions."""
    timeout = TimeoutConfig(
        connect=settings.timeout_connect,
        read=settings.timeout_read,
        write=settings.timeout_write,
        pool=settings.timeout_pool,
    )

    retry = RetryConfig(
        max_attempts=settings.retry_max_attempts,
        backoff_base=settings.retry_backoff_base,
        backoff_factor=settings.retry_backoff_factor,
        backoff_jitter=settings.retry_backoff_jitter,
        backoff_max=settings.retry_backoff_max,
        respect_retry_after=settings.retry_respect_retry_after,
    )

    serializer = SerializerOptions(
        serialize_null_values=settings.serializer_serialize_null_values,
        serialize_enums_as_strings=settings.serializer_serialize_enums_as_strings,
        camel_case_properties=settings.serializer_camel_case_properties,
        indented=settings.serializer_indented,
    )

    logging_config = None
    if settings.log_level is not None:
        logging_config = LoggingConfig(
            level=settings.log_level,
            format=settings.log_format,
            enable_console=settings.log_enable_console,
            enable_file=settings.log_enable_file,
            file_path=settings.log_file_path,
            max_bytes=settings.log_max_bytes,
            backup_count=settings.log_backup_count,
            enable_correlation_id=settings.log_enable_correlation_id,
        )

    parsers = (ProblemDetailsErrorParser(),) if settings.problem_details_parser else ()

    return ApiClientOptions(
        base_url=settings.base_url or None,
        timeout=timeout,
        retry=retry,
        serializer=serializer,
        known_error_parsers=parsers,
        verify_ssl=settings.verify_ssl,
        follow_redirects=settings.follow_redirects,
        logging=logging_config,
    )
