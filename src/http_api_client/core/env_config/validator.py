"""
Pydantic settings for environment configuration.

Flat API_CLIENT_* variables validated by pydantic-settings and converted
into the frozen option dataclasses used by ApiClient.
"""

from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiClientSettings(BaseSettings):
    """
    ApiClient configuration from environment variables.

    Reads from:
    1. Environment variables (API_CLIENT_*)
    2. .env file
    3. Defaults

    Example .env file:
        API_CLIENT_BASE_URL=https://api.example.com
        API_CLIENT_TIMEOUT_CONNECT=5.0
        API_CLIENT_TIMEOUT_READ=30.0
        API_CLIENT_RETRY_MAX_ATTEMPTS=4
        API_CLIENT_SERIALIZER_CAMEL_CASE_PROPERTIES=true
        API_CLIENT_LOG_LEVEL=DEBUG

    Usage:
        >>> settings = ApiClientSettings()
        >>> settings.base_url
        'https://api.example.com'
    """

    model_config = SettingsConfigDict(
        env_prefix='API_CLIENT_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    base_url: str = Field(default="", description="Base URL of the target API")

    # Timeouts
    timeout_connect: float = Field(default=5.0, gt=0)
    timeout_read: float = Field(default=30.0, gt=0)
    timeout_write: Optional[float] = Field(default=None, gt=0)
    timeout_pool: Optional[float] = Field(default=None, gt=0)

    # Retry
    retry_max_attempts: int = Field(default=3, ge=1, le=10)
    retry_backoff_base: float = Field(default=0.5, ge=0)
    retry_backoff_factor: float = Field(default=2.0, ge=1.0)
    retry_backoff_jitter: bool = Field(default=True)
    retry_backoff_max: float = Field(default=60.0, gt=0)
    retry_respect_retry_after: bool = Field(default=True)

    # Serializer
    serializer_serialize_null_values: bool = Field(default=False)
    serializer_serialize_enums_as_strings: bool = Field(default=False)
    serializer_camel_case_properties: bool = Field(default=False)
    serializer_indented: bool = Field(default=False)

    # Transport
    verify_ssl: bool = Field(default=True)
    follow_redirects: bool = Field(default=True)

    # Known error parsers
    problem_details_parser: bool = Field(
        default=True, description="Install ProblemDetailsErrorParser"
    )

    # Logging (disabled unless a level is given)
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None
    log_format: Literal["json", "text"] = Field(default="text")
    log_enable_console: bool = Field(default=True)
    log_enable_file: bool = Field(default=False)
    log_file_path: Optional[str] = None
    log_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    log_backup_count: int = Field(default=5, ge=0)
    log_enable_correlation_id: bool = Field(default=True)

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Only absolute http(s) URLs, without trailing slash."""
        if v and not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must start with http:// or https://, got {v!r}")
        return v.rstrip("/")

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper() or None
        return v

    @model_validator(mode='after')
    def validate_file_path(self) -> "ApiClientSettings":
        """file_path is required when enable_file=True."""
        if self.log_enable_file and not self.log_file_path:
            raise ValueError("log_file_path is required when log_enable_file=True")
        return self
