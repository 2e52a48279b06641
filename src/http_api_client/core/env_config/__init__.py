"""
Environment and file configuration for ApiClient.

Example:
    >>> from http_api_client.core.env_config import load_from_env, ConfigFileLoader
    >>>
    >>> # Load from API_CLIENT_* variables and .env
    >>> options = load_from_env()
    >>>
    >>> # Load with overrides
    >>> options = load_from_env(base_url="https://custom.api.com")
    >>>
    >>> # Load from YAML
    >>> options = ConfigFileLoader.from_file("api.yaml")
"""

from .file_loader import ConfigFileLoader, ConfigValidationError
from .loader import load_from_env, settings_to_options
from .validator import ApiClientSettings

__all__ = [
    "load_from_env",
    "settings_to_options",
    "ApiClientSettings",
    "ConfigFileLoader",
    "ConfigValidationError",
]
