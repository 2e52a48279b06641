"""
Configuration file loader for YAML and JSON files.

Supports loading ApiClientOptions from external configuration files.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..config import ApiClientOptions, RetryConfig, SerializerOptions, TimeoutConfig
from ..error_parsers import ProblemDetailsErrorParser
from ..exceptions import ConfigurationError
from ..logging import LoggingConfig

CONFIG_FILE_ENV = "API_CLIENT_CONFIG_FILE"

_RETRY_KEYS = (
    "max_attempts",
    "backoff_base",
    "backoff_factor",
    "backoff_max",
    "backoff_jitter",
    "respect_retry_after",
    "retry_after_max",
)


class ConfigValidationError(ConfigurationError):
    """Raised when configuration file is invalid."""


class ConfigFileLoader:
    """
    Загрузчик конфигурации из файлов.

    Supports YAML and JSON formats with automatic format detection.
    Конфиг может лежать в корне файла или в секции ``api_client``.

    Examples:
        >>> options = ConfigFileLoader.from_yaml("api.yaml")
        >>> options = ConfigFileLoader.from_json("api.json")
        >>> options = ConfigFileLoader.from_file("api.yaml")  # Auto-detect
        >>> options = ConfigFileLoader.from_env_path()  # From API_CLIENT_CONFIG_FILE

    Example api.yaml:
        api_client:
          base_url: https://api.example.com
          headers:
            Accept: application/json
          timeout: {connect: 5, read: 30}
          retry: {max_attempts: 4, retry_on_status: [502, 503]}
          serializer: {camel_case_properties: true}
          known_error_parsers: [problem_details]
          logging: {level: DEBUG, format: json}
    """

    @staticmethod
    def from_yaml(path: Union[str, Path]) -> ApiClientOptions:
        """
        Загрузить конфиг из YAML файла.

        Raises:
            FileNotFoundError: Если файл не найден
            ConfigValidationError: Если конфиг невалидный
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML syntax in {path}: {e}") from e

        if not data:
            raise ConfigValidationError(f"Empty config file: {path}")

        return ConfigFileLoader._build_config(data, str(path))

    @staticmethod
    def from_json(path: Union[str, Path]) -> ApiClientOptions:
        """
        Загрузить конфиг из JSON файла.

        Raises:
            FileNotFoundError: Если файл не найден
            ConfigValidationError: Если конфиг невалидный
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid JSON syntax in {path}: {e}") from e

        if not data:
            raise ConfigValidationError(f"Empty config file: {path}")

        return ConfigFileLoader._build_config(data, str(path))

    @staticmethod
    def from_file(path: Union[str, Path]) -> ApiClientOptions:
        """
        Автоопределение формата по расширению (.yaml, .yml, .json).

        Raises:
            ValueError: Если формат не поддерживается
        """
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix in (".yaml", ".yml"):
            return ConfigFileLoader.from_yaml(path)
        elif suffix == ".json":
            return ConfigFileLoader.from_json(path)
        else:
            raise ValueError(
                f"Unsupported config file format: {suffix}. "
                f"Supported formats: .yaml, .yml, .json"
            )

    @staticmethod
    def from_env_path() -> Optional[ApiClientOptions]:
        """Загрузить из пути в API_CLIENT_CONFIG_FILE; None если переменная не задана."""
        config_path = os.environ.get(CONFIG_FILE_ENV)
        if not config_path:
            return None
        return ConfigFileLoader.from_file(config_path)

    @staticmethod
    def _section(config_data: Dict[str, Any], key: str, source: str) -> Dict[str, Any]:
        value = config_data.get(key, {})
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ConfigValidationError(f"{key} must be a dictionary in {source}")
        return value

    @staticmethod
    def _build_config(data: Any, source: str) -> ApiClientOptions:
        """
        Build ApiClientOptions from parsed data.

        Raises:
            ConfigValidationError: If config is invalid
        """
        if isinstance(data, dict) and "api_client" in data:
            config_data = data["api_client"]
        else:
            config_data = data

        if not isinstance(config_data, dict):
            raise ConfigValidationError(
                f"Config must be a dictionary, got {type(config_data).__name__} in {source}"
            )

        section = ConfigFileLoader._section

        try:
            timeout_data = section(config_data, "timeout", source)
            timeout_cfg = TimeoutConfig(
                connect=timeout_data.get("connect", 5.0),
                read=timeout_data.get("read", 30.0),
                write=timeout_data.get("write"),
                pool=timeout_data.get("pool"),
            )

            retry_data = section(config_data, "retry", source)
            retry_kwargs = {k: retry_data[k] for k in _RETRY_KEYS if k in retry_data}
            if "retry_on_status" in retry_data:
                retry_kwargs["retryable_status_codes"] = frozenset(retry_data["retry_on_status"])
            if "idempotent_methods" in retry_data:
                retry_kwargs["idempotent_methods"] = frozenset(retry_data["idempotent_methods"])
            retry_cfg = RetryConfig(**retry_kwargs)

            serializer_data = section(config_data, "serializer", source)
            unknown = set(serializer_data) - set(SerializerOptions.__dataclass_fields__)
            if unknown:
                raise ConfigValidationError(
                    f"Unknown serializer options {sorted(unknown)} in {source}"
                )
            serializer_cfg = SerializerOptions(**serializer_data)

            logging_cfg = None
            if config_data.get("logging") is not None:
                logging_data = section(config_data, "logging", source)
                logging_cfg = LoggingConfig.create(
                    level=logging_data.get("level", "INFO"),
                    format=logging_data.get("format", "text"),
                    enable_console=logging_data.get("enable_console", True),
                    enable_file=logging_data.get("enable_file", False),
                    file_path=logging_data.get("file_path"),
                    enable_correlation_id=logging_data.get("enable_correlation_id", True),
                )

            headers = section(config_data, "headers", source)
            parsers = ConfigFileLoader._build_parsers(
                config_data.get("known_error_parsers", ["problem_details"]), source
            )

            return ApiClientOptions(
                base_url=config_data.get("base_url"),
                headers={str(k): str(v) for k, v in headers.items()},
                timeout=timeout_cfg,
                retry=retry_cfg,
                serializer=serializer_cfg,
                known_error_parsers=parsers,
                verify_ssl=config_data.get("verify_ssl", True),
                follow_redirects=config_data.get("follow_redirects", True),
                logging=logging_cfg,
            )

        except (ValueError, TypeError) as e:
            raise ConfigValidationError(f"Invalid config in {source}: {e}") from e

    @staticmethod
    def _build_parsers(names: Any, source: str) -> tuple:
        if names is None:
            return ()
        if not isinstance(names, list):
            raise ConfigValidationError(f"known_error_parsers must be a list in {source}")
        parsers = []
        for name in names:
            if name == "problem_details":
                parsers.append(ProblemDetailsErrorParser())
            else:
                raise ConfigValidationError(f"Unknown known error parser {name!r} in {source}")
        return tuple(parsers)
