"""
ApiClientLogger: wires LoggingConfig into the standard logging module.
"""

import logging
from typing import Any, Dict, List, Optional

from .config import LoggingConfig, LogLevel
from .filters import CorrelationIdFilter, ExtraFieldsFilter
from .formatters import get_formatter
from .handlers import create_console_handler, create_file_handler
from ...utils.sanitizer import mask_sensitive_data

DEFAULT_LOGGER_NAME = "http_api_client"

# logger name -> (open instances, propagate value before the first one)
_active: Dict[str, List[Any]] = {}


class ApiClientLogger:
    """
    Logger facade used by ApiClient.

    Installs handlers on the named logger and masks sensitive values in
    extra fields. ApiClient passes a per-client child name
    (``http_api_client.<host>``). Several instances may share one name: each
    one only owns, and on close() only removes, the handlers it installed.

    Example:
        >>> logger = ApiClientLogger(LoggingConfig.create(level="DEBUG"))
        >>> logger.info("Request completed", method="GET", status_code=200)
        >>> logger.close()
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: str = DEFAULT_LOGGER_NAME):
        self.config = config or LoggingConfig()
        self.name = name
        self._closed = False
        self._handlers: List[logging.Handler] = []

        self._logger = logging.getLogger(name)
        self._logger.setLevel(self._get_level(self.config.level))
        state = _active.setdefault(name, [0, self._logger.propagate])
        state[0] += 1
        self._logger.propagate = False

        filters = []
        if self.config.enable_correlation_id:
            filters.append(CorrelationIdFilter())
        if self.config.extra_fields:
            filters.append(ExtraFieldsFilter(self.config.extra_fields))

        formatter = get_formatter(self.config.format.value)
        level = self._get_level(self.config.level)

        if self.config.enable_console:
            self._handlers.append(create_console_handler(level, formatter, filters))

        if self.config.enable_file and self.config.file_path:
            self._handlers.append(create_file_handler(
                file_path=self.config.file_path,
                level=level,
                formatter=formatter,
                max_bytes=self.config.max_bytes,
                backup_count=self.config.backup_count,
                filters=filters,
            ))

        if not self._handlers:
            self._handlers.append(logging.NullHandler())

        for handler in self._handlers:
            self._logger.addHandler(handler)

    @staticmethod
    def _get_level(level: LogLevel) -> int:
        return getattr(logging, level.value)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def _log(self, level: int, message: str, kwargs: Any, exc_info: bool = False) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, message, extra=mask_sensitive_data(kwargs), exc_info=exc_info)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log at ERROR with the current exception's traceback."""
        self._log(logging.ERROR, message, kwargs, exc_info=True)

    def close(self) -> None:
        """
        Flush, close and remove the handlers this instance installed.
        When the last instance on this logger name closes, propagation goes
        back to what it was before the first one.
        Idempotent.
        """
        if self._closed:
            return

        for handler in self._handlers:
            self._logger.removeHandler(handler)
            try:
                handler.flush()
                handler.close()
            except (OSError, ValueError):
                pass
        self._handlers = []

        state = _active[self.name]
        state[0] -= 1
        if state[0] == 0:
            self._logger.propagate = state[1]
            del _active[self.name]
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
