"""
Tests for ApiClientLogger and handlers.
"""

import json
import logging
from logging.handlers import RotatingFileHandler

from http_api_client.core.logging.config import LoggingConfig, LogLevel
from http_api_client.core.logging.filters import set_correlation_id
from http_api_client.core.logging.handlers import create_console_handler, create_file_handler
from http_api_client.core.logging.formatters import TextFormatter
from http_api_client.core.logging.logger import DEFAULT_LOGGER_NAME, ApiClientLogger


class TestApiClientLogger:
    """Tests for ApiClientLogger class."""

    def test_creation_with_defaults(self):
        logger = ApiClientLogger()
        try:
            assert logger.name == DEFAULT_LOGGER_NAME
            assert logger.config.level == LogLevel.INFO
            assert logger.logger.propagate is False
        finally:
            logger.close()

    def test_no_outputs_installs_null_handler(self):
        logger = ApiClientLogger(
            LoggingConfig.create(enable_console=False), name="test.null"
        )
        assert len(logger.logger.handlers) == 1
        assert isinstance(logger.logger.handlers[0], logging.NullHandler)
        logger.close()

    def test_shared_name_keeps_each_instance_handlers(self, tmp_path):
        first_file = tmp_path / "first.log"
        second_file = tmp_path / "second.log"
        first = ApiClientLogger(
            LoggingConfig.create(enable_console=False, enable_file=True, file_path=str(first_file)),
            name="test.shared",
        )
        second = ApiClientLogger(
            LoggingConfig.create(enable_console=False, enable_file=True, file_path=str(second_file)),
            name="test.shared",
        )
        assert len(first.logger.handlers) == 2

        second.close()
        first.info("still here")
        assert first.logger.propagate is False
        first.close()

        assert "still here" in first_file.read_text(encoding="utf-8")
        assert "still here" not in second_file.read_text(encoding="utf-8")
        assert first.logger.handlers == []
        assert first.logger.propagate is True

    def test_file_logging_json_with_masking(self, tmp_path):
        log_file = tmp_path / "logs" / "client.log"
        config = LoggingConfig.create(
            level="DEBUG",
            format="json",
            enable_console=False,
            enable_file=True,
            file_path=str(log_file),
            extra_fields={"service": "billing"},
        )

        with ApiClientLogger(config, name="test.file") as logger:
            set_correlation_id("req-77")
            logger.info(
                "Request started",
                method="GET",
                authorization="Bearer secret-token",
                url="https://api.example.com/?api_key=k123",
            )

        data = json.loads(log_file.read_text(encoding="utf-8").strip())
        assert data["message"] == "Request started"
        assert data["method"] == "GET"
        assert data["service"] == "billing"
        assert data["correlation_id"] == "req-77"
        assert "secret-token" not in data["authorization"]
        assert "k123" not in data["url"]

    def test_level_filtering(self, tmp_path):
        log_file = tmp_path / "client.log"
        config = LoggingConfig.create(
            level="WARNING",
            enable_console=False,
            enable_file=True,
            file_path=str(log_file),
        )

        with ApiClientLogger(config, name="test.level") as logger:
            logger.debug("hidden")
            logger.info("hidden too")
            logger.warning("shown")
            assert logger.is_enabled_for(logging.WARNING)
            assert not logger.is_enabled_for(logging.INFO)

        content = log_file.read_text(encoding="utf-8")
        assert "shown" in content
        assert "hidden" not in content

    def test_exception_logs_traceback(self, tmp_path):
        log_file = tmp_path / "client.log"
        config = LoggingConfig.create(enable_console=False, enable_file=True, file_path=str(log_file))

        with ApiClientLogger(config, name="test.exc") as logger:
            try:
                raise RuntimeError("kaput")
            except RuntimeError:
                logger.exception("Something failed")

        content = log_file.read_text(encoding="utf-8")
        assert "Something failed" in content
        assert "RuntimeError: kaput" in content

    def test_close_idempotent_and_restores_defaults(self):
        logger = ApiClientLogger(LoggingConfig.create(), name="test.close")
        logger.close()
        logger.close()
        assert logger.logger.propagate is True
        assert logger.logger.handlers == []

    def test_close_leaves_foreign_handlers(self):
        package_logger = logging.getLogger(DEFAULT_LOGGER_NAME)
        before = list(package_logger.handlers)

        logger = ApiClientLogger(LoggingConfig.create())
        logger.close()

        assert package_logger.handlers == before
        assert package_logger.propagate is True


class TestHandlers:

    def test_console_handler(self):
        handler = create_console_handler(logging.INFO, TextFormatter())
        assert handler.level == logging.INFO
        assert isinstance(handler.formatter, TextFormatter)

    def test_file_handler_creates_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "app.log"
        handler = create_file_handler(str(path), logging.DEBUG, TextFormatter(), max_bytes=1024)
        try:
            assert isinstance(handler, RotatingFileHandler)
            assert path.parent.exists()
            assert handler.maxBytes == 1024
        finally:
            handler.close()
