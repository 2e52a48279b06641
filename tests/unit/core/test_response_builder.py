"""Тесты ApiResponseBuilder."""

import logging

import httpx
import pytest

from http_api_client.core.api_response import TransportFailure
from http_api_client.core.context import ApiRequest, ExecutionContext
from http_api_client.core.error_parsers import (
    ERROR_RETURNED_BY_SERVER,
    KnownErrorParser,
    ProblemDetailsErrorParser,
)
from http_api_client.core.exceptions import ConnectionError
from http_api_client.core.response_builder import ApiResponseBuilder
from http_api_client.core.retry_engine import RetryInfo

LOGGER_NAME = "http_api_client.core.response_builder"


def make_request(path: str = "/users", retry_info: RetryInfo = None) -> ApiRequest:
    http_request = httpx.Request("GET", f"https://api.example.com{path}")
    return ApiRequest(
        method="GET",
        resource_path=path,
        http_request=http_request,
        context=ExecutionContext("GET " + path),
        retry_info=retry_info,
    )


def make_httpx_response(status_code: int, **kwargs) -> httpx.Response:
    return httpx.Response(
        status_code,
        request=httpx.Request("GET", "https://api.example.com/users"),
        **kwargs,
    )


class RecordingParser(KnownErrorParser):
    def __init__(self, result, calls):
        self.result = result
        self.calls = calls

    def parse_known_errors(self, response):
        self.calls.append(self)
        if self.result:
            response.error_detail = response.error_detail or f"from {len(self.calls)}"
        return self.result


class ExplodingParser(KnownErrorParser):
    def parse_known_errors(self, response):
        raise RuntimeError("parser bug")


class TestBuildFromResponse:

    def test_success_json(self):
        builder = ApiResponseBuilder()
        request = make_request()
        response = builder.build_from_response(
            make_httpx_response(200, json={"users": [{"name": "alice"}]}),
            request,
        )

        assert response.is_success is True
        assert response.status_code == 200
        assert response.data.select("users[0].name").as_str() == "alice"
        assert '"alice"' in response.raw_body
        assert response.exception is None
        assert response.resource_path == "/users"
        assert response.request_id == request.request_id
        assert response.reason_phrase == "OK"

    def test_non_2xx_is_failure(self):
        response = ApiResponseBuilder().build_from_response(
            make_httpx_response(503, text="unavailable"), make_request()
        )
        assert response.is_success is False
        assert response.status_code == 503

    def test_empty_body(self):
        response = ApiResponseBuilder().build_from_response(
            make_httpx_response(204), make_request()
        )
        assert response.data is None
        assert response.raw_body == ""
        assert response.is_success is True

    def test_non_json_body_kept_raw(self):
        response = ApiResponseBuilder().build_from_response(
            make_httpx_response(200, text="<html>hi</html>"), make_request()
        )
        assert response.data is None
        assert response.raw_body == "<html>hi</html>"
        assert response.is_success is True

    def test_retry_info_copied(self):
        info = RetryInfo().next_retry(0.5, status_code=503)
        response = ApiResponseBuilder().build_from_response(
            make_httpx_response(200, json={}), make_request(retry_info=info)
        )
        assert response.retry_info is info
        assert response.retry_count == 1

    def test_known_error_on_2xx_flips_success(self):
        builder = ApiResponseBuilder([ProblemDetailsErrorParser()])
        response = builder.build_from_response(
            make_httpx_response(200, json={"error": {"title": "Quota", "detail": "Exceeded"}}),
            make_request(),
        )

        assert response.status_code == 200
        assert response.is_success is False
        assert response.error_type == ERROR_RETURNED_BY_SERVER
        assert response.error_message == "Quota: Exceeded"


class TestParserChain:

    def test_all_parsers_run_in_order(self):
        calls = []
        first = RecordingParser(True, calls)
        second = RecordingParser(True, calls)
        third = RecordingParser(False, calls)
        builder = ApiResponseBuilder([first, second, third])

        response = builder.build_from_response(make_httpx_response(200, json={}), make_request())

        assert calls == [first, second, third]
        assert response.is_success is False
        # первый match не перезаписывается последующими
        assert response.error_detail == "from 1"

    def test_no_match_keeps_success(self):
        calls = []
        builder = ApiResponseBuilder([RecordingParser(False, calls)])
        response = builder.build_from_response(make_httpx_response(200, json={}), make_request())
        assert response.is_success is True

    def test_parser_exception_is_not_a_match(self, caplog):
        calls = []
        builder = ApiResponseBuilder([ExplodingParser(), RecordingParser(False, calls)])
        module_logger = logging.getLogger(LOGGER_NAME)
        module_logger.addHandler(caplog.handler)

        try:
            with caplog.at_level("WARNING", logger=LOGGER_NAME):
                response = builder.build_from_response(
                    make_httpx_response(200, json={}), make_request()
                )
        finally:
            module_logger.removeHandler(caplog.handler)

        assert response.is_success is True
        assert len(calls) == 1
        assert "ExplodingParser" in caplog.text

    def test_run_parsers_return_value(self):
        builder = ApiResponseBuilder([ProblemDetailsErrorParser()])
        response = builder.build_from_response(
            make_httpx_response(400, json={"title": "Bad"}), make_request()
        )
        assert builder.run_parsers(response) is True


class TestBuildFromFailure:

    def test_failure_shape(self):
        calls = []
        builder = ApiResponseBuilder([RecordingParser(True, calls)])
        error = ConnectionError("Connection refused", "https://api.example.com/users")
        info = RetryInfo().next_retry(0.1, error=error).next_retry(0.2, error=error)
        request = make_request()

        response = builder.build_from_failure(TransportFailure(error, info), request)

        assert response.status_code is None
        assert response.exception is error
        assert response.is_success is False
        assert response.is_transport_failure is True
        assert response.retry_info.retry_count == 2
        assert response.request_id == request.request_id
        assert calls == []

    def test_raise_for_error(self):
        error = ConnectionError("Connection refused")
        response = ApiResponseBuilder().build_from_failure(
            TransportFailure(error), make_request()
        )
        with pytest.raises(ConnectionError):
            response.raise_for_error()
