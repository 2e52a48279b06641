"""Turns a transport outcome into an ApiResponse."""

import logging
from typing import Iterable, Optional, Tuple

import httpx

from .api_response import ApiResponse, TransportFailure
from .context import ApiRequest
from .error_parsers import KnownErrorParser
from .exceptions import InvalidPayloadError
from .json_value import JsonNode

logger = logging.getLogger(__name__)


class ApiResponseBuilder:
    """
    Builds ApiResponse objects and runs the known error parser chain.

    Every configured parser runs, in order, even after a match: parsers
    may target different payload shapes and later ones can fill fields an
    earlier one left empty. The first match marks the response as failed.

    The builder holds no per-call state and is safe to share between
    concurrent calls.
    """

    def __init__(self, known_error_parsers: Iterable[KnownErrorParser] = ()):
        self._parsers: Tuple[KnownErrorParser, ...] = tuple(known_error_parsers)

    @property
    def known_error_parsers(self) -> Tuple[KnownErrorParser, ...]:
        return self._parsers

    def build_from_response(
        self,
        response: httpx.Response,
        request: ApiRequest
    ) -> ApiResponse:
        """
        Build from a response the server returned.

        Args:
            response: Transport response (body already read)
            request: Outbound request, carrying resource path and retry info
        """
        raw_body = response.text
        api_response = ApiResponse(
            resource_path=request.resource_path,
            status_code=response.status_code,
            data=self._parse_body(raw_body, request.resource_path),
            raw_body=raw_body,
            is_success=response.is_success,
            retry_info=request.retry_info,
            headers=dict(response.headers),
            request_id=request.request_id,
            reason_phrase=response.reason_phrase,
            elapsed=self._elapsed(response),
        )
        self.run_parsers(api_response)
        return api_response

    def build_from_failure(
        self,
        failure: TransportFailure,
        request: ApiRequest
    ) -> ApiResponse:
        """
        Build from a call that never got a status.

        The parser chain is not run: there is no body to classify.
        """
        return ApiResponse(
            resource_path=request.resource_path,
            is_success=False,
            exception=failure.error,
            retry_info=failure.retry_info,
            request_id=request.request_id,
        )

    def run_parsers(self, api_response: ApiResponse) -> bool:
        """
        Run every parser over the response.

        Returns:
            True if at least one parser found a known error.
        """
        matched = False
        for parser in self._parsers:
            try:
                found = parser.parse_known_errors(api_response)
            except Exception as e:
                logger.warning(
                    "Known error parser %s failed for %s: %s",
                    parser.__class__.__name__,
                    api_response.resource_path,
                    e,
                )
                continue
            if found and not matched:
                matched = True
                api_response.is_success = False
        return matched

    @staticmethod
    def _parse_body(raw_body: str, resource_path: str) -> Optional[JsonNode]:
        if not raw_body or not raw_body.strip():
            return None
        try:
            return JsonNode.parse(raw_body)
        except InvalidPayloadError as e:
            logger.debug("Response body for %s is not JSON: %s", resource_path, e.message)
            return None

    @staticmethod
    def _elapsed(response: httpx.Response) -> Optional[float]:
        # elapsed доступен только после закрытия ответа
        try:
            return response.elapsed.total_seconds()
        except RuntimeError:
            return None
