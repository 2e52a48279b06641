"""Structured result of one ApiClient call."""

from dataclasses import dataclass, field
from typing import Mapping, Optional

from .exceptions import ApiClientException, ApiResponseError
from .json_value import JsonNode
from .retry_engine import RetryInfo


@dataclass(frozen=True)
class TransportFailure:
    """A call that never got an HTTP status, plus its retry history.

    Retry metadata travels next to the exception instead of being attached
    to the exception object.
    """

    error: ApiClientException
    retry_info: Optional[RetryInfo] = None


@dataclass
class ApiResponse:
    """Result of a single call: either a server answer or a transport failure.

    Exactly one of ``status_code`` / ``exception`` is set. The object is
    built by ApiResponseBuilder, completed by the known-error parser chain
    and not modified afterwards.

    Attributes:
        resource_path: Resource requested by the caller
        status_code: HTTP status, None when the transport failed
        data: Parsed JSON payload, None if the body is empty or not JSON
        raw_body: Body text, kept even when parsing failed
        is_success: 2xx status and no known error found in the body
        error_type: Classified error type (sentinel once a parser matched)
        error_title: Classified error title
        error_detail: Classified error detail
        error_instance: Classified error instance
        exception: Captured transport failure
        retry_info: Retry activity that preceded this result
        headers: Response headers
        request_id: Correlation id of the outbound request
        reason_phrase: HTTP reason phrase
        elapsed: Seconds spent in the transport call, None on failure
    """

    resource_path: str
    status_code: Optional[int] = None
    data: Optional[JsonNode] = None
    raw_body: Optional[str] = None
    is_success: bool = False
    error_type: Optional[str] = None
    error_title: Optional[str] = None
    error_detail: Optional[str] = None
    error_instance: Optional[str] = None
    exception: Optional[ApiClientException] = None
    retry_info: Optional[RetryInfo] = None
    headers: Mapping[str, str] = field(default_factory=dict)
    request_id: Optional[str] = None
    reason_phrase: Optional[str] = None
    elapsed: Optional[float] = None

    @property
    def is_transport_failure(self) -> bool:
        return self.exception is not None

    @property
    def has_known_error(self) -> bool:
        """True once any known-error field was populated."""
        return any((self.error_type, self.error_title, self.error_detail, self.error_instance))

    @property
    def retry_count(self) -> int:
        return self.retry_info.retry_count if self.retry_info else 0

    @property
    def error_message(self) -> Optional[str]:
        """Best human-readable description of what went wrong, if anything."""
        if self.exception is not None:
            return str(self.exception)
        if self.error_title and self.error_detail:
            return f"{self.error_title}: {self.error_detail}"
        if self.error_title or self.error_detail:
            return self.error_title or self.error_detail
        if not self.is_success:
            return f"HTTP {self.status_code}"
        return None

    def raise_for_error(self) -> "ApiResponse":
        """
        Opt into exceptions.

        Raises:
            ApiClientException: the captured transport failure
            ApiResponseError: non-success response

        Returns:
            self, so calls can be chained.
        """
        if self.exception is not None:
            raise self.exception
        if not self.is_success:
            raise ApiResponseError(self)
        return self
