"""Outbound request and per-call execution context."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import uuid

import httpx

from .retry_engine import RetryInfo

RETRY_INFO_KEY = "retry_info"


@dataclass
class ExecutionContext:
    """Opaque per-call carrier shared with the retry policy.

    ApiClient creates a fresh context for every call and hands it to the
    policy; the policy records retry activity into it, and ApiClient reads
    it back on both the success and the failure path.

    Attributes:
        operation_key: Human-readable operation name ("GET /users")
        correlation_id: Same id as the outbound X-Correlation-ID header
        data: Free-form storage for policies

    Example:
        >>> ctx = ExecutionContext("GET /users")
        >>> ctx.get_retry_info() is None
        True
    """

    operation_key: str
    correlation_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    data: Dict[str, Any] = field(default_factory=dict)

    def get_retry_info(self) -> Optional[RetryInfo]:
        return self.data.get(RETRY_INFO_KEY)

    def set_retry_info(self, retry_info: RetryInfo) -> None:
        self.data[RETRY_INFO_KEY] = retry_info


@dataclass
class ApiRequest:
    """One outbound call as seen by the pipeline.

    Attributes:
        method: HTTP method (GET, POST, etc.)
        resource_path: Path as requested by the caller
        http_request: Prepared httpx request handed to the transport
        context: Execution context attached to this request
        retry_info: Retry activity, set once the transport call has finished
    """

    method: str
    resource_path: str
    http_request: httpx.Request
    context: ExecutionContext
    retry_info: Optional[RetryInfo] = None

    @property
    def request_id(self) -> str:
        return self.context.correlation_id

    @property
    def url(self) -> str:
        return str(self.http_request.url)
