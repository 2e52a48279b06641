# src/http_api_client/core/api_client.py
"""
Асинхронный API клиент.

Каждый вызов проходит один и тот же путь:
verb метод -> send() -> RetryPolicy(транспорт) -> ApiResponseBuilder -> ApiResponse.
Транспортные ошибки никогда не выходят наружу: они возвращаются как
ApiResponse с заполненным полем exception.
"""

import asyncio
import base64
import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union
from urllib.parse import urlparse

import httpx

from .api_response import ApiResponse, TransportFailure
from .cancellation import CancellationScope
from .config import ApiClientOptions
from .context import ApiRequest, ExecutionContext
from .exceptions import TransportError, classify_httpx_exception
from .logging import DEFAULT_LOGGER_NAME, ApiClientLogger
from .logging.filters import reset_correlation_id, set_correlation_id
from .response_builder import ApiResponseBuilder
from .retry_engine import BackoffRetryPolicy, NoRetryPolicy, RetryPolicy
from ..utils.serialization import JsonSerializer

Delay = Union[float, timedelta]

CORRELATION_HEADER = "X-Correlation-ID"


def _logger_name(base_url: Optional[str]) -> str:
    """Имя логгера клиента: http_api_client.<host>."""
    host = urlparse(base_url).netloc if base_url else ""
    return f"{DEFAULT_LOGGER_NAME}.{host}" if host else DEFAULT_LOGGER_NAME


class ApiClient:
    """
    Асинхронный клиент одного API (base URL).

    Один экземпляр на цель, переживает отдельные вызовы. Счётчики
    request_count / pending_request_count / last_request_timestamp живут
    всё время жизни экземпляра.

    Example:
        >>> async with ApiClient(ApiClientOptions.create(base_url="https://api.example.com")) as client:
        ...     response = await client.get("/users")
        ...     if response.is_success:
        ...         print(response.data.select("items[0].name").as_str())
        ...     else:
        ...         print(response.error_message)

    Features:
        - Транспорт (httpx.AsyncClient) можно передать снаружи или создать из options
        - Retry политика подключаемая (по умолчанию BackoffRetryPolicy)
        - Цепочка KnownErrorParser для ошибок в теле ответа
        - Общий CancellationScope для всех вызовов
    """

    def __init__(
        self,
        options: Optional[ApiClientOptions] = None,
        *,
        transport: Optional[httpx.AsyncClient] = None,
        retry_policy: Optional[RetryPolicy] = None,
        serializer: Optional[JsonSerializer] = None,
        **kwargs: Any,
    ):
        """
        Args:
            options: Конфигурация клиента
            transport: Внешний httpx.AsyncClient (не закрывается этим клиентом)
            retry_policy: Политика повторов; по умолчанию из options.retry
            serializer: JSON сериализатор; по умолчанию из options.serializer
            **kwargs: Параметры для ApiClientOptions.create(), если options не задан
        """
        if options is None:
            options = ApiClientOptions.create(**kwargs)
        elif kwargs:
            raise TypeError(f"Unexpected arguments with explicit options: {sorted(kwargs)}")

        self._options = options

        if transport is not None:
            self._transport = transport
            self._owns_transport = False
        else:
            self._transport = httpx.AsyncClient(
                base_url=options.base_url or "",
                timeout=options.timeout.to_httpx(),
                verify=options.verify_ssl,
                follow_redirects=options.follow_redirects,
            )
            self._owns_transport = True

        self._logger: Optional[ApiClientLogger] = None
        if options.logging is not None:
            self._logger = ApiClientLogger(options.logging, name=_logger_name(self.base_url))

        if retry_policy is None:
            retry_policy = (
                BackoffRetryPolicy(options.retry)
                if options.retry.max_attempts > 1 else NoRetryPolicy()
            )
        self._retry_policy = retry_policy
        self._serializer = serializer or JsonSerializer(options.serializer)
        self._response_builder = ApiResponseBuilder(options.known_error_parsers)

        self._headers: Dict[str, str] = dict(options.headers)
        self._cancellation = CancellationScope()

        self._counter_lock = threading.Lock()
        self._request_count = 0
        self._pending_request_count = 0
        self._last_request_timestamp: Optional[datetime] = None

        self._log_debug(
            "ApiClient constructed",
            base_url=self.base_url,
            parsers=[p.__class__.__name__ for p in options.known_error_parsers],
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Закрыть собственный транспорт и логгер. Внешний транспорт не трогаем."""
        if self._owns_transport and not self._transport.is_closed:
            await self._transport.aclose()
        if self._logger is not None:
            self._logger.close()

    # ==================== Properties ====================

    @property
    def options(self) -> ApiClientOptions:
        return self._options

    @property
    def base_url(self) -> Optional[str]:
        base = str(self._transport.base_url)
        return base.rstrip("/") if base else self._options.base_url

    @property
    def request_count(self) -> int:
        """Сколько запросов отправлено за всё время (не сбрасывается)."""
        return self._request_count

    @property
    def pending_request_count(self) -> int:
        """Сколько запросов сейчас в полёте."""
        return self._pending_request_count

    @property
    def last_request_timestamp(self) -> Optional[datetime]:
        """UTC время последнего отправленного запроса."""
        return self._last_request_timestamp

    @property
    def cancellation(self) -> CancellationScope:
        return self._cancellation

    # ==================== Cancellation ====================

    def cancel(self) -> int:
        """
        Отменить все вызовы этого клиента.

        Вызовы в полёте завершаются ApiResponse с RequestCancelledError,
        новые вызовы падают так же, пока не вызван reset_cancellation().

        Returns:
            Количество прерванных транспортных шагов
        """
        cancelled = self._cancellation.cancel()
        self._log_debug("Cancellation requested", in_flight=cancelled)
        return cancelled

    def reset_cancellation(self) -> None:
        """Установить новый CancellationScope (старый остаётся отменённым)."""
        self._cancellation = CancellationScope()

    # ==================== Credentials & headers ====================

    def set_basic_auth(self, username: str, password: str) -> None:
        token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
        self._headers["Authorization"] = f"Basic {token}"

    def clear_basic_auth(self) -> None:
        self._headers.pop("Authorization", None)

    def set_bearer_token(self, bearer_token: str) -> None:
        """OAuth 2.0 bearer token для всех последующих запросов."""
        self._headers["Authorization"] = f"Bearer {bearer_token}"

    def clear_bearer_token(self) -> None:
        self._headers.pop("Authorization", None)

    def set_cookie(self, cookie: str) -> None:
        """Raw Cookie header ("name=value; other=value")."""
        self._headers["Cookie"] = cookie

    def clear_cookie(self) -> None:
        self._headers.pop("Cookie", None)

    def set_header(self, name: str, value: str) -> None:
        self._headers[name] = value

    def remove_header(self, name: str) -> None:
        self._headers.pop(name, None)

    @property
    def headers(self) -> Dict[str, str]:
        """Копия заголовков по умолчанию."""
        return dict(self._headers)

    # ==================== Verb методы ====================

    async def get(self, resource_path: str, delay: Optional[Delay] = None) -> ApiResponse:
        """GET запрос."""
        await self._pace("GET", resource_path, delay)
        return await self.send("GET", resource_path)

    async def post(
        self,
        resource_path: str,
        body: Any = None,
        delay: Optional[Delay] = None
    ) -> Optional[ApiResponse]:
        """POST запрос. None - если тело не удалось сериализовать."""
        await self._pace("POST", resource_path, delay)
        return await self.send_object("POST", resource_path, body)

    async def put(
        self,
        resource_path: str,
        body: Any = None,
        delay: Optional[Delay] = None
    ) -> Optional[ApiResponse]:
        """PUT запрос. None - если тело не удалось сериализовать."""
        await self._pace("PUT", resource_path, delay)
        return await self.send_object("PUT", resource_path, body)

    async def delete(self, resource_path: str, delay: Optional[Delay] = None) -> ApiResponse:
        """DELETE запрос."""
        await self._pace("DELETE", resource_path, delay)
        return await self.send("DELETE", resource_path)

    async def _pace(self, method: str, resource_path: str, delay: Optional[Delay]) -> None:
        # Задержка по запросу вызывающего, не retry: до учёта в счётчиках
        if delay is None:
            self._log_debug(f"{method} resource", resource_path=resource_path)
            return
        seconds = delay.total_seconds() if isinstance(delay, timedelta) else float(delay)
        if seconds < 0:
            raise ValueError("delay must be non-negative")
        self._log_debug(f"{method} resource after delay", resource_path=resource_path, delay=seconds)
        await asyncio.sleep(seconds)

    # ==================== Send ====================

    async def send_string(
        self,
        method: str,
        resource_path: str,
        text: Optional[str],
        media_type: str = "text/plain"
    ) -> ApiResponse:
        """
        Отправить строку как тело запроса (UTF-8).

        Args:
            method: HTTP метод
            resource_path: Путь ресурса
            text: Тело; None = без тела
            media_type: Content-Type без charset
        """
        content = None
        if text is not None:
            content = (text.encode("utf-8"), f"{media_type}; charset=utf-8")
        return await self._send(method, resource_path, content)

    async def send_object(self, method: str, resource_path: str, obj: Any) -> Optional[ApiResponse]:
        """
        Отправить объект как JSON (строку - как text/plain).

        Ошибка сериализации логируется и НЕ пробрасывается: метод
        возвращает None - запрос даже не удалось построить.
        """
        if obj is None:
            return await self._send(method, resource_path, None)
        if isinstance(obj, str):
            return await self.send_string(method, resource_path, obj)

        try:
            json_text = self._serializer.serialize(obj)
        except Exception as e:
            # Включая чужие сериализаторы, которые бросают не SerializationError
            self._log_error(
                "Serialization failed, request not sent",
                method=method,
                resource_path=resource_path,
                object_type=type(obj).__name__,
                error=str(e),
            )
            return None

        content = (json_text.encode("utf-8"), "application/json; charset=utf-8")
        return await self._send(method, resource_path, content)

    async def send(
        self,
        method: str,
        resource_path: str,
        content: Union[str, bytes, None] = None,
        content_type: Optional[str] = None,
    ) -> ApiResponse:
        """
        Общая точка для всех вызовов.

        Args:
            method: HTTP метод
            resource_path: Путь ресурса (относительно base_url) или абсолютный URL
            content: Готовое тело запроса
            content_type: Content-Type для content

        Returns:
            ApiResponse - всегда, транспортные ошибки не пробрасываются
        """
        body = None
        if content is not None:
            raw = content.encode("utf-8") if isinstance(content, str) else content
            body = (raw, content_type)
        return await self._send(method, resource_path, body)

    async def _send(self, method: str, resource_path: str, body) -> ApiResponse:
        if not method or not isinstance(method, str):
            raise ValueError("method must be a non-empty string")
        if resource_path is None:
            raise ValueError("resource_path must not be None")

        method = method.upper()
        request = self._build_request(method, resource_path, body)
        correlation_token = set_correlation_id(request.request_id)

        with self._counter_lock:
            self._request_count += 1
            self._pending_request_count += 1
            self._last_request_timestamp = datetime.now(timezone.utc)

        start = time.perf_counter()
        try:
            self._log_debug(
                "Sending request",
                method=method,
                resource_path=resource_path,
                has_content=body is not None,
            )
            try:
                response = await self._cancellation.run(
                    self._retry_policy.execute(
                        lambda: self._invoke_transport(request),
                        request.context,
                        method,
                    )
                )
            except TransportError as e:
                failure = self._capture_failure(e, request)
                self._log_warning(
                    "Request failed",
                    method=method,
                    resource_path=resource_path,
                    error=str(failure.error),
                    retry_count=failure.retry_info.retry_count if failure.retry_info else 0,
                )
                return self._response_builder.build_from_failure(failure, request)

            self._transfer_retry_info(request)
            api_response = self._response_builder.build_from_response(response, request)
            self._log_debug(
                "Request completed",
                method=method,
                resource_path=resource_path,
                status_code=api_response.status_code,
                is_success=api_response.is_success,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
                retry_count=api_response.retry_count,
            )
            return api_response
        finally:
            with self._counter_lock:
                self._pending_request_count -= 1
            reset_correlation_id(correlation_token)

    def _build_request(self, method: str, resource_path: str, body) -> ApiRequest:
        headers = dict(self._headers)
        content = None
        if body is not None:
            content, content_type = body
            if content_type:
                headers["Content-Type"] = content_type
        elif method in ("POST", "PUT"):
            self._log_debug("Content is empty for POST or PUT request", resource_path=resource_path)

        context = ExecutionContext(operation_key=f"{method} {resource_path}")
        if headers.get(CORRELATION_HEADER):
            context.correlation_id = headers[CORRELATION_HEADER]
        else:
            headers[CORRELATION_HEADER] = context.correlation_id

        http_request = self._transport.build_request(
            method, resource_path, content=content, headers=headers
        )
        return ApiRequest(
            method=method,
            resource_path=resource_path,
            http_request=http_request,
            context=context,
        )

    async def _invoke_transport(self, request: ApiRequest) -> httpx.Response:
        """Одна попытка: httpx исключения -> наша классификация."""
        try:
            return await self._transport.send(request.http_request)
        except httpx.RequestError as e:
            raise classify_httpx_exception(e, request.url) from e

    @staticmethod
    def _transfer_retry_info(request: ApiRequest) -> None:
        retry_info = request.context.get_retry_info()
        if retry_info is not None:
            request.retry_info = retry_info

    @staticmethod
    def _capture_failure(error: TransportError, request: ApiRequest) -> TransportFailure:
        return TransportFailure(error=error, retry_info=request.context.get_retry_info())

    # ==================== Logging ====================

    def _log_debug(self, message: str, **kwargs: Any) -> None:
        if self._logger:
            self._logger.debug(message, **kwargs)

    def _log_warning(self, message: str, **kwargs: Any) -> None:
        if self._logger:
            self._logger.warning(message, **kwargs)

    def _log_error(self, message: str, **kwargs: Any) -> None:
        if self._logger:
            self._logger.error(message, **kwargs)

    def __repr__(self) -> str:
        return f"<ApiClient base_url={self.base_url!r} requests={self._request_count}>"

