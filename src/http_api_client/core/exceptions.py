"""
Иерархия исключений HTTP API Client.

Классификация:
- TransportError (retryable=True) - запрос не дошёл до сервера, можно ретраить
- FatalError (fatal=True) - НЕ ретраить никогда

Транспортные ошибки никогда не выходят за пределы ApiClient.send():
они превращаются в ApiResponse с заполненным полем exception.
"""

from typing import TYPE_CHECKING, Optional

import httpx

if TYPE_CHECKING:
    from .api_response import ApiResponse

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ApiClientException(Exception):
    """Базовое исключение HTTP API Client."""

    retryable: bool = False
    fatal: bool = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ТРАНСПОРТНЫЕ ОШИБКИ (retryable=True)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TransportError(ApiClientException):
    """
    Запрос не получил HTTP статус.

    Примеры: таймауты, отказ в соединении, ошибки DNS.
    """
    retryable = True

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        full_message = message
        if url:
            full_message += f" (url: {url})"
        super().__init__(full_message)

class TimeoutError(TransportError):
    """
    Таймаут запроса.

    Args:
        message: Сообщение об ошибке
        url: URL запроса
        timeout_type: Тип таймаута ('connect', 'read', 'write', 'pool')
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        timeout_type: Optional[str] = None
    ):
        self.timeout_type = timeout_type
        if timeout_type:
            message += f" ({timeout_type} timeout)"
        super().__init__(message, url)

class ConnectionError(TransportError):
    """
    Ошибка подключения.

    Примеры:
    - Connection refused
    - Connection reset
    - Network unreachable
    """
    pass

class DNSError(ConnectionError):
    """DNS resolution failed."""
    pass

class ProxyError(TransportError):
    """Ошибка прокси."""
    pass

class ProtocolError(TransportError):
    """Сервер нарушил HTTP протокол (обрыв ответа, битые заголовки)."""
    pass

class RequestCancelledError(TransportError):
    """Запрос отменён через CancellationScope клиента."""
    retryable = False
    fatal = True

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ФАТАЛЬНЫЕ ОШИБКИ (fatal=True)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class FatalError(ApiClientException):
    """Фатальная ошибка - НЕ ретраить."""
    fatal = True

class SerializationError(FatalError):
    """
    Объект не удалось сериализовать в JSON.

    Args:
        message: Сообщение
        type_name: Имя типа, на котором сломалась сериализация
    """

    def __init__(self, message: str, type_name: Optional[str] = None):
        self.type_name = type_name
        if type_name:
            message += f" (type: {type_name})"
        super().__init__(message)

class InvalidPayloadError(FatalError):
    """
    Тело ответа не является валидным JSON.

    Args:
        message: Сообщение
        raw_body: Исходный текст (обрезается до 200 символов в сообщении)
    """

    def __init__(self, message: str, raw_body: Optional[str] = None):
        self.raw_body = raw_body
        if raw_body:
            message += f": {raw_body[:200]!r}"
        super().__init__(message)

class ConfigurationError(FatalError):
    """Ошибка конфигурации."""
    pass

class ApiResponseError(FatalError):
    """
    Ответ содержит ошибку (не-2xx статус или известная ошибка в теле).

    Бросается только из ApiResponse.raise_for_error() - по умолчанию
    клиент возвращает ответы, а не исключения.
    """

    def __init__(self, response: "ApiResponse"):
        self.response = response
        self.status_code = response.status_code

        msg = f"HTTP {response.status_code} error for {response.resource_path}"
        if response.error_title:
            msg += f": {response.error_title}"
        if response.error_detail:
            msg += f" - {response.error_detail}"
        super().__init__(msg)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# УТИЛИТЫ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

_DNS_FAILURE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
)

def classify_httpx_exception(
    exc: Exception,
    url: Optional[str] = None
) -> TransportError:
    """
    Конвертировать httpx исключения в наши.

    Args:
        exc: Исключение из httpx
        url: URL запроса

    Returns:
        TransportError нужного подкласса

    Examples:
        >>> our_exc = classify_httpx_exception(httpx.ReadTimeout("timed out"), "/users")
        >>> assert isinstance(our_exc, TimeoutError)
        >>> assert our_exc.retryable == True
    """
    message = str(exc) or exc.__class__.__name__

    if isinstance(exc, httpx.TimeoutException):
        timeout_type = None
        if isinstance(exc, httpx.ConnectTimeout):
            timeout_type = "connect"
        elif isinstance(exc, httpx.ReadTimeout):
            timeout_type = "read"
        elif isinstance(exc, httpx.WriteTimeout):
            timeout_type = "write"
        elif isinstance(exc, httpx.PoolTimeout):
            timeout_type = "pool"
        return TimeoutError(message, url, timeout_type=timeout_type)

    elif isinstance(exc, httpx.ProxyError):
        return ProxyError(message, url)

    elif isinstance(exc, httpx.ConnectError):
        lowered = message.lower()
        if any(marker in lowered for marker in _DNS_FAILURE_MARKERS):
            return DNSError(message, url)
        return ConnectionError(message, url)

    elif isinstance(exc, (httpx.ProtocolError, httpx.DecodingError)):
        return ProtocolError(message, url)

    elif isinstance(exc, httpx.NetworkError):
        return ConnectionError(message, url)

    else:
        # Неизвестная транспортная ошибка - оборачиваем
        return TransportError(message, url)
