"""
Система конфигурации для HTTP API Client.

Все конфиги immutable (frozen dataclasses) - один экземпляр ApiClientOptions
разделяется всеми вызовами клиента.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import (
    TYPE_CHECKING,
    Dict,
    FrozenSet,
    Iterable,
    Mapping,
    Optional,
    Tuple,
    Union,
)

import httpx

if TYPE_CHECKING:
    from .error_parsers import KnownErrorParser
    from .logging import LoggingConfig

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TIMEOUT CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class TimeoutConfig:
    """
    Конфигурация таймаутов транспорта.

    Args:
        connect: Таймаут подключения (сек)
        read: Таймаут чтения данных (сек)
        write: Таймаут отправки тела (сек, по умолчанию = read)
        pool: Ожидание свободного соединения в пуле (сек)

    Examples:
        >>> TimeoutConfig(connect=5, read=30)
    """
    connect: float = 5.0
    read: float = 30.0
    write: Optional[float] = None
    pool: Optional[float] = None

    def __post_init__(self):
        """Валидация."""
        if self.connect <= 0:
            raise ValueError("connect timeout must be positive")
        if self.read <= 0:
            raise ValueError("read timeout must be positive")
        if self.write is not None and self.write <= 0:
            raise ValueError("write timeout must be positive")
        if self.pool is not None and self.pool <= 0:
            raise ValueError("pool timeout must be positive")

    def to_httpx(self) -> httpx.Timeout:
        """Вернуть как httpx.Timeout."""
        return httpx.Timeout(
            connect=self.connect,
            read=self.read,
            write=self.write if self.write is not None else self.read,
            pool=self.pool,
        )

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# RETRY CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class RetryConfig:
    """
    Конфигурация retry стратегии.

    Args:
        max_attempts: Максимум попыток (включая первую). 1 = без ретраев
        backoff_base: Базовая задержка (сек)
        backoff_factor: Множитель для exponential backoff
        backoff_max: Максимальная задержка (сек)
        backoff_jitter: Добавлять случайность (против thundering herd)
        idempotent_methods: Какие HTTP методы можно ретраить
        retryable_status_codes: Какие статус коды ретраить
        respect_retry_after: Учитывать Retry-After header
        retry_after_max: Максимум ждать из Retry-After (сек)

    Examples:
        >>> RetryConfig(max_attempts=3, backoff_base=0.5)
    """
    max_attempts: int = 3
    backoff_base: float = 0.5
    backoff_factor: float = 2.0
    backoff_max: float = 60.0
    backoff_jitter: bool = True

    idempotent_methods: FrozenSet[str] = frozenset(
        {'GET', 'HEAD', 'PUT', 'DELETE', 'OPTIONS', 'TRACE'}
    )

    retryable_status_codes: FrozenSet[int] = frozenset(
        {408, 429, 500, 502, 503, 504}
    )

    respect_retry_after: bool = True
    retry_after_max: float = 300.0  # 5 минут

    def __post_init__(self):
        """Валидация и нормализация."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.backoff_base < 0:
            raise ValueError("backoff_base must be non-negative")
        if self.backoff_factor < 1:
            raise ValueError("backoff_factor must be >= 1")
        if self.backoff_max < 0:
            raise ValueError("backoff_max must be non-negative")
        if self.retry_after_max < 0:
            raise ValueError("retry_after_max must be non-negative")

        object.__setattr__(
            self, 'idempotent_methods',
            frozenset(m.upper() for m in self.idempotent_methods)
        )
        object.__setattr__(
            self, 'retryable_status_codes', frozenset(self.retryable_status_codes)
        )

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SERIALIZER OPTIONS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class SerializerOptions:
    """
    Опции JSON сериализации тел запросов (send_object/post/put).

    Args:
        serialize_null_values: Писать свойства со значением None как null
        serialize_enums_as_strings: Enum -> имя члена вместо значения
        camel_case_properties: snake_case ключи -> camelCase
        indented: Форматированный вывод с отступами

    Examples:
        >>> SerializerOptions(camel_case_properties=True)
    """
    serialize_null_values: bool = False
    serialize_enums_as_strings: bool = False
    camel_case_properties: bool = False
    indented: bool = False

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MAIN CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _freeze_dict(d: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    """
    Convert dict to immutable MappingProxyType.

    Example:
        >>> frozen = _freeze_dict({"X-API-Key": "secret"})
        >>> frozen["X-New"] = "value"  # Raises TypeError
    """
    if d is None:
        return MappingProxyType({})
    return MappingProxyType(dict(d))


def _default_parsers() -> Tuple["KnownErrorParser", ...]:
    from .error_parsers import ProblemDetailsErrorParser
    return (ProblemDetailsErrorParser(),)


@dataclass(frozen=True)
class ApiClientOptions:
    """
    Главная конфигурация ApiClient.

    Args:
        base_url: Базовый URL API (цель клиента)
        headers: Дефолтные заголовки
        timeout: Конфигурация таймаутов
        retry: Конфигурация retry
        serializer: Опции JSON сериализации
        known_error_parsers: Цепочка парсеров известных ошибок (порядок важен)
        verify_ssl: Проверять SSL сертификаты
        follow_redirects: Следовать редиректам
        logging: Конфигурация логирования (None = только NullHandler)

    Examples:
        >>> options = ApiClientOptions(base_url="https://api.example.com")
        >>> options = ApiClientOptions.create(timeout=60, max_retries=5)
    """
    base_url: Optional[str] = None
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    serializer: SerializerOptions = field(default_factory=SerializerOptions)
    known_error_parsers: Tuple["KnownErrorParser", ...] = ()
    verify_ssl: bool = True
    follow_redirects: bool = True
    logging: Optional['LoggingConfig'] = None

    def __post_init__(self):
        """Normalize base_url and freeze mutable collections."""
        if not isinstance(self.headers, MappingProxyType):
            object.__setattr__(self, 'headers', _freeze_dict(self.headers))
        if not isinstance(self.known_error_parsers, tuple):
            object.__setattr__(self, 'known_error_parsers', tuple(self.known_error_parsers))

        if self.base_url:
            normalized = self.base_url.rstrip('/')
            if normalized != self.base_url:
                object.__setattr__(self, 'base_url', normalized)

    @classmethod
    def create(
        cls,
        base_url: Optional[str] = None,
        timeout: Union[float, Tuple[float, float], TimeoutConfig] = 30,
        max_retries: int = 3,
        headers: Optional[Dict[str, str]] = None,
        known_error_parsers: Optional[Iterable["KnownErrorParser"]] = None,
        serialize_null_values: bool = False,
        serialize_enums_as_strings: bool = False,
        camel_case_properties: bool = False,
        indented: bool = False,
        logging: Optional['LoggingConfig'] = None,
        **kwargs
    ) -> 'ApiClientOptions':
        """
        Удобный конструктор конфигурации.

        Args:
            base_url: Базовый URL
            timeout: Таймаут (число, (connect, read) или TimeoutConfig)
            max_retries: Количество ретраев (не включая первый запрос)
            headers: Заголовки
            known_error_parsers: Парсеры ошибок; None = ProblemDetailsErrorParser
            serialize_null_values: см. SerializerOptions
            serialize_enums_as_strings: см. SerializerOptions
            camel_case_properties: см. SerializerOptions
            indented: см. SerializerOptions
            logging: Конфигурация логирования

        Returns:
            ApiClientOptions instance

        Examples:
            >>> options = ApiClientOptions.create(timeout=(5, 60), max_retries=0)
        """
        if isinstance(timeout, TimeoutConfig):
            timeout_cfg = timeout
        elif isinstance(timeout, tuple):
            timeout_cfg = TimeoutConfig(connect=timeout[0], read=timeout[1])
        else:
            timeout_cfg = TimeoutConfig(read=timeout)

        # max_retries = количество ретраев, max_attempts = все попытки
        retry_cfg = RetryConfig(max_attempts=max_retries + 1)

        parsers = _default_parsers() if known_error_parsers is None else tuple(known_error_parsers)

        return cls(
            base_url=base_url,
            headers=headers or {},
            timeout=timeout_cfg,
            retry=retry_cfg,
            serializer=SerializerOptions(
                serialize_null_values=serialize_null_values,
                serialize_enums_as_strings=serialize_enums_as_strings,
                camel_case_properties=camel_case_properties,
                indented=indented,
            ),
            known_error_parsers=parsers,
            logging=logging,
            **kwargs
        )

    def with_headers(self, headers: Dict[str, str]) -> 'ApiClientOptions':
        """
        Создать новый конфиг с дополнительными заголовками.

        Example:
            >>> new_options = options.with_headers({"X-API-Key": "secret"})
        """
        merged = dict(self.headers)
        merged.update(headers)
        return replace(self, headers=merged)

    def with_retries(self, max_attempts: int) -> 'ApiClientOptions':
        """Создать новый конфиг с другим числом попыток (включая первую)."""
        return replace(self, retry=replace(self.retry, max_attempts=max_attempts))

    def with_known_error_parsers(
        self,
        parsers: Iterable["KnownErrorParser"]
    ) -> 'ApiClientOptions':
        """Создать новый конфиг с другой цепочкой парсеров."""
        return replace(self, known_error_parsers=tuple(parsers))

    def with_serializer(self, **changes: bool) -> 'ApiClientOptions':
        """
        Создать новый конфиг с изменёнными опциями сериализации.

        Example:
            >>> new_options = options.with_serializer(indented=True)
        """
        return replace(self, serializer=replace(self.serializer, **changes))
