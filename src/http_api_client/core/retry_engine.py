"""
Retry engine и политики повторных попыток.

Включает:
- RetryInfo - неизменяемая запись о ретраях одного логического вызова
- RetryEngine - exponential backoff с jitter, Retry-After, идемпотентность
- RetryPolicy - обёртка над вызовом транспорта; пишет RetryInfo
  в ExecutionContext, который создаёт ApiClient
"""

import asyncio
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

import httpx

from .config import RetryConfig

if TYPE_CHECKING:
    from .context import ExecutionContext

logger = logging.getLogger(__name__)

TransportAction = Callable[[], Awaitable[httpx.Response]]


@dataclass(frozen=True)
class RetryInfo:
    """
    Что происходило до финального результата вызова.

    Создаётся только политикой retry; ApiClient и ApiResponseBuilder
    его читают и переносят в ApiResponse.

    Args:
        retry_count: Сколько повторов было запланировано
        total_delay: Суммарная задержка между попытками (сек)
        last_delay: Последняя задержка (сек)
        last_status_code: Статус попытки, вызвавшей последний повтор
        last_error: Описание ошибки, вызвавшей последний повтор
    """
    retry_count: int = 0
    total_delay: float = 0.0
    last_delay: float = 0.0
    last_status_code: Optional[int] = None
    last_error: Optional[str] = None

    @property
    def attempts(self) -> int:
        """Всего попыток, включая первую."""
        return self.retry_count + 1

    def next_retry(
        self,
        delay: float,
        status_code: Optional[int] = None,
        error: Optional[Exception] = None
    ) -> "RetryInfo":
        """Новая запись с ещё одним запланированным повтором."""
        return replace(
            self,
            retry_count=self.retry_count + 1,
            total_delay=self.total_delay + delay,
            last_delay=delay,
            last_status_code=status_code,
            last_error=str(error) if error is not None else None,
        )


class RetryEngine:
    """
    Механизм retry с умной логикой. Один экземпляр на логический вызов.

    Examples:
        >>> engine = RetryEngine(RetryConfig(max_attempts=3))
        >>> if engine.should_retry('GET', error, response):
        >>>     await engine.async_wait(error, response)
        >>>     engine.increment()
    """

    MAX_RETRY_AFTER_LENGTH = 100

    def __init__(self, config: RetryConfig):
        self.config = config
        self._attempt = 0

    def should_retry(
        self,
        method: str,
        error: Optional[Exception] = None,
        response: Optional[httpx.Response] = None
    ) -> bool:
        """
        Решить нужен ли retry.

        Args:
            method: HTTP метод (GET, POST, etc)
            error: Исключение (если запрос не получил ответ)
            response: Response объект (если есть)

        Returns:
            True если нужен retry
        """
        if self._attempt + 1 >= self.config.max_attempts:
            return False

        if method.upper() not in self.config.idempotent_methods:
            return False

        if error is not None:
            if getattr(error, 'fatal', False):
                return False
            return bool(getattr(error, 'retryable', False))

        if response is not None:
            return response.status_code in self.config.retryable_status_codes

        return False

    def get_wait_time(self, response: Optional[httpx.Response] = None) -> float:
        """
        Вычислить время ожидания.

        Приоритет: Retry-After header, затем exponential backoff.
        """
        if self.config.respect_retry_after and response is not None:
            retry_after = self._parse_retry_after(response)
            if retry_after is not None:
                return min(retry_after, self.config.retry_after_max)

        wait = self.config.backoff_base * (
            self.config.backoff_factor ** self._attempt
        )
        wait = min(wait, self.config.backoff_max)

        # jitter 50-150% от wait
        if self.config.backoff_jitter:
            wait = wait * (0.5 + random.random())

        return wait

    def _parse_retry_after(self, response: httpx.Response) -> Optional[float]:
        """
        Распарсить Retry-After header (секунды или HTTP-date).

        Слишком длинные и некорректные значения игнорируются.
        """
        retry_after = response.headers.get('Retry-After')
        if not retry_after:
            return None

        if len(retry_after) > self.MAX_RETRY_AFTER_LENGTH:
            logger.warning(
                "Retry-After header too long (%d chars), ignoring", len(retry_after)
            )
            return None

        try:
            seconds = float(retry_after)
        except ValueError:
            try:
                retry_date = parsedate_to_datetime(retry_after)
            except (ValueError, TypeError, OverflowError) as e:
                logger.debug("Failed to parse Retry-After header %r: %s", retry_after, e)
                return None
            if retry_date.tzinfo is None:
                retry_date = retry_date.replace(tzinfo=timezone.utc)
            return max(0.0, (retry_date - datetime.now(timezone.utc)).total_seconds())

        if seconds < 0 or seconds > 86400 * 365:
            logger.warning("Retry-After seconds value out of range: %s", seconds)
            return None
        return seconds

    def increment(self) -> None:
        """Увеличить счётчик попыток."""
        self._attempt += 1

    def reset(self) -> None:
        """Сбросить счётчик."""
        self._attempt = 0

    @property
    def attempt(self) -> int:
        """Текущая попытка (0 = первая)."""
        return self._attempt


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ПОЛИТИКИ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class RetryPolicy(ABC):
    """
    Обёртка над вызовом транспорта.

    Политика не знает о типах ApiClient: она получает функцию, которая
    выполняет одну попытку, и ExecutionContext для записи RetryInfo.
    Исключения последней попытки пробрасываются как есть.
    """

    @abstractmethod
    async def execute(
        self,
        action: TransportAction,
        context: "ExecutionContext",
        method: str
    ) -> httpx.Response:
        """Выполнить action с учётом политики."""


class NoRetryPolicy(RetryPolicy):
    """Одна попытка, RetryInfo никогда не записывается."""

    async def execute(
        self,
        action: TransportAction,
        context: "ExecutionContext",
        method: str
    ) -> httpx.Response:
        return await action()


class BackoffRetryPolicy(RetryPolicy):
    """
    Exponential backoff на основе RetryConfig.

    Ретраит транспортные ошибки с retryable=True и ответы с кодами из
    retryable_status_codes. Если попытки закончились на таком ответе,
    он возвращается вызывающему (а не превращается в исключение).

    Example:
        >>> policy = BackoffRetryPolicy(RetryConfig(max_attempts=4))
        >>> response = await policy.execute(send_once, context, "GET")
        >>> context.get_retry_info()
        RetryInfo(retry_count=2, ...)
    """

    def __init__(self, config: Optional[RetryConfig] = None):
        self.config = config or RetryConfig()

    async def execute(
        self,
        action: TransportAction,
        context: "ExecutionContext",
        method: str
    ) -> httpx.Response:
        # Свой RetryEngine на каждый вызов - вызовы идут конкурентно
        engine = RetryEngine(self.config)
        retry_info = context.get_retry_info() or RetryInfo()

        while True:
            try:
                response = await action()
            except Exception as error:
                if not engine.should_retry(method, error=error):
                    raise
                wait = engine.get_wait_time()
                retry_info = retry_info.next_retry(wait, error=error)
            else:
                if not engine.should_retry(method, response=response):
                    return response
                wait = engine.get_wait_time(response)
                retry_info = retry_info.next_retry(wait, status_code=response.status_code)
                await response.aclose()

            context.set_retry_info(retry_info)
            logger.debug(
                "Retrying %s (retry %d, waiting %.2fs): %s",
                context.operation_key,
                retry_info.retry_count,
                wait,
                retry_info.last_error or f"HTTP {retry_info.last_status_code}",
            )
            await asyncio.sleep(wait)
            engine.increment()
