"""Cancellation scope shared by all calls of one ApiClient."""

import asyncio
from typing import Awaitable, Set, TypeVar

from .exceptions import RequestCancelledError

T = TypeVar("T")


class CancellationScope:
    """
    Cancels every transport step started through it.

    ``run()`` executes an awaitable as a task registered with the scope;
    ``cancel()`` marks the scope cancelled and cancels every registered
    task. A task cancelled this way surfaces as RequestCancelledError.
    Once cancelled, the scope stays cancelled: new work fails immediately.

    Example:
        >>> scope = CancellationScope()
        >>> response = await scope.run(transport.send(request))
        >>> scope.cancel()  # from anywhere, aborts in-flight sends
    """

    def __init__(self):
        self._cancelled = False
        self._tasks: Set[asyncio.Task] = set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def active_count(self) -> int:
        return len(self._tasks)

    def cancel(self) -> int:
        """
        Cancel the scope.

        Returns:
            Number of in-flight tasks that were cancelled.
        """
        self._cancelled = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        return len(tasks)

    async def run(self, awaitable: Awaitable[T]) -> T:
        """
        Await inside the scope.

        Raises:
            RequestCancelledError: the scope was or became cancelled
        """
        if self._cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise RequestCancelledError("Request cancelled before it was sent")

        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)
        try:
            return await task
        except asyncio.CancelledError:
            # Отмена скоупом превращается в ошибку, внешняя - пробрасывается
            if self._cancelled and task.cancelled() and not _outer_cancelling():
                raise RequestCancelledError("Request cancelled") from None
            raise
        finally:
            self._tasks.discard(task)


def _outer_cancelling() -> bool:
    current = asyncio.current_task()
    cancelling = getattr(current, "cancelling", None)
    return bool(cancelling and cancelling())
