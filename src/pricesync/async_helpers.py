from __future__ import annotations

"""Helpers for scheduling fire-and-forget coroutines without losing their errors."""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Optional, Set, Tuple, Type, Union

logger = logging.getLogger(__name__)

CoroutineFactory = Callable[[], Coroutine[Any, Any, Any]]


class BackgroundTaskSet:
    """
    Keeps strong references to scheduled tasks until they finish.

    Exceptions of the listed types are logged at WARNING when the task
    completes; anything else is logged at ERROR with its traceback.
    """

    def __init__(self, name: str, logged_errors: Tuple[Type[BaseException], ...] = (Exception,)):
        self.name = name
        self._logged_errors = logged_errors
        self._tasks: Set[asyncio.Task[Any]] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def schedule(
        self,
        coro_or_factory: Union[Coroutine[Any, Any, Any], CoroutineFactory],
        *,
        description: str = "background task",
    ) -> asyncio.Task[Any]:
        coro = _resolve_coroutine(coro_or_factory)
        loop = asyncio.get_running_loop()
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(lambda finished: self._on_done(finished, description))
        return task

    def _on_done(self, task: asyncio.Task[Any], description: str) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is None:
            return
        if isinstance(error, self._logged_errors):
            logger.warning("%s: %s failed: %s", self.name, description, error)
            return
        logger.error("%s: %s crashed", self.name, description, exc_info=error)

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for every task scheduled so far."""
        pending = list(self._tasks)
        if not pending:
            return
        await asyncio.wait(pending, timeout=timeout)

    async def cancel_all(self) -> None:
        pending = list(self._tasks)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


def _resolve_coroutine(
    coro_or_factory: Union[Coroutine[Any, Any, Any], CoroutineFactory],
) -> Coroutine[Any, Any, Any]:
    """Turn the input into a coroutine object for scheduling."""
    if asyncio.iscoroutine(coro_or_factory):
        return coro_or_factory

    if callable(coro_or_factory):
        result = coro_or_factory()
        if not asyncio.iscoroutine(result):
            raise TypeError("Callable passed to BackgroundTaskSet.schedule must return a coroutine")
        return result

    raise TypeError("BackgroundTaskSet.schedule expects a coroutine or a callable returning one")


__all__ = ["BackgroundTaskSet", "CoroutineFactory"]
