"""
Single-flight coordination for expensive async builds.

Concurrent callers asking for the same key share one in-flight computation
instead of each starting their own.
"""

import asyncio
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any, TypeVar

from stockpick_gateway.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class SingleFlight:
    """
    At most one in-flight call per key.

    The first caller for a key starts the factory as a task owned by this
    object; every caller, the first included, awaits that task through
    `asyncio.shield`. Cancelling one caller therefore never cancels the call
    the others are waiting on. The key is released once the call settles, so
    a failed call is retried by the next caller.
    """

    def __init__(self) -> None:
        self._inflight: dict[str, asyncio.Task[Any]] = {}

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """
        Run `factory` for `key`, or join the call already in flight.

        Args:
            key: Flight key
            factory: Zero-argument coroutine function producing the value

        Returns:
            The value produced by the (shared) call
        """
        task = self._inflight.get(key)
        if task is None or task.done():
            task = asyncio.ensure_future(factory())
            self._inflight[key] = task
            task.add_done_callback(partial(self._release, key))
        else:
            logger.debug("Joining in-flight call for '%s'", key)

        return await asyncio.shield(task)

    def _release(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        # Retrieve the outcome so a failure nobody awaited is not reported as lost
        if not task.cancelled():
            task.exception()

    def in_flight(self, key: str) -> bool:
        """Check whether a call for `key` is currently running."""
        task = self._inflight.get(key)
        return task is not None and not task.done()
