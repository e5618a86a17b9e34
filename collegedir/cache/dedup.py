"""Collapse concurrent identical fetches into a single in-flight task."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT = 30.0


class RequestDeduplicator:
    """Share one pending fetch per key between every concurrent caller.

    The in-flight record is released when the fetch settles or when *timeout*
    seconds pass, whichever happens first.  Releasing a record never cancels
    the underlying fetch; callers that stop awaiting simply stop waiting.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._timeout = timeout
        self._pending: Dict[str, "asyncio.Task[Any]"] = {}
        self._timers: Dict[str, asyncio.TimerHandle] = {}

    async def execute(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        task = self._pending.get(key)
        if task is not None:
            logger.debug("Reusing in-flight request for %s", key)
            return await asyncio.shield(task)

        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run(key, factory))
        self._pending[key] = task
        self._timers[key] = loop.call_later(self._timeout, self._expire, key, task)
        return await asyncio.shield(task)

    def cancel(self, key: str) -> None:
        """Forget the in-flight record for *key*; the fetch itself keeps running."""

        self._pending.pop(key, None)
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()

    def cancel_all(self) -> None:
        for key in list(self._pending):
            self.cancel(key)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def pending_keys(self) -> List[str]:
        return list(self._pending.keys())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        try:
            return await factory()
        finally:
            self._release(key, asyncio.current_task())

    def _release(self, key: str, task: Any) -> None:
        if self._pending.get(key) is task:
            self.cancel(key)

    def _expire(self, key: str, task: "asyncio.Task[Any]") -> None:
        if self._pending.get(key) is task:
            logger.debug("In-flight record for %s expired after %.1fs", key, self._timeout)
            self._pending.pop(key, None)
            self._timers.pop(key, None)
