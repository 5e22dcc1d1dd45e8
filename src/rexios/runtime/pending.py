"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/pending.py.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")

logger = logging.getLogger("rexios.pending")


class PendingCoordinator:
    """
    Deduplicate and serialize in-flight work sharing a cache key.

    Check-and-register runs without a suspension point, so the pending map
    needs no lock under the asyncio event loop.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[Any]] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, key: str) -> asyncio.Task[Any] | None:
        return self._tasks.get(key)

    def start(
        self,
        key: str,
        work: Callable[[], Awaitable[T]],
        *,
        dedupe: bool = True,
    ) -> asyncio.Task[T]:
        """Register ``work`` under ``key``, or return the in-flight task when deduping."""
        existing = self._tasks.get(key)
        if dedupe and existing is not None:
            logger.debug("Joining in-flight request for key %s", key)
            return existing

        task: asyncio.Task[T] = asyncio.ensure_future(work())
        self._tasks[key] = task
        task.add_done_callback(lambda done: self._release(key, done))
        return task

    async def run(
        self,
        key: str,
        work: Callable[[], Awaitable[T]],
        *,
        dedupe: bool = True,
        serial: bool = False,
    ) -> T:
        """Run ``work`` for ``key`` honoring serial ordering and dedupe collapse."""
        task = await self.schedule(key, work, dedupe=dedupe, serial=serial)
        # Shield: one caller going away must not cancel a fetch others share.
        return await asyncio.shield(task)

    async def schedule(
        self,
        key: str,
        work: Callable[[], Awaitable[T]],
        *,
        dedupe: bool = True,
        serial: bool = False,
    ) -> asyncio.Task[T]:
        """Wait for a predecessor when ``serial``, then start or join the work."""
        if serial:
            predecessor = self._tasks.get(key)
            if predecessor is not None:
                logger.debug("Waiting for in-flight request for key %s", key)
                # Outcome of the predecessor is ignored.
                await asyncio.wait({predecessor})
        return self.start(key, work, dedupe=dedupe)

    def clear(self) -> None:
        """Forget every in-flight task without cancelling it."""
        self._tasks.clear()

    def _release(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]
