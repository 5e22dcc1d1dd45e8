"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/cancellation.py.
"""

from __future__ import annotations

import asyncio
from typing import Callable

CancelCallback = Callable[[str], None]


def _noop() -> None:
    return None


class CancelToken:
    """
    One-shot cancellation signal handed to transport calls.

    A token fires at most once; callbacks registered after it fired run
    immediately.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None
        self._callbacks: list[CancelCallback] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(reason)

    def add_callback(self, callback: CancelCallback) -> Callable[[], None]:
        """Run ``callback(reason)`` on cancellation; returns a remover."""
        if self._event.is_set():
            callback(self._reason or "cancelled")
            return _noop
        self._callbacks.append(callback)

        def _remove() -> None:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

        return _remove

    def link(self, other: "CancelToken") -> Callable[[], None]:
        """Propagate this token's cancellation into ``other``; returns an unlinker."""
        return self.add_callback(other.cancel)

    async def wait(self) -> str:
        await self._event.wait()
        return self._reason or "cancelled"
