"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/timeouts.py.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from ..errors import RequestCancelledError, RexiosTimeoutError
from .cancellation import CancelToken

T = TypeVar("T")

TIMEOUT_REASON = "timeout"


async def call_with_cancellation(
    call: Callable[[CancelToken], Awaitable[T]],
    *,
    timeout_s: float | None,
    signal: CancelToken | None = None,
) -> T:
    """
    Run ``call`` under a token fired by ``signal`` or by the timeout.

    Whichever fires first aborts the in-flight call. The timer and the link to
    ``signal`` are released on every exit path.
    """
    combined = CancelToken()
    unlink = signal.link(combined) if signal is not None else None
    if combined.cancelled:
        if unlink is not None:
            unlink()
        raise RequestCancelledError(f"Request cancelled: {combined.reason}")

    loop = asyncio.get_running_loop()
    timer = (
        loop.call_later(timeout_s, combined.cancel, TIMEOUT_REASON)
        if timeout_s is not None and timeout_s > 0
        else None
    )
    work = asyncio.ensure_future(call(combined))
    watcher = asyncio.ensure_future(combined.wait())
    try:
        await asyncio.wait({work, watcher}, return_when=asyncio.FIRST_COMPLETED)
        if work.done():
            return work.result()

        work.cancel()
        await asyncio.gather(work, return_exceptions=True)
        if combined.reason == TIMEOUT_REASON:
            raise RexiosTimeoutError(f"Request timed out after {timeout_s}s")
        raise RequestCancelledError(f"Request cancelled: {combined.reason}")
    finally:
        if timer is not None:
            timer.cancel()
        if unlink is not None:
            unlink()
        if not work.done():
            work.cancel()
        watcher.cancel()
