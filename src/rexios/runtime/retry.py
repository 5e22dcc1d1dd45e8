"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/retry.py.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from ..types import RetryDelaySpec, RetrySpec

T = TypeVar("T")

logger = logging.getLogger("rexios.retry")


def should_retry(policy: RetrySpec | None, error: BaseException, attempt: int) -> bool:
    """
    Decide whether a failed attempt is re-run.

    A callable policy is authoritative; an integer policy retries while
    ``attempt < policy``; no policy never retries.
    """
    if policy is None or isinstance(policy, bool):
        return False
    if callable(policy):
        return bool(policy(error, attempt))
    return attempt < int(policy)


def resolve_retry_delay(spec: RetryDelaySpec | None, attempt: int) -> float:
    """Return the delay in seconds before the attempt following ``attempt``."""
    if spec is None:
        return 0.0
    delay = spec(attempt) if callable(spec) else spec
    return max(0.0, float(delay or 0.0))


async def call_with_retry(
    fn: Callable[[int], Awaitable[T]],
    *,
    retry: RetrySpec | None,
    retry_delay_s: RetryDelaySpec | None = None,
    can_retry: Callable[[], bool] | None = None,
) -> T:
    """Execute ``fn(attempt)`` and re-run it in place while the policy allows."""
    attempt = 0
    while True:
        try:
            return await fn(attempt)
        except Exception as error:
            if can_retry is not None and not can_retry():
                raise
            if not should_retry(retry, error, attempt):
                raise
            delay = resolve_retry_delay(retry_delay_s, attempt)
            logger.debug(
                "Retrying after attempt %d failed (%s); sleeping %.3fs",
                attempt,
                type(error).__name__,
                delay,
            )
            if delay > 0:
                await asyncio.sleep(delay)
            attempt += 1
