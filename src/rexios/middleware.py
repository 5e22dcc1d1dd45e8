"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module defining middleware hooks and the per-attempt pipeline.

A pipeline runs every ``before`` hook, then one transport call, then every
``after`` hook. Stages observe and mutate the shared context around the single
physical call; they do not wrap each other.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Sequence

from .types import MiddlewareContext, RawResponse

RequestExecutor = Callable[[MiddlewareContext], Awaitable[RawResponse]]
RetryWithRequest = Callable[..., Awaitable[RawResponse]]

_OVERRIDABLE = frozenset({"url", "method", "headers", "body"})


@dataclass(frozen=True, slots=True)
class Continue:
    """``after`` outcome: keep running the remaining stages."""


@dataclass(frozen=True, slots=True)
class ShortCircuit:
    """``after`` outcome: stop the pipeline and make ``value`` the result."""

    value: Any


CONTINUE = Continue()
AfterOutcome = Continue | ShortCircuit


@dataclass(frozen=True, slots=True)
class PipelineResult:
    """Outcome of one attempt; ``response`` is set unless a stage short-circuited."""

    response: RawResponse | None = None
    short_circuit: ShortCircuit | None = None


class Middleware:
    """
    Base class for pipeline stages; every hook is optional and may be sync or async.

    ``after`` may return ``ShortCircuit(value)`` to finish the attempt with
    ``value``. Returning ``None`` or ``CONTINUE`` hands over to the next stage.
    """

    async def before(self, ctx: MiddlewareContext) -> None:
        return None

    async def after(
        self,
        ctx: MiddlewareContext,
        retry_with: RetryWithRequest,
    ) -> AfterOutcome | None:
        return None

    async def on_error(self, ctx: MiddlewareContext, error: Exception) -> None:
        return None


async def _resolve(result: Any) -> Any:
    """Hooks may be sync or async."""
    if inspect.isawaitable(result):
        return await result
    return result


async def execute_with_middlewares(
    ctx: MiddlewareContext,
    middlewares: Sequence[Any],
    do_request: RequestExecutor,
) -> PipelineResult:
    """Run one attempt through ``middlewares`` around ``do_request``."""
    try:
        for middleware in middlewares:
            hook = getattr(middleware, "before", None)
            if hook is not None:
                await _resolve(hook(ctx))

        ctx.response = await do_request(ctx)

        async def retry_with(**overrides: Any) -> RawResponse:
            unknown = set(overrides) - _OVERRIDABLE
            if unknown:
                raise TypeError(f"Cannot override request fields: {sorted(unknown)}")
            response = await do_request(replace(ctx, **overrides))
            ctx.response = response
            return response

        for middleware in middlewares:
            hook = getattr(middleware, "after", None)
            if hook is None:
                continue
            outcome = await _resolve(hook(ctx, retry_with))
            if isinstance(outcome, ShortCircuit):
                return PipelineResult(short_circuit=outcome)
            if outcome is not None and not isinstance(outcome, Continue):
                raise TypeError(
                    f"{type(middleware).__name__}.after must return "
                    "ShortCircuit, CONTINUE or None"
                )
        return PipelineResult(response=ctx.response)
    except Exception as error:
        for middleware in middlewares:
            hook = getattr(middleware, "on_error", None)
            if hook is not None:
                await _resolve(hook(ctx, error))
        raise
