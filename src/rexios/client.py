"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: client.py.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import replace
from typing import Any, Callable, Iterable, Sequence

from .cache.base import CacheStore, Listener, Unsubscribe
from .cache.factory import create_cache_store
from .cache.freshness import is_expired, is_fresh
from .cache.keys import build_cache_key
from .errors import ConfigurationError, RexiosError, classify_transport_error
from .middleware import execute_with_middlewares
from .response import parse_response
from .runtime.cancellation import CancelToken
from .runtime.pending import PendingCoordinator
from .runtime.retry import call_with_retry
from .runtime.timeouts import call_with_cancellation
from .settings import ClientSettings
from .tags import TagIndex
from .types import (
    READ_METHODS,
    CacheEntry,
    CacheKey,
    MiddlewareContext,
    RawResponse,
    RequestOptions,
    Tag,
    Transport,
)
from .urls import append_query, join_url

logger = logging.getLogger("rexios.client")

BackgroundErrorHook = Callable[[CacheKey, Exception], None]

_RESET_EXPIRED: dict[str, Any] = {
    "status": "idle",
    "data": None,
    "error": None,
    "expires_at": None,
    "updated_at": None,
}


class RequestClient:
    """
    Request orchestrator: serves cached data, joins or starts fetches, and keeps
    the tag index in step with the cache store.

    Pending fetches and the tag index belong to this instance; ``clear_cache``
    resets both together with the store.
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        transport: Transport | None = None,
        cache_store: str | CacheStore | None = None,
        redis_client: Any | None = None,
        middlewares: Sequence[Any] | None = None,
        clock: Callable[[], float] | None = None,
        on_background_error: BackgroundErrorHook | None = None,
    ) -> None:
        self.settings = settings or ClientSettings()
        self._owns_transport = transport is None
        if transport is None:
            transport = _default_transport()
        if not callable(transport):
            raise ConfigurationError(
                "A transport callable is required; pass `transport=` or use the default."
            )
        self._transport = transport
        self._cache = create_cache_store(
            cache_store,
            redis_client=redis_client,
            settings=self.settings,
        )
        self._middlewares = list(middlewares or [])
        self._clock = clock or time.time
        self._on_background_error = on_background_error

        self._pending = PendingCoordinator()
        self._tags = TagIndex()
        self._background: set[asyncio.Task[None]] = set()

    @property
    def cache_store(self) -> CacheStore:
        return self._cache

    async def __aenter__(self) -> "RequestClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def query(
        self,
        name: str,
        request: RequestOptions | None = None,
        **fields: Any,
    ) -> Any:
        """Read-shaped request: serve from cache when allowed, otherwise fetch."""
        options = replace(_build_options(request, fields), method="GET")
        key = build_cache_key(name, options)
        return await self._perform(key, options)

    async def mutate(
        self,
        name: str,
        request: RequestOptions | None = None,
        **fields: Any,
    ) -> Any:
        """
        Write-shaped request: always executes, then invalidates ``invalidate_tags``.

        Mutations do not dedupe unless ``dedupe=True`` is passed; ``serial=True``
        orders mutations sharing a key.
        """
        options = _build_options(request, fields)
        if options.method in READ_METHODS:
            raise ValueError(f"mutate() requires a write method, got {options.method}")
        key = build_cache_key(name, options)
        result = await self._pending.run(
            key,
            lambda: self._fetch_and_cache(key, options),
            dedupe=bool(options.dedupe),
            serial=options.serial,
        )
        if options.invalidate_tags:
            await self.invalidate_tags(options.invalidate_tags)
        return result

    async def get_cache(self, key: CacheKey) -> CacheEntry | None:
        return await self._cache.get(key)

    def subscribe(self, key: CacheKey, callback: Listener) -> Unsubscribe:
        return self._cache.subscribe(key, callback)

    async def invalidate_tags(self, tags: Iterable[Tag]) -> list[CacheKey]:
        return await self._tags.invalidate_tags(self._cache, tags)

    async def invalidate_key(self, key: CacheKey) -> None:
        await self._tags.invalidate_key(self._cache, key)

    async def clear_cache(self) -> None:
        """Drop pending fetches, the tag index and every stored entry."""
        self._pending.clear()
        self._tags.clear()
        await self._cache.clear()

    async def aclose(self) -> None:
        """Cancel background revalidations and close the transport if the client built it."""
        background = list(self._background)
        for task in background:
            task.cancel()
        await asyncio.gather(*background, return_exceptions=True)
        if self._owns_transport:
            await self._transport.aclose()  # type: ignore[attr-defined]

    async def _perform(self, key: CacheKey, options: RequestOptions) -> Any:
        now = self._clock()
        dedupe = True if options.dedupe is None else options.dedupe
        existing = await self._cache.get(key)

        if is_expired(existing, options.cache_time_s, now):
            logger.debug("Cache entry expired for key %s", key)
            await self._cache.patch(key, _RESET_EXPIRED)
        elif is_fresh(existing, options.stale_time_s, now):
            logger.debug("Serving fresh cache entry for key %s", key)
            return existing.data  # type: ignore[union-attr]
        elif options.background and existing is not None and existing.has_data:
            logger.debug("Serving stale entry and revalidating key %s", key)
            self._revalidate_in_background(key, options, dedupe=dedupe)
            return existing.data

        return await self._pending.run(
            key,
            lambda: self._fetch_and_cache(key, options),
            dedupe=dedupe,
            serial=options.serial,
        )

    def _revalidate_in_background(
        self,
        key: CacheKey,
        options: RequestOptions,
        *,
        dedupe: bool,
    ) -> None:
        async def _revalidate() -> None:
            try:
                await self._pending.run(
                    key,
                    lambda: self._fetch_and_cache(key, options),
                    dedupe=dedupe,
                    serial=options.serial,
                )
            except Exception as error:
                # Already recorded as an error entry; the stale reader is not interrupted.
                logger.warning("Background revalidation failed for key %s: %s", key, error)
                if self._on_background_error is not None:
                    try:
                        self._on_background_error(key, error)
                    except Exception:
                        logger.exception("on_background_error hook failed for key %s", key)

        task = asyncio.ensure_future(_revalidate())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _fetch_and_cache(self, key: CacheKey, options: RequestOptions) -> Any:
        """Write a loading entry, run the attempts, then record success or error."""
        method = options.method or "GET"
        headers = {**self.settings.headers, **(options.headers or {})}
        url = append_query(join_url(self.settings.base_url, options.url), options.query)
        timeout_s = options.timeout_s if options.timeout_s is not None else self.settings.timeout_s
        entry_tags = options.tags or self._tags.tags_for(key)
        signal = options.signal

        async def _send(ctx: MiddlewareContext) -> RawResponse:
            return await self._send(ctx, timeout_s=timeout_s, signal=signal)

        async def _attempt(attempt: int) -> Any:
            ctx = MiddlewareContext(
                url=url,
                method=method,
                headers=dict(headers),
                body=options.body,
                attempt=attempt,
            )
            result = await execute_with_middlewares(ctx, self._middlewares, _send)
            if result.short_circuit is not None:
                return result.short_circuit.value
            return await parse_response(result.response, options)  # type: ignore[arg-type]

        await self._cache.set(
            key,
            CacheEntry(
                status="loading",
                updated_at=self._clock(),
                tags=entry_tags,
                version=options.version,
            ),
        )

        try:
            data = await call_with_retry(
                _attempt,
                retry=options.retry,
                retry_delay_s=options.retry_delay_s,
                can_retry=lambda: signal is None or not signal.cancelled,
            )
            updated_at = self._clock()
            await self._cache.set(
                key,
                CacheEntry(
                    status="success",
                    data=data,
                    updated_at=updated_at,
                    expires_at=(
                        updated_at + options.cache_time_s
                        if options.cache_time_s is not None
                        else None
                    ),
                    tags=options.tags,
                    version=options.version,
                ),
            )
            self._tags.register(key, options.tags)
            return data
        except Exception as error:
            logger.debug("Request failed for key %s: %s", key, error)
            await self._cache.set(
                key,
                CacheEntry(
                    status="error",
                    error=error,
                    updated_at=self._clock(),
                    tags=entry_tags,
                    version=options.version,
                ),
            )
            raise

    async def _send(
        self,
        ctx: MiddlewareContext,
        *,
        timeout_s: float | None,
        signal: CancelToken | None,
    ) -> RawResponse:
        """One physical transport call under the composed cancellation token."""

        async def _call(token: CancelToken) -> RawResponse:
            try:
                return await self._transport(
                    ctx.url,
                    method=ctx.method,
                    headers=ctx.headers,
                    body=ctx.body,
                    signal=token,
                )
            except RexiosError:
                raise
            except Exception as error:
                raise classify_transport_error(error) from error

        return await call_with_cancellation(_call, timeout_s=timeout_s, signal=signal)


def _default_transport() -> Transport:
    try:
        from .transport import HttpxTransport
    except ModuleNotFoundError as exc:
        raise ConfigurationError(
            "No transport given and `httpx` is not installed; pass `transport=`."
        ) from exc
    return HttpxTransport()


def _build_options(request: RequestOptions | None, fields: dict[str, Any]) -> RequestOptions:
    """Merge keyword ``fields`` over ``request``; ``provide_tags`` aliases ``tags``."""
    fields = dict(fields)
    if "provide_tags" in fields:
        if "tags" in fields:
            raise TypeError("Pass either `tags` or `provide_tags`, not both")
        fields["tags"] = fields.pop("provide_tags")
    if request is None:
        return RequestOptions(**fields)
    return replace(request, **fields) if fields else request


def create_client(
    settings: ClientSettings | None = None,
    **kwargs: Any,
) -> RequestClient:
    """Create a client, loading settings from the environment when none are given."""
    return RequestClient(settings or ClientSettings.from_env(), **kwargs)
