"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: __init__.py.
"""

from __future__ import annotations

from .cache import (
    CacheStore,
    InMemoryCacheStore,
    RedisCacheStore,
    build_cache_key,
    create_cache_store,
    is_expired,
    is_fresh,
)
from .client import RequestClient, create_client
from .errors import (
    ConfigurationError,
    HttpError,
    NetworkError,
    ParseError,
    RequestCancelledError,
    RexiosError,
    RexiosTimeoutError,
    UnknownError,
)
from .middleware import (
    CONTINUE,
    Continue,
    Middleware,
    PipelineResult,
    ShortCircuit,
    execute_with_middlewares,
)
from .runtime import CancelToken, PendingCoordinator, should_retry
from .settings import ClientSettings
from .tags import TagIndex
from .types import (
    CacheEntry,
    CacheKey,
    CacheStatus,
    MiddlewareContext,
    RawResponse,
    RequestOptions,
    Tag,
    Transport,
)

__all__ = [
    "CONTINUE",
    "CacheEntry",
    "CacheKey",
    "CacheStatus",
    "CacheStore",
    "CancelToken",
    "ClientSettings",
    "ConfigurationError",
    "Continue",
    "HttpError",
    "InMemoryCacheStore",
    "Middleware",
    "MiddlewareContext",
    "NetworkError",
    "ParseError",
    "PendingCoordinator",
    "PipelineResult",
    "RawResponse",
    "RedisCacheStore",
    "RequestCancelledError",
    "RequestClient",
    "RequestOptions",
    "RexiosError",
    "RexiosTimeoutError",
    "ShortCircuit",
    "Tag",
    "TagIndex",
    "Transport",
    "UnknownError",
    "build_cache_key",
    "create_cache_store",
    "create_client",
    "execute_with_middlewares",
    "is_expired",
    "is_fresh",
    "should_retry",
]


# Lazy import for the httpx-backed transport
def __getattr__(name: str):
    """Lazily expose the default transport, which requires ``httpx``."""
    if name in ("HttpxResponse", "HttpxTransport"):
        from . import transport

        return getattr(transport, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
