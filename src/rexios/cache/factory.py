"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Factory helpers for selecting cache store backends.
"""

from __future__ import annotations

from typing import Any

from ..errors import ConfigurationError
from ..settings import ClientSettings
from .base import CacheStore
from .inmemory import InMemoryCacheStore


def create_cache_store(
    backend: str | CacheStore | None = None,
    *,
    redis_client: Any | None = None,
    settings: ClientSettings | None = None,
) -> CacheStore:
    """
    Resolve a cache store from an id, an instance, or client settings.

    Backends:
    - `inmemory` (default)
    - `redis`

    Redis resolution:
    - Uses the provided `redis_client` when supplied.
    - Otherwise builds a client from `settings.redis_url`.
    """
    if backend is not None and not isinstance(backend, str):
        return backend

    cfg = settings or ClientSettings()
    key = (backend or cfg.cache_backend or "inmemory").strip().lower()

    if key in ("mem", "memory", "inmemory", "in_memory"):
        return InMemoryCacheStore()

    if key == "redis":
        from .redis import RedisCacheStore

        client = redis_client
        if client is None:
            if not cfg.redis_url:
                raise ConfigurationError(
                    "Redis cache backend requires a redis client or REXIOS_REDIS_URL."
                )
            try:
                import redis.asyncio as redis
            except ModuleNotFoundError as exc:  # pragma: no cover
                raise ConfigurationError(
                    "Redis cache backend requires `redis` to be installed."
                ) from exc
            client = redis.from_url(cfg.redis_url)
        return RedisCacheStore(client, prefix=cfg.redis_prefix)

    raise ConfigurationError(f"Unknown cache backend '{backend or cfg.cache_backend}'")
