"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/redis.py.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from .base import CacheStore, Listener, ListenerRegistry, Unsubscribe, merge_entry
from ..errors import HttpError, RexiosError
from ..types import CacheEntry, CacheKey

logger = logging.getLogger("rexios.cache")


class RedisCacheStore(CacheStore):
    """
    Redis-backed cache store for entries that outlive one process.

    Uses:
    - Redis string (``{prefix}:entry:{key}``) per serialized entry
    - Redis set (``{prefix}:keys``) tracking every written key for ``clear``

    Entry ``data`` must be JSON-serializable. Stored errors come back as
    ``RexiosError`` (or ``HttpError`` when a status was recorded) carrying the
    original message. Subscriptions are local to this adapter instance.

    Requires ``redis.asyncio`` (``pip install redis``).

    Args:
        redis: An ``redis.asyncio.Redis`` client instance.
        prefix: Key prefix for namespacing.
    """

    backend_id = "redis"

    def __init__(self, redis: Any, *, prefix: str = "rexios:cache") -> None:
        self._redis = redis
        self._prefix = prefix
        self._listeners = ListenerRegistry()

    def _entry_key(self, key: CacheKey) -> str:
        return f"{self._prefix}:entry:{key}"

    def _keys_key(self) -> str:
        return f"{self._prefix}:keys"

    async def get(self, key: CacheKey) -> CacheEntry | None:
        blob = await self._redis.get(self._entry_key(key))
        if blob is None:
            return None
        if isinstance(blob, bytes):
            blob = blob.decode("utf-8")
        try:
            row = json.loads(blob)
        except json.JSONDecodeError:
            logger.warning("Dropping unreadable cache entry for key %s", key)
            return None
        return _entry_from_row(row)

    async def set(self, key: CacheKey, entry: CacheEntry) -> None:
        await self._write(key, entry)

    async def patch(self, key: CacheKey, partial: Mapping[str, Any]) -> None:
        await self._write(key, merge_entry(await self.get(key), partial))

    def subscribe(self, key: CacheKey, callback: Listener) -> Unsubscribe:
        return self._listeners.add(key, callback)

    async def clear(self) -> None:
        members = await self._redis.smembers(self._keys_key())
        keys = sorted(m.decode("utf-8") if isinstance(m, bytes) else m for m in members)
        if keys:
            await self._redis.delete(*[self._entry_key(k) for k in keys])
        await self._redis.delete(self._keys_key())
        for key in keys:
            self._listeners.notify(key)

    async def _write(self, key: CacheKey, entry: CacheEntry) -> None:
        payload = json.dumps(_entry_to_row(entry), ensure_ascii=True)
        await self._redis.set(self._entry_key(key), payload)
        await self._redis.sadd(self._keys_key(), key)
        self._listeners.notify(key)


def _entry_to_row(entry: CacheEntry) -> dict[str, Any]:
    error: dict[str, Any] | None = None
    if entry.error is not None:
        error = {"type": type(entry.error).__name__, "message": str(entry.error)}
        if isinstance(entry.error, HttpError):
            error["status"] = entry.error.status
    return {
        "status": entry.status,
        "data": entry.data,
        "error": error,
        "updated_at": entry.updated_at,
        "expires_at": entry.expires_at,
        "tags": list(entry.tags),
        "version": entry.version,
    }


def _entry_from_row(row: dict[str, Any]) -> CacheEntry:
    error: BaseException | None = None
    error_row = row.get("error")
    if isinstance(error_row, dict):
        message = str(error_row.get("message", ""))
        status = error_row.get("status")
        if isinstance(status, int):
            error = HttpError(message, status, None, None)
        else:
            error = RexiosError(message)
    return CacheEntry(
        status=row.get("status", "idle"),
        data=row.get("data"),
        error=error,
        updated_at=row.get("updated_at"),
        expires_at=row.get("expires_at"),
        tags=tuple(row.get("tags") or ()),
        version=row.get("version"),
    )
