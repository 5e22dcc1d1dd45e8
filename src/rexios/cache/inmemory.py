"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/inmemory.py.
"""

from __future__ import annotations

from typing import Any, Mapping

from .base import CacheStore, Listener, ListenerRegistry, Unsubscribe, merge_entry
from ..types import CacheEntry, CacheKey


class InMemoryCacheStore(CacheStore):
    """
    Process-local cache store suitable for single-client and test workloads.

    Entries are replaced, never mutated, so a subscriber fires exactly when the
    entry object for its key changes identity.
    """

    backend_id = "inmemory"

    def __init__(self) -> None:
        self._rows: dict[CacheKey, CacheEntry] = {}
        self._listeners = ListenerRegistry()

    async def get(self, key: CacheKey) -> CacheEntry | None:
        return self._rows.get(key)

    async def set(self, key: CacheKey, entry: CacheEntry) -> None:
        self._write(key, entry)

    async def patch(self, key: CacheKey, partial: Mapping[str, Any]) -> None:
        self._write(key, merge_entry(self._rows.get(key), partial))

    def subscribe(self, key: CacheKey, callback: Listener) -> Unsubscribe:
        return self._listeners.add(key, callback)

    async def clear(self) -> None:
        dropped = list(self._rows)
        self._rows.clear()
        for key in dropped:
            self._listeners.notify(key)

    def __len__(self) -> int:
        return len(self._rows)

    def _write(self, key: CacheKey, entry: CacheEntry) -> None:
        if self._rows.get(key) is entry:
            return
        self._rows[key] = entry
        self._listeners.notify(key)
