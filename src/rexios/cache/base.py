"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/base.py.
"""

from __future__ import annotations

from dataclasses import fields, replace
from typing import Any, Callable, Mapping, Protocol, runtime_checkable

from ..types import CacheEntry, CacheKey

Unsubscribe = Callable[[], None]
Listener = Callable[[], None]

ENTRY_FIELDS: frozenset[str] = frozenset(f.name for f in fields(CacheEntry))


@runtime_checkable
class CacheStore(Protocol):
    """Storage contract consumed by the request engine; every data op is awaited."""

    async def get(self, key: CacheKey) -> CacheEntry | None: ...

    async def set(self, key: CacheKey, entry: CacheEntry) -> None: ...

    async def patch(self, key: CacheKey, partial: Mapping[str, Any]) -> None: ...

    def subscribe(self, key: CacheKey, callback: Listener) -> Unsubscribe: ...

    async def clear(self) -> None: ...


def merge_entry(entry: CacheEntry | None, partial: Mapping[str, Any]) -> CacheEntry:
    """Shallow-merge ``partial`` into ``entry``; an absent entry starts idle."""
    unknown = set(partial) - ENTRY_FIELDS
    if unknown:
        raise KeyError(f"Unknown cache entry fields: {sorted(unknown)}")
    return replace(entry if entry is not None else CacheEntry(), **partial)


class ListenerRegistry:
    """Per-key callback registry shared by store implementations."""

    def __init__(self) -> None:
        self._listeners: dict[CacheKey, list[Listener]] = {}

    def add(self, key: CacheKey, callback: Listener) -> Unsubscribe:
        self._listeners.setdefault(key, []).append(callback)

        def _unsubscribe() -> None:
            rows = self._listeners.get(key)
            if rows is None:
                return
            try:
                rows.remove(callback)
            except ValueError:
                return
            if not rows:
                self._listeners.pop(key, None)

        return _unsubscribe

    def notify(self, key: CacheKey) -> None:
        for callback in list(self._listeners.get(key, ())):
            callback()
