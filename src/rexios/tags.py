"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Bidirectional tag index and tag-driven invalidation.
"""

from __future__ import annotations

import logging
from typing import Iterable

from .cache.base import CacheStore
from .types import CacheKey, Tag, normalize_tags

logger = logging.getLogger("rexios.cache")

INVALIDATED_EXPIRES_AT = 0.0


class TagIndex:
    """
    Key -> tags and tag -> keys maps kept in sync by one registration path.

    Every mutation runs without suspension points, so under the asyncio event
    loop the two maps are never observed out of sync.
    """

    def __init__(self) -> None:
        self._key_tags: dict[CacheKey, tuple[Tag, ...]] = {}
        self._tag_keys: dict[Tag, set[CacheKey]] = {}

    def register(self, key: CacheKey, tags: Iterable[Tag] | None) -> None:
        """Replace the tag membership of ``key`` with ``tags``."""
        self.unregister(key)
        normalized = normalize_tags(tags)
        if not normalized:
            return
        self._key_tags[key] = normalized
        for tag in normalized:
            self._tag_keys.setdefault(tag, set()).add(key)

    def unregister(self, key: CacheKey) -> tuple[Tag, ...]:
        """Drop every membership of ``key``; returns the tags it held."""
        previous = self._key_tags.pop(key, ())
        for tag in previous:
            keys = self._tag_keys.get(tag)
            if keys is None:
                continue
            keys.discard(key)
            if not keys:
                del self._tag_keys[tag]
        return previous

    def tags_for(self, key: CacheKey) -> tuple[Tag, ...]:
        return self._key_tags.get(key, ())

    def keys_for(self, tag: Tag) -> frozenset[CacheKey]:
        return frozenset(self._tag_keys.get(tag, ()))

    def drop_tag(self, tag: Tag) -> None:
        self._tag_keys.pop(tag, None)

    def clear(self) -> None:
        self._key_tags.clear()
        self._tag_keys.clear()

    def __contains__(self, tag: object) -> bool:
        return tag in self._tag_keys

    async def invalidate_key(self, store: CacheStore, key: CacheKey) -> None:
        """
        Force ``key`` back to idle and drop its tag memberships.

        The entry is patched rather than deleted so subscribers observe the
        transition; ``expires_at`` in the past makes the next read purge it.
        """
        self.unregister(key)
        await store.patch(
            key,
            {
                "status": "idle",
                "data": None,
                "error": None,
                "expires_at": INVALIDATED_EXPIRES_AT,
            },
        )

    async def invalidate_tags(
        self,
        store: CacheStore,
        tags: Iterable[Tag],
    ) -> list[CacheKey]:
        """Invalidate every key carrying any of ``tags``; each key at most once."""
        requested = normalize_tags(tags)
        invalidated: list[CacheKey] = []
        seen: set[CacheKey] = set()
        for tag in requested:
            # Snapshot: invalidate_key mutates the reverse index while we iterate.
            for key in sorted(self.keys_for(tag)):
                if key in seen:
                    continue
                seen.add(key)
                await self.invalidate_key(store, key)
                invalidated.append(key)
            self.drop_tag(tag)
        if invalidated:
            logger.debug("Invalidated %d key(s) for tags %s", len(invalidated), list(requested))
        return invalidated
