"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Freshness and expiry predicates over cache entries.

Freshness decides whether a value may be served with no network activity at
all. Expiry decides whether a value must be dropped before use, whether or not
a refresh was requested.
"""

from __future__ import annotations

import time

from ..types import CacheEntry


def is_fresh(
    entry: CacheEntry | None,
    stale_time_s: float | None,
    now: float | None = None,
) -> bool:
    """Return True when ``entry`` is a success younger than ``stale_time_s``."""
    if entry is None or entry.status != "success":
        return False
    if entry.updated_at is None or stale_time_s is None:
        return False
    current = time.time() if now is None else now
    return current - entry.updated_at < stale_time_s


def is_expired(
    entry: CacheEntry | None,
    cache_time_s: float | None,
    now: float | None = None,
) -> bool:
    """
    Return True when ``entry`` must be purged before use.

    An absolute ``expires_at`` always wins over the relative ``cache_time_s``.
    """
    if entry is None or entry.updated_at is None:
        return False
    current = time.time() if now is None else now
    if entry.expires_at is not None:
        return current > entry.expires_at
    if cache_time_s is None:
        return False
    return current - entry.updated_at > cache_time_s
