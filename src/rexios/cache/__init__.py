"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/__init__.py.
"""

from .base import CacheStore, merge_entry
from .factory import create_cache_store
from .freshness import is_expired, is_fresh
from .inmemory import InMemoryCacheStore
from .keys import build_cache_key, hash_value
from .redis import RedisCacheStore

__all__ = [
    "CacheStore",
    "InMemoryCacheStore",
    "RedisCacheStore",
    "build_cache_key",
    "create_cache_store",
    "hash_value",
    "is_expired",
    "is_fresh",
    "merge_entry",
]
