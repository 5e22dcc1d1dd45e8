"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/keys.py.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Mapping

from ..types import CacheKey, RequestOptions


def _canonical(value: Any, active: set[int]) -> Any:
    """Order-independent, JSON-safe view of ``value``; cycles become a marker."""
    if isinstance(value, (Mapping, list, tuple, set, frozenset)):
        marker = id(value)
        if marker in active:
            return "<cycle>"
        active.add(marker)
        try:
            if isinstance(value, Mapping):
                items = sorted(
                    value.items(), key=lambda item: (type(item[0]).__name__, str(item[0]))
                )
                return [[type(k).__name__, str(k), _canonical(v, active)] for k, v in items]
            rows = [_canonical(item, active) for item in value]
            if isinstance(value, (set, frozenset)):
                rows.sort(key=lambda row: json.dumps(row, sort_keys=True, default=str))
            return rows
        finally:
            active.discard(marker)
    return value


def hash_value(value: Any) -> str:
    """Return a stable digest for a query/body payload; never raises."""
    try:
        normalized = json.dumps(value, ensure_ascii=True, sort_keys=True, default=str)
    except (TypeError, ValueError):
        # Mixed key types or cycles: hash a canonical form instead of str().
        normalized = json.dumps(_canonical(value, set()), ensure_ascii=True, default=str)
    return hashlib.sha256(normalized.encode("utf-8", "backslashreplace")).hexdigest()[:16]


def build_cache_key(name: str, request: RequestOptions) -> CacheKey:
    """Build deterministic cache key for request name + method + url + payload."""
    if request.query_key:
        return request.query_key
    method = (request.method or "GET").upper()
    query = hash_value(request.query) if request.query else ""
    body = hash_value(request.body) if request.body is not None else ""
    return f"{name}:{method}:{request.url}:{query}:{body}"
