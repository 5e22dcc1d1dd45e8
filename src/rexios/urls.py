"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: urls.py.
"""

from __future__ import annotations

import re
from typing import Any, Mapping
from urllib.parse import urlencode

_ABSOLUTE_URL = re.compile(r"^https?://", re.IGNORECASE)


def join_url(base_url: str | None, url: str) -> str:
    """Join ``url`` onto ``base_url`` unless ``url`` is already absolute."""
    if not base_url or _ABSOLUTE_URL.match(url):
        return url
    return f"{base_url.rstrip('/')}/{url.lstrip('/')}"


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def append_query(url: str, query: Mapping[str, Any] | None) -> str:
    """Append ``query`` to ``url``; ``None`` values are skipped, lists repeat."""
    if not query:
        return url
    pairs: list[tuple[str, str]] = []
    for key, value in query.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, _query_value(item)) for item in value)
        else:
            pairs.append((key, _query_value(value)))
    qs = urlencode(pairs)
    if not qs:
        return url
    return f"{url}&{qs}" if "?" in url else f"{url}?{qs}"
