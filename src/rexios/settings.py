"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Client settings and explicit config loading.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

DEFAULT_TIMEOUT_S = 60.0


def _env_first(*names: str, default: str | None = None) -> str | None:
    """
    Return the first non-empty environment variable in `names`.

    Args:
        *names: Environment variable names to check in order.
        default: Value returned if no non-empty variable is found.
    """
    for name in names:
        raw = os.getenv(name)
        if raw is None:
            continue
        value = raw.strip()
        if value:
            return value
    return default


@dataclass(frozen=True, slots=True)
class ClientSettings:
    """Explicit settings shared by every request a client issues."""

    base_url: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    timeout_s: float = DEFAULT_TIMEOUT_S

    cache_backend: str = "inmemory"
    redis_url: str | None = None
    redis_prefix: str = "rexios:cache"

    @staticmethod
    def from_env() -> "ClientSettings":
        """Load settings from `REXIOS_*` environment variables."""
        return ClientSettings(
            base_url=_env_first("REXIOS_BASE_URL"),
            timeout_s=float(
                _env_first("REXIOS_TIMEOUT_S", default=str(DEFAULT_TIMEOUT_S))
                or DEFAULT_TIMEOUT_S
            ),
            cache_backend=(
                _env_first("REXIOS_CACHE_BACKEND", default="inmemory") or "inmemory"
            ).lower(),
            redis_url=_env_first("REXIOS_REDIS_URL", "REDIS_URL"),
            redis_prefix=(
                _env_first("REXIOS_REDIS_PREFIX", default="rexios:cache")
                or "rexios:cache"
            ),
        )
