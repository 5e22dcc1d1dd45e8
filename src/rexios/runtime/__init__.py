"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/__init__.py.
"""

from .cancellation import CancelToken
from .pending import PendingCoordinator
from .retry import call_with_retry, resolve_retry_delay, should_retry
from .timeouts import call_with_cancellation

__all__ = [
    "CancelToken",
    "PendingCoordinator",
    "call_with_cancellation",
    "call_with_retry",
    "resolve_retry_delay",
    "should_retry",
]
