"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Error taxonomy for request execution.
"""

from __future__ import annotations

import asyncio
import socket
from typing import Any


class RexiosError(RuntimeError):
    """Base error for all request engine failures."""


class ConfigurationError(RexiosError):
    """Raised when a client cannot be constructed from its configuration."""


class NetworkError(RexiosError):
    """Raised when the transport cannot reach the remote endpoint."""


class RexiosTimeoutError(RexiosError):
    """Raised when a transport call exceeds its timeout."""


class RequestCancelledError(RexiosError):
    """Raised when the caller-supplied cancellation token fires."""


class ParseError(RexiosError):
    """Raised when a response body cannot be decoded as requested."""


class UnknownError(RexiosError):
    """Raised for transport failures that fit no other category."""


class HttpError(RexiosError):
    """Raised for non-2xx responses; carries the status and decoded body."""

    def __init__(self, message: str, status: int, body: Any, response: Any) -> None:
        super().__init__(message)
        self.status = status
        self.body = body
        self.response = response


def classify_transport_error(error: Exception) -> RexiosError:
    """Classify a raw transport exception into a request engine error."""
    if isinstance(error, RexiosError):
        return error
    if isinstance(error, (asyncio.TimeoutError, TimeoutError, socket.timeout)):
        return RexiosTimeoutError(str(error) or "Request timed out")
    if isinstance(error, (ConnectionError, OSError)):
        return NetworkError(str(error) or type(error).__name__)
    return UnknownError(str(error) or type(error).__name__)
