"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Default transport backed by ``httpx.AsyncClient``.
"""

from __future__ import annotations

from typing import Any, Mapping

import httpx

from .errors import NetworkError, RequestCancelledError, RexiosTimeoutError
from .runtime.cancellation import CancelToken


class HttpxResponse:
    """Adapter exposing an ``httpx.Response`` through the raw-response contract."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response
        self.status = response.status_code

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def headers(self) -> Mapping[str, str]:
        return self._response.headers

    @property
    def raw(self) -> httpx.Response:
        return self._response

    async def text(self) -> str:
        await self._response.aread()
        return self._response.text

    async def json(self) -> Any:
        await self._response.aread()
        return self._response.json()


class HttpxTransport:
    """
    Transport issuing requests through one shared ``httpx.AsyncClient``.

    ``dict``/``list`` bodies are sent as JSON; ``str``/``bytes`` bodies as-is.
    Timeouts are enforced by the request engine, so the client runs without
    its own timeout unless one is passed in.
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client or httpx.AsyncClient(timeout=None)
        self._owns_client = client is None

    async def __call__(
        self,
        url: str,
        *,
        method: str,
        headers: Mapping[str, str],
        body: Any,
        signal: CancelToken,
    ) -> HttpxResponse:
        if signal.cancelled:
            raise RequestCancelledError(f"Request cancelled: {signal.reason}")
        kwargs: dict[str, Any] = {"headers": dict(headers)}
        if isinstance(body, (dict, list)):
            kwargs["json"] = body
        elif body is not None:
            kwargs["content"] = body
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise RexiosTimeoutError(str(exc) or "Request timed out") from exc
        except httpx.TransportError as exc:
            raise NetworkError(str(exc) or type(exc).__name__) from exc
        return HttpxResponse(response)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
