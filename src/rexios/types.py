"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Request, cache-entry and transport types shared by the request engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Literal,
    Mapping,
    Protocol,
    TypeAlias,
    runtime_checkable,
)

if TYPE_CHECKING:
    from .runtime.cancellation import CancelToken


CacheKey: TypeAlias = str
Tag: TypeAlias = str
CacheStatus = Literal["idle", "loading", "success", "error"]
HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]
ResponseType = Literal["json", "text", "raw"]

RetryDecider: TypeAlias = Callable[[BaseException, int], bool]
RetrySpec: TypeAlias = int | RetryDecider
RetryDelaySpec: TypeAlias = float | Callable[[int], float]

READ_METHODS: frozenset[str] = frozenset({"GET"})


@runtime_checkable
class RawResponse(Protocol):
    """Response-like object returned by a transport call."""

    status: int

    @property
    def ok(self) -> bool: ...

    @property
    def headers(self) -> Mapping[str, str]: ...

    async def text(self) -> str: ...

    async def json(self) -> Any: ...


class Transport(Protocol):
    """Injectable fetch-like primitive used for every physical request."""

    async def __call__(
        self,
        url: str,
        *,
        method: str,
        headers: Mapping[str, str],
        body: Any,
        signal: CancelToken,
    ) -> RawResponse: ...


ResponseParser: TypeAlias = Callable[[RawResponse], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """
    Last known state of one request result.

    ``data`` is meaningful only when ``status == "success"`` and ``error`` only
    when ``status == "error"``.
    """

    status: CacheStatus = "idle"
    data: Any = None
    error: BaseException | None = None
    updated_at: float | None = None
    expires_at: float | None = None
    tags: tuple[Tag, ...] = ()
    version: int | None = None

    @property
    def has_data(self) -> bool:
        return self.status == "success"


@dataclass(frozen=True, slots=True)
class RequestOptions:
    """
    Descriptor for one logical request.

    Attributes:
        url: Absolute URL or path joined onto the client base URL.
        method: HTTP method; ``query`` always forces ``GET``.
        headers: Per-request headers merged over the client defaults.
        body: Request payload handed to the transport as-is.
        query: Query parameters appended to the URL.
        query_key: Explicit cache key; bypasses structural key derivation.
        timeout_s: Per-request timeout; falls back to the client default.
        stale_time_s: Window during which a success entry is served as fresh.
        cache_time_s: Window after which an entry is purged before use.
        dedupe: Join an in-flight fetch for the same key instead of starting one.
        serial: Wait for an in-flight fetch for the same key to settle first.
        background: Serve existing data and revalidate without blocking.
        tags: Invalidation tags provided by a successful result.
        invalidate_tags: Tags invalidated after a successful mutation.
        version: Caller-owned marker copied onto written entries.
        retry: Attempt limit or ``(error, attempt) -> bool`` decider.
        retry_delay_s: Delay before the next attempt, fixed or per attempt.
        response_type: How a successful body is decoded.
        parser: Custom async decoder; wins over ``response_type``.
        response_model: Type the decoded JSON is validated into.
        signal: Caller-owned cancellation token for the transport call.
    """

    url: str
    method: HttpMethod = "GET"
    headers: Mapping[str, str] | None = None
    body: Any = None
    query: Mapping[str, Any] | None = None
    query_key: CacheKey | None = None
    timeout_s: float | None = None
    stale_time_s: float | None = None
    cache_time_s: float | None = None
    dedupe: bool | None = None
    serial: bool = False
    background: bool = False
    tags: tuple[Tag, ...] = ()
    invalidate_tags: tuple[Tag, ...] = ()
    version: int | None = None
    retry: RetrySpec | None = None
    retry_delay_s: RetryDelaySpec | None = None
    response_type: ResponseType = "json"
    parser: ResponseParser | None = None
    response_model: Any = None
    signal: CancelToken | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", normalize_tags(self.tags))
        object.__setattr__(self, "invalidate_tags", normalize_tags(self.invalidate_tags))
        object.__setattr__(self, "method", str(self.method).upper())


def normalize_tags(tags: Any) -> tuple[Tag, ...]:
    """Accept one tag or any iterable of tags; keep first-seen order, drop repeats."""
    if not tags:
        return ()
    if isinstance(tags, str):
        return (tags,)
    return tuple(dict.fromkeys(tags))


@dataclass(slots=True)
class MiddlewareContext:
    """Per-attempt record threaded through every middleware stage."""

    url: str
    method: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    attempt: int = 0
    response: RawResponse | None = None
