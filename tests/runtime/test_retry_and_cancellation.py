from __future__ import annotations

import asyncio

import pytest

from rexios import CancelToken, RequestCancelledError, RexiosTimeoutError, should_retry
from rexios.runtime import call_with_cancellation, call_with_retry, resolve_retry_delay


def run_async(coro):
    return asyncio.run(coro)


def test_should_retry_policies():
    error = RuntimeError("x")

    assert should_retry(None, error, 0) is False
    assert should_retry(2, error, 0) is True
    assert should_retry(2, error, 1) is True
    assert should_retry(2, error, 2) is False
    assert should_retry(0, error, 0) is False
    assert should_retry(lambda err, attempt: attempt < 5, error, 4) is True
    assert should_retry(lambda err, attempt: isinstance(err, KeyError), error, 0) is False


def test_resolve_retry_delay():
    assert resolve_retry_delay(None, 3) == 0.0
    assert resolve_retry_delay(0.25, 3) == 0.25
    assert resolve_retry_delay(lambda attempt: 0.1 * (2**attempt), 2) == pytest.approx(0.4)
    assert resolve_retry_delay(-1.0, 0) == 0.0


def test_call_with_retry_reruns_in_place_and_sleeps_between_attempts():
    async def scenario() -> None:
        attempts: list[int] = []
        delays: list[int] = []

        async def flaky(attempt: int) -> str:
            attempts.append(attempt)
            if attempt < 2:
                raise ConnectionError("down")
            return "ok"

        def delay(attempt: int) -> float:
            delays.append(attempt)
            return 0.001

        result = await call_with_retry(flaky, retry=2, retry_delay_s=delay)

        assert result == "ok"
        assert attempts == [0, 1, 2]
        assert delays == [0, 1]

    run_async(scenario())


def test_call_with_retry_raises_last_error_when_policy_exhausted():
    async def scenario() -> None:
        attempts: list[int] = []

        async def broken(attempt: int) -> None:
            attempts.append(attempt)
            raise ValueError(f"attempt {attempt}")

        with pytest.raises(ValueError, match="attempt 1"):
            await call_with_retry(broken, retry=1)
        assert attempts == [0, 1]

    run_async(scenario())


def test_call_with_retry_stops_when_caller_forbids():
    async def scenario() -> None:
        attempts: list[int] = []

        async def broken(attempt: int) -> None:
            attempts.append(attempt)
            raise ValueError("nope")

        with pytest.raises(ValueError):
            await call_with_retry(broken, retry=5, can_retry=lambda: False)
        assert attempts == [0]

    run_async(scenario())


def test_cancel_token_callbacks_and_link():
    parent = CancelToken()
    child = CancelToken()
    reasons: list[str] = []
    parent.link(child)
    remove = parent.add_callback(reasons.append)
    remove()
    parent.add_callback(reasons.append)

    parent.cancel("user")
    parent.cancel("again")

    assert child.cancelled and child.reason == "user"
    assert reasons == ["user"]

    late: list[str] = []
    parent.add_callback(late.append)
    assert late == ["user"]


def test_call_with_cancellation_returns_result_and_unlinks():
    async def scenario() -> None:
        signal = CancelToken()
        seen: list[CancelToken] = []

        async def call(token: CancelToken) -> str:
            seen.append(token)
            return "ok"

        assert await call_with_cancellation(call, timeout_s=1.0, signal=signal) == "ok"
        signal.cancel("after")
        assert seen[0].cancelled is False

    run_async(scenario())


def test_call_with_cancellation_times_out_and_aborts_work():
    async def scenario() -> None:
        aborted = asyncio.Event()

        async def slow(token: CancelToken) -> None:
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                aborted.set()
                raise

        with pytest.raises(RexiosTimeoutError, match="timed out"):
            await call_with_cancellation(slow, timeout_s=0.01)
        assert aborted.is_set()

    run_async(scenario())


def test_call_with_cancellation_honours_caller_token():
    async def scenario() -> None:
        signal = CancelToken()
        asyncio.get_running_loop().call_later(0.01, signal.cancel, "navigated away")

        async def slow(token: CancelToken) -> None:
            await token.wait()
            await asyncio.sleep(10)

        with pytest.raises(RequestCancelledError, match="navigated away"):
            await call_with_cancellation(slow, timeout_s=5.0, signal=signal)

    run_async(scenario())


def test_call_with_cancellation_rejects_already_cancelled_token():
    async def scenario() -> None:
        signal = CancelToken()
        signal.cancel("early")
        calls = 0

        async def call(token: CancelToken) -> None:
            nonlocal calls
            calls += 1

        with pytest.raises(RequestCancelledError, match="early"):
            await call_with_cancellation(call, timeout_s=None, signal=signal)
        assert calls == 0

    run_async(scenario())
