#!/usr/bin/env python3
"""
Dedupe benchmark utility for characterizing request collapse and cache reads.

Usage examples:
  PYTHONPATH=src python scripts/dedupe_benchmark.py --backend inmemory
  PYTHONPATH=src python scripts/dedupe_benchmark.py --backend redis --redis-url redis://localhost:6379/0
"""

from __future__ import annotations

import argparse
import asyncio
import json
import statistics
import time
import uuid

from rexios import ClientSettings, RequestClient


class SleepResponse:
    def __init__(self, payload: dict) -> None:
        self.status = 200
        self.headers: dict[str, str] = {"content-type": "application/json"}
        self._body = json.dumps(payload)

    @property
    def ok(self) -> bool:
        return True

    async def text(self) -> str:
        return self._body

    async def json(self):
        return json.loads(self._body)


class SleepTransport:
    def __init__(self, latency_ms: float) -> None:
        self._latency_s = latency_ms / 1000.0
        self.calls = 0

    async def __call__(self, url, *, method, headers, body, signal):
        _ = headers
        _ = body
        _ = signal
        self.calls += 1
        await asyncio.sleep(self._latency_s)
        return SleepResponse({"url": url, "method": method})


async def run_benchmark(
    *,
    backend: str,
    num_requests: int,
    distinct_keys: int,
    latency_ms: float,
    stale_time_s: float | None,
    redis_url: str | None,
) -> None:
    redis_client = None
    if backend == "redis":
        if not redis_url:
            raise ValueError("--redis-url is required for redis backend")
        import redis.asyncio as redis

        redis_client = redis.Redis.from_url(redis_url)
    elif backend != "inmemory":
        raise ValueError(f"Unsupported backend: {backend}")

    transport = SleepTransport(latency_ms=latency_ms)
    client = RequestClient(
        ClientSettings(redis_prefix=f"bench:{uuid.uuid4().hex}"),
        transport=transport,
        cache_store=backend,
        redis_client=redis_client,
    )
    latencies: list[float] = []

    async def one(i: int) -> None:
        started = time.perf_counter()
        await client.query("bench", url=f"/items/{i % distinct_keys}", stale_time_s=stale_time_s)
        latencies.append(time.perf_counter() - started)

    started = time.time()
    await asyncio.gather(*(one(i) for i in range(num_requests)))
    elapsed = time.time() - started
    await client.clear_cache()

    throughput = num_requests / elapsed if elapsed > 0 else 0.0
    p50 = statistics.median(latencies) if latencies else 0.0
    p95 = sorted(latencies)[int(0.95 * (len(latencies) - 1))] if latencies else 0.0

    print(f"backend={backend}")
    print(f"requests={num_requests}")
    print(f"distinct_keys={distinct_keys}")
    print(f"transport_calls={transport.calls}")
    print(f"transport_latency_ms={latency_ms:.2f}")
    print(f"elapsed_s={elapsed:.3f}")
    print(f"throughput_rps={throughput:.2f}")
    print(f"request_p50_ms={p50 * 1000:.2f}")
    print(f"request_p95_ms={p95 * 1000:.2f}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Request dedupe benchmark utility")
    parser.add_argument("--backend", choices=("inmemory", "redis"), default="inmemory")
    parser.add_argument("--num-requests", type=int, default=1000)
    parser.add_argument("--distinct-keys", type=int, default=10)
    parser.add_argument("--latency-ms", type=float, default=20.0)
    parser.add_argument("--stale-time-s", type=float, default=None)
    parser.add_argument("--redis-url", type=str, default=None)
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    asyncio.run(
        run_benchmark(
            backend=args.backend,
            num_requests=args.num_requests,
            distinct_keys=args.distinct_keys,
            latency_ms=args.latency_ms,
            stale_time_s=args.stale_time_s,
            redis_url=args.redis_url,
        )
    )


if __name__ == "__main__":
    main()
