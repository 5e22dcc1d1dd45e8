"""
basic_query.py — Minimal rexios example.

Demonstrates a cached read, a background revalidation and a mutation that
invalidates the read through a shared tag.

Usage:
    export REXIOS_BASE_URL=https://jsonplaceholder.typicode.com
    python examples/basic_query.py
"""

from rexios import create_client


async def main() -> None:
    async with create_client() as client:
        post = await client.query(
            "post",
            url="/posts/1",
            stale_time_s=30,
            provide_tags=["post:1"],
        )
        print("fetched:", post["title"])

        cached = await client.query("post", url="/posts/1", stale_time_s=30)
        print("served from cache:", cached is post)

        await client.mutate(
            "updatePost",
            method="PUT",
            url="/posts/1",
            body={"id": 1, "title": "updated", "body": "", "userId": 1},
            invalidate_tags=["post:1"],
        )
        refreshed = await client.query("post", url="/posts/1", stale_time_s=30)
        print("refetched after invalidation:", refreshed["title"])


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
