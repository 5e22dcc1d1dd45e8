from __future__ import annotations

import asyncio

from rexios import CacheEntry, InMemoryCacheStore, TagIndex


def run_async(coro):
    return asyncio.run(coro)


def test_register_replaces_previous_membership():
    index = TagIndex()
    index.register("k1", ["user:1", "users"])
    index.register("k1", ["users", "team:7"])

    assert index.tags_for("k1") == ("users", "team:7")
    assert index.keys_for("users") == {"k1"}
    assert index.keys_for("team:7") == {"k1"}
    assert index.keys_for("user:1") == frozenset()
    assert "user:1" not in index


def test_register_is_idempotent_and_empty_tags_unregister():
    index = TagIndex()
    index.register("k1", ["users"])
    index.register("k1", ["users", "users"])
    index.register("k2", ["users"])

    assert index.tags_for("k1") == ("users",)
    assert index.keys_for("users") == {"k1", "k2"}

    index.register("k1", [])
    assert index.tags_for("k1") == ()
    assert index.keys_for("users") == {"k2"}


def test_invalidate_key_resets_entry_to_idle_and_drops_membership():
    async def scenario() -> None:
        store = InMemoryCacheStore()
        index = TagIndex()
        await store.set(
            "k1",
            CacheEntry(status="success", data={"id": 1}, updated_at=5.0, tags=("user:1",)),
        )
        index.register("k1", ["user:1"])

        await index.invalidate_key(store, "k1")

        entry = await store.get("k1")
        assert entry is not None
        assert entry.status == "idle"
        assert entry.data is None
        assert entry.error is None
        assert entry.expires_at == 0.0
        assert entry.updated_at == 5.0
        assert index.tags_for("k1") == ()
        assert "user:1" not in index

    run_async(scenario())


def test_invalidate_tags_touches_each_key_once_and_drops_tags():
    async def scenario() -> None:
        store = InMemoryCacheStore()
        index = TagIndex()
        writes: list[str] = []
        for key, tags in (("k1", ["a", "b"]), ("k2", ["b"]), ("k3", ["c"])):
            await store.set(key, CacheEntry(status="success", data=key, updated_at=1.0))
            index.register(key, tags)
            store.subscribe(key, lambda key=key: writes.append(key))

        invalidated = await index.invalidate_tags(store, ["a", "b", "a"])

        assert sorted(invalidated) == ["k1", "k2"]
        assert sorted(writes) == ["k1", "k2"]
        assert "a" not in index
        assert "b" not in index
        assert index.keys_for("c") == {"k3"}
        k3 = await store.get("k3")
        assert k3 is not None and k3.status == "success"

    run_async(scenario())


def test_invalidate_unknown_tag_is_a_no_op():
    async def scenario() -> None:
        store = InMemoryCacheStore()
        index = TagIndex()
        assert await index.invalidate_tags(store, ["missing"]) == []
        assert len(store) == 0

    run_async(scenario())
