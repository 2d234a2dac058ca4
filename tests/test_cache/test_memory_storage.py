"""Tests for the in-memory response storage."""

from __future__ import annotations

import asyncio
import threading

from addrindex.cache.memory import MemoryStorage


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestMemoryStorage:
    async def test_set_get(self) -> None:
        storage = MemoryStorage()
        await storage.set("k", b"body", 30)
        assert await storage.get("k") == b"body"

    async def test_get_missing(self) -> None:
        assert await MemoryStorage().get("missing") is None

    async def test_entry_lives_until_ttl(self) -> None:
        clock = FakeClock()
        storage = MemoryStorage(clock=clock)
        await storage.set("k", b"body", 30)

        clock.advance(29.9)
        assert await storage.get("k") == b"body"

        clock.advance(0.1)
        assert await storage.get("k") is None

    async def test_expired_entry_is_evicted_on_read(self) -> None:
        clock = FakeClock()
        storage = MemoryStorage(clock=clock)
        await storage.set("k", b"body", 1)
        clock.advance(5)
        assert len(storage) == 1
        assert await storage.get("k") is None
        assert len(storage) == 0

    async def test_zero_ttl_is_never_served(self) -> None:
        storage = MemoryStorage(clock=FakeClock())
        await storage.set("k", b"body", 0)
        assert await storage.get("k") is None

    async def test_none_ttl_never_expires(self) -> None:
        clock = FakeClock()
        storage = MemoryStorage(clock=clock)
        await storage.set("k", b"body", None)
        clock.advance(10**9)
        assert await storage.get("k") == b"body"

    async def test_set_overwrites_and_resets_ttl(self) -> None:
        clock = FakeClock()
        storage = MemoryStorage(clock=clock)
        await storage.set("k", b"old", 10)
        clock.advance(8)
        await storage.set("k", b"new", 10)
        clock.advance(8)
        assert await storage.get("k") == b"new"

    async def test_lru_eviction(self) -> None:
        storage = MemoryStorage(max_entries=2)
        await storage.set("a", b"1")
        await storage.set("b", b"2")
        assert await storage.get("a") == b"1"  # touch a, b becomes LRU
        await storage.set("c", b"3")

        assert await storage.get("b") is None
        assert await storage.get("a") == b"1"
        assert await storage.get("c") == b"3"

    async def test_delete_and_flush(self) -> None:
        storage = MemoryStorage()
        await storage.set("a", b"1")
        await storage.set("b", b"2")
        await storage.delete("a")
        assert await storage.get("a") is None
        await storage.flush()
        assert len(storage) == 0

    async def test_close_clears(self) -> None:
        storage = MemoryStorage()
        await storage.connect()
        await storage.set("a", b"1")
        await storage.close()
        assert len(storage) == 0

    async def test_concurrent_tasks_distinct_keys(self) -> None:
        storage = MemoryStorage()

        async def writer(i: int) -> None:
            await storage.set(f"k{i}", str(i).encode(), 60)
            await asyncio.sleep(0)
            assert await storage.get(f"k{i}") == str(i).encode()

        await asyncio.gather(*(writer(i) for i in range(200)))
        assert len(storage) == 200

    def test_concurrent_threads_distinct_keys(self) -> None:
        storage = MemoryStorage(max_entries=100_000)
        failures: list[str] = []

        def worker(n: int) -> None:
            loop = asyncio.new_event_loop()
            try:
                for i in range(200):
                    key = f"t{n}-{i}"
                    loop.run_until_complete(storage.set(key, key.encode(), 60))
                    if loop.run_until_complete(storage.get(key)) != key.encode():
                        failures.append(key)
            finally:
                loop.close()

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert failures == []
        assert len(storage) == 1600
