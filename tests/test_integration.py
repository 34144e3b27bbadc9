"""
Integration Tests

End-to-end tests driving the pool with many concurrent tasks while
checking its bounds.

Run with: python -m pytest tests/test_integration.py -v
"""

import asyncio

import pytest

from respool.commands import KVCommands


@pytest.mark.asyncio
@pytest.mark.integration
class TestConcurrentLoad:
    """Many tasks sharing one pool."""

    async def test_bounds_hold_under_load(self, pool_factory, fake_server):
        pool = await pool_factory(min_conn_num=2, idle_conn_num=3, max_conn_num=4)
        kv = KVCommands(pool)
        fake_server.delay = 0.01
        violations = []
        done = asyncio.Event()

        async def watch():
            while not done.is_set():
                stats = pool.stats()
                if stats["idle"] > 3 or stats["idle"] + stats["checked_out"] > 4:
                    violations.append(stats)
                await asyncio.sleep(0)

        async def worker(n: int):
            for i in range(5):
                await kv.set(f"key:{n}:{i}", n * 100 + i)
                assert await kv.get_int(f"key:{n}:{i}") == n * 100 + i

        watcher = asyncio.create_task(watch())
        await asyncio.gather(*(worker(n) for n in range(20)))
        done.set()
        await watcher

        assert violations == []
        assert fake_server.peak_connections <= 4
        assert pool.outstanding <= 4

    @pytest.mark.slow
    async def test_shared_list_from_many_tasks(self, pool_factory):
        pool = await pool_factory()
        kv = KVCommands(pool)

        await asyncio.gather(*(kv.rpush("jobs", n) for n in range(50)))

        items = await kv.lrange("jobs")
        assert sorted(map(int, items)) == list(range(50))

    async def test_multiple_databases_share_server(self, pool_factory):
        pool_a = await pool_factory(database=1)
        pool_b = await pool_factory(database=2)

        await KVCommands(pool_a).set("owner", "a")
        await KVCommands(pool_b).set("owner", "b")

        assert await KVCommands(pool_a).get("owner") == "a"
        assert await KVCommands(pool_b).get("owner") == "b"
