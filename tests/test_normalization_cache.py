import unittest
from unittest.mock import AsyncMock, MagicMock

from models.job import Location
from tests.fakes import MemoryStore
from tools.detached import DetachedTasks
from tools.normalization_cache import NormalizationCache, normalize_key

SEATTLE = Location(city="Seattle", region_code="WA", country_code="US")


class TestNormalizeKey(unittest.TestCase):
    def test_lowercases_trims_and_replaces_reserved_characters(self):
        self.assertEqual(normalize_key("  Seattle, WA  "), "seattle, wa")
        self.assertEqual(normalize_key("NYC/Remote #2?"), "nyc_remote _2_")
        self.assertEqual(normalize_key("a\\b"), "a_b")

    def test_blank(self):
        self.assertEqual(normalize_key("   "), "")
        self.assertEqual(normalize_key(None), "")


class TestNormalizationCache(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.store = MemoryStore()
        self.tasks = DetachedTasks()
        self.telemetry = MagicMock()
        self.loader = AsyncMock(return_value=SEATTLE)

    async def asyncTearDown(self):
        await self.tasks.drain()

    def make(self, capacity=10):
        return NormalizationCache(
            "ExtractLocation",
            self.store,
            "location_cache",
            Location,
            self.loader,
            capacity=capacity,
            tasks=self.tasks,
            telemetry=self.telemetry,
        )

    def counters(self):
        return [c.args[0] for c in self.telemetry.log_counter.call_args_list]

    async def test_miss_runs_loader_and_writes_both_tiers(self):
        cache = self.make()

        result = await cache.resolve("  Seattle, WA ")
        await self.tasks.drain()

        self.assertEqual(result, SEATTLE)
        self.loader.assert_awaited_once_with("  Seattle, WA ")
        self.assertEqual(cache.memory.get("seattle, wa"), SEATTLE)

        doc = self.store.docs[("location_cache", "s", "seattle, wa")]
        self.assertEqual(doc["id"], "seattle, wa")
        self.assertEqual(doc["pkey"], "s")
        self.assertEqual(doc["city"], "Seattle")

    async def test_store_write_joins_shared_group(self):
        cache = self.make()
        self.assertIs(cache._tasks, self.tasks)

        await cache.resolve("Seattle, WA")

        self.assertEqual(len(self.tasks), 1)
        await self.tasks.drain()
        self.assertIn(("location_cache", "s", "seattle, wa"), self.store.docs)

    async def test_memory_hit_skips_store_and_loader(self):
        cache = self.make()
        await cache.resolve("Seattle, WA")
        self.store.fail_reads = True

        result = await cache.resolve("SEATTLE, wa")

        self.assertEqual(result, SEATTLE)
        self.assertEqual(self.loader.await_count, 1)
        self.assertIn("ExtractLocation_MemoryHit", self.counters())

    async def test_store_hit_backfills_memory(self):
        await self.make().resolve("Seattle, WA")
        await self.tasks.drain()

        # A fresh process: empty memory tier, same store
        cache = self.make()
        result = await cache.resolve("Seattle, WA")

        self.assertEqual(result, SEATTLE)
        self.assertEqual(self.loader.await_count, 1)
        self.assertEqual(cache.memory.size(), 1)
        self.assertIn("ExtractLocation_DbHit", self.counters())

    async def test_store_read_failure_is_a_miss(self):
        self.store.fail_reads = True
        cache = self.make()

        result = await cache.resolve("Seattle, WA")

        self.assertEqual(result, SEATTLE)
        self.loader.assert_awaited_once()
        self.telemetry.log_error.assert_called()

    async def test_store_write_failure_does_not_reach_caller(self):
        self.store.fail_writes = True
        cache = self.make()

        result = await cache.resolve("Seattle, WA")
        await self.tasks.drain()

        self.assertEqual(result, SEATTLE)
        self.assertEqual(cache.memory.get("seattle, wa"), SEATTLE)
        self.assertEqual(self.store.docs, {})
        self.telemetry.log_error.assert_called()

    async def test_empty_key_is_never_looked_up(self):
        cache = self.make()

        self.assertIsNone(await cache.resolve("   "))
        self.loader.assert_not_awaited()

    async def test_failed_load_is_not_cached(self):
        self.loader.return_value = None
        cache = self.make()

        self.assertIsNone(await cache.resolve("Atlantis"))
        await self.tasks.drain()

        self.assertEqual(cache.memory.size(), 0)
        self.assertEqual(self.store.docs, {})

    async def test_memory_tier_is_bounded(self):
        cache = self.make(capacity=2)
        for text in ["a", "b", "c"]:
            await cache.resolve(text)

        self.assertEqual(cache.memory.keys(), ["c", "b"])


if __name__ == "__main__":
    unittest.main()
