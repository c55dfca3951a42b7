import unittest
from unittest.mock import MagicMock

from agents.metadata import MetadataService
from tests.fakes import MemoryStore, VirtualTimer
from tools.detached import DetachedTasks


class TestMetadataService(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = MemoryStore()
        self.timer = VirtualTimer()
        self.tasks = DetachedTasks()
        self.telemetry = MagicMock()
        self.service = MetadataService(
            self.store, debounce_ms=1000, timer=self.timer, tasks=self.tasks, telemetry=self.telemetry
        )
        await self.store.upsert("company", {"id": "acme", "provider": "greenhouse", "name": "Acme"})
        await self.store.upsert("company", {"id": "plaid", "provider": "lever", "name": ""})
        for id in ["1", "2", "3"]:
            await self.store.upsert("job", {"id": id, "company_id": "acme", "title": id})

    def recounts(self, name):
        return [c for c in self.telemetry.log_call.call_args_list if c.args[0] == name]

    async def test_burst_of_changes_recounts_once(self):
        for _ in range(10):
            self.service.job_changed()
            self.timer.advance(0.25)
        await self.tasks.drain()
        self.assertEqual(self.recounts("RefreshJobMetadata"), [])

        self.timer.advance(1)
        await self.tasks.drain()

        self.assertEqual(len(self.recounts("RefreshJobMetadata")), 1)
        self.assertEqual(self.recounts("RefreshCompanyMetadata"), [])
        self.assertEqual(self.store.docs[("metadata", "job", "job")]["job_count"], 3)

    async def test_company_metadata(self):
        doc = await self.service.refresh_company_metadata()

        self.assertEqual(doc["company_count"], 2)
        # Name falls back to id
        self.assertEqual(sorted(doc["company_names"]), [["acme", "Acme"], ["plaid", "plaid"]])

    async def test_get_metadata_is_cached_until_recount(self):
        await self.service.refresh_company_metadata()
        await self.service.refresh_job_metadata()

        first = await self.service.get_metadata()
        self.assertEqual(first["job_count"], 3)

        await self.store.upsert("job", {"id": "4", "company_id": "acme", "title": "4"})
        self.assertEqual((await self.service.get_metadata())["job_count"], 3)

        self.service.job_changed()
        await self.service.flush()

        self.assertEqual((await self.service.get_metadata())["job_count"], 4)

    async def test_empty_metadata(self):
        meta = await MetadataService(MemoryStore(), timer=self.timer, tasks=self.tasks).get_metadata()

        self.assertEqual(meta, {"company_count": 0, "company_names": [], "job_count": 0})


if __name__ == "__main__":
    unittest.main()
