import os
import tempfile
import unittest

from models.enums import Provider
from tools.errors import ValidationFailed
from tools.job_store import SqliteStore


class TestSqliteStore(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        # Nested path: the directory is created on first use
        self.store = SqliteStore(os.path.join(self.tmp.name, "data", "test.db"))

    async def test_upsert_stamps_write_time(self):
        doc = await self.store.upsert("job", {"id": "1", "company_id": "acme", "title": "Engineer"})

        self.assertIn("_ts", doc)
        stored = await self.store.get_item("job", "1", "acme")
        self.assertEqual(stored["title"], "Engineer")
        self.assertEqual(stored["_ts"], doc["_ts"])

    async def test_upsert_replaces_whole_document(self):
        await self.store.upsert("job", {"id": "1", "company_id": "acme", "title": "Old", "summary": "x"})
        await self.store.upsert("job", {"id": "1", "company_id": "acme", "title": "New"})

        stored = await self.store.get_item("job", "1", "acme")
        self.assertEqual(stored["title"], "New")
        self.assertNotIn("summary", stored)
        self.assertEqual(await self.store.count("job"), 1)

    async def test_partition_key_scopes_ids(self):
        await self.store.upsert("job", {"id": "1", "company_id": "acme", "title": "A"})
        await self.store.upsert("job", {"id": "1", "company_id": "globex", "title": "G"})

        self.assertEqual((await self.store.get_item("job", "1", "globex"))["title"], "G")
        self.assertIsNone(await self.store.get_item("job", "1", "initech"))

    async def test_enum_partition_key(self):
        await self.store.upsert("company", {"id": "acme", "provider": Provider.GREENHOUSE, "name": "Acme"})

        self.assertIsNotNone(await self.store.get_item("company", "acme", Provider.GREENHOUSE))
        self.assertIsNotNone(await self.store.get_item("company", "acme", "greenhouse"))
        self.assertEqual(len(await self.store.query("company", {"provider": Provider.GREENHOUSE})), 1)

    async def test_delete(self):
        await self.store.upsert("job", {"id": "1", "company_id": "acme", "title": "A"})

        self.assertTrue(await self.store.delete_item("job", "1", "acme"))
        self.assertFalse(await self.store.delete_item("job", "1", "acme"))

    async def test_query_and_count_filters(self):
        for id, company in [("1", "acme"), ("2", "acme"), ("3", "globex")]:
            await self.store.upsert("job", {"id": id, "company_id": company, "title": id})
        await self.store.upsert("company", {"id": "acme", "provider": "greenhouse", "name": "Acme"})

        docs = await self.store.query("job", {"company_id": "acme"})
        self.assertEqual([doc["id"] for doc in docs], ["1", "2"])
        self.assertEqual(await self.store.count("job"), 3)
        self.assertEqual(await self.store.count("job", {"company_id": "globex"}), 1)
        self.assertEqual(await self.store.count("company"), 1)

    async def test_invalid_documents(self):
        with self.assertRaises(ValidationFailed):
            await self.store.upsert("job", {"company_id": "acme"})
        with self.assertRaises(ValidationFailed):
            await self.store.upsert("job", {"id": "1"})
        with self.assertRaises(ValidationFailed):
            await self.store.upsert("widgets", {"id": "1"})

    async def test_filter_field_names_are_checked(self):
        with self.assertRaises(ValidationFailed):
            await self.store.query("job", {"title') OR 1=1 --": "x"})


if __name__ == "__main__":
    unittest.main()
