"""
Test doubles shared across test modules.
"""

import time
from typing import Callable, Optional
from unittest.mock import AsyncMock, MagicMock

from models.company import Company, CompanyKey
from models.enums import Provider
from models.job import Job, JobKey
from tools.errors import NotFound, RequestFailed


class _Handle:
    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualTimer:
    """Timer whose clock only moves on advance()."""

    def __init__(self):
        self.now = 0.0
        self._handles: list[_Handle] = []

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> _Handle:
        handle = _Handle(self.now + delay_s, callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for h in self._handles if not h.cancelled and not h.fired)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [h for h in self._handles if not h.cancelled and not h.fired and h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.now = handle.when
            handle.fired = True
            handle.callback()
        self.now = target


class MemoryStore:
    """Dict-backed Store; set fail_reads / fail_writes to simulate outages."""

    def __init__(self):
        self.docs: dict[tuple[str, str, str], dict] = {}
        self.fail_reads = False
        self.fail_writes = False

    async def get_item(self, collection, id, partition_key):
        if self.fail_reads:
            raise RequestFailed("store unavailable")
        return self.docs.get((collection, str(getattr(partition_key, "value", partition_key)), id))

    async def upsert(self, collection, item):
        if self.fail_writes:
            raise RequestFailed("store unavailable")
        pkey_field = {"company": "provider", "job": "company_id", "location_cache": "pkey", "metadata": "id"}[collection]
        doc = {**item, "_ts": int(time.time())}
        self.docs[(collection, str(item[pkey_field]), item["id"])] = doc
        return doc

    async def delete_item(self, collection, id, partition_key):
        return self.docs.pop((collection, str(getattr(partition_key, "value", partition_key)), id), None) is not None

    async def query(self, collection, filters=None):
        docs = [doc for (c, _, _), doc in self.docs.items() if c == collection]
        for name, value in (filters or {}).items():
            value = getattr(value, "value", value)
            docs = [doc for doc in docs if doc.get(name) == value]
        return docs

    async def count(self, collection, filters=None):
        return len(await self.query(collection, filters))


class FakeConnector:
    """In-memory provider board that records every call."""

    def __init__(self, provider: Provider = Provider.GREENHOUSE, lists_full_jobs: bool = False):
        self.provider = provider
        self.lists_full_jobs = lists_full_jobs
        self.companies: dict[str, str] = {}
        self.jobs: dict[str, dict[str, Job]] = {}
        self.calls: list[tuple] = []

    def add_company(self, id: str, name: str, job_ids: list[str] = ()) -> None:
        self.companies[id] = name
        self.set_jobs(id, job_ids)

    def set_jobs(self, company_id: str, job_ids) -> None:
        self.jobs[company_id] = {
            id: Job(
                id=id,
                company_id=company_id,
                title=f"Job {id}",
                description=f"<p>Description {id}</p>",
                post_ts=1700000000000,
                apply_url=f"https://example.com/{company_id}/{id}",
                location="Seattle, WA",
            )
            for id in job_ids
        }

    async def get_company(self, key: CompanyKey, full: bool = False) -> Company:
        self.calls.append(("get_company", key.id, full))
        if key.id not in self.companies:
            raise NotFound(f"{self.provider.value} / {key.id}: Not Found")
        return Company(
            id=key.id,
            provider=self.provider,
            name=self.companies[key.id],
            description=f"{self.companies[key.id]} builds things." if full else None,
        )

    async def get_jobs(self, key: CompanyKey, full: bool = False) -> list[Job]:
        self.calls.append(("get_jobs", key.id, full))
        if key.id not in self.jobs:
            raise NotFound(f"{self.provider.value} / {key.id}: Not Found")
        full = full or self.lists_full_jobs
        return [
            job.model_copy() if full else job.model_copy(update={"description": ""})
            for job in self.jobs[key.id].values()
        ]

    async def get_job(self, job_key: JobKey) -> Job:
        self.calls.append(("get_job", job_key.id))
        try:
            return self.jobs[job_key.company_id][job_key.id].model_copy()
        except KeyError:
            raise NotFound(f"{self.provider.value} / {job_key.company_id}: Not Found")

    def calls_named(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]


def fake_llm(responses: Optional[dict] = None, error: Optional[Exception] = None) -> MagicMock:
    """
    A LangChain-like chat model mock.

    `responses` maps schema class -> parsed instance; schemas not listed get a
    parsing error. `error`, when given, is raised by every completion.
    """
    responses = responses or {}
    llm = MagicMock()

    def with_structured_output(schema, include_raw=False):
        structured = MagicMock()

        async def ainvoke(messages):
            if error is not None:
                raise error
            parsed = responses.get(schema)
            return {
                "raw": MagicMock(usage_metadata={"total_tokens": 42}),
                "parsed": parsed,
                "parsing_error": None if parsed is not None else ValueError("no response configured"),
            }

        structured.ainvoke = AsyncMock(side_effect=ainvoke)
        return structured

    llm.with_structured_output.side_effect = with_structured_output
    return llm
