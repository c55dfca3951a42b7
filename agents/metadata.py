"""
Metadata Agent — debounced recount of company and job aggregates.

Bursts of queue completions collapse into one recount per aggregate; the
result is stored in the `metadata` collection and served from a cache that
each recount invalidates.
"""

from typing import Optional

from config.log import get_logger
from tools.debounce import DebounceExecutor
from tools.detached import DetachedTasks
from tools.job_store import Store
from tools.telemetry import Telemetry
from tools.timers import Timer

log = get_logger(__name__)

METADATA_COLLECTION = "metadata"


class MetadataService:
    def __init__(
        self,
        store: Store,
        debounce_ms: int = 30000,
        timer: Timer | None = None,
        tasks: DetachedTasks | None = None,
        telemetry: Telemetry | None = None,
    ):
        self.store = store
        self._cache: Optional[dict] = None
        self.company_executor = DebounceExecutor(
            "RefreshCompanyMetadata", self.refresh_company_metadata, debounce_ms, timer, tasks, telemetry
        )
        self.job_executor = DebounceExecutor(
            "RefreshJobMetadata", self.refresh_job_metadata, debounce_ms, timer, tasks, telemetry
        )

    def company_changed(self) -> None:
        self.company_executor.call()

    def job_changed(self) -> None:
        self.job_executor.call()

    async def refresh_company_metadata(self) -> dict:
        companies = await self.store.query("company")
        doc = {
            "id": "company",
            "company_count": len(companies),
            "company_names": [[c["id"], c.get("name") or c["id"]] for c in companies],
        }
        await self.store.upsert(METADATA_COLLECTION, doc)
        self._cache = None
        log.info("[Metadata] %d companies", doc["company_count"])
        return doc

    async def refresh_job_metadata(self) -> dict:
        doc = {"id": "job", "job_count": await self.store.count("job")}
        await self.store.upsert(METADATA_COLLECTION, doc)
        self._cache = None
        log.info("[Metadata] %d jobs", doc["job_count"])
        return doc

    async def get_metadata(self) -> dict:
        """Combined aggregates as last recounted."""
        if self._cache is None:
            company = await self.store.get_item(METADATA_COLLECTION, "company", "company") or {}
            job = await self.store.get_item(METADATA_COLLECTION, "job", "job") or {}
            self._cache = {
                "company_count": company.get("company_count", 0),
                "company_names": company.get("company_names", []),
                "job_count": job.get("job_count", 0),
            }
        return self._cache

    async def flush(self) -> None:
        """Run any pending recount now."""
        await self.company_executor.flush()
        await self.job_executor.flush()
