"""
Reconciler Agent — keeps stored companies and jobs in step with ATS providers.

A jobs refresh diffs the provider's current postings against the stored set:
new postings are inserted, vanished ones deleted, and both new and stale
postings are queued for enrichment (full content, facet extraction, location
normalization). Company onboarding is two-phase: a cheap existence check and
bare insert, then queued enrichment which in turn schedules a jobs refresh.
"""

from dataclasses import dataclass, field
from typing import Optional

from agents.company_info import fill_company_info
from agents.extractor import ExtractionService
from agents.job_info import fill_job_info
from agents.metadata import MetadataService
from config.log import get_logger
from config.settings import Settings
from models.company import Company, CompanyKey
from models.context import ContextEntry, LLMContext
from models.enums import Provider
from models.job import Job, JobKey, JobUpdates, Location
from sources.base import SourceConnector
from sources.registry import get_connector
from tools.async_batch import async_batch
from tools.detached import DetachedTasks
from tools.errors import AppError, NotFound
from tools.job_store import Store
from tools.normalization_cache import NormalizationCache
from tools.task_queue import TaskQueue
from tools.telemetry import Telemetry
from tools.text_extractor import html_to_text

log = get_logger(__name__)

COMPANY = "company"
JOB = "job"

# Refetch a light listing in full when at least ~10% of it is new
FULL_REFETCH_RATIO = 9


@dataclass(frozen=True)
class JobsRefresh:
    key: CompanyKey
    replace_older_than: Optional[int] = None


@dataclass
class JobRefresh:
    provider: Provider
    job: Job
    company_description: Optional[str] = None


@dataclass
class OnboardResult:
    added: list[str] = field(default_factory=list)
    existing: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


def _split(upstream: list[Job], stored_ts: dict[str, int]) -> tuple[list[Job], list[str], list[Job]]:
    """Partition into (added jobs, removed ids, kept jobs)."""
    upstream_ids = {job.id for job in upstream}
    added = [job for job in upstream if job.id not in stored_ts]
    removed = [id for id in stored_ts if id not in upstream_ids]
    kept = [job for job in upstream if job.id in stored_ts]
    return added, removed, kept


def _company_doc(company: Company) -> dict:
    return company.model_dump(mode="json", exclude_none=True)


def _job_doc(job: Job) -> dict:
    return job.model_dump(mode="json", exclude_none=True)


class ReconciliationEngine:
    def __init__(
        self,
        store: Store,
        connectors: dict[Provider, SourceConnector],
        extraction: ExtractionService,
        location_cache: NormalizationCache[Location],
        metadata: MetadataService,
        tasks: DetachedTasks,
        telemetry: Telemetry,
        settings: Settings,
    ):
        self.store = store
        self.connectors = connectors
        self.extraction = extraction
        self.location_cache = location_cache
        self.metadata = metadata
        self.telemetry = telemetry
        self.batch_size = settings.batch_size

        queue_args = dict(
            concurrency_limit=settings.queue_concurrency,
            task_delay_ms=settings.queue_task_delay_ms,
            tasks=tasks,
            telemetry=telemetry,
        )
        self.company_jobs_queue: TaskQueue[JobsRefresh] = TaskQueue(
            "CompanyJobs", self._run_jobs_refresh, on_complete=metadata.job_changed, **queue_args
        )
        self.company_info_queue: TaskQueue[CompanyKey] = TaskQueue(
            "CompanyInfo", self.refresh_company_info, on_complete=metadata.company_changed, **queue_args
        )
        self.job_info_queue: TaskQueue[JobRefresh] = TaskQueue(
            "JobInfo", self.refresh_job_info, on_complete=metadata.job_changed, **queue_args
        )

    # region Jobs

    async def refresh_jobs_for_company(
        self,
        key: CompanyKey,
        replace_older_than: Optional[int] = None,
    ) -> JobUpdates:
        """
        Reconcile one company's stored jobs with its provider listing.

        Args:
            key: Company to refresh.
            replace_older_than: Epoch ms; kept jobs last written before this
                are re-enriched and overwritten.

        Returns:
            Ids added, removed, kept and refreshed.
        """
        connector = get_connector(self.connectors, key.provider)

        company = await self.store.get_item(COMPANY, key.id, key.provider)
        if company is None:
            raise NotFound(f"{key}: Company not found")

        full = connector.lists_full_jobs
        upstream = await connector.get_jobs(key, full=full)

        stored = await self.store.query(JOB, {"company_id": key.id})
        stored_ts = {doc["id"]: doc.get("_ts", 0) for doc in stored}

        added, removed, kept = _split(upstream, stored_ts)

        if not full and len(added) > 1 and FULL_REFETCH_RATIO * len(added) > len(removed) + len(kept):
            log.info("[Reconciler] %s: %d new jobs, refetching listing in full", key, len(added))
            upstream = await connector.get_jobs(key, full=True)
            added, removed, kept = _split(upstream, stored_ts)

        refreshed: list[Job] = []
        if replace_older_than is not None:
            refreshed = [job for job in kept if stored_ts[job.id] * 1000 < replace_older_than]

        company_name = company.get("name") or key.id
        for job in upstream:
            job.company_name = company_name

        await async_batch(
            "InsertJobs",
            added,
            lambda job: self.store.upsert(JOB, _job_doc(job)),
            self.batch_size,
            self.telemetry,
        )
        await async_batch(
            "DeleteJobs",
            removed,
            lambda id: self.store.delete_item(JOB, id, key.id),
            self.batch_size,
            self.telemetry,
        )

        description = company.get("description")
        self.job_info_queue.add(
            JobRefresh(key.provider, job, description) for job in added + refreshed
        )

        updates = JobUpdates(
            added=[job.id for job in added],
            removed=removed,
            kept=[job.id for job in kept],
            refreshed=[job.id for job in refreshed],
        )

        log.info(
            "[Reconciler] %s: +%d -%d =%d ~%d",
            key,
            len(updates.added),
            len(updates.removed),
            len(updates.kept),
            len(updates.refreshed),
        )
        self.telemetry.log_property("JobUpdates", {"company": str(key), "added": len(updates.added), "removed": len(updates.removed)})

        return updates

    async def refresh_job_info(self, task: JobRefresh) -> Job:
        """Fetch full content if needed, extract facets and location, then overwrite the job."""
        job = task.job

        if not job.description:
            connector = get_connector(self.connectors, task.provider)
            full = await connector.get_job(job.key)
            full.company_name = job.company_name or full.company_name
            job = full

        context = None
        if task.company_description:
            context = [ContextEntry("Company overview", html_to_text(task.company_description))]

        await fill_job_info(self.extraction, LLMContext(item=job, context=context))

        if job.location:
            location = await self.location_cache.resolve(job.location)
            if location is not None and location.label():
                job.primary_location = location

        await self.store.upsert(JOB, _job_doc(job))
        return job

    async def remove_job(self, key: JobKey) -> bool:
        return await self.store.delete_item(JOB, key.id, key.company_id)

    async def crawl(
        self,
        provider: Optional[Provider] = None,
        replace_older_than: Optional[int] = None,
    ) -> int:
        """Queue a jobs refresh for every stored company. Returns the number queued."""
        keys = await self.get_company_keys(provider)
        self.company_jobs_queue.add(JobsRefresh(key, replace_older_than) for key in keys)
        log.info("[Reconciler] Queued %d companies for crawl", len(keys))
        return len(keys)

    async def _run_jobs_refresh(self, task: JobsRefresh) -> None:
        await self.refresh_jobs_for_company(task.key, task.replace_older_than)

    # endregion

    # region Companies

    async def get_company_keys(self, provider: Optional[Provider] = None) -> list[CompanyKey]:
        filters = {"provider": provider} if provider else None
        docs = await self.store.query(COMPANY, filters)
        return [CompanyKey(id=doc["id"], provider=doc["provider"]) for doc in docs]

    async def add_companies(self, provider: Provider, ids: list[str]) -> OnboardResult:
        """
        Onboard companies: verify each on the provider, store a bare record and
        queue enrichment. Each id succeeds or fails on its own.
        """
        connector = get_connector(self.connectors, provider)
        result = OnboardResult()

        async def add(id: str) -> None:
            key = CompanyKey(id=id, provider=provider)
            try:
                if await self.store.get_item(COMPANY, key.id, key.provider) is not None:
                    result.existing.append(id)
                    return

                company = await connector.get_company(key, full=False)
                await self.store.upsert(COMPANY, _company_doc(company))
                result.added.append(id)
            except Exception as e:
                result.failed[id] = e.message if isinstance(e, AppError) else str(e)
                raise

        await async_batch("AddCompanies", list(dict.fromkeys(ids)), add, self.batch_size, self.telemetry)

        self.company_info_queue.add(CompanyKey(id=id, provider=provider) for id in result.added)

        log.info(
            "[Reconciler] %s: added %d, existing %d, failed %d",
            provider.value,
            len(result.added),
            len(result.existing),
            len(result.failed),
        )
        return result

    async def refresh_company_info(self, key: CompanyKey) -> Company:
        """Fetch full company info plus a sample job, extract attributes, store, then refresh jobs."""
        connector = get_connector(self.connectors, key.provider)
        company = await connector.get_company(key, full=True)

        context = []
        sample = await self._sample_job(connector, key)
        if sample is not None:
            context.append(ContextEntry("Sample job description", html_to_text(sample.description)))

        await fill_company_info(self.extraction, LLMContext(item=company, context=context or None))

        await self.store.upsert(COMPANY, _company_doc(company))
        self.company_jobs_queue.add([JobsRefresh(key)])
        return company

    async def remove_company(self, key: CompanyKey) -> bool:
        """Delete a company and all of its jobs."""
        jobs = await self.store.query(JOB, {"company_id": key.id})
        failures = await async_batch(
            "DeleteJobs",
            [doc["id"] for doc in jobs],
            lambda id: self.store.delete_item(JOB, id, key.id),
            self.batch_size,
            self.telemetry,
        )
        if failures:
            raise AppError(f"{key}: {failures} jobs could not be deleted", 500)

        deleted = await self.store.delete_item(COMPANY, key.id, key.provider)

        self.metadata.company_changed()
        self.metadata.job_changed()
        log.info("[Reconciler] Removed %s and %d jobs", key, len(jobs))
        return deleted

    async def _sample_job(self, connector: SourceConnector, key: CompanyKey) -> Optional[Job]:
        try:
            jobs = await connector.get_jobs(key, full=False)
            if not jobs:
                return None
            sample = jobs[0]
            if not sample.description:
                sample = await connector.get_job(sample.key)
            return sample
        except AppError as e:
            log.warning("[Reconciler] %s: no sample job: %s", key, e.message)
            return None

    # endregion