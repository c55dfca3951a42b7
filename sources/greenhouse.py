"""
Greenhouse job board connector.

Board API: GET /{token} for company info, /{token}/jobs for listings
(?content=true for descriptions) and /{token}/jobs/{id} for one posting.
"""

from datetime import datetime

from config.log import get_logger
from models.company import Company, CompanyKey
from models.enums import Provider
from models.job import Job, JobKey
from tools.api_fetcher import AtsFetcher
from tools.text_extractor import norm_title, unescape_and_sanitize

log = get_logger(__name__)


def _to_epoch_ms(value: str) -> int:
    """Parse an ISO-8601 timestamp (e.g. 2024-05-01T10:00:00-04:00)."""
    if not value:
        return 0
    try:
        return int(datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp() * 1000)
    except ValueError:
        log.debug("Unparseable Greenhouse timestamp: %s", value)
        return 0


class GreenhouseConnector:
    provider = Provider.GREENHOUSE
    lists_full_jobs = False

    def __init__(self, fetcher: AtsFetcher):
        self.fetcher = fetcher

    async def get_company(self, key: CompanyKey, full: bool = False) -> Company:
        data = await self.fetcher.get_json("company", key.id)

        return Company(
            id=key.id,
            provider=self.provider,
            name=data.get("name") or key.id,
            description=unescape_and_sanitize(data.get("content", "")) if full else None,
        )

    async def get_jobs(self, key: CompanyKey, full: bool = False) -> list[Job]:
        params = {"content": "true"} if full else None
        data = await self.fetcher.get_json("jobs", key.id, "jobs", params)

        return [self._parse_job(key.id, raw, full) for raw in data.get("jobs", [])]

    async def get_job(self, job_key: JobKey) -> Job:
        raw = await self.fetcher.get_json("job", job_key.company_id, f"jobs/{job_key.id}")
        return self._parse_job(job_key.company_id, raw, True)

    def _parse_job(self, company_id: str, raw: dict, full: bool) -> Job:
        return Job(
            id=str(raw["id"]),
            company_id=company_id,
            company_name=raw.get("company_name") or "",
            title=norm_title(raw.get("title", "")),
            description=unescape_and_sanitize(raw.get("content", "")) if full else "",
            post_ts=_to_epoch_ms(raw.get("updated_at", "")),
            apply_url=raw.get("absolute_url", ""),
            location=(raw.get("location") or {}).get("name", ""),
        )
