"""
Lever postings connector.

Postings API: GET /{slug}?mode=json always returns full postings, so
listings are never light. Lever exposes no company profile; the slug doubles
as the display name and the first posting's opening as the overview.
"""

from config.log import get_logger
from models.company import Company, CompanyKey
from models.enums import Provider
from models.job import Job, JobKey
from tools.api_fetcher import AtsFetcher
from tools.errors import NotFound
from tools.text_extractor import norm_title, sanitize_html

log = get_logger(__name__)


def _description(raw: dict) -> str:
    """Body, then each headed list, then the closing section."""
    parts = [raw.get("description") or ""]

    for section in raw.get("lists") or []:
        heading = section.get("text") or ""
        content = section.get("content") or ""
        parts.append(f"<h3>{heading}</h3><ul>{content}</ul>")

    parts.append(raw.get("additional") or "")

    return sanitize_html("".join(parts))


class LeverConnector:
    provider = Provider.LEVER
    lists_full_jobs = True

    def __init__(self, fetcher: AtsFetcher):
        self.fetcher = fetcher

    async def get_company(self, key: CompanyKey, full: bool = False) -> Company:
        data = await self.fetcher.get_json("company", key.id, params={"mode": "json", "limit": 1})

        if not data:
            # No postings means no name or overview can be derived
            raise NotFound(f"{self.provider.value} / {key.id}: Not Found")

        opening = data[0].get("openingPlain") or ""

        return Company(
            id=key.id,
            provider=self.provider,
            name=key.id,
            description=opening.strip() if full and opening.strip() else None,
        )

    async def get_jobs(self, key: CompanyKey, full: bool = False) -> list[Job]:
        data = await self.fetcher.get_json("jobs", key.id, params={"mode": "json"})
        return [self._parse_job(key.id, raw) for raw in data or []]

    async def get_job(self, job_key: JobKey) -> Job:
        raw = await self.fetcher.get_json("job", job_key.company_id, job_key.id, params={"mode": "json"})
        return self._parse_job(job_key.company_id, raw)

    def _parse_job(self, company_id: str, raw: dict) -> Job:
        categories = raw.get("categories") or {}
        locations = categories.get("allLocations") or []
        if not locations and categories.get("location"):
            locations = [categories["location"]]

        return Job(
            id=str(raw["id"]),
            company_id=company_id,
            company_name=company_id,
            title=norm_title(raw.get("text", "")),
            description=_description(raw),
            post_ts=int(raw.get("createdAt") or 0),
            apply_url=raw.get("applyUrl") or raw.get("hostedUrl") or "",
            location=" OR ".join(locations),
        )
