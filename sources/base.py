"""
Source connector contract — one implementation per ATS provider.
"""

from typing import Protocol

from models.company import Company, CompanyKey
from models.enums import Provider
from models.job import Job, JobKey


class SourceConnector(Protocol):
    provider: Provider

    # True when get_jobs always returns full descriptions
    lists_full_jobs: bool

    async def get_company(self, key: CompanyKey, full: bool = False) -> Company:
        """
        Fetch company details.

        Raises:
            NotFound: company does not exist on the provider.
            RequestFailed: any other upstream failure.
        """
        ...

    async def get_jobs(self, key: CompanyKey, full: bool = False) -> list[Job]:
        """List current postings; light listings leave `description` empty."""
        ...

    async def get_job(self, job_key: JobKey) -> Job:
        """Fetch one posting with its full description."""
        ...
