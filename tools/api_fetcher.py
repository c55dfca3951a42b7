"""
API Fetcher Tool — timed JSON GETs against ATS provider APIs.
Classifies failures into NotFound / RequestFailed and reports every call.
"""

import time
from typing import Any, Optional

import httpx

from config.log import get_logger
from tools.errors import NotFound, RequestFailed
from tools.telemetry import Telemetry

log = get_logger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "job-ingest/0.1 (+https://github.com/)",
    "Accept": "application/json",
    "Accept-Encoding": "gzip, deflate",  # Exclude brotli to avoid decompressobj reuse bug
}


def build_client(timeout: float = 10.0) -> httpx.AsyncClient:
    """Shared client for all provider calls."""
    return httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=True,
        headers=DEFAULT_HEADERS,
    )


class AtsFetcher:
    """Issues GET requests under `{base_url}/{company_id}/{path}` for one provider."""

    def __init__(
        self,
        provider: str,
        base_url: str,
        client: httpx.AsyncClient,
        telemetry: Telemetry,
        timeout: float = 10.0,
    ):
        self.provider = provider
        self.base_url = base_url.rstrip("/")
        self.client = client
        self.telemetry = telemetry
        self.timeout = timeout

    def url(self, company_id: str, path: str = "") -> str:
        url = f"{self.base_url}/{company_id}"
        return f"{url}/{path}" if path else url

    async def get_json(
        self,
        name: str,
        company_id: str,
        path: str = "",
        params: Optional[dict] = None,
    ) -> Any:
        """
        Fetch and decode a JSON document.

        Args:
            name: Operation name for telemetry (e.g. "jobs").
            company_id: Board token or slug.
            path: Path below the company root.
            params: Query parameters.

        Raises:
            NotFound: on HTTP 404.
            RequestFailed: on any other non-2xx, timeout, transport error or bad body.
        """
        start = time.perf_counter()
        status: int | str = "exception"
        label = f"{self.provider} / {company_id}"

        try:
            try:
                resp = await self.client.get(
                    self.url(company_id, path),
                    params=params or None,
                    timeout=self.timeout,
                )
            except httpx.TimeoutException as e:
                status = "timeout"
                raise RequestFailed(f"{label}: Request Timed Out", e) from e
            except httpx.HTTPError as e:
                raise RequestFailed(f"{label}: Request Failed", e) from e

            status = resp.status_code
            if resp.status_code == 404:
                raise NotFound(f"{label}: Not Found")
            if not resp.is_success:
                raise RequestFailed(f"{label}: Request Failed", f"HTTP {resp.status_code}")

            try:
                return resp.json()
            except ValueError as e:
                raise RequestFailed(f"{label}: Invalid Response Body", e) from e
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            log.debug("GET %s %s %s %.0fms", name, label, status, duration_ms)
            self.telemetry.log_call(
                f"GET {name}",
                duration_ms,
                status,
                provider=self.provider,
                id=company_id,
            )
