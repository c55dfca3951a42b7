"""
Application context — builds and owns every long-lived component.

Nothing is a module-level singleton: the CLI builds one context per run and
tests build their own with fakes swapped in.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from agents.extractor import ExtractionService
from agents.location import build_location_cache
from agents.metadata import MetadataService
from agents.reconciler import ReconciliationEngine
from config.settings import Settings
from models.enums import Provider
from models.job import Location
from sources.base import SourceConnector
from sources.registry import build_connectors
from tools.api_fetcher import build_client
from tools.detached import DetachedTasks
from tools.job_store import SqliteStore, Store
from tools.normalization_cache import NormalizationCache
from tools.telemetry import LoggingTelemetry, Telemetry
from tools.timers import Timer


@dataclass
class AppContext:
    settings: Settings
    telemetry: Telemetry
    tasks: DetachedTasks
    store: Store
    client: httpx.AsyncClient
    connectors: dict[Provider, SourceConnector]
    extraction: ExtractionService
    location_cache: NormalizationCache[Location]
    metadata: MetadataService
    engine: ReconciliationEngine

    async def settle(self) -> None:
        """Wait for detached work, then run pending metadata recounts."""
        await self.tasks.drain()
        await self.metadata.flush()
        await self.tasks.drain()

    async def close(self) -> None:
        await self.client.aclose()


def build_context(
    settings: Settings,
    store: Optional[Store] = None,
    llm=None,
    client: Optional[httpx.AsyncClient] = None,
    connectors: Optional[dict[Provider, SourceConnector]] = None,
    timer: Optional[Timer] = None,
    telemetry: Optional[Telemetry] = None,
) -> AppContext:
    """
    Wire all components from settings.

    Args:
        settings: Configuration to build from.
        store: Document store (default: SQLite at settings.db_path).
        llm: LangChain chat model (default: ChatOpenAI from settings).
        client: HTTP client (default: shared httpx.AsyncClient).
        connectors: Provider connectors (default: Greenhouse and Lever).
        timer: Debounce timer (default: event loop timer).
        telemetry: Telemetry sink (default: LoggingTelemetry).
    """
    telemetry = telemetry if telemetry is not None else LoggingTelemetry()
    tasks = DetachedTasks(telemetry)
    store = store if store is not None else SqliteStore(settings.db_path)
    client = client if client is not None else build_client(settings.request_timeout)
    connectors = connectors or build_connectors(settings, client, telemetry)

    if llm is None:
        extraction = ExtractionService.from_settings(settings, telemetry)
    else:
        extraction = ExtractionService(
            llm,
            telemetry,
            max_retries=settings.llm_max_retries,
            initial_backoff_ms=settings.llm_initial_backoff_ms,
        )

    location_cache = build_location_cache(
        store,
        extraction,
        capacity=settings.location_cache_size,
        tasks=tasks,
        telemetry=telemetry,
    )
    metadata = MetadataService(
        store,
        debounce_ms=settings.metadata_debounce_ms,
        timer=timer,
        tasks=tasks,
        telemetry=telemetry,
    )
    engine = ReconciliationEngine(
        store,
        connectors,
        extraction,
        location_cache,
        metadata,
        tasks,
        telemetry,
        settings,
    )

    return AppContext(
        settings=settings,
        telemetry=telemetry,
        tasks=tasks,
        store=store,
        client=client,
        connectors=connectors,
        extraction=extraction,
        location_cache=location_cache,
        metadata=metadata,
        engine=engine,
    )
