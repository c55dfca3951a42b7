"""
Location Agent — turns provider location text into a structured Location.
Results are cached per normalized text in memory and in the store.
"""

from typing import Optional

from agents.extractor import ExtractionService
from agents.merge import set_extracted_data
from models.context import LLMContext
from models.extraction import ExtractionLocation
from models.job import Location
from tools.detached import DetachedTasks
from tools.job_store import Store
from tools.normalization_cache import NormalizationCache
from tools.telemetry import Telemetry

LOCATION_COLLECTION = "location_cache"

LOCATION_PROMPT = """You are an experienced job seeker whose goal is to quickly find relevant information from job listings.
First, read the job location text that is provided.
Then decide where the job is based to the extent possible, regardless of whether it is remote or hybrid/on-site.
When several locations are listed, use the first one.
Provide the response JSON in the provided schema, using empty string ("") for any unknown fields."""


async def extract_location(extraction: ExtractionService, text: str) -> Optional[Location]:
    result = await extraction.extract(
        "extractLocation",
        LOCATION_PROMPT,
        ExtractionLocation,
        LLMContext(item=text),
    )

    if result is None:
        return None

    location = Location()
    set_extracted_data(location, result)

    # "Remote", "Worldwide" and the like resolve to no place at all
    if not location.label():
        return None
    return location


def build_location_cache(
    store: Store,
    extraction: ExtractionService,
    capacity: int = 1000,
    tasks: DetachedTasks | None = None,
    telemetry: Telemetry | None = None,
) -> NormalizationCache[Location]:
    async def loader(text: str) -> Optional[Location]:
        return await extract_location(extraction, text)

    return NormalizationCache(
        "ExtractLocation",
        store,
        LOCATION_COLLECTION,
        Location,
        loader,
        capacity=capacity,
        tasks=tasks,
        telemetry=telemetry,
    )
