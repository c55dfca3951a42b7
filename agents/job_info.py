"""
Job Info Agent — extracts job facets (presence, seniority, salary, ...) from a posting.
"""

from agents.extractor import ExtractionService
from models.context import LLMContext
from models.extraction import ExtractionJob
from models.job import Job

JOB_INFO_PROMPT = """You are an information-extraction engine. Your sole job is to read unstructured job descriptions and extract factual data points explicitly stated in the text.

## Mission & Boundaries

1. **Follow the provided schema exactly** (field names, types, enums, constraints). If a value cannot be supported by evidence in the text, leave it empty per schema rules.
2. **No guessing or world knowledge**: do not infer facts from stereotypes or typical patterns (e.g., don't assume location from company HQ, don't assume seniority from title style).
3. **No heuristics**: do not fill missing values with heuristics ("engineer -> full-time", "startup -> seed", etc.).

## Extraction Method

1. READ the provided JSON data:
   - "item": Contains the job details and description
   - "context": Contains additional company context
   - Ignore boilerplate EEO text
2. Prefer the most recent/most specific mention if the document has duplicates.
3. EXTRACT specific data points in the provided schema.
   - Be strict: reject values that don't match schema type/enum constraints rather than coercing them incorrectly."""


async def fill_job_info(extraction: ExtractionService, job: LLMContext[Job]) -> bool:
    """Returns True if extraction succeeded and was merged into `job.item`."""
    return await extraction.fill(
        "extractFacets",
        JOB_INFO_PROMPT,
        ExtractionJob,
        job,
    )
