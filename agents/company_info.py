"""
Company Info Agent — fills company attributes from its overview and a sample job.
"""

from agents.extractor import ExtractionService
from models.company import Company
from models.context import LLMContext
from models.extraction import ExtractionCompany

COMPANY_INFO_PROMPT = """You are a detail-oriented job seeker who excels at understanding company profiles through job descriptions.
Your goal is to extract key company insights from available context.
First, carefully review the provided company overview and sample job description to identify important company attributes.
Then, identify and extract pertinent company details.
Then, compose a concise, clear, and engaging company description paragraph.
Format your response in JSON, adhering to the provided schema."""


async def fill_company_info(extraction: ExtractionService, company: LLMContext[Company]) -> bool:
    """
    Fill in company information.

    Returns:
        True if extraction succeeded and was merged into `company.item`.
    """
    return await extraction.fill(
        "extractCompanyInfo",
        COMPANY_INFO_PROMPT,
        ExtractionCompany,
        company,
    )
