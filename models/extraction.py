"""
Extraction schemas — the structured output requested from the LLM.

Field names mirror the stored models so a completion can be merged straight
into a record. "Not stated" is expressed with sentinels the merge step drops:
'' for strings, -1 for numbers, null for enums.
"""

from typing import Optional
from pydantic import BaseModel, Field

from models.enums import (
    CompanySizeBand,
    CompanyStage,
    EducationLevel,
    EngagementType,
    PayCadence,
    Presence,
    SeniorityLevel,
    WorkTimeBasis,
)


class ExtractionCompany(BaseModel):
    """Company-level facts explicitly stated in the source.
    Prefer the most recent explicit facts, except founding_year which should be the original legal founding."""

    website: str = Field(
        description=(
            "Primary company homepage URL. Use https if available. "
            "Prefer the corporate root domain (e.g., https://www.example.com). Strip tracking params/fragments. "
            "Exclude ATS/careers and vendor subdomains (e.g., *.lever.co, *.greenhouse.io, careers.example.com). "
            "If no URL is explicitly stated, return ''."
        )
    )
    founding_year: int = Field(
        ge=-1,
        description=(
            "Four-digit legal founding year (YYYY). "
            "If both founding and launch years are present, return the founding year. "
            "If no founding year is explicitly stated, return -1."
        ),
    )
    stage: Optional[CompanyStage] = Field(
        description="Funding stage. Only include if explicitly mentioned, otherwise null."
    )
    size_band: Optional[CompanySizeBand] = Field(
        description="Employee headcount band. Only include if explicitly mentioned, otherwise null."
    )
    description: str = Field(
        description=(
            "1-3 sentence factual summary of what the company does (product/market, customers, differentiators). "
            "Third person, present tense. Avoid marketing slogans. "
            "Exclude role-specific details (responsibilities, benefits, comp, team stack). "
            "If no company details are present, return ''."
        )
    )


class ExtractionLocation(BaseModel):
    """Normalized single location explicitly stated for the context.
    When the context is remote, use the primary office location if stated."""

    city: str = Field(
        description=(
            "City name in English. Exclude country/region names. "
            "'Located in downtown Seattle' -> Seattle; 'Remote US only' -> ''."
        )
    )
    region_code: str = Field(
        description=(
            "ISO 3166-2 subdivision code (uppercase) excluding country prefix. "
            "'Located in downtown Seattle' -> WA; 'Our office is in Cologne, Germany' -> NW; 'Remote US only' -> ''."
        )
    )
    country_code: str = Field(
        description=(
            "ISO 3166-1 alpha-2 country code (uppercase). "
            "'Located in downtown Seattle' -> US; 'Remote US only' -> US; 'Remote worldwide' -> ''."
        )
    )


class ExtractionRemoteEligibility(BaseModel):
    """Remote work eligibility as explicitly stated. Uppercase codes, no duplicates."""

    countries: list[str] = Field(
        description=(
            "ISO 3166-1 alpha-2 country codes (uppercase). "
            "If no country restrictions are explicitly stated, return an empty array. "
            "'Remote (US and Canada only)' -> ['US', 'CA']."
        )
    )
    regions: list[str] = Field(
        description=(
            "Complete ISO 3166-2 subdivision codes (uppercase, including country prefix). "
            "If no region restrictions are explicitly stated, return an empty array. "
            "'Remote (NY, CA, TX)' -> ['US-NY', 'US-CA', 'US-TX']."
        )
    )
    notes: str = Field(
        description=(
            "Freeform clarifications such as time-zone limits or work authorization requirements. "
            "When the role is not remote or no clarifications are needed, return ''."
        )
    )


class ExtractionSalaryRange(BaseModel):
    """Salary figures as stated, normalized to a single currency.
    If only one number is provided, set both min and max to that number."""

    currency: str = Field(description="ISO 4217 currency code (uppercase), e.g. 'USD'.")
    cadence: Optional[PayCadence] = Field(description="Pay cadence, or null if not stated.")
    min: float = Field(ge=-1, description="Minimum salary. If not explicitly stated, return -1.")
    max: float = Field(ge=-1, description="Maximum salary. If not explicitly stated, return -1.")
    min_ote: float = Field(
        ge=-1,
        description="Minimum on-target earnings (base + target variable comp). If not stated, return -1.",
    )
    max_ote: float = Field(
        ge=-1,
        description="Maximum on-target earnings (base + target variable comp). If not stated, return -1.",
    )


class ExtractionJob(BaseModel):
    """Job-level facts explicitly stated for the role.
    Set string fields to '' and numeric fields to -1 when not explicitly stated."""

    presence: Optional[Presence] = Field(description="Work arrangement, or null if not stated.")
    work_time_basis: Optional[WorkTimeBasis] = Field(description="Full-time or part-time, or null if not stated.")
    engagement_type: Optional[EngagementType] = Field(description="Employment relationship, or null if not stated.")
    seniority_level: Optional[SeniorityLevel] = Field(
        description="Seniority explicitly stated in the title or text, or null. Do not infer from title style."
    )
    primary_location: ExtractionLocation
    remote_eligibility: ExtractionRemoteEligibility
    salary_range: ExtractionSalaryRange
    required_education: Optional[EducationLevel] = Field(
        description="Minimum education explicitly required, or null."
    )
    required_experience: int = Field(
        ge=-1,
        description=(
            "Minimum years of experience explicitly required. For ranges, use the lower bound. "
            "For 'X+ years', use X. If not explicitly stated, return -1."
        ),
    )
    summary: str = Field(
        description=(
            "1-2 sentence factual summary of the role's key responsibilities. "
            "Third person, present tense. Do not repeat the company or job title."
        )
    )
