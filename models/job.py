"""
Job data model — represents a single job posting.
"""

from dataclasses import dataclass, field
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from models.enums import (
    EducationLevel,
    EngagementType,
    PayCadence,
    Presence,
    SeniorityLevel,
    WorkTimeBasis,
)


class JobKey(BaseModel):
    """Identifies a job: the provider's posting id within a company."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Provider-assigned posting id")
    company_id: str = Field(description="Owning company id")


class Location(BaseModel):
    city: str = Field(default="", description="City name in English")
    region_code: str = Field(default="", description="ISO 3166-2 subdivision code without country prefix")
    country_code: str = Field(default="", description="ISO 3166-1 alpha-2 country code")

    def label(self) -> str:
        return ", ".join(part for part in (self.city, self.region_code, self.country_code) if part)


class RemoteEligibility(BaseModel):
    countries: list[str] = Field(default_factory=list)
    regions: list[str] = Field(default_factory=list)
    notes: str = ""


class SalaryRange(BaseModel):
    currency: str = ""
    cadence: Optional[PayCadence] = None
    min: Optional[float] = None
    max: Optional[float] = None
    min_ote: Optional[float] = None
    max_ote: Optional[float] = None


class Job(BaseModel):
    """Represents a single job posting on a provider board."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(description="Provider-assigned posting id")
    company_id: str = Field(description="Owning company id")
    company_name: str = Field(default="", description="Company display name")
    title: str = Field(description="Job title")
    description: str = Field(default="", description="Sanitized HTML description; empty for light listings")
    post_ts: int = Field(default=0, description="Posted/updated time in epoch milliseconds")
    apply_url: str = Field(default="", description="Direct URL to the job posting")
    location: str = Field(default="", description="Provider freehand location text")

    # Extracted facets
    presence: Optional[Presence] = None
    work_time_basis: Optional[WorkTimeBasis] = None
    engagement_type: Optional[EngagementType] = None
    seniority_level: Optional[SeniorityLevel] = None
    primary_location: Optional[Location] = None
    remote_eligibility: Optional[RemoteEligibility] = None
    salary_range: Optional[SalaryRange] = None
    required_education: Optional[EducationLevel] = None
    required_experience: Optional[int] = None
    summary: Optional[str] = None

    @property
    def key(self) -> JobKey:
        return JobKey(id=self.id, company_id=self.company_id)


@dataclass
class JobUpdates:
    """Outcome of reconciling one company's jobs."""

    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    kept: list[str] = field(default_factory=list)
    refreshed: list[str] = field(default_factory=list)
