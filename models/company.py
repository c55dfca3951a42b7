"""
Company data model — one employer on one ATS provider.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from models.enums import CompanySizeBand, CompanyStage, Provider


class CompanyKey(BaseModel):
    """Identifies a company: its board token/slug on a provider."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Provider board token or slug")
    provider: Provider = Field(description="ATS provider hosting the board")

    def __str__(self) -> str:
        return f"{self.provider.value}:{self.id}"


class Company(BaseModel):
    """A company record, enriched asynchronously after onboarding."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(description="Provider board token or slug")
    provider: Provider = Field(description="ATS provider hosting the board")
    name: str = Field(description="Display name")
    website: Optional[str] = Field(default=None, description="Company homepage URL")
    founding_year: Optional[int] = Field(default=None, description="Year the company was founded")
    size_band: Optional[CompanySizeBand] = Field(default=None, description="Headcount band")
    stage: Optional[CompanyStage] = Field(default=None, description="Funding stage")
    description: Optional[str] = Field(
        default=None,
        description="Company overview (provider content, replaced by the extracted summary)",
    )

    @property
    def key(self) -> CompanyKey:
        return CompanyKey(id=self.id, provider=self.provider)
