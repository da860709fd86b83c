from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SWOT_FIELDS: List[str] = ["strengths", "weaknesses", "opportunities", "threats"]

SectionTheme = Literal["career", "skills", "action", "threat", "strength", "industry", "next", "general"]


class SwotText(BaseModel):
    """Four free-text SWOT quadrants. Every quadrant is always filled."""

    model_config = ConfigDict(frozen=True)

    strengths: str = Field(..., min_length=1)
    weaknesses: str = Field(..., min_length=1)
    opportunities: str = Field(..., min_length=1)
    threats: str = Field(..., min_length=1)

    @field_validator("strengths", "weaknesses", "opportunities", "threats")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("SWOT field must not be blank.")
        return v


class ResumeDetails(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=254)
    experience: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required.")
        return v

    @field_validator("email")
    @classmethod
    def looks_like_email(cls, v: str) -> str:
        v = v.strip()
        local, _, domain = v.partition("@")
        if not local or "." not in domain or " " in v:
            raise ValueError("Enter a valid email address.")
        return v

    @field_validator("experience")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None


class ReportSection(BaseModel):
    title: str
    body: str = ""
    theme: SectionTheme = "general"


class CareerAnalysis(BaseModel):
    swot: SwotText
    analysis: str
    source: Literal["manual", "resume"] = "manual"
    generated_at: datetime = Field(default_factory=datetime.now)
