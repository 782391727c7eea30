"""
Pydantic Schemas for manually submitted LinkedIn data.
"""

import re
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field


_PROFILE_URL_PATTERNS = (
    re.compile(r"linkedin\.com/in/([^/?]+)"),
    re.compile(r"linkedin\.com/pub/([^/?]+)"),
)


def extract_linkedin_username(profile_url: str) -> str:
    """Username from /in/<id> or /pub/<id>, else the last path segment."""
    for pattern in _PROFILE_URL_PATTERNS:
        match = pattern.search(profile_url)
        if match:
            return match.group(1)
    segments = [s for s in profile_url.split("/") if s]
    return segments[-1] if segments else profile_url


# =============================================================
# NESTED ENTRIES
# =============================================================

class ExperienceEntry(BaseModel):
    title: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    start_date: date
    end_date: Optional[date] = None
    description: Optional[str] = None
    location: Optional[str] = None


class EducationEntry(BaseModel):
    school: str = Field(..., min_length=1)
    degree: Optional[str] = None
    field_of_study: Optional[str] = None
    start_year: Optional[int] = Field(None, ge=1900, le=2100)
    end_year: Optional[int] = Field(None, ge=1900, le=2100)


class SkillEntry(BaseModel):
    name: str = Field(..., min_length=1)
    endorsements: int = Field(0, ge=0)


class CertificationEntry(BaseModel):
    name: str = Field(..., min_length=1)
    authority: Optional[str] = None
    issued: Optional[date] = None


# =============================================================
# MANUAL ENTRY
# =============================================================

class LinkedInManualEntry(BaseModel):
    """Profile data a candidate types in (LinkedIn has no public API)."""
    profile_url: str = Field(..., min_length=3)
    name: Optional[str] = None
    headline: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    industry: Optional[str] = None
    connections: int = Field(0, ge=0)
    experiences: List[ExperienceEntry] = Field(default_factory=list)
    education: List[EducationEntry] = Field(default_factory=list)
    skills: List[SkillEntry] = Field(default_factory=list)
    certifications: List[CertificationEntry] = Field(default_factory=list)

    @property
    def username(self) -> str:
        return extract_linkedin_username(self.profile_url)
