"""
Professional-network calculator (LinkedIn).

Positions are the activity items; education, skills and
certifications ride on the profile.
"""

from datetime import date, datetime
from typing import List, Optional

from ..config import ProfessionalNetworkConfig
from ..types import LinkedInPosition, LinkedInProfile, Platform, PlatformFamily, PlatformMetrics
from .base import BasePlatformCalculator, as_number, round_to, safe_ratio, saturate


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end, floored at 0."""
    months = (end.year - start.year) * 12 + (end.month - start.month)
    return max(0, months)


class ProfessionalNetworkCalculator(BasePlatformCalculator[LinkedInProfile, LinkedInPosition]):
    """Scores experience, education, skills and network size."""

    def __init__(self, config: Optional[ProfessionalNetworkConfig] = None):
        self._config = config or ProfessionalNetworkConfig()

    @property
    def family(self) -> PlatformFamily:
        return PlatformFamily.PROFESSIONAL_NETWORK

    @property
    def max_recommendations(self) -> int:
        return self._config.max_recommendations

    def years_of_experience(self, positions: List[LinkedInPosition], today: date) -> float:
        total_months = sum(
            months_between(position.start, position.end or today)
            for position in positions
        )
        return round_to(total_months / 12, 1)

    def _calculate(
        self,
        profile: LinkedInProfile,
        activity: List[LinkedInPosition],
        now: datetime,
    ) -> PlatformMetrics:
        cfg = self._config
        positions = activity

        # Experience
        years = self.years_of_experience(positions, now.date())
        described = sum(1 for position in positions if position.description)
        experience = min(
            saturate(years, cfg.experience_years_saturation, cfg.experience_years_credit)
            + saturate(len(positions), cfg.position_saturation, cfg.position_credit)
            + safe_ratio(described, len(positions)) * cfg.position_description_credit,
            100,
        )

        # Education
        education_entries = profile.education
        has_advanced_degree = any(
            keyword in (entry.degree or "").lower()
            for entry in education_entries
            for keyword in cfg.advanced_degree_keywords
        )
        education = min(
            (cfg.education_any_credit if education_entries else 0.0)
            + (cfg.education_advanced_credit if has_advanced_degree else 0.0)
            + (cfg.education_field_credit if any(e.field_of_study for e in education_entries) else 0.0),
            100,
        )

        # Skills
        skills = profile.skills
        total_endorsements = sum(as_number(skill.endorsements) for skill in skills)
        skills_score = min(
            saturate(len(skills), cfg.skill_saturation, cfg.skill_credit)
            + saturate(total_endorsements, cfg.endorsement_saturation, cfg.endorsement_credit),
            100,
        )

        # Network
        connections = as_number(profile.connections)
        network = saturate(connections, cfg.connection_saturation, 100.0)

        sub_scores = {
            "experience": experience,
            "education": education,
            "skills": skills_score,
            "network": network,
        }

        recommendations: List[str] = []
        if years < cfg.min_experience_years:
            recommendations.append("Gain more professional experience")
        if described < len(positions):
            recommendations.append("Add detailed descriptions to your work experiences")
        if len(skills) < cfg.min_skills:
            recommendations.append("Add more skills to your profile")
        if connections < cfg.min_connections:
            recommendations.append("Expand your professional network")
        if not profile.headline:
            recommendations.append("Add a professional headline")
        if not profile.bio:
            recommendations.append("Write a compelling summary/bio")
        if not profile.certifications:
            recommendations.append("Add relevant certifications to stand out")

        top_skills = [
            skill.name
            for skill in sorted(skills, key=lambda s: -as_number(s.endorsements))[:10]
        ]

        breakdown = {
            "years_of_experience": years,
            "positions": len(positions),
            "education_entries": len(education_entries),
            "skills": len(skills),
            "top_skills": top_skills,
            "connections": int(connections),
            "has_certifications": bool(profile.certifications),
        }

        return self._metrics(
            Platform.LINKEDIN,
            sub_scores,
            cfg.blend_weights,
            breakdown,
            recommendations,
        )
