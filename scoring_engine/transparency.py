"""
Score transparency.

Explains a CompositeScore family by family: status label, raw
weight, renormalized weight and points contributed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from platform_metrics.calculators.base import round_to
from platform_metrics.types import PlatformFamily

from .config import ScoringConfig, get_default_config
from .types import CompositeScore


class FamilyStatus(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    NEEDS_IMPROVEMENT = "needs_improvement"
    NOT_CONNECTED = "not_connected"


def family_status(score: Optional[int], config: Optional[ScoringConfig] = None) -> FamilyStatus:
    config = config or get_default_config()
    if score is None:
        return FamilyStatus.NOT_CONNECTED
    if score >= config.excellent_threshold:
        return FamilyStatus.EXCELLENT
    if score >= config.good_threshold:
        return FamilyStatus.GOOD
    return FamilyStatus.NEEDS_IMPROVEMENT


@dataclass(frozen=True)
class FamilyBreakdown:
    family: PlatformFamily
    score: Optional[int]
    status: FamilyStatus
    weight: float
    effective_weight: float
    contribution: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "family": self.family.value,
            "label": self.family.label,
            "score": self.score,
            "status": self.status.value,
            "weight": self.weight,
            "effective_weight": self.effective_weight,
            "contribution": self.contribution,
        }


@dataclass(frozen=True)
class ScoreReport:
    overall: int
    families: List[FamilyBreakdown] = field(default_factory=list)
    strengths: List[str] = field(default_factory=list)
    improvements: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": self.overall,
            "families": [f.to_dict() for f in self.families],
            "strengths": list(self.strengths),
            "improvements": list(self.improvements),
            "recommendations": list(self.recommendations),
        }


def build_score_report(score: CompositeScore, config: Optional[ScoringConfig] = None) -> ScoreReport:
    """
    Break a composite score down per family.

    Effective weights renormalize over connected families, so
    the contributions sum to the unrounded overall score.
    """
    config = config or get_default_config()
    connected_weight = sum(
        score.weights.weight_for(f)
        for f in PlatformFamily.all_families()
        if score.family_score(f) is not None
    )

    families: List[FamilyBreakdown] = []
    for family in PlatformFamily.all_families():
        value = score.family_score(family)
        weight = score.weights.weight_for(family)
        if value is None or connected_weight <= 0:
            effective = 0.0
        else:
            effective = weight / connected_weight
        families.append(
            FamilyBreakdown(
                family=family,
                score=value,
                status=family_status(value, config),
                weight=weight,
                effective_weight=round_to(effective, 4),
                contribution=round_to((value or 0) * effective, 2),
            )
        )

    return ScoreReport(
        overall=score.overall,
        families=families,
        strengths=list(score.strengths),
        improvements=list(score.improvements),
        recommendations=list(score.recommendations),
    )
