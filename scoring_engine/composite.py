"""
Scoring Engine - Composite Score.

============================================================
ALGORITHM
============================================================
1. For each family take its score if present, else mark missing
2. overall = round(sum(w_f * s_f) / sum(w_f)) over present f;
   0 when nothing is present (or present weights sum to 0)
3. Strengths: present families scoring >= 70
4. Improvements: present families scoring < 50
5. Recommendations: each family's calculator recommendations in
   family order, then "Connect more platforms: ..." naming the
   missing families; exact-match dedup; capped at 10

============================================================
"""

from datetime import datetime
from typing import Dict, List, Optional

from core.clock import get_clock
from platform_metrics.calculators.base import round_half_up
from platform_metrics.types import PlatformFamily

from .config import ScoringConfig, ScoringWeights, get_default_config
from .types import CompositeScore, DigitalProfile


def weighted_overall(
    family_scores: Dict[PlatformFamily, Optional[int]],
    weights: ScoringWeights,
) -> int:
    """Renormalized weighted mean of the present families."""
    weighted_sum = 0.0
    total_weight = 0.0
    for family, score in family_scores.items():
        if score is None:
            continue
        weight = weights.weight_for(family)
        weighted_sum += score * weight
        total_weight += weight

    if total_weight <= 0:
        return 0
    return max(0, min(100, round_half_up(weighted_sum / total_weight)))


def _dedupe(items: List[str]) -> List[str]:
    seen = set()
    unique: List[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique


def calculate_composite_score(
    profile: DigitalProfile,
    weights: Optional[ScoringWeights] = None,
    config: Optional[ScoringConfig] = None,
    now: Optional[datetime] = None,
) -> CompositeScore:
    """
    Convert a DigitalProfile into a CompositeScore. Pure apart from ``now``.

    Args:
        profile: Aggregated platform metrics
        weights: Family weights (defaults if omitted)
        config: Presentation thresholds
        now: Timestamp for the result

    Returns:
        CompositeScore (not yet persisted)
    """
    weights = weights or ScoringWeights()
    config = config or get_default_config()

    family_scores: Dict[PlatformFamily, Optional[int]] = {}
    connected: List[PlatformFamily] = []
    missing: List[PlatformFamily] = []
    strengths: List[str] = []
    improvements: List[str] = []
    recommendations: List[str] = []

    for family in PlatformFamily.all_families():
        score = profile.family_score(family)
        family_scores[family] = score

        if score is None:
            missing.append(family)
            continue

        connected.append(family)
        if score >= config.strength_threshold:
            strengths.append(config.strengths[family])
        if score < config.improvement_threshold:
            improvements.append(config.improvements[family])
        for metrics in profile.family_metrics(family):
            recommendations.extend(metrics.recommendations)

    if missing:
        recommendations.append(
            config.connect_more_prefix + ", ".join(family.label for family in missing)
        )

    return CompositeScore(
        overall=weighted_overall(family_scores, weights),
        family_scores=family_scores,
        weights=weights,
        connected=connected,
        missing=missing,
        strengths=_dedupe(strengths),
        improvements=_dedupe(improvements),
        recommendations=_dedupe(recommendations)[: config.max_recommendations],
        calculated_at=now or get_clock().now(),
        candidate_id=profile.candidate_id,
    )
