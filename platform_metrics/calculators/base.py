"""
Platform Metrics - Base Calculator.

============================================================
PURPOSE
============================================================
Shared scaffolding for the four platform calculators.

Each calculator:
1. Takes a typed profile and a possibly-empty activity list
2. Computes 3-5 sub-dimensions, each bounded to [0, 100]
3. Blends them with fixed weights into an overall score
4. Emits remediation strings from independent threshold rules

============================================================
DESIGN PRINCIPLES
============================================================
- Pure functions: same input = same output
- Never raise on sparse input (None counts as 0)
- Wall-clock time only for explicit time-windowed checks,
  and then only through the ``now`` argument
- Averages divide by max(1, count)

============================================================
"""

import math
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, Sequence, TypeVar

from core.clock import ensure_utc, get_clock

from ..types import Platform, PlatformFamily, PlatformMetrics


P = TypeVar("P")
A = TypeVar("A")


# ============================================================
# NUMERIC HELPERS
# ============================================================


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up."""
    return int(math.floor(value + 0.5))


def round_to(value: float, digits: int) -> float:
    """Round half-up to ``digits`` decimals (used for breakdown values)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def clamp_score(value: float) -> float:
    """Bound a score to [0, 100]."""
    return max(0.0, min(100.0, value))


def as_number(value: Any) -> float:
    """Coerce a possibly-missing numeric field. None and negatives become 0."""
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or number < 0:
        return 0.0
    return number


def saturate(value: float, saturation: float, credit: float) -> float:
    """value >= saturation -> credit, else value scaled linearly."""
    if saturation <= 0:
        return credit
    if value >= saturation:
        return credit
    return value * credit / saturation


def linear(value: float, unit: float, credit: float) -> float:
    """Unbounded linear credit: (value / unit) * credit."""
    if unit <= 0:
        return 0.0
    return value / unit * credit


def safe_ratio(count: float, total: float) -> float:
    return count / max(1.0, total)


def top_counts(values: Sequence[str], limit: int) -> List[str]:
    """Most frequent values; ties keep first-seen order."""
    counts: Dict[str, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [name for name, _ in ranked[:limit]]


# ============================================================
# BASE CALCULATOR
# ============================================================


class BasePlatformCalculator(ABC, Generic[P, A]):
    """
    Abstract base class for platform calculators.

    Subclasses implement _calculate(); calculate() resolves ``now``
    and enforces the output bounds.
    """

    @property
    @abstractmethod
    def family(self) -> PlatformFamily:
        """Return the platform family this calculator handles."""
        pass

    @property
    @abstractmethod
    def max_recommendations(self) -> int:
        pass

    @abstractmethod
    def _calculate(
        self,
        profile: P,
        activity: List[A],
        now: datetime,
    ) -> PlatformMetrics:
        pass

    def calculate(
        self,
        profile: P,
        activity: Optional[List[A]] = None,
        now: Optional[datetime] = None,
    ) -> PlatformMetrics:
        """
        Calculate metrics for one platform.

        Args:
            profile: Static platform attributes
            activity: Activity items (may be empty)
            now: Reference time for time-windowed checks

        Returns:
            PlatformMetrics with all scores in [0, 100]
        """
        reference_time = ensure_utc(now or get_clock().now())
        metrics = self._calculate(profile, list(activity or []), reference_time)
        return PlatformMetrics(
            platform=metrics.platform,
            overall_score=int(clamp_score(metrics.overall_score)),
            sub_scores={k: int(clamp_score(v)) for k, v in metrics.sub_scores.items()},
            breakdown=metrics.breakdown,
            recommendations=metrics.recommendations[: self.max_recommendations],
        )

    # --------------------------------------------------------
    # Helpers for subclasses
    # --------------------------------------------------------

    @staticmethod
    def _blend(sub_scores: Dict[str, float], weights: Dict[str, float]) -> int:
        """Fixed weighted blend of unrounded sub-scores."""
        total = sum(clamp_score(sub_scores.get(name, 0.0)) * weight for name, weight in weights.items())
        return round_half_up(total)

    @staticmethod
    def _rounded(sub_scores: Dict[str, float]) -> Dict[str, int]:
        return {name: round_half_up(clamp_score(value)) for name, value in sub_scores.items()}

    def _metrics(
        self,
        platform: Platform,
        sub_scores: Dict[str, float],
        weights: Dict[str, float],
        breakdown: Dict[str, Any],
        recommendations: List[str],
    ) -> PlatformMetrics:
        return PlatformMetrics(
            platform=platform,
            overall_score=self._blend(sub_scores, weights),
            sub_scores=self._rounded(sub_scores),
            breakdown=breakdown,
            recommendations=recommendations,
        )
