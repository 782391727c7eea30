"""
Scoring Engine - Type Definitions.

============================================================
PURPOSE
============================================================
Data contracts shared by the aggregator, the scoring engine,
persistence and the notification layer.

============================================================
TYPES
============================================================
- CandidateProfile / PlatformConnection: what persistence knows
  about a candidate and the platforms they connected
- CachedMetrics: PlatformMetrics plus fetch/expiry timestamps
- DigitalProfile: ephemeral per-candidate aggregate, keyed by
  platform, with blog providers collapsed into one family score
- CompositeScore: the weighted 0-100 result (one snapshot)
- ScoreUpdateResult: previous/current pair with change info

============================================================
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from core.clock import ensure_utc
from platform_metrics.calculators.base import round_half_up
from platform_metrics.types import Platform, PlatformFamily, PlatformMetrics

from .config import ScoringWeights


# ============================================================
# CANDIDATE DATA (FROM PERSISTENCE)
# ============================================================


@dataclass(frozen=True)
class CandidateProfile:
    candidate_id: str
    display_name: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class PlatformConnection:
    """A platform the candidate connected, with its last sync outcome."""

    platform: Platform
    username: str
    connected_at: Optional[datetime] = None
    last_synced_at: Optional[datetime] = None
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None


@dataclass(frozen=True)
class CachedMetrics:
    metrics: PlatformMetrics
    fetched_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return ensure_utc(now) >= ensure_utc(self.expires_at)


# ============================================================
# DIGITAL PROFILE
# ============================================================


def collapse_families(
    platform_metrics: Mapping[Platform, PlatformMetrics],
) -> Dict[PlatformFamily, int]:
    """
    One score per present family.

    Several blog providers average into the long-form-content
    family: round(mean of their overall scores).
    """
    grouped: Dict[PlatformFamily, List[int]] = {}
    for platform, metrics in platform_metrics.items():
        grouped.setdefault(platform.family, []).append(metrics.overall_score)

    return {
        family: round_half_up(sum(scores) / len(scores))
        for family, scores in grouped.items()
        if scores
    }


@dataclass(frozen=True)
class DigitalProfile:
    """
    All PlatformMetrics of one candidate at one point in time.

    Never persisted; rebuilt from the per-platform cache.
    """

    candidate_id: str
    platforms: Dict[Platform, PlatformMetrics] = field(default_factory=dict)
    family_scores: Dict[PlatformFamily, int] = field(default_factory=dict)
    failed_platforms: Dict[Platform, str] = field(default_factory=dict)
    assembled_at: Optional[datetime] = None

    @classmethod
    def from_metrics(
        cls,
        candidate_id: str,
        platforms: Mapping[Platform, PlatformMetrics],
        failed_platforms: Optional[Mapping[Platform, str]] = None,
        assembled_at: Optional[datetime] = None,
    ) -> "DigitalProfile":
        return cls(
            candidate_id=candidate_id,
            platforms=dict(platforms),
            family_scores=collapse_families(platforms),
            failed_platforms=dict(failed_platforms or {}),
            assembled_at=assembled_at,
        )

    def family_score(self, family: PlatformFamily) -> Optional[int]:
        return self.family_scores.get(family)

    def family_metrics(self, family: PlatformFamily) -> List[PlatformMetrics]:
        """Metrics of a family in Platform declaration order."""
        return [
            self.platforms[platform]
            for platform in Platform
            if platform.family == family and platform in self.platforms
        ]

    @property
    def connected_families(self) -> List[PlatformFamily]:
        return [f for f in PlatformFamily.all_families() if f in self.family_scores]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "candidate_id": self.candidate_id,
            "platforms": {p.value: m.to_dict() for p, m in self.platforms.items()},
            "family_scores": {f.value: s for f, s in self.family_scores.items()},
            "failed_platforms": {p.value: e for p, e in self.failed_platforms.items()},
            "assembled_at": self.assembled_at.isoformat() if self.assembled_at else None,
        }


# ============================================================
# COMPOSITE SCORE
# ============================================================


@dataclass(frozen=True)
class CompositeScore:
    """
    Weighted composite across platform families.

    ============================================================
    INVARIANTS
    ============================================================
    - overall is an integer in [0, 100]
    - overall == 0 when no family is present
    - otherwise overall == round(sum(w*s) / sum(w)) over
      present families only
    - recommendations are unique and capped

    ============================================================
    """

    overall: int
    family_scores: Dict[PlatformFamily, Optional[int]]
    weights: ScoringWeights
    connected: List[PlatformFamily]
    missing: List[PlatformFamily]
    strengths: List[str]
    improvements: List[str]
    recommendations: List[str]
    calculated_at: datetime
    candidate_id: Optional[str] = None
    snapshot_id: Optional[int] = None

    def family_score(self, family: PlatformFamily) -> Optional[int]:
        return self.family_scores.get(family)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "candidate_id": self.candidate_id,
            "snapshot_id": self.snapshot_id,
            "overall": self.overall,
            "family_scores": {f.value: s for f, s in self.family_scores.items()},
            "weights": self.weights.to_dict(),
            "connected": [f.value for f in self.connected],
            "missing": [f.value for f in self.missing],
            "strengths": list(self.strengths),
            "improvements": list(self.improvements),
            "recommendations": list(self.recommendations),
            "calculated_at": self.calculated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CompositeScore":
        family_scores = data.get("family_scores") or {}
        return cls(
            overall=int(data["overall"]),
            family_scores={
                family: family_scores.get(family.value)
                for family in PlatformFamily.all_families()
            },
            weights=ScoringWeights.from_dict(data.get("weights") or {}),
            connected=[PlatformFamily(v) for v in data.get("connected") or []],
            missing=[PlatformFamily(v) for v in data.get("missing") or []],
            strengths=list(data.get("strengths") or []),
            improvements=list(data.get("improvements") or []),
            recommendations=list(data.get("recommendations") or []),
            calculated_at=ensure_utc(datetime.fromisoformat(data["calculated_at"])),
            candidate_id=data.get("candidate_id"),
            snapshot_id=data.get("snapshot_id"),
        )


@dataclass(frozen=True)
class ScoreUpdateResult:
    """
    Outcome of calculate_and_store_score().

    change_amount is current - previous, or current.overall when
    there is no previous snapshot (implicit zero baseline).
    """

    previous: Optional[CompositeScore]
    current: CompositeScore
    changed: bool
    change_amount: int

    @classmethod
    def between(
        cls,
        previous: Optional[CompositeScore],
        current: CompositeScore,
    ) -> "ScoreUpdateResult":
        if previous is None:
            return cls(previous=None, current=current, changed=False, change_amount=current.overall)
        return cls(
            previous=previous,
            current=current,
            changed=previous.overall != current.overall,
            change_amount=current.overall - previous.overall,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "previous": self.previous.to_dict() if self.previous else None,
            "current": self.current.to_dict(),
            "changed": self.changed,
            "change_amount": self.change_amount,
        }
