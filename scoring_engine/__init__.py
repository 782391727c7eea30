"""
Scoring Engine Package.

Turns per-platform metrics into the weighted 0-100 composite
score and keeps its snapshot history.

Modules:
- config: weights, WeightsProvider, presentation thresholds
- types: DigitalProfile, CompositeScore, ScoreUpdateResult
- composite: pure DigitalProfile -> CompositeScore
- aggregator: cached read and refresh of platform metrics
- engine: scoring with persisted snapshots
- transparency: per-family score report
"""

from .aggregator import ProfileAggregator
from .composite import calculate_composite_score, weighted_overall
from .config import (
    DEFAULT_IMPROVEMENTS,
    DEFAULT_STRENGTHS,
    ScoringConfig,
    ScoringWeights,
    WeightsProvider,
    get_default_config,
)
from .engine import ScoringEngine
from .interfaces import Persistence, PlatformConnector
from .transparency import FamilyBreakdown, FamilyStatus, ScoreReport, build_score_report, family_status
from .types import (
    CachedMetrics,
    CandidateProfile,
    CompositeScore,
    DigitalProfile,
    PlatformConnection,
    ScoreUpdateResult,
    collapse_families,
)


__all__ = [
    "ScoringWeights",
    "WeightsProvider",
    "ScoringConfig",
    "get_default_config",
    "DEFAULT_STRENGTHS",
    "DEFAULT_IMPROVEMENTS",
    "CandidateProfile",
    "PlatformConnection",
    "CachedMetrics",
    "DigitalProfile",
    "CompositeScore",
    "ScoreUpdateResult",
    "collapse_families",
    "calculate_composite_score",
    "weighted_overall",
    "Persistence",
    "PlatformConnector",
    "ProfileAggregator",
    "ScoringEngine",
    "FamilyStatus",
    "FamilyBreakdown",
    "ScoreReport",
    "build_score_report",
    "family_status",
]

__version__ = "1.0.0"
