"""
Scoring Engine - Configuration.

============================================================
PURPOSE
============================================================
Composite score weights and presentation thresholds.

Weights are an explicit value passed to every computation.
WeightsProvider holds the process-wide default that
set_weights() / get_weights() adjust at runtime; a call may
still pass its own override.

============================================================
WEIGHT PHILOSOPHY
============================================================
Default weights:
- CODE_HOSTING          0.35
- PROFESSIONAL_NETWORK  0.30
- LONG_FORM_CONTENT     0.20
- SHORT_FORM_SOCIAL     0.15

Weights renormalize over connected families, so they need not
sum to 1.0. Negative weights are rejected.

============================================================
"""

import logging
import math
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Union

from core.exceptions import ConfigurationError
from platform_metrics.types import PlatformFamily


logger = logging.getLogger(__name__)


# ============================================================
# WEIGHTS
# ============================================================


@dataclass(frozen=True)
class ScoringWeights:
    """Per-family weights for the composite score."""

    code_hosting: float = 0.35
    professional_network: float = 0.30
    long_form_content: float = 0.20
    short_form_social: float = 0.15

    def __post_init__(self) -> None:
        for family in PlatformFamily.all_families():
            value = getattr(self, family.value)
            if not isinstance(value, (int, float)) or math.isnan(value) or math.isinf(value):
                raise ConfigurationError(
                    "Weight must be a finite number",
                    config_key=family.value,
                    actual_value=value,
                )
            if value < 0:
                raise ConfigurationError(
                    "Weight must not be negative",
                    config_key=family.value,
                    actual_value=value,
                )

    def weight_for(self, family: PlatformFamily) -> float:
        return float(getattr(self, family.value))

    def merged(self, partial: Mapping[Union[PlatformFamily, str], float]) -> "ScoringWeights":
        """
        Return a copy with some weights replaced.

        Keys may be PlatformFamily members, their values
        ("code_hosting") or their labels ("github").

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        updates: Dict[str, float] = {}
        for key, value in partial.items():
            family = _resolve_family(key)
            updates[family.value] = value
        return replace(self, **updates)

    def to_dict(self) -> Dict[str, float]:
        return {family.value: self.weight_for(family) for family in PlatformFamily.all_families()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScoringWeights":
        return cls().merged({k: float(v) for k, v in data.items()})


def _resolve_family(key: Union[PlatformFamily, str]) -> PlatformFamily:
    if isinstance(key, PlatformFamily):
        return key
    for family in PlatformFamily.all_families():
        if key in (family.value, family.label, family.name):
            return family
    raise ConfigurationError("Unknown platform family", config_key=str(key))


class WeightsProvider:
    """
    Process-wide, runtime-adjustable weights.

    Changes affect subsequent computations only; stored
    snapshots keep the weights they were computed with.
    """

    def __init__(self, initial: Optional[ScoringWeights] = None):
        self._weights = initial or ScoringWeights()
        self._lock = threading.Lock()

    def get_weights(self) -> ScoringWeights:
        with self._lock:
            return self._weights

    def set_weights(self, partial: Mapping[Union[PlatformFamily, str], float]) -> ScoringWeights:
        """Merge a partial weight mapping into the current weights."""
        with self._lock:
            self._weights = self._weights.merged(partial)
            logger.info(f"[Weights] Updated scoring weights: {self._weights.to_dict()}")
            return self._weights

    def reset(self) -> None:
        with self._lock:
            self._weights = ScoringWeights()


# ============================================================
# ENGINE CONFIGURATION
# ============================================================


DEFAULT_STRENGTHS = {
    PlatformFamily.CODE_HOSTING: "Strong GitHub presence with quality code",
    PlatformFamily.PROFESSIONAL_NETWORK: "Well-developed professional network",
    PlatformFamily.LONG_FORM_CONTENT: "Active content creator with quality blogs",
    PlatformFamily.SHORT_FORM_SOCIAL: "Strong social media engagement",
}

DEFAULT_IMPROVEMENTS = {
    PlatformFamily.CODE_HOSTING: "Improve GitHub activity and project quality",
    PlatformFamily.PROFESSIONAL_NETWORK: "Enhance LinkedIn profile and connections",
    PlatformFamily.LONG_FORM_CONTENT: "Write more technical blog content",
    PlatformFamily.SHORT_FORM_SOCIAL: "Increase technical content on social media",
}


@dataclass(frozen=True)
class ScoringConfig:
    """
    Composite score presentation rules.

    - strength_threshold: family score >= this adds a strength
    - improvement_threshold: family score < this adds an improvement
    - max_recommendations: cap after deduplication
    """

    strength_threshold: int = 70
    improvement_threshold: int = 50
    max_recommendations: int = 10
    connect_more_prefix: str = "Connect more platforms: "
    strengths: Dict[PlatformFamily, str] = field(default_factory=lambda: dict(DEFAULT_STRENGTHS))
    improvements: Dict[PlatformFamily, str] = field(default_factory=lambda: dict(DEFAULT_IMPROVEMENTS))

    # Score transparency labels
    excellent_threshold: int = 80
    good_threshold: int = 65

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strength_threshold": self.strength_threshold,
            "improvement_threshold": self.improvement_threshold,
            "max_recommendations": self.max_recommendations,
            "excellent_threshold": self.excellent_threshold,
            "good_threshold": self.good_threshold,
        }


def get_default_config() -> ScoringConfig:
    """Get the default scoring configuration."""
    return ScoringConfig()
