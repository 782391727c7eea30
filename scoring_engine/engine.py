"""
Scoring Engine - Main Engine.

============================================================
PURPOSE
============================================================
Stateful wrapper around calculate_composite_score():
aggregate -> score -> append snapshot -> diff with previous.

============================================================
FAILURE SEMANTICS
============================================================
- Unknown candidate: CandidateNotFoundError, not retried
- Platform fetch failure during refresh: platform missing
- Persistence failure: logged and propagated, nothing partial
  is written

============================================================
CONCURRENCY
============================================================
No locks. Concurrent runs for one candidate each append a full
snapshot; the last write is the current score.

============================================================
"""

import logging
from typing import List, Mapping, Optional, Union

from core.clock import ClockProtocol, get_clock
from core.exceptions import CandidateNotFoundError, PersistenceError
from platform_metrics.types import PlatformFamily

from .aggregator import ProfileAggregator
from .composite import calculate_composite_score
from .config import ScoringConfig, ScoringWeights, WeightsProvider, get_default_config
from .interfaces import Persistence
from .types import CompositeScore, DigitalProfile, ScoreUpdateResult


logger = logging.getLogger(__name__)


class ScoringEngine:
    """
    Composite scoring with snapshot history.

    Weights come from the WeightsProvider unless a call passes
    its own override.
    """

    def __init__(
        self,
        persistence: Persistence,
        aggregator: ProfileAggregator,
        weights_provider: Optional[WeightsProvider] = None,
        config: Optional[ScoringConfig] = None,
        clock: Optional[ClockProtocol] = None,
    ):
        self._persistence = persistence
        self._aggregator = aggregator
        self._weights_provider = weights_provider or WeightsProvider()
        self._config = config or get_default_config()
        self._clock = clock or get_clock()

    # ============================================================
    # WEIGHTS
    # ============================================================

    def get_weights(self) -> ScoringWeights:
        return self._weights_provider.get_weights()

    def set_weights(self, partial: Mapping[Union[PlatformFamily, str], float]) -> ScoringWeights:
        """Adjust the default weights for subsequent computations."""
        return self._weights_provider.set_weights(partial)

    # ============================================================
    # SCORING
    # ============================================================

    def calculate_composite_score(
        self,
        profile: DigitalProfile,
        weights: Optional[ScoringWeights] = None,
    ) -> CompositeScore:
        """Score a profile without persisting anything."""
        return calculate_composite_score(
            profile,
            weights=weights or self.get_weights(),
            config=self._config,
            now=self._clock.now(),
        )

    async def calculate_and_store_score(
        self,
        candidate_id: str,
        weights: Optional[ScoringWeights] = None,
        refresh: bool = False,
    ) -> ScoreUpdateResult:
        """
        Score a candidate and append the result to their history.

        Args:
            candidate_id: Candidate to score
            weights: Per-call override of the default weights
            refresh: Re-fetch platforms first instead of reading the cache

        Returns:
            ScoreUpdateResult with previous/current snapshots

        Raises:
            CandidateNotFoundError: Unknown candidate
            PersistenceError: Storage failure
        """
        if await self._persistence.get_candidate_profile(candidate_id) is None:
            raise CandidateNotFoundError(candidate_id)

        if refresh:
            profile = await self._aggregator.refresh_all_platform_data(candidate_id)
        else:
            profile = await self._aggregator.aggregate_profile(candidate_id)

        current = self.calculate_composite_score(profile, weights)

        try:
            previous = await self._persistence.get_latest_snapshot(candidate_id)
            stored = await self._persistence.append_snapshot(candidate_id, current)
        except PersistenceError as e:
            logger.error(f"[ScoringEngine] Failed to store score for {candidate_id}: {e}", exc_info=True)
            raise

        result = ScoreUpdateResult.between(previous, stored)
        logger.info(
            f"[ScoringEngine] {candidate_id} scored {stored.overall} "
            f"(changed={result.changed}, delta={result.change_amount:+d}, "
            f"missing={[f.label for f in stored.missing]})"
        )
        return result

    async def refresh_and_recalculate(
        self,
        candidate_id: str,
        weights: Optional[ScoringWeights] = None,
    ) -> ScoreUpdateResult:
        """Refresh every platform, then score and store."""
        return await self.calculate_and_store_score(candidate_id, weights=weights, refresh=True)

    # ============================================================
    # HISTORY
    # ============================================================

    async def get_current_score(self, candidate_id: str) -> Optional[CompositeScore]:
        """Most recent snapshot, or None if never scored."""
        return await self._persistence.get_latest_snapshot(candidate_id)

    async def get_score_history(self, candidate_id: str, limit: int = 10) -> List[CompositeScore]:
        """Snapshots, most recent first."""
        if limit <= 0:
            return []
        return await self._persistence.get_score_history(candidate_id, limit=limit)

    @property
    def aggregator(self) -> ProfileAggregator:
        return self._aggregator

    @property
    def config(self) -> ScoringConfig:
        return self._config
