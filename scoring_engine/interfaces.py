"""
Scoring Engine - Collaborator Interfaces.

The aggregator and the engine depend only on these protocols.
storage.persistence.SqlAlchemyPersistence implements Persistence;
platform_connectors provides PlatformConnector implementations.
"""

from datetime import datetime
from typing import List, Optional, Protocol

from platform_metrics.types import Platform, PlatformData, PlatformMetrics

from .types import CachedMetrics, CandidateProfile, CompositeScore, PlatformConnection


class PlatformConnector(Protocol):
    """Fetches one platform's data, decoded into its typed variant."""

    @property
    def platform(self) -> Platform:
        ...

    async def fetch(self, username: str, candidate_id: Optional[str] = None) -> PlatformData:
        """
        ``candidate_id`` identifies whose connection is being refreshed;
        connectors backed by per-candidate input need it.

        Raises:
            UpstreamUnavailableError: not found, rate limited, auth failure
        """
        ...


class Persistence(Protocol):
    """Storage operations consumed by the scoring core."""

    async def get_candidate_profile(self, candidate_id: str) -> Optional[CandidateProfile]:
        ...

    async def list_candidate_ids(self) -> List[str]:
        ...

    async def list_connections(self, candidate_id: str) -> List[PlatformConnection]:
        ...

    async def get_latest_snapshot(self, candidate_id: str) -> Optional[CompositeScore]:
        ...

    async def append_snapshot(self, candidate_id: str, score: CompositeScore) -> CompositeScore:
        """Insert a new immutable snapshot; returns it with snapshot_id set."""
        ...

    async def get_score_history(self, candidate_id: str, limit: int = 10) -> List[CompositeScore]:
        """Most recent first."""
        ...

    async def get_cached_metrics(
        self,
        candidate_id: str,
        platform: Platform,
    ) -> Optional[CachedMetrics]:
        ...

    async def store_cached_metrics(
        self,
        candidate_id: str,
        metrics: PlatformMetrics,
        fetched_at: datetime,
        expires_at: datetime,
    ) -> None:
        """Replace the cache entry for (candidate, metrics.platform)."""
        ...

    async def record_fetch_failure(
        self,
        candidate_id: str,
        platform: Platform,
        error: str,
        failed_at: datetime,
    ) -> None:
        ...
