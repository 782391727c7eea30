"""
Test doubles and builders shared across the test suite.

- FakePersistence: in-memory Persistence implementation
- FakeConnector: scripted platform connector
- make_metrics / make_profile / make_score: value builders
"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Set, Tuple

from core.clock import ClockProtocol, MockClock
from core.exceptions import PersistenceError
from platform_metrics.types import (
    GitHubData,
    GitHubProfile,
    Platform,
    PlatformData,
    PlatformFamily,
    PlatformMetrics,
)
from scoring_engine.config import ScoringWeights
from scoring_engine.types import (
    CachedMetrics,
    CandidateProfile,
    CompositeScore,
    DigitalProfile,
    PlatformConnection,
)


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


# ============================================================
# BUILDERS
# ============================================================


def make_metrics(
    platform: Platform,
    score: int,
    recommendations: Sequence[str] = (),
) -> PlatformMetrics:
    return PlatformMetrics(
        platform=platform,
        overall_score=score,
        sub_scores={"overall": score},
        recommendations=list(recommendations),
    )


def make_profile(candidate_id: str = "c1", **scores: int) -> DigitalProfile:
    """DigitalProfile from platform-name keyword scores, e.g. github=80."""
    platforms = {
        Platform(name): make_metrics(Platform(name), score)
        for name, score in scores.items()
    }
    return DigitalProfile.from_metrics(candidate_id, platforms)


def make_score(
    overall: int,
    recommendations: Sequence[str] = (),
    calculated_at: datetime = NOW,
    snapshot_id: Optional[int] = None,
    family_scores: Optional[Dict[PlatformFamily, Optional[int]]] = None,
    candidate_id: str = "c1",
) -> CompositeScore:
    """CompositeScore with every family present in family_scores."""
    scores = {family: None for family in PlatformFamily.all_families()}
    scores.update(family_scores or {PlatformFamily.CODE_HOSTING: overall})
    connected = [f for f in PlatformFamily.all_families() if scores[f] is not None]
    return CompositeScore(
        overall=overall,
        family_scores=scores,
        weights=ScoringWeights(),
        connected=connected,
        missing=[f for f in PlatformFamily.all_families() if f not in connected],
        strengths=[],
        improvements=[],
        recommendations=list(recommendations),
        calculated_at=calculated_at,
        candidate_id=candidate_id,
        snapshot_id=snapshot_id,
    )


def github_data(username: str = "octo", **profile_fields) -> GitHubData:
    return GitHubData(profile=GitHubProfile(username=username, **profile_fields))


# ============================================================
# CALCULATOR PROPERTIES
# ============================================================

# Counts fed one at a time into a calculator, smallest first
INPUT_LADDER = (0, 1, 5, 50, 500, 10**6)

HUGE = 10**12


def assert_non_decreasing(scores: Sequence[int]) -> None:
    assert list(scores) == sorted(scores), f"score dropped along {list(scores)}"
    assert scores[-1] > scores[0], f"input had no effect: {list(scores)}"


def assert_bounded(metrics: PlatformMetrics) -> None:
    assert 0 <= metrics.overall_score <= 100
    assert all(0 <= value <= 100 for value in metrics.sub_scores.values()), metrics.sub_scores


# ============================================================
# FAKE CONNECTOR
# ============================================================


class FakeConnector:
    """Returns canned data or raises a canned error; records usernames."""

    def __init__(
        self,
        platform: Platform,
        data: Optional[PlatformData] = None,
        error: Optional[Exception] = None,
    ):
        self._platform = platform
        self.data = data
        self.error = error
        self.calls: List[str] = []

    @property
    def platform(self) -> Platform:
        return self._platform

    async def fetch(self, username: str, candidate_id: Optional[str] = None) -> PlatformData:
        self.calls.append(username)
        if self.error is not None:
            raise self.error
        return self.data


# ============================================================
# FAKE PERSISTENCE
# ============================================================


class FakePersistence:
    """
    In-memory Persistence.

    Snapshots are ordered like the SQL repository: calculated_at
    descending, then snapshot_id descending.
    """

    def __init__(self, clock: Optional[ClockProtocol] = None):
        self.clock = clock or MockClock(NOW)
        self.candidates: Dict[str, CandidateProfile] = {}
        self.connections: Dict[str, Dict[Platform, PlatformConnection]] = {}
        self.cache: Dict[Tuple[str, Platform], CachedMetrics] = {}
        self.snapshots: Dict[str, List[CompositeScore]] = {}
        self.failures: List[Tuple[str, Platform, str]] = []
        self.fail_append_for: Set[str] = set()
        self._next_snapshot_id = 1

    # Test setup

    def add_candidate(self, candidate_id: str, display_name: Optional[str] = None) -> None:
        self.candidates[candidate_id] = CandidateProfile(candidate_id, display_name)
        self.connections.setdefault(candidate_id, {})
        self.snapshots.setdefault(candidate_id, [])

    def connect(
        self,
        candidate_id: str,
        platform: Platform,
        username: str = "user",
        last_synced_at: Optional[datetime] = None,
        last_error: Optional[str] = None,
        last_error_at: Optional[datetime] = None,
    ) -> None:
        self.connections[candidate_id][platform] = PlatformConnection(
            platform=platform,
            username=username,
            connected_at=self.clock.now(),
            last_synced_at=last_synced_at,
            last_error=last_error,
            last_error_at=last_error_at,
        )

    def cache_metrics(
        self,
        candidate_id: str,
        metrics: PlatformMetrics,
        fetched_at: Optional[datetime] = None,
        ttl: timedelta = timedelta(hours=24),
    ) -> None:
        fetched_at = fetched_at or self.clock.now()
        self.cache[(candidate_id, metrics.platform)] = CachedMetrics(metrics, fetched_at, fetched_at + ttl)

    # Persistence protocol

    async def get_candidate_profile(self, candidate_id: str) -> Optional[CandidateProfile]:
        return self.candidates.get(candidate_id)

    async def list_candidate_ids(self) -> List[str]:
        return sorted(self.candidates)

    async def list_connections(self, candidate_id: str) -> List[PlatformConnection]:
        return list(self.connections.get(candidate_id, {}).values())

    async def get_latest_snapshot(self, candidate_id: str) -> Optional[CompositeScore]:
        history = await self.get_score_history(candidate_id, limit=1)
        return history[0] if history else None

    async def append_snapshot(self, candidate_id: str, score: CompositeScore) -> CompositeScore:
        if candidate_id in self.fail_append_for:
            raise PersistenceError(f"Cannot store snapshot for {candidate_id}")
        stored = replace(score, snapshot_id=self._next_snapshot_id, candidate_id=candidate_id)
        self._next_snapshot_id += 1
        self.snapshots.setdefault(candidate_id, []).append(stored)
        return stored

    async def get_score_history(self, candidate_id: str, limit: int = 10) -> List[CompositeScore]:
        ordered = sorted(
            self.snapshots.get(candidate_id, []),
            key=lambda s: (s.calculated_at, s.snapshot_id),
            reverse=True,
        )
        return ordered[:limit]

    async def get_cached_metrics(self, candidate_id: str, platform: Platform) -> Optional[CachedMetrics]:
        return self.cache.get((candidate_id, platform))

    async def store_cached_metrics(
        self,
        candidate_id: str,
        metrics: PlatformMetrics,
        fetched_at: datetime,
        expires_at: datetime,
    ) -> None:
        self.cache[(candidate_id, metrics.platform)] = CachedMetrics(metrics, fetched_at, expires_at)
        connection = self.connections.get(candidate_id, {}).get(metrics.platform)
        if connection is not None:
            self.connections[candidate_id][metrics.platform] = replace(
                connection, last_synced_at=fetched_at, last_error=None, last_error_at=None
            )

    async def record_fetch_failure(
        self,
        candidate_id: str,
        platform: Platform,
        error: str,
        failed_at: datetime,
    ) -> None:
        self.failures.append((candidate_id, platform, error))
        connection = self.connections.get(candidate_id, {}).get(platform)
        if connection is not None:
            self.connections[candidate_id][platform] = replace(
                connection, last_error=error, last_error_at=failed_at
            )
