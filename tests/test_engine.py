"""
Tests for the scoring engine.

Tests cover:
- Score storage and change detection across runs
- History ordering and limits
- Runtime weight changes
- Failure semantics
"""

from datetime import timedelta

import pytest

from core.exceptions import CandidateNotFoundError, PersistenceError
from platform_connectors.exceptions import RateLimitError
from platform_metrics.types import Platform, PlatformFamily
from scoring_engine.config import ScoringWeights

from tests.helpers import FakeConnector, github_data, make_metrics, make_profile


@pytest.fixture
def github_candidate(persistence):
    """c1 with a cached GitHub score of 50."""
    persistence.connect("c1", Platform.GITHUB, "octo")
    persistence.cache_metrics("c1", make_metrics(Platform.GITHUB, 50))
    return persistence


# =============================================================
# TEST: Calculate and Store
# =============================================================

class TestCalculateAndStore:
    """Each run appends a snapshot and reports the change."""

    @pytest.mark.asyncio
    async def test_first_score(self, engine, github_candidate):
        """No previous snapshot: unchanged, change equals the score."""
        result = await engine.calculate_and_store_score("c1")

        assert result.previous is None
        assert result.current.overall == 50
        assert result.changed is False
        assert result.change_amount == 50
        assert result.current.snapshot_id is not None

    @pytest.mark.asyncio
    async def test_change_sequence(self, engine, github_candidate, clock):
        """Scores 50, 50, 70 report changed False, False, True."""
        first = await engine.calculate_and_store_score("c1")
        clock.advance(minutes=1)
        second = await engine.calculate_and_store_score("c1")
        clock.advance(minutes=1)
        github_candidate.cache_metrics("c1", make_metrics(Platform.GITHUB, 70))
        third = await engine.calculate_and_store_score("c1")

        assert [r.changed for r in (first, second, third)] == [False, False, True]
        assert second.change_amount == 0
        assert third.change_amount == 20
        assert third.previous.overall == 50

    @pytest.mark.asyncio
    async def test_decline_is_negative(self, engine, github_candidate):
        await engine.calculate_and_store_score("c1")
        github_candidate.cache_metrics("c1", make_metrics(Platform.GITHUB, 35))

        result = await engine.calculate_and_store_score("c1")

        assert result.changed is True
        assert result.change_amount == -15

    @pytest.mark.asyncio
    async def test_refresh_fetches_platforms(self, engine, persistence, registry):
        """refresh=True goes through the connectors; failures become missing."""
        github = FakeConnector(Platform.GITHUB, data=github_data(bio="hi"))
        registry.register(github)
        registry.register(FakeConnector(Platform.TWITTER, error=RateLimitError("Rate limit exceeded")))
        persistence.connect("c1", Platform.GITHUB, "octo")
        persistence.connect("c1", Platform.TWITTER, "dev")

        result = await engine.refresh_and_recalculate("c1")

        assert github.calls == ["octo"]
        assert PlatformFamily.CODE_HOSTING in result.current.connected
        assert PlatformFamily.SHORT_FORM_SOCIAL in result.current.missing

    @pytest.mark.asyncio
    async def test_no_connections(self, engine):
        """A candidate with nothing connected scores 0 and is told to connect."""
        result = await engine.calculate_and_store_score("c1")

        assert result.current.overall == 0
        assert result.current.recommendations == [
            "Connect more platforms: github, linkedin, blog, twitter"
        ]

    @pytest.mark.asyncio
    async def test_unknown_candidate(self, engine, persistence):
        with pytest.raises(CandidateNotFoundError):
            await engine.calculate_and_store_score("nobody")

        assert "nobody" not in persistence.snapshots

    @pytest.mark.asyncio
    async def test_persistence_failure_propagates(self, engine, github_candidate):
        """Nothing is stored when the snapshot write fails."""
        github_candidate.fail_append_for.add("c1")

        with pytest.raises(PersistenceError):
            await engine.calculate_and_store_score("c1")

        assert github_candidate.snapshots["c1"] == []


# =============================================================
# TEST: History
# =============================================================

class TestHistory:

    @pytest.mark.asyncio
    async def test_most_recent_first(self, engine, github_candidate, clock):
        for score in (50, 60, 70):
            github_candidate.cache_metrics("c1", make_metrics(Platform.GITHUB, score))
            await engine.calculate_and_store_score("c1")
            clock.advance(hours=1)

        history = await engine.get_score_history("c1")

        assert [s.overall for s in history] == [70, 60, 50]
        assert (await engine.get_current_score("c1")).overall == 70

    @pytest.mark.asyncio
    async def test_same_timestamp_ordered_by_insertion(self, engine, github_candidate):
        """With a frozen clock, the last insert is still the current score."""
        await engine.calculate_and_store_score("c1")
        github_candidate.cache_metrics("c1", make_metrics(Platform.GITHUB, 90))
        await engine.calculate_and_store_score("c1")

        assert (await engine.get_current_score("c1")).overall == 90

    @pytest.mark.asyncio
    async def test_limit(self, engine, github_candidate):
        for _ in range(3):
            await engine.calculate_and_store_score("c1")

        assert len(await engine.get_score_history("c1", limit=2)) == 2
        assert await engine.get_score_history("c1", limit=0) == []

    @pytest.mark.asyncio
    async def test_never_scored(self, engine):
        assert await engine.get_current_score("c1") is None
        assert await engine.get_score_history("c1") == []


# =============================================================
# TEST: Weights
# =============================================================

class TestEngineWeights:

    def test_set_weights_affects_next_calculation(self, engine):
        profile = make_profile(github=80, linkedin=60)
        before = engine.calculate_composite_score(profile)

        engine.set_weights({"linkedin": 0.0})
        after = engine.calculate_composite_score(profile)

        assert before.overall == 71
        assert after.overall == 80
        assert engine.get_weights().professional_network == 0.0

    @pytest.mark.asyncio
    async def test_stored_snapshot_keeps_its_weights(self, engine, github_candidate):
        result = await engine.calculate_and_store_score("c1")
        engine.set_weights({"github": 0.9})

        stored = await engine.get_current_score("c1")

        assert stored.weights == ScoringWeights()
        assert result.current.weights == ScoringWeights()

    @pytest.mark.asyncio
    async def test_per_call_override(self, engine, persistence):
        persistence.connect("c1", Platform.GITHUB, "octo")
        persistence.connect("c1", Platform.LINKEDIN, "jane")
        persistence.cache_metrics("c1", make_metrics(Platform.GITHUB, 80))
        persistence.cache_metrics("c1", make_metrics(Platform.LINKEDIN, 60), ttl=timedelta(days=7))

        result = await engine.calculate_and_store_score(
            "c1", weights=ScoringWeights(code_hosting=0.0)
        )

        assert result.current.overall == 60
        assert engine.get_weights() == ScoringWeights()
