"""
Tests for the profile aggregator.

Tests cover:
- Cached reads (no network, expiry, failure after fetch)
- Refresh with per-platform failure isolation
- Persistence failures propagating
"""

from datetime import timedelta

import pytest

from core.exceptions import CandidateNotFoundError, PersistenceError
from platform_connectors.exceptions import ProfileNotFoundError, RateLimitError
from platform_metrics.types import BlogData, BlogProfile, Platform, PlatformFamily

from tests.helpers import NOW, FakeConnector, github_data, make_metrics


# =============================================================
# TEST: Cached Read
# =============================================================

class TestAggregateProfile:
    """aggregate_profile reads the metrics cache only."""

    @pytest.mark.asyncio
    async def test_uses_cache_without_fetching(self, aggregator, persistence, registry):
        """Cached metrics are used and no connector is called."""
        connector = FakeConnector(Platform.GITHUB, data=github_data())
        registry.register(connector)
        persistence.connect("c1", Platform.GITHUB, "octo")
        persistence.cache_metrics("c1", make_metrics(Platform.GITHUB, 82))

        profile = await aggregator.aggregate_profile("c1")

        assert profile.family_score(PlatformFamily.CODE_HOSTING) == 82
        assert connector.calls == []

    @pytest.mark.asyncio
    async def test_expired_cache_is_absent(self, aggregator, persistence, clock):
        persistence.connect("c1", Platform.GITHUB, "octo")
        persistence.cache_metrics("c1", make_metrics(Platform.GITHUB, 82), ttl=timedelta(hours=1))
        clock.advance(hours=1)

        profile = await aggregator.aggregate_profile("c1")

        assert profile.platforms == {}
        assert profile.connected_families == []

    @pytest.mark.asyncio
    async def test_cache_older_than_failure_is_skipped(self, aggregator, persistence):
        """A failure recorded after the last fetch hides the cached data."""
        persistence.connect(
            "c1",
            Platform.TWITTER,
            "dev",
            last_error="Rate limit exceeded",
            last_error_at=NOW - timedelta(hours=1),
        )
        persistence.cache_metrics(
            "c1", make_metrics(Platform.TWITTER, 60), fetched_at=NOW - timedelta(hours=2)
        )

        profile = await aggregator.aggregate_profile("c1")

        assert Platform.TWITTER not in profile.platforms
        assert profile.failed_platforms == {Platform.TWITTER: "Rate limit exceeded"}

    @pytest.mark.asyncio
    async def test_cache_newer_than_failure_is_used(self, aggregator, persistence):
        persistence.connect(
            "c1", Platform.TWITTER, "dev", last_error="old", last_error_at=NOW - timedelta(hours=3)
        )
        persistence.cache_metrics(
            "c1", make_metrics(Platform.TWITTER, 60), fetched_at=NOW - timedelta(hours=2)
        )

        profile = await aggregator.aggregate_profile("c1")

        assert profile.family_score(PlatformFamily.SHORT_FORM_SOCIAL) == 60

    @pytest.mark.asyncio
    async def test_blog_providers_collapse(self, aggregator, persistence):
        persistence.connect("c1", Platform.DEVTO, "writer")
        persistence.connect("c1", Platform.HASHNODE, "writer")
        persistence.cache_metrics("c1", make_metrics(Platform.DEVTO, 70))
        persistence.cache_metrics("c1", make_metrics(Platform.HASHNODE, 81))

        profile = await aggregator.aggregate_profile("c1")

        assert profile.family_score(PlatformFamily.LONG_FORM_CONTENT) == 76
        assert set(profile.platforms) == {Platform.DEVTO, Platform.HASHNODE}

    @pytest.mark.asyncio
    async def test_unknown_candidate(self, aggregator):
        with pytest.raises(CandidateNotFoundError):
            await aggregator.aggregate_profile("nobody")


# =============================================================
# TEST: Refresh
# =============================================================

class TestRefreshAllPlatformData:
    """refresh_all_platform_data fetches every connection."""

    @pytest.mark.asyncio
    async def test_failure_is_isolated(self, aggregator, persistence, registry):
        """A rate-limited platform is missing; the other still aggregates."""
        registry.register(FakeConnector(Platform.GITHUB, data=github_data()))
        registry.register(
            FakeConnector(Platform.TWITTER, error=RateLimitError("Rate limit exceeded", platform="twitter"))
        )
        persistence.connect("c1", Platform.GITHUB, "octo")
        persistence.connect("c1", Platform.TWITTER, "dev")

        profile = await aggregator.refresh_all_platform_data("c1")

        assert set(profile.platforms) == {Platform.GITHUB}
        assert "Rate limit exceeded" in profile.failed_platforms[Platform.TWITTER]
        assert [(c, p) for c, p, _ in persistence.failures] == [("c1", Platform.TWITTER)]

    @pytest.mark.asyncio
    async def test_refresh_stores_cache_with_ttl(self, aggregator, persistence, registry):
        connector = FakeConnector(Platform.GITHUB, data=github_data())
        registry.register(connector)
        persistence.connect("c1", Platform.GITHUB, "octo")

        await aggregator.refresh_all_platform_data("c1")

        cached = persistence.cache[("c1", Platform.GITHUB)]
        assert connector.calls == ["octo"]
        assert cached.fetched_at == NOW
        assert cached.expires_at == NOW + timedelta(hours=24)
        assert persistence.connections["c1"][Platform.GITHUB].last_synced_at == NOW

    @pytest.mark.asyncio
    async def test_all_platforms_fail(self, aggregator, persistence, registry):
        """Every platform failing yields an empty profile, not an error."""
        registry.register(FakeConnector(Platform.GITHUB, error=ProfileNotFoundError("github", "ghost")))
        persistence.connect("c1", Platform.GITHUB, "ghost")

        profile = await aggregator.refresh_all_platform_data("c1")

        assert profile.platforms == {}
        assert Platform.GITHUB in profile.failed_platforms

    @pytest.mark.asyncio
    async def test_missing_connector_is_a_platform_failure(self, aggregator, persistence):
        persistence.connect("c1", Platform.MEDIUM, "writer")

        profile = await aggregator.refresh_all_platform_data("c1")

        assert profile.failed_platforms == {Platform.MEDIUM: "No connector registered for medium"}

    @pytest.mark.asyncio
    async def test_mismatched_platform_data_is_a_failure(self, aggregator, persistence, registry):
        """A connector returning another provider's data is rejected."""
        wrong = BlogData(
            profile=BlogProfile(platform=Platform.HASHNODE, username="writer"),
            platform=Platform.HASHNODE,
        )
        registry.register(FakeConnector(Platform.DEVTO, data=wrong))
        persistence.connect("c1", Platform.DEVTO, "writer")

        profile = await aggregator.refresh_all_platform_data("c1")

        assert Platform.DEVTO in profile.failed_platforms
        assert ("c1", Platform.HASHNODE) not in persistence.cache

    @pytest.mark.asyncio
    async def test_persistence_failure_propagates(self, aggregator, persistence, registry):
        """Storage errors are never isolated."""
        registry.register(FakeConnector(Platform.GITHUB, data=github_data()))
        persistence.connect("c1", Platform.GITHUB, "octo")

        async def broken_store(*args, **kwargs):
            raise PersistenceError("disk full")

        persistence.store_cached_metrics = broken_store

        with pytest.raises(PersistenceError):
            await aggregator.refresh_all_platform_data("c1")


class TestRefreshPlatform:

    @pytest.mark.asyncio
    async def test_refreshes_one_platform(self, aggregator, persistence, registry):
        github = FakeConnector(Platform.GITHUB, data=github_data())
        twitter = FakeConnector(Platform.TWITTER)
        registry.register(github)
        registry.register(twitter)
        persistence.connect("c1", Platform.GITHUB, "octo")
        persistence.connect("c1", Platform.TWITTER, "dev")

        metrics = await aggregator.refresh_platform("c1", Platform.GITHUB)

        assert metrics.platform == Platform.GITHUB
        assert github.calls == ["octo"]
        assert twitter.calls == []

    @pytest.mark.asyncio
    async def test_not_connected(self, aggregator):
        assert await aggregator.refresh_platform("c1", Platform.GITHUB) is None

    @pytest.mark.asyncio
    async def test_failure_is_recorded(self, aggregator, persistence, registry):
        registry.register(FakeConnector(Platform.GITHUB, error=ProfileNotFoundError("github", "ghost")))
        persistence.connect("c1", Platform.GITHUB, "ghost")

        assert await aggregator.refresh_platform("c1", Platform.GITHUB) is None
        assert persistence.connections["c1"][Platform.GITHUB].last_error_at == NOW

    def test_supported_platforms(self, aggregator, registry):
        registry.register(FakeConnector(Platform.GITHUB))

        assert aggregator.supported_platforms == [Platform.GITHUB]
