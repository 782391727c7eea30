"""
Tests for the composite score.

Tests cover:
- Weighted renormalization over connected families
- Empty profiles
- Blog provider averaging
- Strengths, improvements and recommendation assembly
"""

import pytest

from platform_metrics.types import Platform, PlatformFamily
from scoring_engine.composite import calculate_composite_score, weighted_overall
from scoring_engine.config import ScoringWeights
from scoring_engine.types import DigitalProfile

from tests.helpers import NOW, make_metrics, make_profile


# =============================================================
# TEST: Overall Score
# =============================================================

class TestOverallScore:
    """Renormalized weighted mean."""

    def test_single_family_scores_itself(self):
        """Only GitHub at 82 gives 82, whatever its weight."""
        score = calculate_composite_score(make_profile(github=82), now=NOW)

        assert score.overall == 82

    def test_two_families(self):
        """(0.35*80 + 0.30*60) / 0.65 = 70.77 -> 71."""
        score = calculate_composite_score(make_profile(github=80, linkedin=60), now=NOW)

        assert score.overall == 71

    def test_all_families(self):
        """Default weights sum to 1.0, so no renormalization."""
        profile = make_profile(github=80, linkedin=60, devto=50, twitter=40)

        score = calculate_composite_score(profile, now=NOW)

        # 28 + 18 + 10 + 6 = 62
        assert score.overall == 62

    def test_no_families(self):
        """An empty profile scores 0."""
        score = calculate_composite_score(make_profile(), now=NOW)

        assert score.overall == 0
        assert score.connected == []
        assert score.missing == PlatformFamily.all_families()

    def test_zero_total_weight(self):
        """Present families whose weights sum to 0 give 0."""
        weights = ScoringWeights(code_hosting=0.0)

        score = calculate_composite_score(make_profile(github=90), weights=weights, now=NOW)

        assert score.overall == 0

    def test_weights_override(self):
        """A per-call weight override changes the blend."""
        weights = ScoringWeights(code_hosting=1.0, professional_network=0.0)

        score = calculate_composite_score(make_profile(github=80, linkedin=20), weights=weights, now=NOW)

        assert score.overall == 80
        assert score.weights == weights

    def test_weighted_overall_ignores_missing(self):
        scores = {
            PlatformFamily.CODE_HOSTING: 40,
            PlatformFamily.PROFESSIONAL_NETWORK: None,
            PlatformFamily.LONG_FORM_CONTENT: None,
            PlatformFamily.SHORT_FORM_SOCIAL: 40,
        }

        assert weighted_overall(scores, ScoringWeights()) == 40

    @pytest.mark.parametrize("value", [0, 1, 50, 99, 100])
    def test_bounds(self, value):
        profile = make_profile(github=value, linkedin=value, devto=value, twitter=value)

        assert calculate_composite_score(profile, now=NOW).overall == value


# =============================================================
# TEST: Blog Providers
# =============================================================

class TestBlogAveraging:
    """Several blog providers collapse into one family score."""

    def test_providers_average(self):
        """Dev.to 70 and Hashnode 81 average to 75.5 -> 76."""
        profile = make_profile(devto=70, hashnode=81)

        score = calculate_composite_score(profile, now=NOW)

        assert score.family_score(PlatformFamily.LONG_FORM_CONTENT) == 76
        assert score.overall == 76

    def test_blog_recommendations_in_provider_order(self):
        profile = DigitalProfile.from_metrics(
            "c1",
            {
                Platform.HASHNODE: make_metrics(Platform.HASHNODE, 50, ["from hashnode"]),
                Platform.DEVTO: make_metrics(Platform.DEVTO, 50, ["from devto"]),
            },
        )

        score = calculate_composite_score(profile, now=NOW)

        assert score.recommendations[:2] == ["from devto", "from hashnode"]


# =============================================================
# TEST: Presentation
# =============================================================

class TestPresentation:
    """Strengths, improvements and recommendations."""

    def test_connect_more_when_nothing_connected(self):
        score = calculate_composite_score(make_profile(), now=NOW)

        assert score.recommendations == ["Connect more platforms: github, linkedin, blog, twitter"]
        assert score.strengths == []
        assert score.improvements == []

    def test_connect_more_names_missing_families(self):
        score = calculate_composite_score(make_profile(github=82), now=NOW)

        assert score.recommendations[-1] == "Connect more platforms: linkedin, blog, twitter"
        assert score.missing == [
            PlatformFamily.PROFESSIONAL_NETWORK,
            PlatformFamily.LONG_FORM_CONTENT,
            PlatformFamily.SHORT_FORM_SOCIAL,
        ]

    def test_strengths_and_improvements(self):
        """>= 70 is a strength, < 50 an improvement, 50-69 neither."""
        score = calculate_composite_score(make_profile(github=70, linkedin=69, twitter=49), now=NOW)

        assert score.strengths == ["Strong GitHub presence with quality code"]
        assert score.improvements == ["Increase technical content on social media"]

    def test_recommendations_deduplicated_in_family_order(self):
        profile = DigitalProfile.from_metrics(
            "c1",
            {
                Platform.TWITTER: make_metrics(Platform.TWITTER, 40, ["Write tests", "Tweet more"]),
                Platform.GITHUB: make_metrics(Platform.GITHUB, 80, ["Add a bio", "Write tests"]),
            },
        )

        score = calculate_composite_score(profile, now=NOW)

        assert score.recommendations == [
            "Add a bio",
            "Write tests",
            "Tweet more",
            "Connect more platforms: linkedin, blog",
        ]

    def test_recommendations_capped(self):
        many = [f"Recommendation {i}" for i in range(12)]
        profile = DigitalProfile.from_metrics("c1", {Platform.GITHUB: make_metrics(Platform.GITHUB, 50, many)})

        score = calculate_composite_score(profile, now=NOW)

        assert score.recommendations == many[:10]

    def test_timestamp_and_candidate(self):
        score = calculate_composite_score(make_profile("c9", github=10), now=NOW)

        assert score.calculated_at == NOW
        assert score.candidate_id == "c9"
        assert score.snapshot_id is None

    def test_dict_round_trip(self):
        score = calculate_composite_score(make_profile(github=80, devto=40), now=NOW)

        assert type(score).from_dict(score.to_dict()) == score
