"""
Tests for the short-form-social (Twitter) calculator.
"""

from datetime import timedelta

import pytest

from platform_metrics.calculators import ShortFormSocialCalculator
from platform_metrics.types import Platform, Tweet, TwitterProfile

from tests.helpers import HUGE, INPUT_LADDER, NOW, assert_bounded, assert_non_decreasing


@pytest.fixture
def calculator():
    return ShortFormSocialCalculator()


@pytest.fixture
def profile():
    return TwitterProfile(
        username="dev",
        bio="Pythonista",
        followers=1000,
        listed_count=50,
        verified=False,
    )


@pytest.fixture
def tweets():
    start = NOW - timedelta(days=14)
    return [
        Tweet(
            id="1",
            text="Shipping a new python release today",
            created_at=start,
            likes=10,
            retweets=5,
            hashtags=["Python", "OpenSource"],
        ),
        Tweet(id="2", text="Great coffee today", created_at=start + timedelta(days=7), likes=20, retweets=5),
        Tweet(
            id="3",
            text="Thoughts on #rust",
            created_at=start + timedelta(days=14),
            likes=0,
            retweets=0,
            hashtags=["rust"],
        ),
        Tweet(id="4", text="Weekend hike", created_at=start + timedelta(days=14), likes=10, retweets=2),
        Tweet(
            id="5",
            text="RT: someone else's viral post",
            created_at=start + timedelta(days=3),
            likes=10000,
            retweets=5000,
            is_retweet=True,
        ),
    ]


class TestShortFormSocialScoring:
    """Four original tweets (plus one retweet) over two weeks."""

    def test_sub_scores(self, calculator, profile, tweets):
        metrics = calculator.calculate(profile, tweets, now=NOW)

        assert metrics.sub_scores == {
            "engagement": 88,
            "technical_content": 50,
            "influence": 19,
            "consistency": 29,
        }

    def test_overall(self, calculator, profile, tweets):
        """0.30*88 + 0.25*50 + 0.25*19 + 0.20*28.57 = 49.36 -> 49."""
        metrics = calculator.calculate(profile, tweets, now=NOW)

        assert metrics.overall_score == 49
        assert metrics.platform == Platform.TWITTER

    def test_retweets_excluded(self, calculator, profile, tweets):
        """The retweet's counters do not enter any average."""
        metrics = calculator.calculate(profile, tweets, now=NOW)

        assert metrics.breakdown["avg_likes"] == 10.0
        assert metrics.breakdown["avg_retweets"] == 3.0
        assert metrics.breakdown["engagement_rate"] == 1.6
        assert metrics.breakdown["technical_tweet_ratio"] == 0.5

    def test_top_hashtags_lowercased(self, calculator, profile, tweets):
        metrics = calculator.calculate(profile, tweets, now=NOW)

        assert metrics.breakdown["top_hashtags"] == ["python", "opensource", "rust"]

    def test_recommendations(self, calculator, profile, tweets):
        metrics = calculator.calculate(profile, tweets, now=NOW)

        assert metrics.recommendations == ["Tweet more consistently to grow your audience"]


class TestTechnicalDetection:

    def test_keyword_in_text(self, calculator):
        assert calculator.is_technical(Tweet(id="1", text="Reviewing a Kubernetes manifest"))

    def test_multiword_keyword_as_hashtag(self, calculator):
        """#machinelearning matches "machine learning"."""
        assert calculator.is_technical(Tweet(id="1", text="New post", hashtags=["MachineLearning"]))

    def test_plain_tweet(self, calculator):
        assert not calculator.is_technical(Tweet(id="1", text="Weekend hike"))


class TestShortFormSocialEdgeCases:

    def test_no_original_tweets_uses_follower_floor(self, calculator):
        """2500 followers and only retweets: overall 12.5 -> 13, influence 50."""
        profile = TwitterProfile(username="lurker", followers=2500)
        retweet = Tweet(id="1", text="RT", is_retweet=True, likes=500)

        metrics = calculator.calculate(profile, [retweet], now=NOW)

        assert metrics.overall_score == 13
        assert metrics.sub_scores == {
            "engagement": 0,
            "technical_content": 0,
            "influence": 50,
            "consistency": 0,
        }
        assert metrics.recommendations == ["Tweet more to build your social presence"]

    def test_follower_floor_is_capped(self, calculator):
        """The inactive floor never exceeds 25."""
        metrics = calculator.calculate(TwitterProfile(username="famous", followers=200000), [], now=NOW)

        assert metrics.overall_score == 25
        assert metrics.sub_scores["influence"] == 100

    def test_single_tweet_has_no_cadence(self, calculator):
        assert calculator.tweets_per_week([Tweet(id="1", text="hi", created_at=NOW)]) == 0.0

    def test_zero_followers(self, calculator):
        """Engagement rate is 0 rather than a division error."""
        tweets = [Tweet(id="1", text="python", likes=3), Tweet(id="2", text="sql", likes=1)]

        metrics = calculator.calculate(TwitterProfile(username="new", followers=0), tweets, now=NOW)

        assert metrics.breakdown["engagement_rate"] == 0.0


# =============================================================
# TEST: Score Properties
# =============================================================

def social_account(likes=0, retweets=0, listed=0):
    profile = TwitterProfile(username="dev", followers=100, listed_count=listed)
    tweets = [
        Tweet(id=str(i), text="Notes", created_at=NOW - timedelta(days=7 * i), likes=likes, retweets=retweets)
        for i in range(2)
    ]
    return profile, tweets


class TestShortFormSocialProperties:
    """
    Followers also divide the engagement rate, so they are only
    ladder-tested on the follower floor (no original tweets).
    """

    @pytest.mark.parametrize("field_name", ["likes", "retweets", "listed"])
    def test_raising_one_count_never_lowers_overall(self, calculator, field_name):
        scores = [
            calculator.calculate(*social_account(**{field_name: value}), now=NOW).overall_score
            for value in INPUT_LADDER
        ]

        assert_non_decreasing(scores)

    def test_follower_floor_never_drops(self, calculator):
        scores = [
            calculator.calculate(TwitterProfile(username="dev", followers=value), [], now=NOW).overall_score
            for value in INPUT_LADDER
        ]

        assert_non_decreasing(scores)

    def test_deterministic(self, calculator, profile, tweets):
        assert calculator.calculate(profile, tweets, now=NOW) == calculator.calculate(profile, tweets, now=NOW)

    def test_bounded_for_huge_counts(self, calculator):
        profile = TwitterProfile(username="dev", followers=HUGE, listed_count=HUGE, verified=True)
        tweets = [
            Tweet(
                id=str(i),
                text="python release notes",
                created_at=NOW - timedelta(hours=i),
                likes=HUGE,
                retweets=HUGE,
            )
            for i in range(100)
        ]

        metrics = calculator.calculate(profile, tweets, now=NOW)

        assert_bounded(metrics)
        assert metrics.sub_scores["influence"] == 100

    def test_bounded_for_missing_fields(self, calculator):
        profile = TwitterProfile(username="dev", followers=None, listed_count=None, following=None)
        tweets = [Tweet(id=str(i), text="hello", likes=None, retweets=None) for i in range(3)]

        metrics = calculator.calculate(profile, tweets, now=NOW)

        assert_bounded(metrics)
        assert metrics.breakdown["engagement_rate"] == 0.0
