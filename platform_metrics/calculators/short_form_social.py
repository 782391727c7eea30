"""
Short-form-social calculator (Twitter).

Retweets are excluded from every "original tweet" count. With no
original tweets the score falls back to a follower-based floor.
"""

from datetime import datetime
from typing import List, Optional

from core.clock import ensure_utc

from ..config import ShortFormSocialConfig
from ..types import Platform, PlatformFamily, PlatformMetrics, Tweet, TwitterProfile
from .base import BasePlatformCalculator, as_number, round_half_up, round_to, saturate, top_counts


SECONDS_PER_WEEK = 7 * 24 * 60 * 60


class ShortFormSocialCalculator(BasePlatformCalculator[TwitterProfile, Tweet]):
    """Scores engagement, technical focus, influence and cadence."""

    def __init__(self, config: Optional[ShortFormSocialConfig] = None):
        self._config = config or ShortFormSocialConfig()

    @property
    def family(self) -> PlatformFamily:
        return PlatformFamily.SHORT_FORM_SOCIAL

    @property
    def max_recommendations(self) -> int:
        return self._config.max_recommendations

    def is_technical(self, tweet: Tweet) -> bool:
        """Keyword in the text, or a hashtag equal to a keyword without spaces."""
        text = (tweet.text or "").lower()
        hashtags = {tag.lower() for tag in tweet.hashtags}
        return any(
            keyword in text or keyword.replace(" ", "") in hashtags
            for keyword in self._config.keywords
        )

    def tweets_per_week(self, tweets: List[Tweet]) -> float:
        dates = sorted(ensure_utc(t.created_at) for t in tweets if t.created_at is not None)
        if len(tweets) < 2 or len(dates) < 2:
            return 0.0
        weeks = max(1.0, (dates[-1] - dates[0]).total_seconds() / SECONDS_PER_WEEK)
        return len(tweets) / weeks

    def _calculate(
        self,
        profile: TwitterProfile,
        activity: List[Tweet],
        now: datetime,
    ) -> PlatformMetrics:
        cfg = self._config
        originals = [tweet for tweet in activity if not tweet.is_retweet]
        followers = as_number(profile.followers)
        listed = as_number(profile.listed_count)

        if not originals:
            units = followers / cfg.inactive_follower_unit
            return PlatformMetrics(
                platform=Platform.TWITTER,
                overall_score=round_half_up(
                    min(units * cfg.inactive_overall_per_unit, cfg.inactive_overall_cap)
                ),
                sub_scores={
                    "engagement": 0,
                    "technical_content": 0,
                    "influence": round_half_up(min(units * cfg.inactive_influence_per_unit, 100)),
                    "consistency": 0,
                },
                breakdown={
                    "followers": int(followers),
                    "following": int(as_number(profile.following)),
                    "total_tweets": int(as_number(profile.tweet_count)),
                    "avg_likes": 0.0,
                    "avg_retweets": 0.0,
                    "engagement_rate": 0.0,
                    "technical_tweet_ratio": 0.0,
                    "top_hashtags": [],
                },
                recommendations=["Tweet more to build your social presence"],
            )

        count = len(originals)
        total_likes = sum(as_number(t.likes) for t in originals)
        total_retweets = sum(as_number(t.retweets) for t in originals)
        avg_likes = total_likes / count
        avg_retweets = total_retweets / count

        total_engagement = total_likes + total_retweets * cfg.retweet_engagement_multiplier
        engagement_rate = (total_engagement / count / followers * 100) if followers > 0 else 0.0

        technical_ratio = sum(1 for t in originals if self.is_technical(t)) / count
        top_hashtags = top_counts(
            [tag.lower() for t in originals for tag in t.hashtags],
            cfg.top_hashtags,
        )
        tweets_per_week = self.tweets_per_week(originals)

        engagement = min(
            saturate(avg_likes, cfg.avg_likes_saturation, cfg.likes_credit)
            + saturate(avg_retweets, cfg.avg_retweets_saturation, cfg.retweets_credit)
            + saturate(engagement_rate, cfg.engagement_rate_saturation, cfg.engagement_rate_credit),
            100,
        )
        technical_content = min(technical_ratio * 100, 100)
        influence = min(
            saturate(followers, cfg.follower_saturation, cfg.follower_credit)
            + saturate(listed, cfg.listed_saturation, cfg.listed_credit)
            + (cfg.verified_credit if profile.verified else 0.0),
            100,
        )
        consistency = saturate(tweets_per_week, cfg.tweets_per_week_saturation, 100.0)

        recommendations: List[str] = []
        if technical_ratio < cfg.min_technical_ratio:
            recommendations.append("Share more technical content to establish expertise")
        if avg_likes < cfg.min_avg_likes:
            recommendations.append("Engage more with the community to increase visibility")
        if tweets_per_week < cfg.min_tweets_per_week:
            recommendations.append("Tweet more consistently to grow your audience")
        if len(top_hashtags) < cfg.min_hashtags:
            recommendations.append("Use relevant hashtags to reach a wider audience")
        if profile.bio is None:
            recommendations.append("Add a bio to your Twitter profile")

        breakdown = {
            "followers": int(followers),
            "following": int(as_number(profile.following)),
            "total_tweets": int(as_number(profile.tweet_count)),
            "avg_likes": round_to(avg_likes, 1),
            "avg_retweets": round_to(avg_retweets, 1),
            "engagement_rate": round_to(engagement_rate, 2),
            "technical_tweet_ratio": round_to(technical_ratio, 2),
            "top_hashtags": top_hashtags,
        }

        return self._metrics(
            Platform.TWITTER,
            {
                "engagement": engagement,
                "technical_content": technical_content,
                "influence": influence,
                "consistency": consistency,
            },
            cfg.blend_weights,
            breakdown,
            recommendations,
        )
