"""
Long-form-content calculator (Dev.to, Hashnode, Medium).

One calculation per blog provider. The aggregator averages the
providers into a single family score.
"""

from datetime import datetime
from typing import List, Optional

from core.clock import ensure_utc

from ..config import LongFormContentConfig
from ..types import BlogPost, BlogProfile, PlatformFamily, PlatformMetrics
from .base import BasePlatformCalculator, as_number, round_to, saturate, top_counts


SECONDS_PER_DAY = 24 * 60 * 60


class LongFormContentCalculator(BasePlatformCalculator[BlogProfile, BlogPost]):
    """Scores content quality, cadence, engagement and topic spread."""

    def __init__(self, config: Optional[LongFormContentConfig] = None):
        self._config = config or LongFormContentConfig()

    @property
    def family(self) -> PlatformFamily:
        return PlatformFamily.LONG_FORM_CONTENT

    @property
    def max_recommendations(self) -> int:
        return self._config.max_recommendations

    def posts_per_month(self, posts: List[BlogPost]) -> float:
        """Posts divided by the first-to-last publishing span in months (at least 1)."""
        dates = sorted(ensure_utc(p.published_at) for p in posts if p.published_at is not None)
        months_active = 1.0
        if len(dates) >= 2:
            span_days = (dates[-1] - dates[0]).total_seconds() / SECONDS_PER_DAY
            months_active = max(1.0, span_days / self._config.days_per_month)
        return len(posts) / months_active

    def _calculate(
        self,
        profile: BlogProfile,
        activity: List[BlogPost],
        now: datetime,
    ) -> PlatformMetrics:
        cfg = self._config
        posts = activity
        followers = as_number(profile.followers)

        if not posts:
            return self._metrics(
                profile.platform,
                {
                    "content_quality": 0.0,
                    "consistency": 0.0,
                    "engagement": 0.0,
                    "topic_diversity": 0.0,
                },
                cfg.blend_weights,
                {
                    "total_posts": 0,
                    "total_reactions": 0,
                    "total_comments": 0,
                    "avg_reading_time": 0.0,
                    "posts_per_month": 0.0,
                    "top_tags": [],
                    "followers": int(followers),
                },
                ["Start writing blog posts to build your content portfolio"],
            )

        count = len(posts)
        total_reactions = sum(as_number(p.reactions) for p in posts)
        total_comments = sum(as_number(p.comments) for p in posts)
        avg_reading_time = sum(as_number(p.reading_time_minutes) for p in posts) / count
        reactions_per_post = total_reactions / count
        comments_per_post = total_comments / count
        posts_per_month = self.posts_per_month(posts)

        all_tags = [tag for p in posts for tag in p.tags]
        unique_tags = len(set(all_tags))
        top_tags = top_counts(all_tags, cfg.top_tags)

        with_cover = sum(1 for p in posts if p.cover_image)
        with_excerpt = sum(1 for p in posts if p.excerpt and len(p.excerpt) > cfg.excerpt_min_length)

        content_quality = min(
            saturate(avg_reading_time, cfg.reading_time_saturation, cfg.reading_time_credit)
            + with_cover / count * cfg.cover_image_credit
            + with_excerpt / count * cfg.excerpt_credit
            + saturate(count, cfg.volume_saturation, cfg.volume_credit),
            100,
        )
        consistency = saturate(posts_per_month, cfg.posts_per_month_saturation, 100.0)
        engagement = min(
            saturate(reactions_per_post, cfg.reactions_per_post_saturation, cfg.reactions_credit)
            + saturate(comments_per_post, cfg.comments_per_post_saturation, cfg.comments_credit)
            + saturate(followers, cfg.follower_saturation, cfg.follower_credit),
            100,
        )
        topic_diversity = min(unique_tags / cfg.tag_saturation * 100, 100)

        recommendations: List[str] = []
        if posts_per_month < cfg.min_posts_per_month:
            recommendations.append("Write more frequently to maintain reader engagement")
        if avg_reading_time < cfg.min_reading_time:
            recommendations.append("Write longer, more in-depth articles")
        if unique_tags < cfg.min_unique_tags:
            recommendations.append("Cover more diverse topics to reach a wider audience")
        if with_cover < count * cfg.min_cover_ratio:
            recommendations.append("Add cover images to more of your posts")
        if reactions_per_post < cfg.min_reactions_per_post:
            recommendations.append("Engage with the community to increase your reactions")

        breakdown = {
            "total_posts": count,
            "total_reactions": int(total_reactions),
            "total_comments": int(total_comments),
            "avg_reading_time": round_to(avg_reading_time, 1),
            "posts_per_month": round_to(posts_per_month, 1),
            "top_tags": top_tags,
            "followers": int(followers),
        }

        return self._metrics(
            profile.platform,
            {
                "content_quality": content_quality,
                "consistency": consistency,
                "engagement": engagement,
                "topic_diversity": topic_diversity,
            },
            cfg.blend_weights,
            breakdown,
            recommendations,
        )
