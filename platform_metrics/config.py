"""
Platform Metrics - Configuration.

============================================================
PURPOSE
============================================================
Tunable thresholds for the four platform calculators.

Every sub-dimension follows the same shape:
    value >= saturation -> full credit
    otherwise           -> value * (credit / saturation)

Blend weights per family sum to 1.0.

============================================================
DESIGN PRINCIPLES
============================================================
- Immutable configurations
- One dataclass per platform family
- Defaults reproduce the production scoring constants

============================================================
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict


# ============================================================
# CODE HOSTING
# ============================================================


@dataclass(frozen=True)
class CodeHostingConfig:
    """
    Thresholds for the code-hosting calculator.

    Sub-dimensions: code quality, language diversity, commit
    frequency, collaboration, project impact.
    """

    # Language diversity: unique languages / saturation
    language_saturation: int = 10

    # Code quality credit split (ratios over own repositories)
    description_credit: float = 30.0
    license_credit: float = 20.0
    topics_credit: float = 20.0
    quality_star_saturation: int = 100
    quality_star_credit: float = 30.0

    # Commit frequency: commits per year scaled
    commit_days: int = 365
    commit_multiplier: float = 10.0

    # Collaboration
    pr_saturation: int = 50
    pr_credit: float = 40.0
    review_saturation: int = 50
    review_credit: float = 30.0
    issue_saturation: int = 100
    issue_credit: float = 30.0

    # Impact
    impact_star_saturation: int = 100
    impact_star_credit: float = 40.0
    impact_fork_saturation: int = 50
    impact_fork_credit: float = 30.0
    impact_follower_saturation: int = 100
    impact_follower_credit: float = 30.0

    # "Active" means pushed within this many days
    active_window_days: int = 182

    blend_weights: Dict[str, float] = field(default_factory=lambda: {
        "code_quality": 0.25,
        "language_diversity": 0.15,
        "commit_frequency": 0.25,
        "collaboration": 0.20,
        "project_impact": 0.15,
    })

    # Recommendation thresholds
    min_language_diversity: float = 50.0
    min_description_ratio: float = 0.8
    min_license_ratio: float = 0.5
    min_commit_frequency: float = 50.0
    min_collaboration: float = 50.0
    min_active_repos: int = 3

    max_recommendations: int = 10


# ============================================================
# PROFESSIONAL NETWORK
# ============================================================


@dataclass(frozen=True)
class ProfessionalNetworkConfig:
    """Thresholds for the professional-network calculator."""

    experience_years_saturation: float = 5.0
    experience_years_credit: float = 40.0
    position_saturation: int = 3
    position_credit: float = 30.0
    position_description_credit: float = 30.0

    education_any_credit: float = 40.0
    education_advanced_credit: float = 30.0
    education_field_credit: float = 30.0
    advanced_degree_keywords: tuple = ("master", "phd", "mba")

    skill_saturation: int = 10
    skill_credit: float = 50.0
    endorsement_saturation: int = 50
    endorsement_credit: float = 50.0

    connection_saturation: int = 500

    blend_weights: Dict[str, float] = field(default_factory=lambda: {
        "experience": 0.35,
        "education": 0.20,
        "skills": 0.25,
        "network": 0.20,
    })

    min_experience_years: float = 2.0
    min_skills: int = 10
    min_connections: int = 100

    max_recommendations: int = 10


# ============================================================
# LONG-FORM CONTENT
# ============================================================


@dataclass(frozen=True)
class LongFormContentConfig:
    """Thresholds for the long-form-content (blog) calculator."""

    reading_time_saturation: float = 3.0
    reading_time_credit: float = 30.0
    cover_image_credit: float = 20.0
    excerpt_min_length: int = 50
    excerpt_credit: float = 20.0
    volume_saturation: int = 20
    volume_credit: float = 30.0

    days_per_month: int = 30
    posts_per_month_saturation: float = 4.0

    reactions_per_post_saturation: float = 10.0
    reactions_credit: float = 40.0
    comments_per_post_saturation: float = 5.0
    comments_credit: float = 30.0
    follower_saturation: int = 100
    follower_credit: float = 30.0

    tag_saturation: int = 10
    top_tags: int = 5

    blend_weights: Dict[str, float] = field(default_factory=lambda: {
        "content_quality": 0.30,
        "consistency": 0.25,
        "engagement": 0.30,
        "topic_diversity": 0.15,
    })

    min_posts_per_month: float = 2.0
    min_reading_time: float = 3.0
    min_unique_tags: int = 5
    min_cover_ratio: float = 0.8
    min_reactions_per_post: float = 5.0

    max_recommendations: int = 10


# ============================================================
# SHORT-FORM SOCIAL
# ============================================================


TECH_KEYWORDS = (
    "javascript", "typescript", "python", "java", "rust", "golang",
    "react", "vue", "angular", "nodejs", "docker", "kubernetes",
    "aws", "azure", "gcp", "api", "database", "sql", "nosql",
    "mongodb", "postgresql", "redis", "git", "github", "gitlab",
    "cicd", "devops", "agile", "scrum", "machine learning", "ai",
    "ml", "deep learning", "neural network", "frontend", "backend",
    "fullstack", "microservices", "serverless", "programming",
    "coding", "developer", "software", "engineering", "algorithm",
    "data structure", "open source", "code review",
)


@dataclass(frozen=True)
class ShortFormSocialConfig:
    """Thresholds for the short-form-social (Twitter) calculator."""

    avg_likes_saturation: float = 10.0
    likes_credit: float = 40.0
    avg_retweets_saturation: float = 5.0
    retweets_credit: float = 30.0
    engagement_rate_saturation: float = 1.0
    engagement_rate_credit: float = 30.0
    retweet_engagement_multiplier: float = 2.0

    follower_saturation: int = 10000
    follower_credit: float = 40.0
    listed_saturation: int = 100
    listed_credit: float = 30.0
    verified_credit: float = 30.0

    tweets_per_week_saturation: float = 7.0

    # Floor used when there are no original tweets
    inactive_follower_unit: int = 1000
    inactive_influence_per_unit: float = 20.0
    inactive_overall_per_unit: float = 5.0
    inactive_overall_cap: float = 25.0

    keywords: tuple = TECH_KEYWORDS
    top_hashtags: int = 5

    blend_weights: Dict[str, float] = field(default_factory=lambda: {
        "engagement": 0.30,
        "technical_content": 0.25,
        "influence": 0.25,
        "consistency": 0.20,
    })

    min_technical_ratio: float = 0.3
    min_avg_likes: float = 5.0
    min_tweets_per_week: float = 3.0
    min_hashtags: int = 3

    max_recommendations: int = 10


# ============================================================
# MASTER CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class PlatformMetricsConfig:
    """Master configuration for all calculators."""

    code_hosting: CodeHostingConfig = field(default_factory=CodeHostingConfig)
    professional_network: ProfessionalNetworkConfig = field(default_factory=ProfessionalNetworkConfig)
    long_form_content: LongFormContentConfig = field(default_factory=LongFormContentConfig)
    short_form_social: ShortFormSocialConfig = field(default_factory=ShortFormSocialConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return asdict(self)


def get_default_config() -> PlatformMetricsConfig:
    """Get the default calculator configuration."""
    return PlatformMetricsConfig()
