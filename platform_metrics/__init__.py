"""
Platform Metrics Package.

============================================================
PURPOSE
============================================================
Normalizes heterogeneous per-platform data into comparable
0-100 sub-scores, an overall per-platform score, a breakdown
of raw statistics and remediation recommendations.

============================================================
USAGE
============================================================
    from platform_metrics import (
        GitHubData, GitHubProfile, calculate_platform_metrics,
    )

    metrics = calculate_platform_metrics(
        GitHubData(profile=GitHubProfile(username="octocat"), activity=repos)
    )
    print(metrics.overall_score, metrics.recommendations)

============================================================
"""

from .types import (
    PlatformFamily,
    Platform,
    GitHubProfile,
    GitHubRepository,
    GitHubContributionStats,
    LinkedInProfile,
    LinkedInPosition,
    LinkedInEducation,
    LinkedInSkill,
    LinkedInCertification,
    TwitterProfile,
    Tweet,
    BlogProfile,
    BlogPost,
    GitHubData,
    LinkedInData,
    TwitterData,
    BlogData,
    PlatformData,
    PlatformMetrics,
)
from .config import (
    CodeHostingConfig,
    ProfessionalNetworkConfig,
    LongFormContentConfig,
    ShortFormSocialConfig,
    PlatformMetricsConfig,
    TECH_KEYWORDS,
    get_default_config,
)
from .calculators import (
    BasePlatformCalculator,
    CodeHostingCalculator,
    ProfessionalNetworkCalculator,
    LongFormContentCalculator,
    ShortFormSocialCalculator,
    calculate_platform_metrics,
    round_half_up,
)


__all__ = [
    # Types
    "PlatformFamily",
    "Platform",
    "GitHubProfile",
    "GitHubRepository",
    "GitHubContributionStats",
    "LinkedInProfile",
    "LinkedInPosition",
    "LinkedInEducation",
    "LinkedInSkill",
    "LinkedInCertification",
    "TwitterProfile",
    "Tweet",
    "BlogProfile",
    "BlogPost",
    "GitHubData",
    "LinkedInData",
    "TwitterData",
    "BlogData",
    "PlatformData",
    "PlatformMetrics",
    # Config
    "CodeHostingConfig",
    "ProfessionalNetworkConfig",
    "LongFormContentConfig",
    "ShortFormSocialConfig",
    "PlatformMetricsConfig",
    "TECH_KEYWORDS",
    "get_default_config",
    # Calculators
    "BasePlatformCalculator",
    "CodeHostingCalculator",
    "ProfessionalNetworkCalculator",
    "LongFormContentCalculator",
    "ShortFormSocialCalculator",
    "calculate_platform_metrics",
    "round_half_up",
]

__version__ = "1.0.0"
