"""
Platform Connectors.

Fetch raw data from external platforms and decode it into the
typed PlatformData variants consumed by platform_metrics.
"""

from .base import BasePlatformConnector
from .blogs import DevToConnector, HashnodeConnector, MediumConnector
from .cache import CachePolicy
from .exceptions import (
    AuthenticationError,
    ConnectorError,
    FetchError,
    ManualEntryMissingError,
    ProfileNotFoundError,
    RateLimitError,
)
from .github import GitHubConnector, contribution_streaks
from .linkedin import LinkedInManualConnector, ManualEntryStore, to_linkedin_data
from .registry import ConnectorRegistry, build_default_registry
from .schemas import (
    CertificationEntry,
    EducationEntry,
    ExperienceEntry,
    LinkedInManualEntry,
    SkillEntry,
    extract_linkedin_username,
)
from .twitter import TwitterConnector


__all__ = [
    "BasePlatformConnector",
    "GitHubConnector",
    "TwitterConnector",
    "DevToConnector",
    "HashnodeConnector",
    "MediumConnector",
    "LinkedInManualConnector",
    "ManualEntryStore",
    "to_linkedin_data",
    "contribution_streaks",
    "CachePolicy",
    "ConnectorRegistry",
    "build_default_registry",
    "LinkedInManualEntry",
    "ExperienceEntry",
    "EducationEntry",
    "SkillEntry",
    "CertificationEntry",
    "extract_linkedin_username",
    "ConnectorError",
    "FetchError",
    "RateLimitError",
    "AuthenticationError",
    "ProfileNotFoundError",
    "ManualEntryMissingError",
]

__version__ = "1.0.0"
