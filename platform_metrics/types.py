"""
Platform Metrics - Type Definitions.

============================================================
PURPOSE
============================================================
Data contracts for per-platform metric calculation.

Raw platform payloads are decoded ONCE at the connector boundary
into the typed variants below. Calculators, the aggregator and the
scoring engine never re-parse JSON.

============================================================
DESIGN PRINCIPLES
============================================================
- All types are immutable
- One tagged variant per platform (GitHubData, LinkedInData, ...)
- Profiles are replaced wholesale on refresh, never merged
- Numeric fields may be None on sparse payloads; calculators
  treat None as 0

============================================================
PLATFORM FAMILIES
============================================================
1. CODE_HOSTING - GitHub
2. PROFESSIONAL_NETWORK - LinkedIn (manual entry)
3. LONG_FORM_CONTENT - Dev.to, Hashnode, Medium
4. SHORT_FORM_SOCIAL - Twitter

============================================================
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union


# ============================================================
# ENUMS
# ============================================================


class PlatformFamily(str, Enum):
    """
    Metric categories combined by the scoring engine.

    Declaration order is the order families are reported in
    (recommendation priority, missing-platform listing).
    """

    CODE_HOSTING = "code_hosting"
    PROFESSIONAL_NETWORK = "professional_network"
    LONG_FORM_CONTENT = "long_form_content"
    SHORT_FORM_SOCIAL = "short_form_social"

    @classmethod
    def all_families(cls) -> List["PlatformFamily"]:
        """Return all families in reporting order."""
        return [
            cls.CODE_HOSTING,
            cls.PROFESSIONAL_NETWORK,
            cls.LONG_FORM_CONTENT,
            cls.SHORT_FORM_SOCIAL,
        ]

    @property
    def label(self) -> str:
        """User-facing name used in recommendations."""
        return _FAMILY_LABELS[self]


_FAMILY_LABELS = {
    PlatformFamily.CODE_HOSTING: "github",
    PlatformFamily.PROFESSIONAL_NETWORK: "linkedin",
    PlatformFamily.LONG_FORM_CONTENT: "blog",
    PlatformFamily.SHORT_FORM_SOCIAL: "twitter",
}


class Platform(str, Enum):
    """Concrete services a candidate can connect."""

    GITHUB = "github"
    LINKEDIN = "linkedin"
    TWITTER = "twitter"
    DEVTO = "devto"
    HASHNODE = "hashnode"
    MEDIUM = "medium"

    @property
    def family(self) -> PlatformFamily:
        return _PLATFORM_FAMILIES[self]

    @property
    def is_blog(self) -> bool:
        return self.family == PlatformFamily.LONG_FORM_CONTENT

    @property
    def display_name(self) -> str:
        return _PLATFORM_DISPLAY_NAMES[self]

    @classmethod
    def blog_platforms(cls) -> List["Platform"]:
        return [cls.DEVTO, cls.HASHNODE, cls.MEDIUM]


_PLATFORM_FAMILIES = {
    Platform.GITHUB: PlatformFamily.CODE_HOSTING,
    Platform.LINKEDIN: PlatformFamily.PROFESSIONAL_NETWORK,
    Platform.TWITTER: PlatformFamily.SHORT_FORM_SOCIAL,
    Platform.DEVTO: PlatformFamily.LONG_FORM_CONTENT,
    Platform.HASHNODE: PlatformFamily.LONG_FORM_CONTENT,
    Platform.MEDIUM: PlatformFamily.LONG_FORM_CONTENT,
}

_PLATFORM_DISPLAY_NAMES = {
    Platform.GITHUB: "GitHub",
    Platform.LINKEDIN: "LinkedIn",
    Platform.TWITTER: "Twitter",
    Platform.DEVTO: "Dev.to",
    Platform.HASHNODE: "Hashnode",
    Platform.MEDIUM: "Medium",
}


# ============================================================
# CODE HOSTING (GITHUB)
# ============================================================


@dataclass(frozen=True)
class GitHubContributionStats:
    """Yearly contribution counters (GraphQL contributionsCollection)."""

    total_commits: Optional[int] = 0
    total_prs: Optional[int] = 0
    total_issues: Optional[int] = 0
    total_reviews: Optional[int] = 0
    contributions_by_day: Dict[str, int] = field(default_factory=dict)
    current_streak: int = 0
    longest_streak: int = 0


@dataclass(frozen=True)
class GitHubProfile:
    """Static attributes of a GitHub account."""

    username: str
    name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    url: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    followers: Optional[int] = 0
    following: Optional[int] = 0
    public_repos: Optional[int] = 0
    created_at: Optional[datetime] = None
    contributions: GitHubContributionStats = field(default_factory=GitHubContributionStats)


@dataclass(frozen=True)
class GitHubRepository:
    """One repository. Forks are kept here and filtered by the calculator."""

    name: str
    description: Optional[str] = None
    url: Optional[str] = None
    language: Optional[str] = None
    languages: Dict[str, int] = field(default_factory=dict)
    stars: Optional[int] = 0
    forks: Optional[int] = 0
    watchers: Optional[int] = 0
    open_issues: Optional[int] = 0
    is_fork: bool = False
    topics: List[str] = field(default_factory=list)
    license: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    pushed_at: Optional[datetime] = None


# ============================================================
# PROFESSIONAL NETWORK (LINKEDIN)
# ============================================================


@dataclass(frozen=True)
class LinkedInPosition:
    """A work experience entry. ``end`` is None for the current position."""

    title: str
    company: str
    start: date
    end: Optional[date] = None
    description: Optional[str] = None
    location: Optional[str] = None


@dataclass(frozen=True)
class LinkedInEducation:
    school: str
    degree: Optional[str] = None
    field_of_study: Optional[str] = None
    start_year: Optional[int] = None
    end_year: Optional[int] = None


@dataclass(frozen=True)
class LinkedInSkill:
    name: str
    endorsements: Optional[int] = 0


@dataclass(frozen=True)
class LinkedInCertification:
    name: str
    authority: Optional[str] = None
    issued: Optional[date] = None


@dataclass(frozen=True)
class LinkedInProfile:
    """Manually submitted LinkedIn profile."""

    username: str
    profile_url: Optional[str] = None
    headline: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    connections: Optional[int] = 0
    education: List[LinkedInEducation] = field(default_factory=list)
    skills: List[LinkedInSkill] = field(default_factory=list)
    certifications: List[LinkedInCertification] = field(default_factory=list)


# ============================================================
# SHORT-FORM SOCIAL (TWITTER)
# ============================================================


@dataclass(frozen=True)
class TwitterProfile:
    username: str
    name: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    followers: Optional[int] = 0
    following: Optional[int] = 0
    tweet_count: Optional[int] = 0
    listed_count: Optional[int] = 0
    verified: bool = False
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Tweet:
    id: str
    text: str
    created_at: Optional[datetime] = None
    likes: Optional[int] = 0
    retweets: Optional[int] = 0
    replies: Optional[int] = 0
    quotes: Optional[int] = 0
    is_retweet: bool = False
    hashtags: List[str] = field(default_factory=list)


# ============================================================
# LONG-FORM CONTENT (BLOGS)
# ============================================================


@dataclass(frozen=True)
class BlogProfile:
    platform: Platform
    username: str
    name: Optional[str] = None
    bio: Optional[str] = None
    followers: Optional[int] = 0


@dataclass(frozen=True)
class BlogPost:
    title: str
    url: Optional[str] = None
    published_at: Optional[datetime] = None
    reading_time_minutes: Optional[float] = 0
    reactions: Optional[int] = 0
    comments: Optional[int] = 0
    tags: List[str] = field(default_factory=list)
    cover_image: Optional[str] = None
    excerpt: Optional[str] = None


# ============================================================
# TAGGED PLATFORM DATA VARIANTS
# ============================================================


@dataclass(frozen=True)
class GitHubData:
    profile: GitHubProfile
    activity: List[GitHubRepository] = field(default_factory=list)
    platform: Platform = Platform.GITHUB


@dataclass(frozen=True)
class LinkedInData:
    profile: LinkedInProfile
    activity: List[LinkedInPosition] = field(default_factory=list)
    platform: Platform = Platform.LINKEDIN


@dataclass(frozen=True)
class TwitterData:
    profile: TwitterProfile
    activity: List[Tweet] = field(default_factory=list)
    platform: Platform = Platform.TWITTER


@dataclass(frozen=True)
class BlogData:
    """Blog variant. ``platform`` is the concrete provider."""

    profile: BlogProfile
    activity: List[BlogPost] = field(default_factory=list)
    platform: Platform = Platform.DEVTO


PlatformData = Union[GitHubData, LinkedInData, TwitterData, BlogData]


# ============================================================
# CALCULATOR OUTPUT
# ============================================================


@dataclass(frozen=True)
class PlatformMetrics:
    """
    Derived metrics for one platform.

    ============================================================
    FIELDS
    ============================================================
    - sub_scores: named sub-dimensions, each in [0, 100]
    - overall_score: fixed weighted blend of sub_scores, [0, 100]
    - breakdown: raw statistics (counts, top tags, ...)
    - recommendations: remediation strings, in rule order

    ============================================================
    """

    platform: Platform
    overall_score: int
    sub_scores: Dict[str, int] = field(default_factory=dict)
    breakdown: Dict[str, Any] = field(default_factory=dict)
    recommendations: List[str] = field(default_factory=list)

    @property
    def family(self) -> PlatformFamily:
        return self.platform.family

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization (cache storage)."""
        return {
            "platform": self.platform.value,
            "overall_score": self.overall_score,
            "sub_scores": dict(self.sub_scores),
            "breakdown": dict(self.breakdown),
            "recommendations": list(self.recommendations),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlatformMetrics":
        """Rebuild from to_dict() output."""
        return cls(
            platform=Platform(data["platform"]),
            overall_score=int(data.get("overall_score") or 0),
            sub_scores={k: int(v) for k, v in (data.get("sub_scores") or {}).items()},
            breakdown=dict(data.get("breakdown") or {}),
            recommendations=list(data.get("recommendations") or []),
        )
