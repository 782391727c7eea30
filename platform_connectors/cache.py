"""
Platform metrics cache policy.

Entries live for a fixed time-to-live per platform; an expired
entry is treated exactly like an absent one.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Optional

from core.clock import ensure_utc
from core.settings import Settings
from platform_metrics.types import Platform


DEFAULT_TTL = timedelta(hours=24)
LINKEDIN_TTL = timedelta(days=7)


@dataclass(frozen=True)
class CachePolicy:
    """Time-to-live per platform."""

    default_ttl: timedelta = DEFAULT_TTL
    overrides: Dict[Platform, timedelta] = field(
        default_factory=lambda: {Platform.LINKEDIN: LINKEDIN_TTL}
    )

    def ttl_for(self, platform: Platform) -> timedelta:
        return self.overrides.get(platform, self.default_ttl)

    def expires_at(self, platform: Platform, fetched_at: datetime) -> datetime:
        return ensure_utc(fetched_at) + self.ttl_for(platform)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "CachePolicy":
        settings = settings or Settings()
        return cls(
            default_ttl=timedelta(hours=settings.cache_ttl_hours),
            overrides={Platform.LINKEDIN: timedelta(days=settings.linkedin_cache_ttl_days)},
        )
