"""
Platform Metrics Cache Repository.

One row per (candidate, platform). A refresh replaces the row
wholesale; nothing is merged.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select

from storage.models.scoring import PlatformMetricsCacheEntry
from storage.repositories.base import BaseRepository


class MetricsCacheRepository(BaseRepository[PlatformMetricsCacheEntry]):

    def __init__(self, session):
        super().__init__(session, PlatformMetricsCacheEntry, "MetricsCacheRepository")

    async def get(self, candidate_id: str, platform: str) -> Optional[PlatformMetricsCacheEntry]:
        stmt = select(PlatformMetricsCacheEntry).where(
            PlatformMetricsCacheEntry.candidate_id == candidate_id,
            PlatformMetricsCacheEntry.platform == platform,
        )
        return await self._execute_scalar(stmt, "get")

    async def replace(
        self,
        candidate_id: str,
        platform: str,
        metrics: dict,
        overall_score: int,
        fetched_at: datetime,
        expires_at: datetime,
    ) -> PlatformMetricsCacheEntry:
        await self._execute(
            delete(PlatformMetricsCacheEntry).where(
                PlatformMetricsCacheEntry.candidate_id == candidate_id,
                PlatformMetricsCacheEntry.platform == platform,
            ),
            "replace",
        )
        return await self._add(
            PlatformMetricsCacheEntry(
                candidate_id=candidate_id,
                platform=platform,
                overall_score=overall_score,
                metrics=metrics,
                fetched_at=fetched_at,
                expires_at=expires_at,
            )
        )

    async def purge_expired(self, now: datetime) -> int:
        """Delete entries whose expiry has passed."""
        result = await self._execute(
            delete(PlatformMetricsCacheEntry).where(PlatformMetricsCacheEntry.expires_at <= now),
            "purge_expired",
        )
        count = result.rowcount or 0
        if count:
            self._logger.info(f"Purged {count} expired cache entries")
        return count
