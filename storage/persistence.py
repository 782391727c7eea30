"""
Storage - SQLAlchemy Persistence.

============================================================
PURPOSE
============================================================
Implements the scoring core's Persistence protocol and the
LinkedIn ManualEntryStore on top of the repositories.

Each call runs in its own session and transaction. Reads
convert ORM rows into scoring_engine types; datetimes are
normalized to UTC (SQLite hands back naive values).

============================================================
ERRORS
============================================================
Repository errors subclass PersistenceError and propagate.
Commit failures are wrapped in TransactionError.

============================================================
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime
from typing import AsyncIterator, Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.clock import ClockProtocol, ensure_utc, get_clock
from core.exceptions import CandidateNotFoundError
from platform_connectors.schemas import LinkedInManualEntry
from platform_metrics.types import Platform, PlatformMetrics
from scoring_engine.types import (
    CachedMetrics,
    CandidateProfile,
    CompositeScore,
    PlatformConnection,
)
from storage.models.candidates import PlatformConnectionRecord
from storage.models.scoring import ScoreSnapshotRecord
from storage.repositories.cache import MetricsCacheRepository
from storage.repositories.candidates import (
    CandidateRepository,
    LinkedInEntryRepository,
    PlatformConnectionRepository,
)
from storage.repositories.exceptions import TransactionError
from storage.repositories.notifications import NotificationRepository
from storage.repositories.snapshots import SnapshotRepository


logger = logging.getLogger(__name__)


def _optional_utc(value: Optional[datetime]) -> Optional[datetime]:
    return ensure_utc(value) if value is not None else None


def _to_connection(record: PlatformConnectionRecord) -> PlatformConnection:
    return PlatformConnection(
        platform=Platform(record.platform),
        username=record.username,
        connected_at=_optional_utc(record.connected_at),
        last_synced_at=_optional_utc(record.last_synced_at),
        last_error=record.last_error,
        last_error_at=_optional_utc(record.last_error_at),
    )


def _to_score(record: ScoreSnapshotRecord) -> CompositeScore:
    payload = dict(record.payload)
    payload["snapshot_id"] = record.id
    payload["candidate_id"] = record.candidate_id
    return CompositeScore.from_dict(payload)


class SqlAlchemyPersistence:
    """Persistence backed by an async SQLAlchemy session factory."""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        clock: Optional[ClockProtocol] = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or get_clock()

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"[Persistence] Transaction failed: {e}", exc_info=True)
                raise TransactionError(
                    repository_name="SqlAlchemyPersistence",
                    operation="transaction",
                    phase="commit",
                    original_error=str(e),
                ) from e
            except BaseException:
                await session.rollback()
                raise

    # ============================================================
    # CANDIDATES
    # ============================================================

    async def get_candidate_profile(self, candidate_id: str) -> Optional[CandidateProfile]:
        async with self._transaction() as session:
            record = await CandidateRepository(session).get(candidate_id)
            if record is None:
                return None
            return CandidateProfile(
                candidate_id=record.id,
                display_name=record.display_name,
                created_at=_optional_utc(record.created_at),
            )

    async def list_candidate_ids(self) -> List[str]:
        async with self._transaction() as session:
            return await CandidateRepository(session).list_ids()

    async def create_candidate(self, candidate_id: str, display_name: Optional[str] = None) -> CandidateProfile:
        async with self._transaction() as session:
            await CandidateRepository(session).create(candidate_id, display_name)
        logger.info(f"[Persistence] Created candidate {candidate_id}")
        return CandidateProfile(candidate_id=candidate_id, display_name=display_name)

    async def delete_candidate(self, candidate_id: str) -> bool:
        """Delete a candidate with connections, cache, snapshots and notifications."""
        async with self._transaction() as session:
            return await CandidateRepository(session).delete(candidate_id)

    # ============================================================
    # CONNECTIONS
    # ============================================================

    async def list_connections(self, candidate_id: str) -> List[PlatformConnection]:
        async with self._transaction() as session:
            records = await PlatformConnectionRepository(session).list_for_candidate(candidate_id)
            return [_to_connection(r) for r in records]

    async def connect_platform(
        self,
        candidate_id: str,
        platform: Platform,
        username: str,
    ) -> PlatformConnection:
        """
        Raises:
            CandidateNotFoundError: Unknown candidate
        """
        async with self._transaction() as session:
            if await CandidateRepository(session).get(candidate_id) is None:
                raise CandidateNotFoundError(candidate_id)
            record = await PlatformConnectionRepository(session).upsert(
                candidate_id, platform.value, username, self._clock.now()
            )
            return _to_connection(record)

    async def disconnect_platform(self, candidate_id: str, platform: Platform) -> bool:
        async with self._transaction() as session:
            return await PlatformConnectionRepository(session).remove(candidate_id, platform.value)

    async def record_fetch_failure(
        self,
        candidate_id: str,
        platform: Platform,
        error: str,
        failed_at: datetime,
    ) -> None:
        async with self._transaction() as session:
            await PlatformConnectionRepository(session).mark_failed(
                candidate_id, platform.value, error, failed_at
            )

    # ============================================================
    # METRICS CACHE
    # ============================================================

    async def get_cached_metrics(self, candidate_id: str, platform: Platform) -> Optional[CachedMetrics]:
        async with self._transaction() as session:
            entry = await MetricsCacheRepository(session).get(candidate_id, platform.value)
            if entry is None:
                return None
            return CachedMetrics(
                metrics=PlatformMetrics.from_dict(entry.metrics),
                fetched_at=ensure_utc(entry.fetched_at),
                expires_at=ensure_utc(entry.expires_at),
            )

    async def store_cached_metrics(
        self,
        candidate_id: str,
        metrics: PlatformMetrics,
        fetched_at: datetime,
        expires_at: datetime,
    ) -> None:
        """Replace the cache entry and mark the connection synced, atomically."""
        async with self._transaction() as session:
            await MetricsCacheRepository(session).replace(
                candidate_id,
                metrics.platform.value,
                metrics.to_dict(),
                metrics.overall_score,
                fetched_at,
                expires_at,
            )
            await PlatformConnectionRepository(session).mark_synced(
                candidate_id, metrics.platform.value, fetched_at
            )

    async def purge_expired_metrics(self) -> int:
        async with self._transaction() as session:
            return await MetricsCacheRepository(session).purge_expired(self._clock.now())

    # ============================================================
    # SNAPSHOTS
    # ============================================================

    async def get_latest_snapshot(self, candidate_id: str) -> Optional[CompositeScore]:
        async with self._transaction() as session:
            record = await SnapshotRepository(session).latest(candidate_id)
            return _to_score(record) if record is not None else None

    async def append_snapshot(self, candidate_id: str, score: CompositeScore) -> CompositeScore:
        async with self._transaction() as session:
            record = await SnapshotRepository(session).append(
                candidate_id,
                score.overall,
                score.to_dict(),
                score.calculated_at,
            )
            snapshot_id = record.id
        return replace(score, snapshot_id=snapshot_id, candidate_id=candidate_id)

    async def get_score_history(self, candidate_id: str, limit: int = 10) -> List[CompositeScore]:
        async with self._transaction() as session:
            records = await SnapshotRepository(session).history(candidate_id, limit)
            return [_to_score(r) for r in records]

    # ============================================================
    # LINKEDIN MANUAL ENTRIES
    # ============================================================

    async def submit_linkedin_entry(self, candidate_id: str, entry: LinkedInManualEntry) -> str:
        """
        Store a LinkedIn submission and connect the platform.

        Returns:
            The LinkedIn username extracted from the profile URL

        Raises:
            CandidateNotFoundError: Unknown candidate
        """
        username = entry.username
        now = self._clock.now()
        async with self._transaction() as session:
            if await CandidateRepository(session).get(candidate_id) is None:
                raise CandidateNotFoundError(candidate_id)
            await LinkedInEntryRepository(session).save(
                candidate_id, username, entry.model_dump(mode="json"), now
            )
            await PlatformConnectionRepository(session).upsert(
                candidate_id, Platform.LINKEDIN.value, username, now
            )
        logger.info(f"[Persistence] Stored LinkedIn entry for {candidate_id} ({username})")
        return username

    async def get_manual_entry(self, platform: Platform, candidate_id: str, username: str) -> Optional[dict]:
        """The candidate's own submission, if it is for ``username``."""
        if platform != Platform.LINKEDIN:
            return None
        async with self._transaction() as session:
            record = await LinkedInEntryRepository(session).get_for_candidate(candidate_id)
            if record is None or record.username != username:
                return None
            return dict(record.payload)

    # ============================================================
    # NOTIFICATIONS
    # ============================================================

    async def list_notifications(self, candidate_id: str, limit: int = 20, unread_only: bool = False) -> List[dict]:
        async with self._transaction() as session:
            return await NotificationRepository(session).list_for_candidate(candidate_id, limit, unread_only)
