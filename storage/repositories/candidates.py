"""
Candidate Repositories.

- CandidateRepository: candidate rows, cascading delete
- PlatformConnectionRepository: connected platforms and their
  last sync outcome
- LinkedInEntryRepository: submitted LinkedIn profile data
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, select

from storage.models.candidates import (
    Candidate,
    LinkedInManualEntryRecord,
    PlatformConnectionRecord,
)
from storage.models.scoring import (
    NotificationRecord,
    PlatformMetricsCacheEntry,
    ScoreSnapshotRecord,
)
from storage.repositories.base import BaseRepository


class CandidateRepository(BaseRepository[Candidate]):

    def __init__(self, session):
        super().__init__(session, Candidate, "CandidateRepository")

    async def get(self, candidate_id: str) -> Optional[Candidate]:
        return await self._get_by_id(candidate_id)

    async def create(self, candidate_id: str, display_name: Optional[str] = None) -> Candidate:
        return await self._add(
            Candidate(id=candidate_id, display_name=display_name),
            key={"field": "candidate_id", "value": candidate_id},
        )

    async def list_ids(self) -> List[str]:
        result = await self._execute(select(Candidate.id).order_by(Candidate.id), "list_ids")
        return list(result.scalars().all())

    async def delete(self, candidate_id: str) -> bool:
        """
        Delete a candidate and everything derived from it.

        Dependent rows are removed explicitly so the cascade does
        not depend on the backend enforcing foreign keys.
        """
        for model in (
            NotificationRecord,
            ScoreSnapshotRecord,
            PlatformMetricsCacheEntry,
            LinkedInManualEntryRecord,
            PlatformConnectionRecord,
        ):
            await self._execute(delete(model).where(model.candidate_id == candidate_id), "delete_cascade")

        result = await self._execute(delete(Candidate).where(Candidate.id == candidate_id), "delete")
        deleted = (result.rowcount or 0) > 0
        if deleted:
            self._logger.info(f"Deleted candidate {candidate_id} with all dependent records")
        return deleted


class PlatformConnectionRepository(BaseRepository[PlatformConnectionRecord]):

    def __init__(self, session):
        super().__init__(session, PlatformConnectionRecord, "PlatformConnectionRepository")

    async def list_for_candidate(self, candidate_id: str) -> List[PlatformConnectionRecord]:
        stmt = (
            select(PlatformConnectionRecord)
            .where(PlatformConnectionRecord.candidate_id == candidate_id)
            .order_by(PlatformConnectionRecord.id)
        )
        return await self._execute_query(stmt, "list_for_candidate")

    async def get(self, candidate_id: str, platform: str) -> Optional[PlatformConnectionRecord]:
        stmt = select(PlatformConnectionRecord).where(
            PlatformConnectionRecord.candidate_id == candidate_id,
            PlatformConnectionRecord.platform == platform,
        )
        return await self._execute_scalar(stmt, "get")

    async def upsert(
        self,
        candidate_id: str,
        platform: str,
        username: str,
        connected_at: datetime,
    ) -> PlatformConnectionRecord:
        """Connect a platform, or switch the username of an existing connection."""
        record = await self.get(candidate_id, platform)
        if record is None:
            return await self._add(
                PlatformConnectionRecord(
                    candidate_id=candidate_id,
                    platform=platform,
                    username=username,
                    connected_at=connected_at,
                )
            )

        if record.username != username:
            record.username = username
            record.last_synced_at = None
            record.last_error = None
            record.last_error_at = None
        record.connected_at = connected_at
        await self.session.flush()
        return record

    async def mark_synced(self, candidate_id: str, platform: str, synced_at: datetime) -> None:
        record = await self.get(candidate_id, platform)
        if record is None:
            return
        record.last_synced_at = synced_at
        record.last_error = None
        record.last_error_at = None
        await self.session.flush()

    async def mark_failed(self, candidate_id: str, platform: str, error: str, failed_at: datetime) -> None:
        record = await self.get(candidate_id, platform)
        if record is None:
            return
        record.last_error = error[:2000]
        record.last_error_at = failed_at
        await self.session.flush()

    async def remove(self, candidate_id: str, platform: str) -> bool:
        stmt = delete(PlatformConnectionRecord).where(
            PlatformConnectionRecord.candidate_id == candidate_id,
            PlatformConnectionRecord.platform == platform,
        )
        result = await self._execute(stmt, "remove")
        return (result.rowcount or 0) > 0


class LinkedInEntryRepository(BaseRepository[LinkedInManualEntryRecord]):
    """One submission per candidate; usernames may repeat across candidates."""

    def __init__(self, session):
        super().__init__(session, LinkedInManualEntryRecord, "LinkedInEntryRepository")

    async def get_for_candidate(self, candidate_id: str) -> Optional[LinkedInManualEntryRecord]:
        stmt = select(LinkedInManualEntryRecord).where(
            LinkedInManualEntryRecord.candidate_id == candidate_id
        )
        return await self._execute_scalar(stmt, "get_for_candidate")

    async def save(
        self,
        candidate_id: str,
        username: str,
        payload: dict,
        submitted_at: datetime,
    ) -> LinkedInManualEntryRecord:
        """Store a submission, replacing the candidate's earlier one."""
        record = await self.get_for_candidate(candidate_id)
        if record is None:
            return await self._add(
                LinkedInManualEntryRecord(
                    candidate_id=candidate_id,
                    username=username,
                    payload=payload,
                    submitted_at=submitted_at,
                ),
                key={"field": "candidate_id", "value": candidate_id},
            )
        record.username = username
        record.payload = payload
        record.submitted_at = submitted_at
        await self.session.flush()
        return record
