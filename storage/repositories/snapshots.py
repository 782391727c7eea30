"""
Score Snapshot Repository.

============================================================
APPEND-ONLY
============================================================
Snapshots are inserted, never updated. A mapper-level
before_update hook rejects any attempt to modify a loaded
snapshot with ImmutableRecordError.

Ordering is calculated_at descending, ties broken by id, so
the last insert is the current score.

============================================================
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import desc, event, func, select

from storage.models.scoring import ScoreSnapshotRecord
from storage.repositories.base import BaseRepository
from storage.repositories.exceptions import ImmutableRecordError


@event.listens_for(ScoreSnapshotRecord, "before_update")
def _reject_snapshot_update(mapper, connection, target: ScoreSnapshotRecord) -> None:
    raise ImmutableRecordError(
        repository_name="SnapshotRepository",
        record_id=target.id,
        attempted_operation="update",
    )


class SnapshotRepository(BaseRepository[ScoreSnapshotRecord]):

    def __init__(self, session):
        super().__init__(session, ScoreSnapshotRecord, "SnapshotRepository")

    async def append(
        self,
        candidate_id: str,
        overall: int,
        payload: dict,
        calculated_at: datetime,
    ) -> ScoreSnapshotRecord:
        return await self._add(
            ScoreSnapshotRecord(
                candidate_id=candidate_id,
                overall=overall,
                payload=payload,
                calculated_at=calculated_at,
            )
        )

    async def latest(self, candidate_id: str) -> Optional[ScoreSnapshotRecord]:
        stmt = (
            select(ScoreSnapshotRecord)
            .where(ScoreSnapshotRecord.candidate_id == candidate_id)
            .order_by(desc(ScoreSnapshotRecord.calculated_at), desc(ScoreSnapshotRecord.id))
            .limit(1)
        )
        return await self._execute_scalar(stmt, "latest")

    async def history(self, candidate_id: str, limit: int = 10) -> List[ScoreSnapshotRecord]:
        """Most recent first."""
        stmt = (
            select(ScoreSnapshotRecord)
            .where(ScoreSnapshotRecord.candidate_id == candidate_id)
            .order_by(desc(ScoreSnapshotRecord.calculated_at), desc(ScoreSnapshotRecord.id))
            .limit(limit)
        )
        return await self._execute_query(stmt, "history")

    async def count(self, candidate_id: str) -> int:
        stmt = select(func.count()).select_from(ScoreSnapshotRecord).where(
            ScoreSnapshotRecord.candidate_id == candidate_id
        )
        result = await self._execute(stmt, "count")
        return result.scalar() or 0
