"""
Notification Repository.

Stores NotificationEvent payloads (NotificationEvent.to_dict()
shape). dedup_key is unique: storing the same event twice keeps
one row.
"""

from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import desc, select

from core.clock import ensure_utc
from storage.models.scoring import NotificationRecord
from storage.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[NotificationRecord]):

    def __init__(self, session):
        super().__init__(session, NotificationRecord, "NotificationRepository")

    async def exists(self, dedup_key: str) -> bool:
        stmt = select(NotificationRecord.id).where(NotificationRecord.dedup_key == dedup_key)
        result = await self._execute(stmt, "exists")
        return result.first() is not None

    async def add(self, event: Dict[str, Any]) -> bool:
        """
        Store an event payload.

        Returns:
            False if an event with the same dedup_key is already stored
        """
        if await self.exists(event["dedup_key"]):
            self._logger.debug(f"Skipping duplicate notification {event['dedup_key']}")
            return False

        await self._add(
            NotificationRecord(
                candidate_id=event["candidate_id"],
                dedup_key=event["dedup_key"],
                event_type=event["event_type"],
                title=event["title"],
                message=event["message"],
                payload=dict(event.get("data") or {}),
                event_created_at=ensure_utc(datetime.fromisoformat(event["created_at"])),
                read=False,
            )
        )
        return True

    async def list_for_candidate(
        self,
        candidate_id: str,
        limit: int = 20,
        unread_only: bool = False,
    ) -> List[Dict[str, Any]]:
        """Stored events, newest first, in to_dict() shape plus ``read``."""
        stmt = select(NotificationRecord).where(NotificationRecord.candidate_id == candidate_id)
        if unread_only:
            stmt = stmt.where(NotificationRecord.read.is_(False))
        stmt = stmt.order_by(desc(NotificationRecord.event_created_at), desc(NotificationRecord.id)).limit(limit)

        return [
            {
                "event_type": record.event_type,
                "candidate_id": record.candidate_id,
                "title": record.title,
                "message": record.message,
                "created_at": ensure_utc(record.event_created_at).isoformat(),
                "dedup_key": record.dedup_key,
                "data": dict(record.payload or {}),
                "read": record.read,
            }
            for record in await self._execute_query(stmt, "list_for_candidate")
        ]

    async def mark_read(self, dedup_key: str) -> bool:
        stmt = select(NotificationRecord).where(NotificationRecord.dedup_key == dedup_key)
        record = await self._execute_scalar(stmt, "mark_read")
        if record is None:
            return False
        record.read = True
        await self.session.flush()
        return True
