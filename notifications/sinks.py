"""
Notifications - Sinks.

============================================================
PURPOSE
============================================================
Delivery destinations for NotificationEvents.

- LoggingNotificationSink: log line per event
- InMemoryNotificationSink: bounded per-candidate inbox
- RepositoryNotificationSink: durable notifications table
- TelegramNotificationSink: Telegram bot message
- FanOutNotificationSink: several sinks, failures isolated

Every sink drops events whose dedup_key it has already
delivered where it can tell.

============================================================
"""

import logging
import threading
from typing import Callable, Dict, List, Optional, Protocol, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from storage.repositories.notifications import NotificationRepository

from .types import NotificationEvent, StoredNotification


logger = logging.getLogger(__name__)


DEFAULT_HISTORY_LIMIT = 100


# ============================================================
# SINK PROTOCOL
# ============================================================


class NotificationSink(Protocol):
    """Anything that can deliver a notification event."""

    async def publish(self, event: NotificationEvent) -> bool:
        """
        Deliver an event.

        Returns:
            True if delivered (False for skipped duplicates)
        """
        ...


# ============================================================
# LOGGING SINK
# ============================================================


class LoggingNotificationSink:
    """Writes each event to the log."""

    def __init__(self, level: int = logging.INFO):
        self._level = level

    async def publish(self, event: NotificationEvent) -> bool:
        logger.log(
            self._level,
            f"[Notification] {event.candidate_id} {event.event_type.value}: {event.title}",
        )
        return True


# ============================================================
# IN-MEMORY SINK
# ============================================================


class InMemoryNotificationSink:
    """
    Per-candidate inbox held in process memory.

    Newest first, bounded to ``limit`` entries per candidate.
    Lost on restart; use RepositoryNotificationSink for
    durable delivery.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT):
        self._limit = limit
        self._store: Dict[str, List[StoredNotification]] = {}
        self._lock = threading.Lock()

    async def publish(self, event: NotificationEvent) -> bool:
        with self._lock:
            inbox = self._store.setdefault(event.candidate_id, [])
            if any(n.dedup_key == event.dedup_key for n in inbox):
                return False
            inbox.insert(0, StoredNotification(event=event))
            del inbox[self._limit:]
            return True

    def get_notifications(
        self,
        candidate_id: str,
        limit: int = 20,
        unread_only: bool = False,
    ) -> List[StoredNotification]:
        with self._lock:
            inbox = self._store.get(candidate_id, [])
            if unread_only:
                inbox = [n for n in inbox if not n.read]
            return list(inbox[:limit])

    def mark_read(self, candidate_id: str, dedup_key: str) -> bool:
        with self._lock:
            for notification in self._store.get(candidate_id, []):
                if notification.dedup_key == dedup_key:
                    notification.read = True
                    return True
            return False

    def mark_all_read(self, candidate_id: str) -> int:
        with self._lock:
            count = 0
            for notification in self._store.get(candidate_id, []):
                if not notification.read:
                    notification.read = True
                    count += 1
            return count

    def unread_count(self, candidate_id: str) -> int:
        with self._lock:
            return sum(1 for n in self._store.get(candidate_id, []) if not n.read)

    def delete(self, candidate_id: str, dedup_key: str) -> bool:
        with self._lock:
            inbox = self._store.get(candidate_id, [])
            for index, notification in enumerate(inbox):
                if notification.dedup_key == dedup_key:
                    del inbox[index]
                    return True
            return False

    def clear(self, candidate_id: str) -> None:
        with self._lock:
            self._store[candidate_id] = []


# ============================================================
# REPOSITORY SINK
# ============================================================


class RepositoryNotificationSink:
    """Persists events to the notifications table, one transaction each."""

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self._session_factory = session_factory

    async def publish(self, event: NotificationEvent) -> bool:
        async with self._session_factory() as session:
            repository = NotificationRepository(session)
            stored = await repository.add(event.to_dict())
            await session.commit()
            return stored


# ============================================================
# TELEGRAM SINK
# ============================================================


class TelegramNotificationSink:
    """
    Send notifications via Telegram.

    Requires a bot token and chat ID; the bot must be a member
    of the chat.
    """

    def __init__(self, bot_token: str, chat_id: str, timeout: float = 10.0):
        self._bot_token = bot_token
        self._chat_id = chat_id
        self._timeout = timeout

    async def publish(self, event: NotificationEvent) -> bool:
        import httpx

        url = f"https://api.telegram.org/bot{self._bot_token}/sendMessage"
        payload = {
            "chat_id": self._chat_id,
            "text": event.to_telegram_message(),
            "parse_mode": "Markdown",
        }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(url, json=payload, timeout=self._timeout)
        except httpx.HTTPError as e:
            logger.warning(f"[telegram] Send failed for {event.dedup_key}: {e}")
            return False

        if response.status_code != 200:
            logger.warning(f"[telegram] HTTP {response.status_code} for {event.dedup_key}")
            return False
        return True


# ============================================================
# FAN-OUT SINK
# ============================================================


class FanOutNotificationSink:
    """
    Publishes to every wrapped sink.

    One sink failing is logged and does not stop the others.
    """

    def __init__(self, sinks: Optional[Sequence[NotificationSink]] = None):
        self._sinks: List[NotificationSink] = list(sinks or [])

    def add_sink(self, sink: NotificationSink) -> None:
        self._sinks.append(sink)

    @property
    def sinks(self) -> List[NotificationSink]:
        return list(self._sinks)

    async def publish(self, event: NotificationEvent) -> bool:
        delivered = False
        for sink in self._sinks:
            try:
                if await sink.publish(event):
                    delivered = True
            except Exception as e:
                logger.error(
                    f"[Notification] {type(sink).__name__} failed for {event.dedup_key}: {e}",
                    exc_info=True,
                )
        return delivered
