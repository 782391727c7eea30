"""
Notifications - Type Definitions.

============================================================
EVENT TYPES
============================================================
- SCORE_UPDATE: first score for a candidate
- SCORE_IMPROVEMENT / SCORE_DECLINE: overall score changed
- PLATFORM_CONNECTED: a platform was linked
- PLATFORM_DATA_REFRESHED: platforms were re-fetched
- NEW_RECOMMENDATION: recommendations not seen before

Events are values. Building the same event twice from the same
inputs yields equal objects with the same dedup_key, so
delivery layers can drop repeats.

============================================================
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from core.clock import ensure_utc


class NotificationType(str, Enum):
    SCORE_UPDATE = "score_update"
    SCORE_IMPROVEMENT = "score_improvement"
    SCORE_DECLINE = "score_decline"
    PLATFORM_CONNECTED = "platform_connected"
    PLATFORM_DATA_REFRESHED = "platform_data_refreshed"
    NEW_RECOMMENDATION = "new_recommendation"

    @property
    def is_score_change(self) -> bool:
        return self in (NotificationType.SCORE_IMPROVEMENT, NotificationType.SCORE_DECLINE)


@dataclass(frozen=True)
class NotificationEvent:
    """
    A candidate-facing notification.

    data holds the type-specific payload, e.g. for score changes:
    previous_score, current_score, change_amount,
    affected_families and the top recommendations.
    """

    event_type: NotificationType
    candidate_id: str
    title: str
    message: str
    created_at: datetime
    dedup_key: str
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def recommendations(self) -> List[str]:
        return list(self.data.get("recommendations") or [])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "event_type": self.event_type.value,
            "candidate_id": self.candidate_id,
            "title": self.title,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
            "dedup_key": self.dedup_key,
            "data": dict(self.data),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NotificationEvent":
        return cls(
            event_type=NotificationType(data["event_type"]),
            candidate_id=data["candidate_id"],
            title=data["title"],
            message=data["message"],
            created_at=ensure_utc(datetime.fromisoformat(data["created_at"])),
            dedup_key=data["dedup_key"],
            data=dict(data.get("data") or {}),
        )

    def to_telegram_message(self) -> str:
        """Format for Telegram (Markdown)."""
        lines = [
            f"*{self.title}*",
            "",
            self.message,
            "",
            f"*Candidate:* {self.candidate_id}",
            f"*Time:* {self.created_at.strftime('%Y-%m-%d %H:%M:%S UTC')}",
        ]
        recommendations = self.recommendations
        if recommendations:
            lines.append("")
            lines.append("*Recommendations:*")
            lines.extend(f"  - {r}" for r in recommendations)
        return "\n".join(lines)


@dataclass
class StoredNotification:
    """An event as held by a store, with its read flag."""

    event: NotificationEvent
    read: bool = False

    @property
    def dedup_key(self) -> str:
        return self.event.dedup_key

    def to_dict(self) -> Dict[str, Any]:
        data = self.event.to_dict()
        data["read"] = self.read
        return data


@dataclass(frozen=True)
class ChangeSummary:
    """Outcome of diffing two scores."""

    score_event: Optional[NotificationEvent] = None
    recommendation_event: Optional[NotificationEvent] = None

    @property
    def events(self) -> List[NotificationEvent]:
        return [e for e in (self.score_event, self.recommendation_event) if e is not None]

    @property
    def is_empty(self) -> bool:
        return not self.events
