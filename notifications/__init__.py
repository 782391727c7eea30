"""
Notifications Package.

Turns score changes into candidate-facing events and delivers
them through pluggable sinks.
"""

from .change_detection import (
    affected_families,
    data_refreshed_event,
    diff_scores,
    initial_score_event,
    new_recommendations,
    new_recommendations_event,
    platform_connected_event,
    score_change_event,
)
from .score_updates import DEFAULT_STALE_AFTER, ScoreUpdateService, SweepSummary
from .sinks import (
    FanOutNotificationSink,
    InMemoryNotificationSink,
    LoggingNotificationSink,
    NotificationSink,
    RepositoryNotificationSink,
    TelegramNotificationSink,
)
from .types import ChangeSummary, NotificationEvent, NotificationType, StoredNotification


__all__ = [
    "NotificationType",
    "NotificationEvent",
    "StoredNotification",
    "ChangeSummary",
    "diff_scores",
    "score_change_event",
    "new_recommendations_event",
    "new_recommendations",
    "affected_families",
    "initial_score_event",
    "platform_connected_event",
    "data_refreshed_event",
    "NotificationSink",
    "LoggingNotificationSink",
    "InMemoryNotificationSink",
    "RepositoryNotificationSink",
    "TelegramNotificationSink",
    "FanOutNotificationSink",
    "ScoreUpdateService",
    "SweepSummary",
    "DEFAULT_STALE_AFTER",
]

__version__ = "1.0.0"
