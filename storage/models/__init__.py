"""
Storage Models Package.

============================================================
MODEL ORGANIZATION
============================================================

Candidates (candidates.py)
- Candidate
- PlatformConnectionRecord
- LinkedInManualEntryRecord

Scoring (scoring.py)
- PlatformMetricsCacheEntry
- ScoreSnapshotRecord
- NotificationRecord

============================================================
"""

from storage.models.base import Base, JSONType, TimestampMixin
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


__all__ = [
    "Base",
    "JSONType",
    "TimestampMixin",
    "Candidate",
    "PlatformConnectionRecord",
    "LinkedInManualEntryRecord",
    "PlatformMetricsCacheEntry",
    "ScoreSnapshotRecord",
    "NotificationRecord",
]
