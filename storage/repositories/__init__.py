"""
Storage Repositories Package.

Session-injected data access. Repositories flush; callers
commit.
"""

from storage.repositories.base import BaseRepository
from storage.repositories.cache import MetricsCacheRepository
from storage.repositories.candidates import (
    CandidateRepository,
    LinkedInEntryRepository,
    PlatformConnectionRepository,
)
from storage.repositories.exceptions import (
    ConnectionError,
    DuplicateRecordError,
    ImmutableRecordError,
    IntegrityError,
    QueryError,
    RepositoryException,
    TransactionError,
)
from storage.repositories.notifications import NotificationRepository
from storage.repositories.snapshots import SnapshotRepository


__all__ = [
    "BaseRepository",
    "CandidateRepository",
    "PlatformConnectionRepository",
    "LinkedInEntryRepository",
    "MetricsCacheRepository",
    "SnapshotRepository",
    "NotificationRepository",
    "RepositoryException",
    "DuplicateRecordError",
    "IntegrityError",
    "ConnectionError",
    "QueryError",
    "TransactionError",
    "ImmutableRecordError",
]
