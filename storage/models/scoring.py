"""
Scoring Domain ORM Models.

============================================================
MODELS
============================================================
- PlatformMetricsCacheEntry: latest PlatformMetrics per
  (candidate, platform); replaced wholesale on refresh
- ScoreSnapshotRecord: one CompositeScore; append-only
- NotificationRecord: delivered notification events

============================================================
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from storage.models.base import Base, JSONType, TimestampMixin


class PlatformMetricsCacheEntry(Base, TimestampMixin):
    """Cached calculator output for one platform of one candidate."""

    __tablename__ = "platform_metrics_cache"
    __table_args__ = (
        UniqueConstraint("candidate_id", "platform", name="uq_platform_metrics_cache_candidate_platform"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    candidate_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("candidates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    platform: Mapped[str] = mapped_column(String(20), nullable=False)
    overall_score: Mapped[int] = mapped_column(Integer, nullable=False)
    metrics: Mapped[dict] = mapped_column(JSONType, nullable=False)
    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class ScoreSnapshotRecord(Base):
    """
    Immutable composite score snapshot.

    ============================================================
    DATA LIFECYCLE
    ============================================================
    - Mutability: IMMUTABLE (append-only)
    - Ordering: calculated_at, then id
    - Current score: the most recent row

    ============================================================
    """

    __tablename__ = "score_snapshots"
    __table_args__ = (
        Index("ix_score_snapshots_candidate_calculated", "candidate_id", "calculated_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    candidate_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("candidates.id", ondelete="CASCADE"),
        nullable=False,
    )
    overall: Mapped[int] = mapped_column(Integer, nullable=False)
    payload: Mapped[dict] = mapped_column(JSONType, nullable=False)
    calculated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<ScoreSnapshotRecord(id={self.id}, candidate_id={self.candidate_id}, overall={self.overall})>"


class NotificationRecord(Base, TimestampMixin):
    """A delivered notification, unique by dedup_key."""

    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    candidate_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("candidates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    dedup_key: Mapped[str] = mapped_column(String(300), nullable=False, unique=True)
    event_type: Mapped[str] = mapped_column(String(40), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    payload: Mapped[dict] = mapped_column(JSONType, nullable=False)
    event_created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
