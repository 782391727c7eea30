"""
Candidate Domain ORM Models.

============================================================
MODELS
============================================================
- Candidate: the scored person
- PlatformConnectionRecord: a platform the candidate linked,
  with the outcome of the last fetch
- LinkedInManualEntryRecord: submitted LinkedIn profile data

Deleting a candidate cascades to every row that references it.

============================================================
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from storage.models.base import Base, JSONType, TimestampMixin


class Candidate(Base, TimestampMixin):
    """A candidate whose digital footprint is scored."""

    __tablename__ = "candidates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    display_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    def __repr__(self) -> str:
        return f"<Candidate(id={self.id})>"


class PlatformConnectionRecord(Base, TimestampMixin):
    """
    One connected platform per (candidate, platform).

    last_error/last_error_at are set by a failed fetch and
    cleared by the next successful one.
    """

    __tablename__ = "platform_connections"
    __table_args__ = (
        UniqueConstraint("candidate_id", "platform", name="uq_platform_connections_candidate_platform"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    candidate_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("candidates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    platform: Mapped[str] = mapped_column(String(20), nullable=False)
    username: Mapped[str] = mapped_column(String(200), nullable=False)
    connected_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_synced_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_error_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<PlatformConnectionRecord(candidate_id={self.candidate_id}, platform={self.platform})>"


class LinkedInManualEntryRecord(Base, TimestampMixin):
    """Latest LinkedIn submission of one candidate (validated payload)."""

    __tablename__ = "linkedin_manual_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    candidate_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("candidates.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    username: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    payload: Mapped[dict] = mapped_column(JSONType, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
