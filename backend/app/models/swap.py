"""
Swap database model.

A swap is one skill-teaching exchange between a teacher and a learner.
"""

import uuid

from sqlalchemy import Column, Integer, Text, DateTime, Enum, ForeignKey, JSON, Uuid, CheckConstraint
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.swap_enums import SwapStatus, MeetingType


class Swap(Base):
    """
    Swap model.

    Follows a strict lifecycle: PENDING -> ACCEPTED -> IN_PROGRESS -> COMPLETED,
    with DECLINED and CANCELLED as side exits. Rows are never deleted.
    Every status change bumps `version`; writers compare-and-set on it.
    """
    __tablename__ = "swaps"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # References
    skill_id = Column(Uuid, ForeignKey("skills.id", ondelete="CASCADE"), nullable=False, index=True)
    teacher_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    learner_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    # Status
    status = Column(Enum(SwapStatus), default=SwapStatus.PENDING, nullable=False, index=True)
    version = Column(Integer, default=1, nullable=False)

    # Terms
    duration_hours = Column(Integer, nullable=False)
    total_credits = Column(Integer, nullable=False)

    # Scheduling / meeting metadata
    message = Column(Text, nullable=True)
    meeting_type = Column(Enum(MeetingType), nullable=True)
    scheduled_at = Column(DateTime(timezone=True), nullable=True)
    meeting_details = Column(JSON, nullable=True)
    completion_notes = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("teacher_id != learner_id", name="ck_swaps_distinct_parties"),
        CheckConstraint("total_credits > 0", name="ck_swaps_total_positive"),
        CheckConstraint("duration_hours > 0", name="ck_swaps_duration_positive"),
    )

    def is_party(self, profile_id) -> bool:
        return profile_id in (self.teacher_id, self.learner_id)

    def __repr__(self):
        return f"<Swap(id={self.id}, status='{self.status.value}', total_credits={self.total_credits})>"
