"""
Skill database model.

Skills are offerings owned by a single profile and priced per hour.
"""

import enum
import uuid

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Enum, ForeignKey, Uuid, CheckConstraint
from sqlalchemy.sql import func
from backend.app.db.session import Base


class DifficultyLevel(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Skill(Base):
    """
    Skill model.

    Read-only from the swap lifecycle's point of view: the price is read
    when a swap is requested and frozen into the swap's total_credits.
    """
    __tablename__ = "skills"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Ownership - Skill belongs to the teaching profile
    user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=False, index=True)

    # Pricing
    credits_per_hour = Column(Integer, nullable=False)
    max_duration_hours = Column(Integer, default=2, nullable=False)

    difficulty_level = Column(Enum(DifficultyLevel), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("credits_per_hour > 0", name="ck_skills_price_positive"),
    )

    def __repr__(self):
        return f"<Skill(id={self.id}, title='{self.title}', credits_per_hour={self.credits_per_hour})>"
