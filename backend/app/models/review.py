"""
Review database model.

Ratings left by the parties of a completed swap.
"""

import enum
import uuid

from sqlalchemy import Column, Integer, Text, DateTime, Enum, ForeignKey, Uuid, UniqueConstraint, CheckConstraint
from sqlalchemy.sql import func
from backend.app.db.session import Base


class ReviewType(str, enum.Enum):
    AS_TEACHER = "as_teacher"  # Reviewee taught in the swap
    AS_LEARNER = "as_learner"  # Reviewee learned in the swap


class Review(Base):
    """
    Review model.

    One review per reviewer and role per swap.
    """
    __tablename__ = "reviews"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    swap_id = Column(Uuid, ForeignKey("swaps.id", ondelete="CASCADE"), nullable=False, index=True)
    reviewer_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    reviewee_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    review_type = Column(Enum(ReviewType), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("swap_id", "reviewer_id", "review_type", name="uq_reviews_swap_reviewer_type"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )

    def __repr__(self):
        return f"<Review(id={self.id}, swap={self.swap_id}, rating={self.rating})>"
