"""
Review Schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from uuid import UUID

from backend.app.models.review import ReviewType


class ReviewCreate(BaseModel):
    rating: int = Field(..., description="Rating from 1 to 5")
    comment: Optional[str] = Field(None, max_length=2000)


class ReviewResponse(BaseModel):
    id: UUID
    swap_id: UUID
    reviewer_id: UUID
    reviewee_id: UUID
    rating: int
    comment: Optional[str]
    review_type: ReviewType
    created_at: datetime

    class Config:
        from_attributes = True
