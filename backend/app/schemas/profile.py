"""
Profile Pydantic schemas.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from uuid import UUID

from backend.app.models.enums import ProfileRole


class ProfileResponse(BaseModel):
    """
    Schema for profile information response.

    Used by GET /auth/me and provisioning.
    """
    id: UUID
    email: str
    full_name: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    role: ProfileRole
    credits: int
    skills_taught: int
    skills_learned: int
    average_rating: float
    total_reviews: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
