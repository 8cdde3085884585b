"""
Swap Schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from backend.app.models.swap_enums import MeetingType, SwapAction, SwapStatus


class SwapCreate(BaseModel):
    """
    Schema for requesting a swap.

    teacher_id and total_credits may be supplied pre-resolved from the
    skill; they are re-validated server-side. When teacher_id is omitted
    it is resolved from the skill owner.
    """
    skill_id: UUID
    duration_hours: int = Field(..., description="Session length in hours")
    teacher_id: Optional[UUID] = None
    total_credits: Optional[int] = None
    message: Optional[str] = Field(None, max_length=2000)
    meeting_type: Optional[MeetingType] = None
    scheduled_at: Optional[datetime] = None
    meeting_details: Optional[Dict[str, Any]] = None


class SwapTransitionRequest(BaseModel):
    """Schema for applying a lifecycle action."""
    action: SwapAction
    completion_notes: Optional[str] = Field(None, max_length=2000)


class SwapResponse(BaseModel):
    """Schema for displaying swaps."""
    id: UUID
    skill_id: UUID
    teacher_id: UUID
    learner_id: UUID
    status: SwapStatus
    duration_hours: int
    total_credits: int
    message: Optional[str]
    meeting_type: Optional[MeetingType]
    scheduled_at: Optional[datetime]
    meeting_details: Optional[Dict[str, Any]]
    completion_notes: Optional[str]
    created_at: datetime
    updated_at: datetime
    started_at: Optional[datetime]
    completed_at: Optional[datetime]

    class Config:
        from_attributes = True


class SwapListResponse(BaseModel):
    total: int
    swaps: List[SwapResponse]
