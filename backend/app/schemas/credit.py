"""
Credit Schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from uuid import UUID

from backend.app.models.credit_enums import TransactionType


class TransactionResponse(BaseModel):
    """Schema for displaying ledger entries."""
    id: UUID
    from_user_id: Optional[UUID]
    to_user_id: UUID
    swap_id: Optional[UUID]
    amount: int
    transaction_type: TransactionType
    description: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class CreditAdjustmentRequest(BaseModel):
    """Schema for an admin credit adjustment (signed amount)."""
    amount: int = Field(..., description="Signed number of credits to add or remove")
    description: Optional[str] = Field(None, max_length=255)


class CreditAdjustmentResponse(BaseModel):
    profile_id: UUID
    credits: int
    transaction: TransactionResponse
