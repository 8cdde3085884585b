"""
Credit Transaction API Endpoints.

Read-only view of the caller's ledger.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, or_, desc
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_db
from backend.app.core.dependencies import get_current_user
from backend.app.models.credit_enums import TransactionType
from backend.app.models.credit_transaction import CreditTransaction
from backend.app.schemas.credit import TransactionResponse

router = APIRouter(prefix="/transactions", tags=["Credits"])


@router.get("", response_model=List[TransactionResponse])
async def list_transactions(
    transaction_type: Optional[TransactionType] = Query(None, description="Filter by transaction type"),
    limit: int = Query(50, ge=1, le=200),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List transactions where the caller sent or received credits, most recent first."""
    user_id = current_user["user_id"]

    query = select(CreditTransaction).where(
        or_(
            CreditTransaction.from_user_id == user_id,
            CreditTransaction.to_user_id == user_id
        )
    )

    if transaction_type:
        query = query.where(CreditTransaction.transaction_type == transaction_type)

    query = query.order_by(desc(CreditTransaction.created_at)).limit(limit)

    result = await db.execute(query)
    return [TransactionResponse.model_validate(t) for t in result.scalars().all()]
