"""
Admin API Endpoints.

Provides admin-only credit adjustments and audit trail access.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.schemas.admin import AuditTrailResponse, AuditLogResponse
from backend.app.schemas.credit import (
    CreditAdjustmentRequest, CreditAdjustmentResponse, TransactionResponse
)
from backend.app.core.guards import require_admin
from backend.app.domain.settlement.settlement_engine import SettlementEngine
from backend.app.services.audit import log_event, AuditAction, get_audit_trail

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/profiles/{profile_id}/credit-adjustments", response_model=CreditAdjustmentResponse)
async def adjust_credits(
    request: Request,
    adjustment: CreditAdjustmentRequest,
    profile_id: UUID = Path(..., description="Profile ID"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Add or remove credits from a profile (admin-only).

    The balance may not go below zero. Every adjustment appends an
    admin_adjustment transaction and an audit entry.
    """
    profile, transaction = await SettlementEngine.adjust_balance(
        db,
        profile_id=profile_id,
        amount=adjustment.amount,
        actor_id=admin["user_id"],
        description=adjustment.description
    )

    await log_event(
        db=db,
        action=AuditAction.CREDITS_ADJUSTED,
        actor_id=admin["user_id"],
        target_user_id=profile.id,
        metadata={
            "amount": adjustment.amount,
            "balance": profile.credits,
            "transaction_id": str(transaction.id)
        },
        ip_address=request.client.host if request.client else None
    )

    return CreditAdjustmentResponse(
        profile_id=profile.id,
        credits=profile.credits,
        transaction=TransactionResponse.model_validate(transaction)
    )


@router.get("/audit-logs", response_model=AuditTrailResponse)
async def get_audit_logs(
    target_user_id: Optional[UUID] = Query(None, description="Filter by target profile"),
    action: Optional[str] = Query(None, description="Filter by action type"),
    limit: int = Query(100, ge=1, le=500, description="Max number of logs"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Get audit trail (admin-only).

    Supports filtering by target profile and action type.
    """
    logs = await get_audit_trail(
        db=db,
        target_user_id=target_user_id,
        action=action,
        limit=limit
    )

    return AuditTrailResponse(
        logs=[AuditLogResponse.model_validate(log) for log in logs],
        total=len(logs)
    )
