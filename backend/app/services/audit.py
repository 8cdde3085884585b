"""
Audit logging service for tracking security events and swap lifecycle actions.

Provides centralized logging for compliance and dispute handling.
"""

from typing import Optional, Dict, Any
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from backend.app.models.audit_log import AuditLog
from backend.app.models.swap_enums import SwapAction


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    PROFILE_PROVISIONED = "PROFILE_PROVISIONED"
    TOKEN_REVOKED = "TOKEN_REVOKED"

    # Swap lifecycle
    SWAP_REQUESTED = "SWAP_REQUESTED"
    SWAP_ACCEPTED = "SWAP_ACCEPTED"
    SWAP_DECLINED = "SWAP_DECLINED"
    SWAP_STARTED = "SWAP_STARTED"
    SWAP_CANCELLED = "SWAP_CANCELLED"
    SWAP_SETTLED = "SWAP_SETTLED"

    # Credits
    CREDITS_ADJUSTED = "CREDITS_ADJUSTED"

    # Reviews
    REVIEW_CREATED = "REVIEW_CREATED"


SWAP_ACTION_EVENTS = {
    SwapAction.ACCEPT: AuditAction.SWAP_ACCEPTED,
    SwapAction.DECLINE: AuditAction.SWAP_DECLINED,
    SwapAction.BEGIN: AuditAction.SWAP_STARTED,
    SwapAction.CANCEL: AuditAction.SWAP_CANCELLED,
    SwapAction.COMPLETE: AuditAction.SWAP_SETTLED,
}


async def log_event(
    db: AsyncSession,
    action: str,
    actor_id: Optional[UUID] = None,
    target_user_id: Optional[UUID] = None,
    metadata: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None
) -> AuditLog:
    """
    Log a security or lifecycle event to the audit log.

    Args:
        db: Database session
        action: Action being performed (use AuditAction constants)
        actor_id: Profile performing the action
        target_user_id: Profile being acted upon (if applicable)
        metadata: Additional context as JSON
        ip_address: IP address of the request

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        actor_id=actor_id,
        action=action,
        target_user_id=target_user_id,
        meta_data=metadata,
        ip_address=ip_address
    )

    db.add(audit_log)
    await db.commit()
    await db.refresh(audit_log)

    return audit_log


async def log_swap_event(
    db: AsyncSession,
    action: SwapAction,
    swap,
    actor_id: UUID,
    ip_address: Optional[str] = None
) -> AuditLog:
    """Log a swap transition, targeting the counterparty of the actor."""
    counterparty = swap.learner_id if actor_id == swap.teacher_id else swap.teacher_id
    return await log_event(
        db=db,
        action=SWAP_ACTION_EVENTS[action],
        actor_id=actor_id,
        target_user_id=counterparty,
        metadata={
            "swap_id": str(swap.id),
            "status": swap.status.value,
            "total_credits": swap.total_credits
        },
        ip_address=ip_address
    )


async def get_audit_trail(
    db: AsyncSession,
    target_user_id: Optional[UUID] = None,
    action: Optional[str] = None,
    limit: int = 100
) -> list[AuditLog]:
    """
    Retrieve audit trail with optional filtering, most recent first.
    """
    query = select(AuditLog).order_by(desc(AuditLog.timestamp))

    if target_user_id:
        query = query.where(AuditLog.target_user_id == target_user_id)

    if action:
        query = query.where(AuditLog.action == action)

    query = query.limit(limit)

    result = await db.execute(query)
    return result.scalars().all()
