"""
Swap API Endpoints.

Learners request swaps; both parties drive them through their lifecycle.
Completion settles the credits.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_db
from backend.app.core.dependencies import get_current_user
from backend.app.domain.swaps.swap_service import SwapService
from backend.app.models.swap_enums import SwapStatus
from backend.app.schemas.swap import (
    SwapCreate, SwapTransitionRequest, SwapResponse, SwapListResponse
)
from backend.app.services.audit import log_event, log_swap_event, AuditAction

router = APIRouter(prefix="/swaps", tags=["Swaps"])


@router.post("", response_model=SwapResponse, status_code=status.HTTP_201_CREATED)
async def create_swap(
    request: Request,
    swap_data: SwapCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Request a swap for a skill (caller becomes the learner).

    Validates:
    - Skill exists, is active and belongs to teacher_id (when given)
    - Caller is not the skill owner
    - Duration is positive and within the skill's maximum
    - total_credits (when given) equals credits_per_hour * duration_hours
    """
    learner_id = current_user["user_id"]

    details = dict(
        duration_hours=swap_data.duration_hours,
        total_credits=swap_data.total_credits,
        message=swap_data.message,
        meeting_type=swap_data.meeting_type,
        scheduled_at=swap_data.scheduled_at,
        meeting_details=swap_data.meeting_details
    )

    if swap_data.teacher_id is None:
        swap = await SwapService.request_swap(
            db, skill_id=swap_data.skill_id, learner_id=learner_id, **details
        )
    else:
        swap = await SwapService.create_swap(
            db,
            actor_id=learner_id,
            skill_id=swap_data.skill_id,
            teacher_id=swap_data.teacher_id,
            learner_id=learner_id,
            **details
        )

    # Audit log
    await log_event(
        db=db,
        action=AuditAction.SWAP_REQUESTED,
        actor_id=learner_id,
        target_user_id=swap.teacher_id,
        metadata={
            "swap_id": str(swap.id),
            "skill_id": str(swap.skill_id),
            "total_credits": swap.total_credits
        },
        ip_address=request.client.host if request.client else None
    )

    return SwapResponse.model_validate(swap)


@router.get("", response_model=SwapListResponse)
async def list_swaps(
    status_filter: Optional[SwapStatus] = Query(None, alias="status", description="Filter by swap status"),
    limit: int = Query(50, ge=1, le=200),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List swaps where the caller is the teacher or the learner."""
    swaps = await SwapService.list_swaps(
        db,
        actor_id=current_user["user_id"],
        status=status_filter,
        limit=limit
    )

    return SwapListResponse(
        total=len(swaps),
        swaps=[SwapResponse.model_validate(s) for s in swaps]
    )


@router.get("/{swap_id}", response_model=SwapResponse)
async def get_swap(
    swap_id: UUID = Path(..., description="Swap ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get a single swap. Only its parties can see it."""
    swap = await SwapService.get_swap_for_party(db, swap_id, current_user["user_id"])
    return SwapResponse.model_validate(swap)


@router.post("/{swap_id}/transitions", response_model=SwapResponse)
async def transition_swap(
    request: Request,
    transition: SwapTransitionRequest,
    swap_id: UUID = Path(..., description="Swap ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Apply a lifecycle action to a swap.

    Actions:
    - accept / decline: teacher only, from pending
    - begin: either party, from accepted
    - cancel: either party, from pending or accepted
    - complete: either party, from in_progress; settles the credits

    Repeating an action that already took effect returns the swap unchanged
    and records no audit event.
    """
    actor_id = current_user["user_id"]

    swap, changed = await SwapService.apply_transition(
        db,
        swap_id=swap_id,
        actor_id=actor_id,
        action=transition.action,
        completion_notes=transition.completion_notes
    )

    # Audit log
    if changed:
        await log_swap_event(
            db=db,
            action=transition.action,
            swap=swap,
            actor_id=actor_id,
            ip_address=request.client.host if request.client else None
        )

    return SwapResponse.model_validate(swap)
