"""
Review API Endpoints.

Parties of a completed swap rate each other.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_db
from backend.app.core.dependencies import get_current_user
from backend.app.schemas.review import ReviewCreate, ReviewResponse
from backend.app.services.audit import log_event, AuditAction
from backend.app.services.review_service import ReviewService

router = APIRouter(tags=["Reviews"])


@router.post("/swaps/{swap_id}/reviews", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    request: Request,
    review_data: ReviewCreate,
    swap_id: UUID = Path(..., description="Swap ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Review the other party of a completed swap (once per swap)."""
    review = await ReviewService.create_review(
        db,
        swap_id=swap_id,
        reviewer_id=current_user["user_id"],
        rating=review_data.rating,
        comment=review_data.comment
    )

    await log_event(
        db=db,
        action=AuditAction.REVIEW_CREATED,
        actor_id=review.reviewer_id,
        target_user_id=review.reviewee_id,
        metadata={"swap_id": str(swap_id), "rating": review.rating},
        ip_address=request.client.host if request.client else None
    )

    return ReviewResponse.model_validate(review)


@router.get("/profiles/{profile_id}/reviews", response_model=List[ReviewResponse])
async def list_profile_reviews(
    profile_id: UUID = Path(..., description="Profile ID"),
    limit: int = Query(50, ge=1, le=200),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List reviews received by a profile, most recent first."""
    reviews = await ReviewService.list_reviews_for_profile(db, profile_id, limit=limit)
    return [ReviewResponse.model_validate(r) for r in reviews]
