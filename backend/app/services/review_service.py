"""
Review service.

Parties of a completed swap rate each other; the reviewee's rating
statistics are recomputed in the same transaction.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update, func, desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import (
    AppException, AuthorizationError, InvalidStateError, NotFoundError, ValidationError
)
from backend.app.db.errors import classify_db_error
from backend.app.models.profile import Profile
from backend.app.models.review import Review, ReviewType
from backend.app.models.swap import Swap
from backend.app.models.swap_enums import SwapStatus

logger = logging.getLogger(__name__)


class ReviewService:

    @staticmethod
    async def create_review(
        db: AsyncSession,
        swap_id: UUID,
        reviewer_id: UUID,
        rating: int,
        comment: Optional[str] = None
    ) -> Review:
        """
        Review the other party of a completed swap.

        The learner reviews the teacher (AS_TEACHER) and vice versa.
        """
        if rating < 1 or rating > 5:
            raise ValidationError("Rating must be between 1 and 5", details={"rating": rating})

        swap = await db.get(Swap, swap_id, populate_existing=True)
        if not swap:
            raise NotFoundError("Swap", swap_id)

        if swap.status != SwapStatus.COMPLETED:
            raise InvalidStateError(swap.status.value, action="review")

        if reviewer_id == swap.learner_id:
            reviewee_id, review_type = swap.teacher_id, ReviewType.AS_TEACHER
        elif reviewer_id == swap.teacher_id:
            reviewee_id, review_type = swap.learner_id, ReviewType.AS_LEARNER
        else:
            raise AuthorizationError("Only the swap's teacher or learner can review it")

        review = Review(
            swap_id=swap.id,
            reviewer_id=reviewer_id,
            reviewee_id=reviewee_id,
            rating=rating,
            comment=comment,
            review_type=review_type
        )

        try:
            db.add(review)
            await db.flush()

            stats = await db.execute(
                select(func.avg(Review.rating), func.count(Review.id))
                .where(Review.reviewee_id == reviewee_id)
            )
            average, total = stats.one()

            await db.execute(
                update(Profile)
                .where(Profile.id == reviewee_id)
                .values(average_rating=round(float(average), 2), total_reviews=total)
                .execution_options(synchronize_session=False)
            )

            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ValidationError("You have already reviewed this swap")
        except AppException:
            await db.rollback()
            raise
        except SQLAlchemyError as exc:
            await db.rollback()
            raise classify_db_error(exc, "review creation") from exc

        await db.refresh(review)
        logger.info("Review %s created for %s (rating %s)", review.id, reviewee_id, rating)
        return review

    @staticmethod
    async def list_reviews_for_profile(db: AsyncSession, profile_id: UUID, limit: int = 50) -> List[Review]:
        result = await db.execute(
            select(Review)
            .where(Review.reviewee_id == profile_id)
            .order_by(desc(Review.created_at))
            .limit(limit)
        )
        return result.scalars().all()
