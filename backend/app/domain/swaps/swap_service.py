"""
Swap Service (Domain Logic).

Creates swaps and applies lifecycle transitions. Status changes are
single-row compare-and-set updates guarded by the status and version the
caller observed; completion is delegated to the settlement engine.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, update, or_, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import (
    AppException, AuthorizationError, InvalidTransitionError, NotFoundError, ValidationError
)
from backend.app.db.errors import classify_db_error
from backend.app.domain.settlement.settlement_engine import SettlementEngine
from backend.app.domain.swaps import state_machine
from backend.app.models.profile import Profile
from backend.app.models.skill import Skill
from backend.app.models.swap import Swap
from backend.app.models.swap_enums import MeetingType, SwapAction, SwapStatus

logger = logging.getLogger(__name__)


async def _load_swap(db: AsyncSession, swap_id: UUID) -> Optional[Swap]:
    result = await db.execute(
        select(Swap).where(Swap.id == swap_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


class SwapService:

    @staticmethod
    async def create_swap(
        db: AsyncSession,
        actor_id: UUID,
        skill_id: UUID,
        teacher_id: UUID,
        learner_id: UUID,
        duration_hours: int,
        total_credits: Optional[int] = None,
        message: Optional[str] = None,
        meeting_type: Optional[MeetingType] = None,
        scheduled_at: Optional[datetime] = None,
        meeting_details: Optional[Dict[str, Any]] = None
    ) -> Swap:
        """
        Create a PENDING swap on behalf of the learner.

        The caller supplies teacher_id and total_credits pre-resolved from the
        skill; both are re-validated here. total_credits must equal
        credits_per_hour * duration_hours (derived when omitted).

        Raises:
            AuthorizationError: actor is not the learner
            ValidationError: bad duration, inactive skill, self-swap,
                skill/teacher mismatch or price mismatch
            NotFoundError: skill or a profile does not exist
        """
        if actor_id != learner_id:
            raise AuthorizationError("Swaps can only be requested by the learner")

        if duration_hours is None or duration_hours <= 0:
            raise ValidationError("Duration must be a positive number of hours", details={"duration_hours": duration_hours})

        skill = await db.get(Skill, skill_id)
        if not skill:
            raise NotFoundError("Skill", skill_id)

        if skill.user_id != teacher_id:
            raise ValidationError("Skill does not belong to the given teacher")

        if not skill.is_active:
            raise ValidationError("Skill is not active")

        if learner_id == teacher_id:
            raise ValidationError("Cannot request a swap for your own skill")

        if duration_hours > skill.max_duration_hours:
            raise ValidationError(
                f"Duration exceeds the skill's maximum of {skill.max_duration_hours} hours",
                details={"max_duration_hours": skill.max_duration_hours}
            )

        expected_credits = skill.credits_per_hour * duration_hours
        if total_credits is not None and total_credits != expected_credits:
            raise ValidationError(
                "total_credits does not match the skill price",
                details={"expected": expected_credits, "received": total_credits}
            )

        for profile_id in (teacher_id, learner_id):
            if not await db.get(Profile, profile_id):
                raise NotFoundError("Profile", profile_id)

        swap = Swap(
            skill_id=skill.id,
            teacher_id=teacher_id,
            learner_id=learner_id,
            status=SwapStatus.PENDING,
            version=1,
            duration_hours=duration_hours,
            total_credits=expected_credits,
            message=message,
            meeting_type=meeting_type,
            scheduled_at=scheduled_at,
            meeting_details=meeting_details
        )

        try:
            db.add(swap)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            raise classify_db_error(exc, "swap creation") from exc

        await db.refresh(swap)
        logger.info("Swap %s requested by %s for skill %s", swap.id, learner_id, skill.id)
        return swap

    @staticmethod
    async def request_swap(
        db: AsyncSession,
        skill_id: UUID,
        learner_id: UUID,
        duration_hours: int,
        total_credits: Optional[int] = None,
        message: Optional[str] = None,
        meeting_type: Optional[MeetingType] = None,
        scheduled_at: Optional[datetime] = None,
        meeting_details: Optional[Dict[str, Any]] = None
    ) -> Swap:
        """Request a swap, resolving the teacher from the skill owner."""
        skill = await db.get(Skill, skill_id)
        if not skill:
            raise NotFoundError("Skill", skill_id)

        return await SwapService.create_swap(
            db,
            actor_id=learner_id,
            skill_id=skill_id,
            teacher_id=skill.user_id,
            learner_id=learner_id,
            duration_hours=duration_hours,
            total_credits=total_credits,
            message=message,
            meeting_type=meeting_type,
            scheduled_at=scheduled_at,
            meeting_details=meeting_details
        )

    @staticmethod
    async def transition_swap(
        db: AsyncSession,
        swap_id: UUID,
        actor_id: UUID,
        action: SwapAction,
        completion_notes: Optional[str] = None
    ) -> Swap:
        """Apply a lifecycle action to a swap and return it in its resulting state."""
        swap, _ = await SwapService.apply_transition(db, swap_id, actor_id, action, completion_notes)
        return swap

    @staticmethod
    async def apply_transition(
        db: AsyncSession,
        swap_id: UUID,
        actor_id: UUID,
        action: SwapAction,
        completion_notes: Optional[str] = None
    ) -> Tuple[Swap, bool]:
        """
        Apply a lifecycle action to a swap.

        Flow:
        1. COMPLETE is handed to the settlement engine unchanged
        2. Load swap (NotFoundError)
        3. Authorize actor for the action (AuthorizationError)
        4. Resolve target status (InvalidTransitionError, or no-op on retry)
        5. Compare-and-set status/version; a lost race re-reads and either
           reports the idempotent no-op or InvalidTransitionError

        Returns:
            (swap in its resulting state, whether this call changed it)
        """
        if action == SwapAction.COMPLETE:
            swap = await SettlementEngine.settle(db, swap_id, actor_id, completion_notes)
            return swap, True

        swap = await _load_swap(db, swap_id)
        if not swap:
            raise NotFoundError("Swap", swap_id)

        state_machine.authorize(action, actor_id, swap.teacher_id, swap.learner_id)

        target = state_machine.resolve(swap.status, action)
        if target is None:
            logger.debug("Swap %s already %s, %s is a no-op", swap.id, swap.status.value, action.value)
            return swap, False

        values = {"status": target, "version": Swap.version + 1}
        if target == SwapStatus.IN_PROGRESS:
            values["started_at"] = datetime.utcnow()

        try:
            result = await db.execute(
                update(Swap)
                .where(
                    Swap.id == swap.id,
                    Swap.status == swap.status,
                    Swap.version == swap.version
                )
                .values(**values)
                .execution_options(synchronize_session=False)
            )

            if result.rowcount != 1:
                await db.rollback()
                current = await _load_swap(db, swap_id)
                if state_machine.is_idempotent_retry(current.status, action):
                    return current, False
                raise InvalidTransitionError(current.status.value, action.value)

            await db.commit()
        except AppException:
            raise
        except SQLAlchemyError as exc:
            await db.rollback()
            raise classify_db_error(exc, f"swap {action.value}") from exc

        await db.refresh(swap)
        logger.info("Swap %s -> %s by %s", swap.id, swap.status.value, actor_id)
        return swap, True

    @staticmethod
    async def get_swap_for_party(db: AsyncSession, swap_id: UUID, actor_id: UUID) -> Swap:
        """Fetch a swap visible to one of its parties."""
        swap = await _load_swap(db, swap_id)
        if not swap:
            raise NotFoundError("Swap", swap_id)

        if not swap.is_party(actor_id):
            raise AuthorizationError("You are not a party to this swap")

        return swap

    @staticmethod
    async def list_swaps(
        db: AsyncSession,
        actor_id: UUID,
        status: Optional[SwapStatus] = None,
        limit: int = 50
    ) -> List[Swap]:
        """List swaps where the actor is teacher or learner, most recent first."""
        query = select(Swap).where(
            or_(Swap.teacher_id == actor_id, Swap.learner_id == actor_id)
        )

        if status:
            query = query.where(Swap.status == status)

        query = query.order_by(desc(Swap.created_at)).limit(limit)

        result = await db.execute(query)
        return result.scalars().all()
