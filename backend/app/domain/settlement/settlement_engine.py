"""
Settlement Engine (Domain Logic).

The only code path that moves credits between profiles. Every operation
runs as a single database transaction: checks and writes either all land
or none do.
"""

import logging
from datetime import datetime
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import (
    AppException, AuthorizationError, ConflictError, InsufficientCreditsError,
    InvalidStateError, NotFoundError, ValidationError
)
from backend.app.db.errors import classify_db_error
from backend.app.models.credit_enums import TransactionType
from backend.app.models.credit_transaction import CreditTransaction
from backend.app.models.enums import ProfileRole
from backend.app.models.profile import Profile
from backend.app.models.swap import Swap
from backend.app.models.swap_enums import SwapStatus

logger = logging.getLogger(__name__)

SWAP_PAYMENT_DESCRIPTION = "Payment for completed skill swap"


async def _lock_swap(db: AsyncSession, swap_id: UUID) -> Optional[Swap]:
    result = await db.execute(
        select(Swap)
        .where(Swap.id == swap_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _lock_profiles(db: AsyncSession, *profile_ids: UUID) -> dict:
    """Lock profile rows in id order so concurrent settlements never deadlock on each other."""
    result = await db.execute(
        select(Profile)
        .where(Profile.id.in_(profile_ids))
        .order_by(Profile.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    profiles = {profile.id: profile for profile in result.scalars().all()}

    for profile_id in profile_ids:
        if profile_id not in profiles:
            raise NotFoundError("Profile", profile_id)

    return profiles


class SettlementEngine:

    @staticmethod
    async def settle(
        db: AsyncSession,
        swap_id: UUID,
        actor_id: UUID,
        completion_notes: Optional[str] = None
    ) -> Swap:
        """
        Settle an in-progress swap.

        Preconditions (first failure wins):
        1. Swap exists -> NotFoundError
        2. Swap is IN_PROGRESS -> InvalidStateError (also blocks double settlement)
        3. Actor is the teacher or the learner -> AuthorizationError
        4. Learner balance covers total_credits -> InsufficientCreditsError

        Effect (one transaction):
        - Debit learner, increment skills_learned
        - Credit teacher, increment skills_taught
        - Swap -> COMPLETED
        - Append one SWAP_PAYMENT transaction

        Writes re-verify their preconditions (status/version compare-and-set
        on the swap, balance floor on the learner), so a concurrent settlement
        that slipped past the reads is rejected with ConflictError and the
        whole unit is rolled back.

        Args:
            db: Database session (committed or rolled back here)
            swap_id: Swap to settle
            actor_id: Profile requesting completion
            completion_notes: Optional free-text notes stored on the swap

        Returns:
            The completed Swap
        """
        try:
            swap = await _lock_swap(db, swap_id)
            if not swap:
                raise NotFoundError("Swap", swap_id)

            if swap.status != SwapStatus.IN_PROGRESS:
                raise InvalidStateError(swap.status.value)

            if not swap.is_party(actor_id):
                raise AuthorizationError(
                    "Only the swap's teacher or learner can complete it",
                    details={"action": "complete"}
                )

            profiles = await _lock_profiles(db, swap.learner_id, swap.teacher_id)
            learner = profiles[swap.learner_id]
            amount = swap.total_credits

            if learner.credits < amount:
                raise InsufficientCreditsError(required=amount, available=learner.credits)

            swap_result = await db.execute(
                update(Swap)
                .where(
                    Swap.id == swap.id,
                    Swap.status == SwapStatus.IN_PROGRESS,
                    Swap.version == swap.version
                )
                .values(
                    status=SwapStatus.COMPLETED,
                    version=Swap.version + 1,
                    completed_at=datetime.utcnow(),
                    completion_notes=completion_notes
                )
                .execution_options(synchronize_session=False)
            )
            if swap_result.rowcount != 1:
                raise ConflictError("Swap was modified concurrently during settlement")

            debit_result = await db.execute(
                update(Profile)
                .where(Profile.id == swap.learner_id, Profile.credits >= amount)
                .values(
                    credits=Profile.credits - amount,
                    skills_learned=Profile.skills_learned + 1
                )
                .execution_options(synchronize_session=False)
            )
            if debit_result.rowcount != 1:
                raise InsufficientCreditsError(required=amount, available=learner.credits)

            await db.execute(
                update(Profile)
                .where(Profile.id == swap.teacher_id)
                .values(
                    credits=Profile.credits + amount,
                    skills_taught=Profile.skills_taught + 1
                )
                .execution_options(synchronize_session=False)
            )

            db.add(CreditTransaction(
                from_user_id=swap.learner_id,
                to_user_id=swap.teacher_id,
                swap_id=swap.id,
                amount=amount,
                transaction_type=TransactionType.SWAP_PAYMENT,
                description=SWAP_PAYMENT_DESCRIPTION
            ))

            await db.commit()

        except AppException as exc:
            await db.rollback()
            logger.warning("Settlement of swap %s rejected: %s", swap_id, exc.error_code)
            raise
        except SQLAlchemyError as exc:
            await db.rollback()
            raise classify_db_error(exc, "settlement") from exc

        await db.refresh(swap)
        logger.info(
            "Settled swap %s: %s credits from %s to %s",
            swap.id, swap.total_credits, swap.learner_id, swap.teacher_id
        )
        return swap

    @staticmethod
    async def adjust_balance(
        db: AsyncSession,
        profile_id: UUID,
        amount: int,
        actor_id: UUID,
        description: Optional[str] = None
    ) -> Tuple[Profile, CreditTransaction]:
        """
        Apply a signed admin adjustment to a profile's balance.

        The actor's admin role is re-checked inside the same transaction that
        writes the balance. The balance may not go negative.

        Returns:
            (updated Profile, appended ADMIN_ADJUSTMENT transaction)
        """
        if amount == 0:
            raise ValidationError("Adjustment amount must be non-zero")

        try:
            actor = await db.get(Profile, actor_id)
            if not actor or actor.role != ProfileRole.ADMIN:
                raise AuthorizationError("Admin access required")

            profiles = await _lock_profiles(db, profile_id)
            target = profiles[profile_id]

            if target.credits + amount < 0:
                raise InsufficientCreditsError(required=-amount, available=target.credits)

            result = await db.execute(
                update(Profile)
                .where(Profile.id == profile_id, Profile.credits + amount >= 0)
                .values(credits=Profile.credits + amount)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise InsufficientCreditsError(required=-amount, available=target.credits)

            transaction = CreditTransaction(
                from_user_id=None,
                to_user_id=profile_id,
                amount=amount,
                transaction_type=TransactionType.ADMIN_ADJUSTMENT,
                description=description or "Admin adjustment"
            )
            db.add(transaction)

            await db.commit()

        except AppException:
            await db.rollback()
            raise
        except SQLAlchemyError as exc:
            await db.rollback()
            raise classify_db_error(exc, "credit adjustment") from exc

        await db.refresh(target)
        await db.refresh(transaction)
        logger.info("Adjusted balance of %s by %s (actor %s)", profile_id, amount, actor_id)
        return target, transaction
