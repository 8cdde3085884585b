"""
Profile provisioning service.

Creates a profile the first time an identity authenticates (including
through a third-party identity provider) and grants the signup bonus.
"""

import logging
from typing import Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.exceptions import ValidationError
from backend.app.db.errors import classify_db_error
from backend.app.models.credit_enums import TransactionType
from backend.app.models.credit_transaction import CreditTransaction
from backend.app.models.profile import Profile
from backend.app.schemas.auth import IdentityClaims

logger = logging.getLogger(__name__)

# Profile fields filled from identity claims when still empty
MERGEABLE_FIELDS = ("full_name", "avatar_url")


def _merge_missing_fields(profile: Profile, identity: IdentityClaims) -> bool:
    """Fill NULL profile fields from the identity. Present values always win."""
    changed = False
    for field in MERGEABLE_FIELDS:
        incoming = getattr(identity, field)
        if getattr(profile, field) is None and incoming is not None:
            setattr(profile, field, incoming)
            changed = True
    return changed


class ProvisioningService:

    @staticmethod
    async def provision(db: AsyncSession, identity: IdentityClaims) -> Tuple[Profile, bool]:
        """
        Upsert the profile for an authenticated identity.

        Flow:
        1. Existing profile -> merge missing fields, no bonus
        2. New profile -> insert with signup balance and one SIGNUP_BONUS
           transaction in the same unit of work
        3. Lost insert race (IntegrityError) -> rollback, re-read and merge

        Returns:
            (profile, created) where created is True only for the call that
            inserted the row
        """
        try:
            existing = await db.get(Profile, identity.id, populate_existing=True)
            if existing:
                if _merge_missing_fields(existing, identity):
                    await db.commit()
                    await db.refresh(existing)
                return existing, False

            bonus = settings.signup_bonus_credits
            profile = Profile(
                id=identity.id,
                email=identity.email,
                full_name=identity.full_name,
                avatar_url=identity.avatar_url,
                credits=bonus
            )
            db.add(profile)
            await db.flush()

            if bonus > 0:
                db.add(CreditTransaction(
                    from_user_id=None,
                    to_user_id=profile.id,
                    amount=bonus,
                    transaction_type=TransactionType.SIGNUP_BONUS,
                    description="Signup bonus"
                ))

            await db.commit()

        except IntegrityError:
            await db.rollback()
            existing = await db.get(Profile, identity.id, populate_existing=True)
            if not existing:
                raise ValidationError("Email already registered to another profile")

            logger.info("Profile %s was provisioned concurrently, merging", identity.id)
            if _merge_missing_fields(existing, identity):
                await db.commit()
                await db.refresh(existing)
            return existing, False

        except SQLAlchemyError as exc:
            await db.rollback()
            raise classify_db_error(exc, "provisioning") from exc

        await db.refresh(profile)
        logger.info("Provisioned profile %s with %s signup credits", profile.id, bonus)
        return profile, True
