"""
First-login provisioning tests.
"""

import uuid

import pytest
from sqlalchemy import func, select

from backend.app.core.config import settings
from backend.app.core.exceptions import ValidationError
from backend.app.models.credit_enums import TransactionType
from backend.app.models.credit_transaction import CreditTransaction
from backend.app.schemas.auth import IdentityClaims
from backend.app.services.provisioning import ProvisioningService
from backend.tests.factories import create_profile


def _identity(**overrides):
    data = {
        "id": uuid.uuid4(),
        "email": "ada@example.com",
        "full_name": "Ada Lovelace",
        "avatar_url": "https://cdn.example.com/ada.png",
    }
    data.update(overrides)
    return IdentityClaims(**data)


async def _bonus_count(db, profile_id):
    result = await db.execute(
        select(func.count(CreditTransaction.id)).where(
            CreditTransaction.to_user_id == profile_id,
            CreditTransaction.transaction_type == TransactionType.SIGNUP_BONUS
        )
    )
    return result.scalar()


async def test_first_login_creates_profile_with_bonus(db_session):
    identity = _identity()

    profile, created = await ProvisioningService.provision(db_session, identity)

    assert created is True
    assert profile.id == identity.id
    assert profile.credits == settings.signup_bonus_credits
    assert profile.full_name == "Ada Lovelace"
    assert await _bonus_count(db_session, profile.id) == 1


async def test_repeat_login_is_idempotent(db_session):
    identity = _identity()

    await ProvisioningService.provision(db_session, identity)
    profile, created = await ProvisioningService.provision(db_session, identity)

    assert created is False
    assert profile.credits == settings.signup_bonus_credits
    assert await _bonus_count(db_session, identity.id) == 1


async def test_existing_fields_are_kept(db_session):
    existing = await create_profile(db_session, credits=7, email="grace@example.com", full_name="Grace H.")

    profile, created = await ProvisioningService.provision(
        db_session,
        _identity(id=existing.id, email="grace@example.com", full_name="Grace Hopper")
    )

    assert created is False
    assert profile.full_name == "Grace H."
    assert profile.avatar_url == "https://cdn.example.com/ada.png"
    assert profile.credits == 7


async def test_email_owned_by_another_profile(db_session):
    await create_profile(db_session, email="taken@example.com")

    with pytest.raises(ValidationError):
        await ProvisioningService.provision(db_session, _identity(email="taken@example.com"))


def test_claims_from_provider_payload():
    subject = uuid.uuid4()
    claims = IdentityClaims.from_token_payload({
        "sub": str(subject),
        "email": "linus@example.com",
        "user_metadata": {"name": "Linus", "avatar_url": "https://cdn.example.com/l.png"},
    })

    assert claims.id == subject
    assert claims.full_name == "Linus"
    assert claims.avatar_url == "https://cdn.example.com/l.png"


def test_claims_fall_back_to_email_local_part():
    claims = IdentityClaims.from_token_payload({"sub": str(uuid.uuid4()), "email": "margaret@example.com"})
    assert claims.full_name == "margaret"
    assert claims.avatar_url is None
