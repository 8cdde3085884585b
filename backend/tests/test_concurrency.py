"""
Concurrency Tests.

Sessions on separate connections race on the same swap or identity.
Exactly one settlement, transition or provisioning insert may land.
"""

import asyncio
import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from backend.app.core.exceptions import AppException, ConflictError, InvalidStateError, InvalidTransitionError
from backend.app.db.session import Base
from backend.app.domain.settlement.settlement_engine import SettlementEngine
from backend.app.domain.swaps.swap_service import SwapService
from backend.app.models.credit_enums import TransactionType
from backend.app.models.credit_transaction import CreditTransaction
from backend.app.models.profile import Profile
from backend.app.models.swap_enums import SwapAction, SwapStatus
from backend.app.schemas.auth import IdentityClaims
from backend.app.services.provisioning import ProvisioningService
from backend.tests.factories import create_profile, create_skill, create_swap


@pytest.fixture
async def file_session_factory(tmp_path):
    """File-backed SQLite so each session gets its own connection."""
    file_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'concurrency.db'}",
        connect_args={"timeout": 5},
    )
    async with file_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(file_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    await file_engine.dispose()


async def _settle_or_error(session_factory, swap_id, actor_id):
    async with session_factory() as session:
        try:
            return await SettlementEngine.settle(session, swap_id, actor_id)
        except (InvalidStateError, ConflictError) as exc:
            return exc


async def test_concurrent_completion_settles_once(file_session_factory):
    async with file_session_factory() as setup:
        teacher = await create_profile(setup, credits=0)
        learner = await create_profile(setup, credits=100)
        skill = await create_skill(setup, teacher, credits_per_hour=30)
        swap = await create_swap(setup, skill, learner, duration_hours=2, status=SwapStatus.IN_PROGRESS)

    results = await asyncio.gather(
        _settle_or_error(file_session_factory, swap.id, learner.id),
        _settle_or_error(file_session_factory, swap.id, teacher.id),
    )

    successes = [r for r in results if not isinstance(r, Exception)]
    failures = [r for r in results if isinstance(r, Exception)]
    assert len(successes) == 1
    assert len(failures) == 1
    assert isinstance(failures[0], (InvalidStateError, ConflictError))

    async with file_session_factory() as check:
        learner_row = await check.get(Profile, learner.id)
        teacher_row = await check.get(Profile, teacher.id)
        assert learner_row.credits == 40
        assert teacher_row.credits == 60
        assert learner_row.credits + teacher_row.credits == 100

        count = await check.execute(
            select(func.count(CreditTransaction.id)).where(CreditTransaction.swap_id == swap.id)
        )
        assert count.scalar() == 1


async def _transition_or_error(session_factory, swap_id, actor_id, action):
    async with session_factory() as session:
        try:
            return await SwapService.apply_transition(session, swap_id, actor_id, action)
        except AppException as exc:
            return exc


async def test_concurrent_accept_and_decline_has_one_winner(file_session_factory):
    async with file_session_factory() as setup:
        teacher = await create_profile(setup)
        learner = await create_profile(setup)
        skill = await create_skill(setup, teacher)
        swap = await create_swap(setup, skill, learner)

    results = await asyncio.gather(
        _transition_or_error(file_session_factory, swap.id, teacher.id, SwapAction.ACCEPT),
        _transition_or_error(file_session_factory, swap.id, teacher.id, SwapAction.DECLINE),
    )

    applied = [r for r in results if not isinstance(r, AppException)]
    rejected = [r for r in results if isinstance(r, AppException)]
    assert len(applied) == 1
    assert applied[0][1] is True
    assert len(rejected) == 1
    assert isinstance(rejected[0], (InvalidTransitionError, ConflictError))

    async with file_session_factory() as check:
        final = await SwapService.get_swap_for_party(check, swap.id, learner.id)

    assert final.status == applied[0][0].status
    assert final.status in (SwapStatus.ACCEPTED, SwapStatus.DECLINED)
    assert final.version == 2


async def test_concurrent_begin_applies_once(file_session_factory):
    async with file_session_factory() as setup:
        teacher = await create_profile(setup)
        learner = await create_profile(setup)
        skill = await create_skill(setup, teacher)
        swap = await create_swap(setup, skill, learner, status=SwapStatus.ACCEPTED)

    results = await asyncio.gather(
        _transition_or_error(file_session_factory, swap.id, teacher.id, SwapAction.BEGIN),
        _transition_or_error(file_session_factory, swap.id, learner.id, SwapAction.BEGIN),
    )

    outcomes = [r for r in results if not isinstance(r, AppException)]
    assert sum(1 for _, changed in outcomes if changed) == 1
    # The loser either observed the no-op retry or lost the lock race
    assert all(isinstance(r, ConflictError) for r in results if isinstance(r, AppException))

    async with file_session_factory() as check:
        final = await SwapService.get_swap_for_party(check, swap.id, learner.id)

    assert final.status == SwapStatus.IN_PROGRESS
    assert final.version == 2


async def test_concurrent_provisioning_creates_one_profile(file_session_factory):
    identity = IdentityClaims(id=uuid.uuid4(), email="race@example.com", full_name="Race")

    async def provision():
        async with file_session_factory() as session:
            _, created = await ProvisioningService.provision(session, identity)
            return created

    results = await asyncio.gather(provision(), provision(), provision())

    assert sorted(results) == [False, False, True]

    async with file_session_factory() as check:
        profiles = await check.execute(select(func.count(Profile.id)).where(Profile.id == identity.id))
        bonuses = await check.execute(
            select(func.count(CreditTransaction.id)).where(
                CreditTransaction.to_user_id == identity.id,
                CreditTransaction.transaction_type == TransactionType.SIGNUP_BONUS
            )
        )
        assert profiles.scalar() == 1
        assert bonuses.scalar() == 1
