"""
Admin credit adjustment tests.
"""

import uuid

import pytest
from sqlalchemy import select

from backend.app.core.exceptions import (
    AuthorizationError, InsufficientCreditsError, NotFoundError, ValidationError
)
from backend.app.domain.settlement.settlement_engine import SettlementEngine
from backend.app.models.audit_log import AuditLog
from backend.app.models.credit_enums import TransactionType
from backend.app.models.enums import ProfileRole
from backend.tests.factories import auth_headers, create_profile


@pytest.fixture
async def admin(db_session):
    return await create_profile(db_session, credits=0, role=ProfileRole.ADMIN)


async def test_adjust_balance_up_and_down(db_session, admin, learner):
    profile, transaction = await SettlementEngine.adjust_balance(
        db_session, learner.id, 25, admin.id, "Referral reward"
    )
    assert profile.credits == 125
    assert transaction.transaction_type == TransactionType.ADMIN_ADJUSTMENT
    assert transaction.from_user_id is None
    assert transaction.amount == 25

    profile, transaction = await SettlementEngine.adjust_balance(db_session, learner.id, -125, admin.id)
    assert profile.credits == 0
    assert transaction.description == "Admin adjustment"


async def test_adjustment_cannot_go_negative(db_session, admin, learner):
    with pytest.raises(InsufficientCreditsError):
        await SettlementEngine.adjust_balance(db_session, learner.id, -101, admin.id)


async def test_zero_adjustment_rejected(db_session, admin, learner):
    with pytest.raises(ValidationError):
        await SettlementEngine.adjust_balance(db_session, learner.id, 0, admin.id)


async def test_non_admin_cannot_adjust(db_session, teacher, learner):
    with pytest.raises(AuthorizationError):
        await SettlementEngine.adjust_balance(db_session, learner.id, 10, teacher.id)


async def test_adjust_unknown_profile(db_session, admin):
    with pytest.raises(NotFoundError):
        await SettlementEngine.adjust_balance(db_session, uuid.uuid4(), 10, admin.id)


async def test_adjustment_endpoint(client, db_session, admin, learner):
    response = await client.post(
        f"/v1/admin/profiles/{learner.id}/credit-adjustments",
        json={"amount": 15, "description": "Support credit"},
        headers=auth_headers(admin.id)
    )

    assert response.status_code == 200
    data = response.json()
    assert data["credits"] == 115
    assert data["transaction"]["transaction_type"] == "admin_adjustment"

    logs = (await db_session.execute(select(AuditLog).where(AuditLog.action == "CREDITS_ADJUSTED"))).scalars().all()
    assert len(logs) == 1
    assert logs[0].target_user_id == learner.id

    trail = await client.get("/v1/admin/audit-logs", headers=auth_headers(admin.id))
    assert trail.status_code == 200
    assert trail.json()["total"] == 1


async def test_adjustment_endpoint_requires_admin(client, teacher, learner):
    response = await client.post(
        f"/v1/admin/profiles/{learner.id}/credit-adjustments",
        json={"amount": 15},
        headers=auth_headers(teacher.id)
    )

    assert response.status_code == 403
