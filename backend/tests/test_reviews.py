"""
Review tests.
"""

import pytest

from backend.app.core.exceptions import AuthorizationError, InvalidStateError, ValidationError
from backend.app.models.profile import Profile
from backend.app.models.review import ReviewType
from backend.app.models.swap_enums import SwapStatus
from backend.app.services.review_service import ReviewService
from backend.tests.factories import create_profile, create_swap


async def test_parties_review_each_other(db_session, skill, teacher, learner):
    swap = await create_swap(db_session, skill, learner, status=SwapStatus.COMPLETED)

    from_learner = await ReviewService.create_review(db_session, swap.id, learner.id, 5, "Patient and clear")
    from_teacher = await ReviewService.create_review(db_session, swap.id, teacher.id, 4)

    assert from_learner.reviewee_id == teacher.id
    assert from_learner.review_type == ReviewType.AS_TEACHER
    assert from_teacher.reviewee_id == learner.id
    assert from_teacher.review_type == ReviewType.AS_LEARNER

    teacher_row = await db_session.get(Profile, teacher.id, populate_existing=True)
    assert teacher_row.total_reviews == 1
    assert teacher_row.average_rating == 5.0


async def test_average_rating_is_recomputed(db_session, skill, teacher, learner):
    other_learner = await create_profile(db_session)
    first = await create_swap(db_session, skill, learner, status=SwapStatus.COMPLETED)
    second = await create_swap(db_session, skill, other_learner, status=SwapStatus.COMPLETED)

    await ReviewService.create_review(db_session, first.id, learner.id, 5)
    await ReviewService.create_review(db_session, second.id, other_learner.id, 2)

    teacher_row = await db_session.get(Profile, teacher.id, populate_existing=True)
    assert teacher_row.total_reviews == 2
    assert teacher_row.average_rating == 3.5

    reviews = await ReviewService.list_reviews_for_profile(db_session, teacher.id)
    assert sorted(r.rating for r in reviews) == [2, 5]


async def test_duplicate_review_rejected(db_session, skill, learner):
    swap = await create_swap(db_session, skill, learner, status=SwapStatus.COMPLETED)

    await ReviewService.create_review(db_session, swap.id, learner.id, 5)

    with pytest.raises(ValidationError):
        await ReviewService.create_review(db_session, swap.id, learner.id, 1)


async def test_review_requires_completed_swap(db_session, skill, learner):
    swap = await create_swap(db_session, skill, learner, status=SwapStatus.IN_PROGRESS)

    with pytest.raises(InvalidStateError):
        await ReviewService.create_review(db_session, swap.id, learner.id, 5)


async def test_stranger_cannot_review(db_session, skill, learner):
    swap = await create_swap(db_session, skill, learner, status=SwapStatus.COMPLETED)
    stranger = await create_profile(db_session)

    with pytest.raises(AuthorizationError):
        await ReviewService.create_review(db_session, swap.id, stranger.id, 3)


@pytest.mark.parametrize("rating", [0, 6])
async def test_rating_bounds(db_session, skill, learner, rating):
    swap = await create_swap(db_session, skill, learner, status=SwapStatus.COMPLETED)

    with pytest.raises(ValidationError):
        await ReviewService.create_review(db_session, swap.id, learner.id, rating)
