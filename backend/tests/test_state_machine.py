"""
Swap lifecycle table tests.

Every (status, action) pair is either a legal move, an idempotent retry,
or an InvalidTransitionError.
"""

import uuid

import pytest

from backend.app.core.exceptions import AuthorizationError, InvalidTransitionError
from backend.app.domain.swaps import state_machine
from backend.app.models.swap_enums import SwapAction, SwapStatus

LEGAL = {
    (SwapStatus.PENDING, SwapAction.ACCEPT): SwapStatus.ACCEPTED,
    (SwapStatus.PENDING, SwapAction.DECLINE): SwapStatus.DECLINED,
    (SwapStatus.PENDING, SwapAction.CANCEL): SwapStatus.CANCELLED,
    (SwapStatus.ACCEPTED, SwapAction.BEGIN): SwapStatus.IN_PROGRESS,
    (SwapStatus.ACCEPTED, SwapAction.CANCEL): SwapStatus.CANCELLED,
    (SwapStatus.IN_PROGRESS, SwapAction.COMPLETE): SwapStatus.COMPLETED,
}

RETRIES = {
    (SwapStatus.ACCEPTED, SwapAction.ACCEPT),
    (SwapStatus.DECLINED, SwapAction.DECLINE),
    (SwapStatus.IN_PROGRESS, SwapAction.BEGIN),
    (SwapStatus.CANCELLED, SwapAction.CANCEL),
}

ALL_PAIRS = [(status, action) for status in SwapStatus for action in SwapAction]


@pytest.mark.parametrize("status,action", ALL_PAIRS)
def test_transition_table(status, action):
    if (status, action) in LEGAL:
        assert state_machine.resolve(status, action) == LEGAL[(status, action)]
    elif (status, action) in RETRIES:
        assert state_machine.resolve(status, action) is None
        assert state_machine.is_idempotent_retry(status, action)
    else:
        with pytest.raises(InvalidTransitionError) as exc_info:
            state_machine.resolve(status, action)
        assert exc_info.value.error_code == "ERR_STATE_001"
        assert exc_info.value.details == {"current_status": status.value, "action": action.value}


def test_complete_is_never_replayed():
    """A completed swap must reject complete instead of reporting a no-op."""
    assert not state_machine.is_idempotent_retry(SwapStatus.COMPLETED, SwapAction.COMPLETE)
    with pytest.raises(InvalidTransitionError):
        state_machine.resolve(SwapStatus.COMPLETED, SwapAction.COMPLETE)


@pytest.mark.parametrize("status", sorted(state_machine.TERMINAL_STATUSES, key=lambda s: s.value))
def test_terminal_statuses_have_no_outgoing_moves(status):
    for action in SwapAction:
        if (status, action) in RETRIES:
            continue
        with pytest.raises(InvalidTransitionError) as exc_info:
            state_machine.resolve(status, action)
        assert exc_info.value.message == f"Cannot {action.value} a swap that is already {status.value}"


@pytest.mark.parametrize("action", [SwapAction.ACCEPT, SwapAction.DECLINE])
def test_respond_is_teacher_only(action):
    teacher_id, learner_id = uuid.uuid4(), uuid.uuid4()

    state_machine.authorize(action, teacher_id, teacher_id, learner_id)

    with pytest.raises(AuthorizationError):
        state_machine.authorize(action, learner_id, teacher_id, learner_id)

    with pytest.raises(AuthorizationError):
        state_machine.authorize(action, uuid.uuid4(), teacher_id, learner_id)


@pytest.mark.parametrize("action", [SwapAction.BEGIN, SwapAction.CANCEL, SwapAction.COMPLETE])
def test_shared_actions_allow_both_parties(action):
    teacher_id, learner_id = uuid.uuid4(), uuid.uuid4()

    state_machine.authorize(action, teacher_id, teacher_id, learner_id)
    state_machine.authorize(action, learner_id, teacher_id, learner_id)

    with pytest.raises(AuthorizationError) as exc_info:
        state_machine.authorize(action, uuid.uuid4(), teacher_id, learner_id)
    assert exc_info.value.status_code == 403
