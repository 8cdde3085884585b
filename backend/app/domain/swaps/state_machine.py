"""
Swap lifecycle rules.

Pure transition table: which action is legal from which status, who may
trigger it, and which status it leads to. No I/O happens here; the swap
service applies the result with a compare-and-set update.
"""

from dataclasses import dataclass
from typing import FrozenSet, Optional

from backend.app.core.exceptions import AuthorizationError, InvalidTransitionError
from backend.app.models.swap_enums import SwapAction, SwapStatus


@dataclass(frozen=True)
class Transition:
    sources: FrozenSet[SwapStatus]
    target: SwapStatus
    teacher_only: bool = False


TRANSITIONS = {
    SwapAction.ACCEPT: Transition(frozenset({SwapStatus.PENDING}), SwapStatus.ACCEPTED, teacher_only=True),
    SwapAction.DECLINE: Transition(frozenset({SwapStatus.PENDING}), SwapStatus.DECLINED, teacher_only=True),
    SwapAction.BEGIN: Transition(frozenset({SwapStatus.ACCEPTED}), SwapStatus.IN_PROGRESS),
    SwapAction.CANCEL: Transition(frozenset({SwapStatus.PENDING, SwapStatus.ACCEPTED}), SwapStatus.CANCELLED),
    SwapAction.COMPLETE: Transition(frozenset({SwapStatus.IN_PROGRESS}), SwapStatus.COMPLETED),
}

TERMINAL_STATUSES = frozenset({SwapStatus.COMPLETED, SwapStatus.DECLINED, SwapStatus.CANCELLED})


def authorize(action: SwapAction, actor_id, teacher_id, learner_id) -> None:
    """Raise AuthorizationError unless the actor may trigger `action` on this swap."""
    transition = TRANSITIONS[action]
    if transition.teacher_only:
        if actor_id != teacher_id:
            raise AuthorizationError(
                f"Only the teacher can {action.value} this swap",
                details={"action": action.value}
            )
        return

    if actor_id not in (teacher_id, learner_id):
        raise AuthorizationError(
            "Only the swap's teacher or learner can change it",
            details={"action": action.value}
        )


def resolve(current: SwapStatus, action: SwapAction) -> Optional[SwapStatus]:
    """
    Resolve the status an action leads to.

    Returns:
        The target status, or None when the swap already sits in the
        action's target status (an idempotent retry). `complete` never
        resolves to a no-op: settlement must not be replayed.

    Raises:
        InvalidTransitionError if the action is not legal from `current`
    """
    transition = TRANSITIONS[action]

    if current in transition.sources:
        return transition.target

    if current == transition.target and action != SwapAction.COMPLETE:
        return None

    if current in TERMINAL_STATUSES:
        raise InvalidTransitionError(
            current.value, action.value,
            message=f"Cannot {action.value} a swap that is already {current.value}"
        )

    raise InvalidTransitionError(current.value, action.value)


def is_idempotent_retry(current: SwapStatus, action: SwapAction) -> bool:
    return action != SwapAction.COMPLETE and current == TRANSITIONS[action].target
