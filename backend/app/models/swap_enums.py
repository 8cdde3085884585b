"""
Swap-related enumerations.
"""

import enum


class SwapStatus(str, enum.Enum):
    """Swap status enumeration."""
    PENDING = "pending"  # Requested by the learner, awaiting the teacher
    ACCEPTED = "accepted"  # Teacher agreed, session not started
    IN_PROGRESS = "in_progress"  # Session running, credits still held by the learner
    COMPLETED = "completed"  # Settled (terminal)
    DECLINED = "declined"  # Rejected by the teacher (terminal)
    CANCELLED = "cancelled"  # Withdrawn by either party before the session (terminal)


class SwapAction(str, enum.Enum):
    """Actions accepted by the swap transition entrypoint."""
    ACCEPT = "accept"
    DECLINE = "decline"
    BEGIN = "begin"
    CANCEL = "cancel"
    COMPLETE = "complete"


class MeetingType(str, enum.Enum):
    """How the teaching session takes place."""
    IN_PERSON = "in_person"
    ONLINE = "online"
    HYBRID = "hybrid"
