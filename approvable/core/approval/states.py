"""Approval statuses and the transitions between them.

Transitions:

    transition   from    to
    ----------   -----   --------
    approve      any     APPROVED
    reject       any     REJECTED
    suspend      any     PENDING

Every status reaches every other status directly through exactly one
transition. There are no terminal states. New records start PENDING.
"""

from enum import Enum
from typing import Any, Dict

DEFAULT_STATUS_COLUMN = "approval_status"
APPROVAL_AT_COLUMN = "approval_at"


class InvalidApprovalStatusError(ValueError):
    """Raised when a value cannot be interpreted as an ApprovalStatus."""

    def __init__(self, value: Any):
        super().__init__(f"Invalid approval status: {value!r}")
        self.value = value


class ApprovalStatus(int, Enum):
    """Stored as a small integer."""

    PENDING = 0
    APPROVED = 1
    REJECTED = 2


class ApprovalTransition(str, Enum):
    """Operations that change an approval status."""

    APPROVE = "approve"    # any → APPROVED
    REJECT = "reject"      # any → REJECTED
    SUSPEND = "suspend"    # any → PENDING (revert a prior decision)


TRANSITION_TARGETS: Dict[ApprovalTransition, ApprovalStatus] = {
    ApprovalTransition.APPROVE: ApprovalStatus.APPROVED,
    ApprovalTransition.REJECT: ApprovalStatus.REJECTED,
    ApprovalTransition.SUSPEND: ApprovalStatus.PENDING,
}

INITIAL_STATUS = ApprovalStatus.PENDING


def coerce_status(value: Any) -> ApprovalStatus:
    """Interpret an enum member, its integer value or its name as an ApprovalStatus."""
    if isinstance(value, ApprovalStatus):
        return value
    # bool is an int subclass but never a meaningful status
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return ApprovalStatus(value)
        except ValueError:
            raise InvalidApprovalStatusError(value) from None
    if isinstance(value, str):
        try:
            return ApprovalStatus[value.strip().upper()]
        except KeyError:
            raise InvalidApprovalStatusError(value) from None
    raise InvalidApprovalStatusError(value)


def get_target_status(transition: ApprovalTransition) -> ApprovalStatus:
    """Status a transition lands on, whatever the current status is."""
    return TRANSITION_TARGETS[ApprovalTransition(transition)]


def can_transition(from_status: ApprovalStatus, transition: ApprovalTransition) -> bool:
    """Check that both arguments are valid; no transition is ever forbidden."""
    try:
        coerce_status(from_status)
        ApprovalTransition(transition)
    except ValueError:
        return False
    return True
