"""Approval status model and transition logic."""

from .states import (
    APPROVAL_AT_COLUMN,
    DEFAULT_STATUS_COLUMN,
    ApprovalStatus,
    ApprovalTransition,
    InvalidApprovalStatusError,
    TRANSITION_TARGETS,
    coerce_status,
)
from .machine import ApprovableRecord, ApprovalCallbacks, ApprovalStateMachine

__all__ = [
    "APPROVAL_AT_COLUMN",
    "DEFAULT_STATUS_COLUMN",
    "ApprovalStatus",
    "ApprovalTransition",
    "InvalidApprovalStatusError",
    "TRANSITION_TARGETS",
    "coerce_status",
    "ApprovableRecord",
    "ApprovalCallbacks",
    "ApprovalStateMachine",
]
