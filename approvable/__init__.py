"""Tri-state approval (pending, approved, rejected) for SQLAlchemy models."""

from approvable.core.approval import (
    ApprovalStatus,
    ApprovalTransition,
    InvalidApprovalStatusError,
)
from approvable.db import Approvable, Base, TimestampMixin

__all__ = [
    "Approvable",
    "ApprovalStatus",
    "ApprovalTransition",
    "Base",
    "InvalidApprovalStatusError",
    "TimestampMixin",
]
