"""Database layer for approvable."""

from approvable.db.base import ActiveRecordMixin, Base, TimestampMixin, utcnow
from approvable.db.types import ApprovalStatusType
from approvable.db.approvable import Approvable

__all__ = [
    "ActiveRecordMixin",
    "Approvable",
    "ApprovalStatusType",
    "Base",
    "TimestampMixin",
    "utcnow",
]
