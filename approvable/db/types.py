from sqlalchemy import SmallInteger
from sqlalchemy.types import TypeDecorator

from approvable.core.approval.states import ApprovalStatus, coerce_status


class ApprovalStatusType(TypeDecorator):
    """ApprovalStatus stored as its small-integer value (0/1/2)."""

    impl = SmallInteger
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return int(coerce_status(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return ApprovalStatus(value)

    @property
    def python_type(self):
        return ApprovalStatus
