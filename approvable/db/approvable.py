"""Approvable mixin for SQLAlchemy models.

Usage::

    class Post(Approvable, TimestampMixin, Base):
        __tablename__ = "posts"
        id = Column(Integer, primary_key=True)

    post = Post()
    session.add(post)
    session.flush()
    post.approve()                     # True
    session.scalars(Post.approved())   # approved posts only

A model can store the status under a different column name by declaring
``APPROVAL_STATUS = "state"``. The Python attribute stays ``approval_status``.
"""

import logging
from typing import Optional

from sqlalchemy import Column, DateTime, event, select, update
from sqlalchemy.orm import declared_attr, validates

from approvable.core.approval.machine import ApprovalCallbacks, ApprovalStateMachine
from approvable.core.approval.states import (
    APPROVAL_AT_COLUMN,
    DEFAULT_STATUS_COLUMN,
    INITIAL_STATUS,
    ApprovalStatus,
    ApprovalTransition,
    coerce_status,
    get_target_status,
)
from approvable.db.base import ActiveRecordMixin, TimestampMixin
from approvable.db.types import ApprovalStatusType

logger = logging.getLogger(__name__)


class Approvable(ActiveRecordMixin):
    """Adds approval_status / approval_at and the approve, reject, suspend operations."""

    # Override per model to rename the status column
    APPROVAL_STATUS = None

    _approval_status_column = DEFAULT_STATUS_COLUMN
    _approval_callbacks = ApprovalCallbacks()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls._approval_status_column = cls.APPROVAL_STATUS or DEFAULT_STATUS_COLUMN
        # Subclasses inherit their parent's hooks; siblings never share them
        cls._approval_callbacks = cls._approval_callbacks.copy()

    @declared_attr
    def approval_status(cls):
        return Column(
            cls.get_approval_status_column(),
            ApprovalStatusType(),
            nullable=False,
            default=INITIAL_STATUS,
            server_default=str(INITIAL_STATUS.value),
            index=True,
        )

    approval_at = Column(APPROVAL_AT_COLUMN, DateTime, nullable=True)

    @validates("approval_status")
    def _validate_approval_status(self, key, value):
        return coerce_status(value)

    # ------------------------------------------------------------------
    # Column resolution
    # ------------------------------------------------------------------

    @classmethod
    def get_approval_status_column(cls) -> str:
        return cls._approval_status_column

    @classmethod
    def get_approval_at_column(cls) -> str:
        return APPROVAL_AT_COLUMN

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    @classmethod
    def register_approval_callback(cls, transition, callback, *, before=False) -> None:
        """Hook a transition on this model. A before-hook returning False vetoes it.

        Subclasses take a copy of their parent's hooks when they are defined, so
        hooks registered on a parent afterwards do not reach existing subclasses.
        """
        cls._approval_callbacks.register(transition, callback, before=before)

    def approval_machine(self) -> ApprovalStateMachine:
        return ApprovalStateMachine(self, type(self)._approval_callbacks)

    def approve(self) -> Optional[bool]:
        return self.approval_machine().approve()

    def reject(self) -> Optional[bool]:
        return self.approval_machine().reject()

    def suspend(self) -> Optional[bool]:
        return self.approval_machine().suspend()

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def is_pending(self) -> bool:
        return self.approval_status == ApprovalStatus.PENDING

    def is_approved(self) -> bool:
        return self.approval_status == ApprovalStatus.APPROVED

    def is_rejected(self) -> bool:
        return self.approval_status == ApprovalStatus.REJECTED

    # ------------------------------------------------------------------
    # Query scopes
    # ------------------------------------------------------------------

    @classmethod
    def with_approval_status(cls, status, query=None):
        """Narrow a Select or legacy Query (default ``select(cls)``) to one status."""
        if query is None:
            query = select(cls)
        return query.filter(cls.approval_status == coerce_status(status))

    @classmethod
    def pending(cls, query=None):
        return cls.with_approval_status(ApprovalStatus.PENDING, query)

    @classmethod
    def approved(cls, query=None):
        return cls.with_approval_status(ApprovalStatus.APPROVED, query)

    @classmethod
    def rejected(cls, query=None):
        return cls.with_approval_status(ApprovalStatus.REJECTED, query)

    # ------------------------------------------------------------------
    # Bulk transitions
    # ------------------------------------------------------------------

    @classmethod
    def bulk_transition(cls, session, transition, *criteria) -> int:
        """
        Apply a transition to every row matching criteria with one UPDATE.

        Callbacks are not run. Returns the number of matched rows.
        """
        transition = ApprovalTransition(transition)
        now = cls.fresh_timestamp()

        values = {
            cls.approval_status: get_target_status(transition),
            cls.approval_at: now,
        }
        if issubclass(cls, TimestampMixin):
            values[cls.updated_at] = now

        stmt = update(cls)
        if criteria:
            stmt = stmt.where(*criteria)
        result = session.execute(stmt.values(values))

        logger.debug("Bulk %s on %s matched %d rows", transition.value, cls.__name__, result.rowcount)
        return result.rowcount

    @classmethod
    def bulk_approve(cls, session, *criteria) -> int:
        return cls.bulk_transition(session, ApprovalTransition.APPROVE, *criteria)

    @classmethod
    def bulk_reject(cls, session, *criteria) -> int:
        return cls.bulk_transition(session, ApprovalTransition.REJECT, *criteria)

    @classmethod
    def bulk_suspend(cls, session, *criteria) -> int:
        return cls.bulk_transition(session, ApprovalTransition.SUSPEND, *criteria)


@event.listens_for(Approvable, "init", propagate=True)
def _default_approval_status(target, args, kwargs):
    # Runs for every mapped subclass whatever its base order
    kwargs.setdefault("approval_status", INITIAL_STATUS)
