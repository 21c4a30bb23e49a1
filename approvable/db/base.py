"""Declarative base and the persistence contract shared by mapped models."""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, inspect
from sqlalchemy.orm import declarative_base, object_session

from approvable.core.config import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC now; DateTime columns are stored without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimestampMixin:
    """created_at / updated_at columns. save() keeps updated_at current."""

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)


class ActiveRecordMixin:
    """Lets a mapped instance report whether it is stored and save itself."""

    @property
    def exists(self) -> bool:
        """True while a stored row backs the instance (flushed or loaded, not deleted)."""
        state = inspect(self)
        if not state.has_identity or state.deleted or state.was_deleted:
            return False
        # Marked with session.delete() but not flushed yet
        return state.session is None or self not in state.session.deleted

    @classmethod
    def fresh_timestamp(cls) -> datetime:
        now = utcnow()
        if get_settings().timestamp_precision == "seconds":
            now = now.replace(microsecond=0)
        return now

    def uses_timestamps(self) -> bool:
        return isinstance(self, TimestampMixin)

    def touch(self, now: Optional[datetime] = None) -> None:
        if self.uses_timestamps():
            self.updated_at = now or self.fresh_timestamp()

    def save(self, *, now: Optional[datetime] = None) -> bool:
        """
        Flush this instance, and only this instance, through its session.

        Other pending changes in the session are left for the caller to flush.

        Returns False when the instance is not attached to any session.
        Commit is left to whoever owns the session. Database errors raised
        by the flush propagate.
        """
        session = object_session(self)
        if session is None:
            logger.warning("Cannot save %r: not attached to a session", self)
            return False

        self.touch(now)
        session.flush([self])
        return True
