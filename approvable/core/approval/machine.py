"""Approval state machine.

Applies approve / reject / suspend to any record that exposes the small
persistence contract described by ``ApprovableRecord``. The SQLAlchemy mixin in
``approvable.db.approvable`` delegates here, but nothing in this module knows
about SQLAlchemy.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Protocol

from .states import (
    ApprovalStatus,
    ApprovalTransition,
    get_target_status,
)

logger = logging.getLogger(__name__)


class ApprovableRecord(Protocol):
    """What the state machine needs from a record."""

    approval_status: ApprovalStatus
    approval_at: Optional[datetime]

    @property
    def exists(self) -> bool: ...

    def fresh_timestamp(self) -> datetime: ...

    def save(self, *, now: Optional[datetime] = None) -> bool: ...


Callback = Callable[[ApprovableRecord], Optional[bool]]


class ApprovalCallbacks:
    """Before/after hooks keyed by transition.

    A before-hook returning ``False`` vetoes the transition. After-hooks run
    only once the record has been saved; their return value is ignored.
    """

    def __init__(self):
        self._before: Dict[ApprovalTransition, List[Callback]] = {}
        self._after: Dict[ApprovalTransition, List[Callback]] = {}

    def register(
        self,
        transition: ApprovalTransition,
        callback: Callback,
        *,
        before: bool = False,
    ) -> None:
        hooks = self._before if before else self._after
        hooks.setdefault(ApprovalTransition(transition), []).append(callback)

    def copy(self) -> "ApprovalCallbacks":
        clone = ApprovalCallbacks()
        clone._before = {k: list(v) for k, v in self._before.items()}
        clone._after = {k: list(v) for k, v in self._after.items()}
        return clone

    def run_before(self, transition: ApprovalTransition, record: ApprovableRecord) -> bool:
        for callback in self._before.get(transition, []):
            if callback(record) is False:
                return False
        return True

    def run_after(self, transition: ApprovalTransition, record: ApprovableRecord) -> None:
        for callback in self._after.get(transition, []):
            try:
                callback(record)
            except Exception:
                # The record is already saved; a failing hook must not undo that
                logger.exception("After-%s callback failed for %r", transition.value, record)


class ApprovalStateMachine:
    """
    Performs approval transitions on a single record.

    Every transition:
    - refuses (returns None) when the record was never persisted
    - captures one timestamp and uses it for approval_at and updated_at
    - saves the record and returns the save result
    """

    def __init__(self, record: ApprovableRecord, callbacks: Optional[ApprovalCallbacks] = None):
        self.record = record
        self.callbacks = callbacks or ApprovalCallbacks()

    @property
    def status(self) -> ApprovalStatus:
        return self.record.approval_status

    def transition(self, transition: ApprovalTransition) -> Optional[bool]:
        """
        Move the record to the status the transition targets.

        Returns:
            None if the record has no persisted identity (nothing is changed),
            False if a before-callback vetoed (nothing is changed) or the save
            failed (in-memory fields stay changed), True otherwise.
        """
        transition = ApprovalTransition(transition)
        record = self.record

        if not record.exists:
            logger.info("Refusing to %s %r: record is not persisted", transition.value, record)
            return None

        now = record.fresh_timestamp()

        if not self.callbacks.run_before(transition, record):
            logger.info("%s of %r vetoed by callback", transition.value.capitalize(), record)
            return False

        from_status = record.approval_status
        record.approval_status = get_target_status(transition)
        record.approval_at = now

        saved = record.save(now=now)
        if not saved:
            logger.warning("Could not save %r after %s", record, transition.value)
            return False

        logger.debug(
            "%r: %s -> %s at %s",
            record,
            from_status.name if from_status is not None else None,
            record.approval_status.name,
            now.isoformat(),
        )
        self.callbacks.run_after(transition, record)
        return True

    def approve(self) -> Optional[bool]:
        return self.transition(ApprovalTransition.APPROVE)

    def reject(self) -> Optional[bool]:
        return self.transition(ApprovalTransition.REJECT)

    def suspend(self) -> Optional[bool]:
        return self.transition(ApprovalTransition.SUSPEND)
