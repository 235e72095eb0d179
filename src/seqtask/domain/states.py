# src/seqtask/domain/states.py
from __future__ import annotations

from enum import StrEnum


class StepStatus(StrEnum):
    """
    Lifecycle states of a single step. Values are the persisted names.

    Suggested semantics:
      - INIT: not yet scheduled (also where a rolled-back step returns to)
      - PENDING: promoted by the owning task, eligible for action()
      - RUNNING: domain action handler in flight
      - ROLLBACK: domain cancel handler in flight
      - SUCCESS: action completed (done)
      - FAILURE: action or cancel failed (done)

    Note:
      - `rank` is an aggregation order for step groups, not a lifecycle order.
        A group reports the highest-ranked status of its members, which reads
        as "most advanced / worst observed" and nothing more.
    """

    INIT = "init"
    PENDING = "pending"
    RUNNING = "running"
    ROLLBACK = "rollback"
    SUCCESS = "success"
    FAILURE = "failure"

    @property
    def rank(self) -> int:
        return _RANK[self]

    @property
    def is_done(self) -> bool:
        return self in (StepStatus.SUCCESS, StepStatus.FAILURE)


_RANK = {
    StepStatus.INIT: 0,
    StepStatus.PENDING: 1,
    StepStatus.RUNNING: 2,
    StepStatus.ROLLBACK: 3,
    StepStatus.SUCCESS: 4,
    StepStatus.FAILURE: 5,
}


class PreValidation(StrEnum):
    """
    Outcome of a step's pre-validation hook.

    ALREADY_COMPLETE tells the engine the side effect happened before an
    interruption, so the action handler must not run again.
    """

    RESUME = "resume"
    ALREADY_COMPLETE = "already_complete"
