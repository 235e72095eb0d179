# src/seqtask/domain/errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


@dataclass(eq=False)
class SeqTaskError(Exception):
    """
    Base error.

    The API layer maps `code` to HTTP responses consistently.
    """
    message: str
    code: str = "SEQTASK_ERROR"
    details: Optional[dict[str, Any]] = None

    def __str__(self) -> str:
        return self.message


# -------------------------
# Local state violations
# -------------------------


@dataclass(eq=False)
class StepStateError(SeqTaskError):
    code: str = "STEP_STATE_ERROR"


@dataclass(eq=False)
class StepNotPendingError(StepStateError):
    message: str = "TaskStep not in pending state"
    code: str = "STEP_NOT_PENDING"


@dataclass(eq=False)
class StepNotSuccessError(StepStateError):
    message: str = "TaskStep not in success state"
    code: str = "STEP_NOT_SUCCESS"


@dataclass(eq=False)
class StepRollbackUnsupportedError(StepStateError):
    message: str = "TaskStep does not support rollback"
    code: str = "ROLLBACK_UNSUPPORTED"


# -------------------------
# Task-level preconditions
# -------------------------


@dataclass(eq=False)
class TaskError(SeqTaskError):
    code: str = "TASK_ERROR"


@dataclass(eq=False)
class TaskRollbackUnsupportedError(TaskError):
    message: str = "no task step supports rollback"
    code: str = "ROLLBACK_UNSUPPORTED"


@dataclass(eq=False)
class NotFoundError(TaskError):
    code: str = "NOT_FOUND"


@dataclass(eq=False)
class ValidationError(SeqTaskError):
    code: str = "VALIDATION_ERROR"


@dataclass(eq=False)
class ConflictError(SeqTaskError):
    code: str = "CONFLICT"


# -------------------------
# Aggregates
# -------------------------


@dataclass(frozen=True)
class TaskDateError:
    """One recorded step failure within a run or rollback pass."""
    date: datetime
    error: BaseException

    @classmethod
    def now(cls, error: BaseException) -> TaskDateError:
        return cls(date=datetime.now(timezone.utc), error=error)


@dataclass(eq=False)
class TaskAggregateError(SeqTaskError):
    """
    Bundles every step failure of a single pass.

    Only raised once the pass has fully stopped, so `errors` is never partial.
    """
    code: str = "TASK_AGGREGATE_ERROR"
    errors: list[TaskDateError] = field(default_factory=list)

    @property
    def messages(self) -> list[str]:
        return [str(e.error) for e in self.errors]


@dataclass(eq=False)
class TaskRunError(TaskAggregateError):
    message: str = "Task run error"
    code: str = "TASK_RUN_ERROR"


@dataclass(eq=False)
class TaskRollbackError(TaskAggregateError):
    message: str = "Task rollback error"
    code: str = "TASK_ROLLBACK_ERROR"
