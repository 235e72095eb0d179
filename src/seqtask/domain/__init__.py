"""
Domain layer for seqtask.

- states: StepStatus / PreValidation enums
- models: Pydantic models for the persisted shape and API input/output
- errors: domain-level exceptions
"""

from .states import PreValidation, StepStatus
from .models import (
    ErrorResponse,
    GroupSnapshot,
    StepSnapshot,
    TaskCreate,
    TaskCreateResponse,
    TaskListResponse,
    TaskSnapshot,
)
from .errors import (
    ConflictError,
    NotFoundError,
    SeqTaskError,
    StepNotPendingError,
    StepNotSuccessError,
    StepRollbackUnsupportedError,
    StepStateError,
    TaskAggregateError,
    TaskDateError,
    TaskError,
    TaskRollbackError,
    TaskRollbackUnsupportedError,
    TaskRunError,
    ValidationError,
)

__all__ = [
    "StepStatus",
    "PreValidation",
    "StepSnapshot",
    "GroupSnapshot",
    "TaskCreate",
    "TaskSnapshot",
    "TaskCreateResponse",
    "TaskListResponse",
    "ErrorResponse",
    "SeqTaskError",
    "StepStateError",
    "StepNotPendingError",
    "StepNotSuccessError",
    "StepRollbackUnsupportedError",
    "TaskError",
    "TaskRollbackUnsupportedError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "TaskDateError",
    "TaskAggregateError",
    "TaskRunError",
    "TaskRollbackError",
]
