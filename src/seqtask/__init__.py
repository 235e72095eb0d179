"""
seqtask: sequential step execution with compensating rollback and resume.
"""

from seqtask.domain import (
    PreValidation,
    StepStatus,
    TaskAggregateError,
    TaskDateError,
    TaskRollbackError,
    TaskRunError,
)
from seqtask.engine import (
    Step,
    StepGroup,
    StepOptions,
    StepRegistry,
    Task,
    TaskManager,
    register_step,
    restore_tasks,
)

__version__ = "0.1.0"

__all__ = [
    "PreValidation",
    "StepStatus",
    "TaskDateError",
    "TaskAggregateError",
    "TaskRunError",
    "TaskRollbackError",
    "Step",
    "StepGroup",
    "StepOptions",
    "StepRegistry",
    "Task",
    "TaskManager",
    "register_step",
    "restore_tasks",
]
