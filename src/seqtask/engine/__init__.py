# src/seqtask/engine/__init__.py
"""
Execution engine for seqtask.

- step: Step base class + state machine
- group: StepGroup composite
- task: Task orchestration (run forward, rollback, resume)
- manager: in-memory task registry with background start
- registry: step-key dispatch for rebuilding persisted tasks
- recovery: restoring persisted tasks into a manager
"""

from .events import EventEmitter
from .group import StepGroup
from .manager import TaskManager
from .recovery import restore_tasks
from .registry import StepRegistry, default_registry, register_step
from .result import CellState, ResultCell
from .step import Step, StepOptions
from .task import StepRun, Task

__all__ = [
    "EventEmitter",
    "ResultCell",
    "CellState",
    "Step",
    "StepOptions",
    "StepGroup",
    "Task",
    "StepRun",
    "TaskManager",
    "StepRegistry",
    "default_registry",
    "register_step",
    "restore_tasks",
]
