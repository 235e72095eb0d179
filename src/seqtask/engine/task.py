# src/seqtask/engine/task.py
from __future__ import annotations

import uuid as uuid_lib
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence, Union

from seqtask.domain.errors import (
    TaskDateError,
    TaskRollbackError,
    TaskRollbackUnsupportedError,
    TaskRunError,
)
from seqtask.domain.states import StepStatus
from seqtask.logging import get_logger

from .events import EventEmitter
from .group import StepGroup
from .step import ACTION_EVENT, STATUS_EVENT, Step

_LOG = get_logger(__name__)

StepEntry = Union[Step, StepGroup]

STEP_STATUS_EVENT = "step_status"
STEP_ACTION_EVENT = "step_action"


@dataclass(frozen=True)
class StepRun:
    step: Step
    data: Any


def flatten(entries: Iterable[StepEntry]) -> list[Step]:
    flat: list[Step] = []
    for entry in entries:
        if isinstance(entry, StepGroup):
            flat.extend(entry.steps)
        else:
            flat.append(entry)
    return flat


class Task(EventEmitter):
    """
    Ordered list of steps and step groups, executed one step at a time.

    Forward runs abort on the first failure of a step that does not continue
    on failure; rollback always visits every step. Both raise one aggregate
    error after the pass if anything failed.

    Events (re-emitted from every flattened step):
      - "step_status" (step)
      - "step_action" (step, data)
    """

    def __init__(
        self,
        type: str,
        steps: Sequence[StepEntry],
        uuid: Optional[str] = None,
    ) -> None:
        super().__init__()
        self.type = type
        self.uuid = uuid if uuid else str(uuid_lib.uuid4())
        self.steps: tuple[StepEntry, ...] = tuple(steps)
        self._flat = flatten(self.steps)

        for step in self._flat:
            step.on(STATUS_EVENT, self._on_step_status)
            step.on(ACTION_EVENT, self._on_step_action)

    def _on_step_status(self, step: Step) -> None:
        self.emit(STEP_STATUS_EVENT, step)

    def _on_step_action(self, step: Step, data: Any) -> None:
        self.emit(STEP_ACTION_EVENT, step, data)

    def flat_steps(self) -> list[Step]:
        return list(self._flat)

    async def start(self) -> None:
        """
        Runs every pending or running step in order.

        Only INIT steps are promoted, so a task rebuilt after a crash picks
        up where it stopped. A step left RUNNING by a previous process is
        re-armed to PENDING and its pre-validation hook decides whether the
        work already happened.
        """
        for step in self._flat:
            if step.status is StepStatus.INIT:
                step.status = StepStatus.PENDING

        selected = [s for s in self._flat if s.status in (StepStatus.PENDING, StepStatus.RUNNING)]
        _LOG.info("Starting task %s (%s): %d step(s) to run", self.uuid, self.type, len(selected))

        errors: list[TaskDateError] = []
        for step in selected:
            if step.status is StepStatus.RUNNING and step.interrupted:
                _LOG.info("Resuming interrupted step %s of task %s", step.key, self.uuid)
                step.status = StepStatus.PENDING
            try:
                await step.action()
            except Exception as e:
                errors.append(TaskDateError.now(e))
                _LOG.warning("Task %s: step %s failed: %s", self.uuid, step.key, e)
                if not step.get_options().continue_on_failure:
                    break

        if errors:
            raise TaskRunError(errors=errors)
        _LOG.info("Task %s finished", self.uuid)

    async def run_next(self) -> Optional[StepRun]:
        """
        Promotes and runs the first INIT step; None when there is none left.
        """
        step = next((s for s in self._flat if s.status is StepStatus.INIT), None)
        if step is None:
            return None
        step.status = StepStatus.PENDING
        return StepRun(step=step, data=await step.action())

    async def rollback(self, *, force: bool = False) -> None:
        if not force and not any(s.get_options().support_rollback for s in self._flat):
            raise TaskRollbackUnsupportedError()

        _LOG.info("Rolling back task %s (%s)", self.uuid, self.type)
        errors: list[TaskDateError] = []
        for step in reversed(self._flat):
            try:
                await step.cancel()
            except Exception as e:
                errors.append(TaskDateError.now(e))
                _LOG.warning("Task %s: rollback of step %s failed: %s", self.uuid, step.key, e)

        if errors:
            raise TaskRollbackError(errors=errors)
        _LOG.info("Task %s rolled back", self.uuid)

    def is_ready(self) -> bool:
        return all(s.is_done() for s in self._flat)

    def to_json(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "uuid": self.uuid,
            "steps": [entry.to_json() for entry in self.steps],
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(type={self.type!r}, uuid={self.uuid!r})"
