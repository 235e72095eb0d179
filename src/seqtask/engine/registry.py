# src/seqtask/engine/registry.py
from __future__ import annotations

from typing import Any, Mapping, Optional, TypeVar

from pydantic import ValidationError as PydanticValidationError

from seqtask.domain.errors import ConflictError, ValidationError
from seqtask.domain.models import GroupSnapshot, StepSnapshot, TaskCreate

from .group import StepGroup
from .step import Step
from .task import StepEntry, Task

S = TypeVar("S", bound=type[Step])


class StepRegistry:
    """
    Maps step keys to concrete step types and rebuilds tasks from their
    persisted shape:

      {"type": ..., "uuid": ...,
       "steps": [{"key": ..., "status": ..., ...payload},
                 {"type": "group", "steps": [...]}]}
    """

    def __init__(self) -> None:
        self._types: dict[str, type[Step]] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._types

    def keys(self) -> list[str]:
        return sorted(self._types)

    def register(self, step_cls: S) -> S:
        key = step_cls.get_key()
        existing = self._types.get(key)
        if existing is not None and existing is not step_cls:
            raise ConflictError(
                f"step key {key!r} already registered to {existing.__name__}",
                details={"key": key},
            )
        self._types[key] = step_cls
        return step_cls

    def build_step(self, data: Mapping[str, Any]) -> Step:
        key = data.get("key")
        step_cls = self._types.get(key) if isinstance(key, str) else None
        if step_cls is None:
            raise ValidationError(f"unknown step key: {key!r}", details={"key": key})
        return step_cls.from_json(data)

    def build_task(self, data: Mapping[str, Any] | TaskCreate, *, task_cls: type[Task] = Task) -> Task:
        if isinstance(data, TaskCreate):
            snapshot = data
        else:
            try:
                snapshot = TaskCreate.model_validate(data)
            except PydanticValidationError as e:
                raise ValidationError(
                    "invalid task snapshot",
                    details={"errors": e.errors(include_url=False, include_context=False)},
                ) from e

        steps: list[StepEntry] = []
        for entry in snapshot.steps:
            if isinstance(entry, GroupSnapshot):
                steps.append(StepGroup(self._build_snapshot(s) for s in entry.steps))
            else:
                steps.append(self._build_snapshot(entry))
        return task_cls(type=snapshot.type, steps=steps, uuid=snapshot.uuid)

    def _build_snapshot(self, snapshot: StepSnapshot) -> Step:
        return self.build_step({"key": snapshot.key, "status": snapshot.status, **snapshot.payload})


default_registry = StepRegistry()


def register_step(step_cls: S, registry: Optional[StepRegistry] = None) -> S:
    """
    Class decorator registering a step type in the default registry.
    """
    return (registry or default_registry).register(step_cls)
