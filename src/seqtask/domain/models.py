from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .states import StepStatus


StepKey = Annotated[str, Field(min_length=1, max_length=256)]
TaskUuid = Annotated[str, Field(min_length=1, max_length=256)]


class StepSnapshot(BaseModel):
    """
    Persisted shape of a single step: key, status and any payload fields.

    Payload fields are opaque to the engine and kept as extras.
    """
    model_config = ConfigDict(extra="allow")

    key: StepKey
    status: StepStatus = StepStatus.INIT

    @property
    def payload(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class GroupSnapshot(BaseModel):
    """
    Persisted shape of a step group.
    """
    model_config = ConfigDict(extra="forbid")

    type: Literal["group"]
    steps: list[StepSnapshot] = Field(min_length=1)


StepEntrySnapshot = Union[GroupSnapshot, StepSnapshot]


class TaskCreate(BaseModel):
    """
    Input model for submitting a task, fresh or reconstructed.

    A missing uuid means a fresh task; one is generated on construction.
    """
    model_config = ConfigDict(extra="forbid")

    type: Annotated[str, Field(min_length=1, max_length=256)]
    uuid: Optional[TaskUuid] = None
    steps: list[StepEntrySnapshot] = Field(min_length=1)


class TaskSnapshot(TaskCreate):
    """
    Full persisted shape of a task, as produced by Task.to_json().
    """
    uuid: TaskUuid


class TaskCreateResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")
    uuid: str


class TaskListResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tasks: list[TaskSnapshot]
    total: int


class ErrorResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    error: str
    code: str
    details: dict = Field(default_factory=dict)
