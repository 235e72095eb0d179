# src/seqtask/engine/step.py
from __future__ import annotations

import abc
import copy
from dataclasses import dataclass
from typing import Any, Generic, Mapping, Optional, TypeVar

from seqtask.domain.errors import (
    StepNotPendingError,
    StepNotSuccessError,
    StepRollbackUnsupportedError,
    ValidationError,
)
from seqtask.domain.states import PreValidation, StepStatus
from seqtask.logging import get_logger

from .events import EventEmitter
from .result import ResultCell

_LOG = get_logger(__name__)

T = TypeVar("T")

STATUS_EVENT = "status"
ACTION_EVENT = "action"


@dataclass(frozen=True)
class StepOptions:
    """
    Per-step-type execution policy.
    """
    continue_on_failure: bool = False
    support_rollback: bool = False
    emit_data: bool = False


class Step(EventEmitter, abc.ABC, Generic[T]):
    """
    Atomic unit of task work.

    Concrete steps implement the hooks below; the engine only ever talks to
    a step through action()/cancel()/wait() and the status property.

    Events:
      - "status" (step): after every status write
      - "action" (step, data): after a successful action, if options.emit_data
    """

    def __init__(
        self,
        payload: Optional[Mapping[str, Any]] = None,
        *,
        status: StepStatus | str = StepStatus.INIT,
    ) -> None:
        super().__init__()
        self.payload: dict[str, Any] = copy.deepcopy(dict(payload or {}))
        self._status = StepStatus(status)
        # left RUNNING by a previous process; see Task.start
        self.interrupted = self._status is StepStatus.RUNNING
        self._data: Optional[T] = None
        self._result: ResultCell[T] = ResultCell()
        if self._status is StepStatus.SUCCESS:
            # rebuilt after completion; the result itself is not persisted
            self._result.resolve(None)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]):
        """
        Rebuilds a step of this type from its persisted shape.
        """
        fields = dict(data)
        key = fields.pop("key", None)
        status = fields.pop("status", StepStatus.INIT)
        expected = cls.get_key()
        if key is not None and key != expected:
            raise ValidationError(
                f"step key mismatch: expected {expected!r}, got {key!r}",
                details={"expected": expected, "key": key},
            )
        return cls(fields, status=status)

    # -------------------------
    # Hooks
    # -------------------------

    @classmethod
    @abc.abstractmethod
    def get_key(cls) -> str:
        """Discriminator used to rebuild this step type from persisted state."""

    @abc.abstractmethod
    def name(self) -> str:
        ...

    @abc.abstractmethod
    def get_options(self) -> StepOptions:
        ...

    @abc.abstractmethod
    async def handle_pre_validation(self) -> PreValidation:
        """
        Checks whether this step's side effect already happened, typically
        after a restart that left the step in RUNNING.
        """

    @abc.abstractmethod
    async def handle_action(self) -> T:
        ...

    @abc.abstractmethod
    async def handle_cancel(self) -> bool:
        """
        Compensates a completed action. Returns whether compensation fully
        succeeded.
        """

    # -------------------------
    # State machine
    # -------------------------

    @property
    def key(self) -> str:
        return self.get_key()

    @property
    def status(self) -> StepStatus:
        return self._status

    @status.setter
    def status(self, status: StepStatus | str) -> None:
        new = StepStatus(status)
        _LOG.debug("Step %s: %s -> %s", self.key, self._status, new)
        self._status = new
        self.emit(STATUS_EVENT, self)

    def is_done(self) -> bool:
        return self._status.is_done

    async def action(self) -> T:
        if self._status is not StepStatus.PENDING:
            raise StepNotPendingError()

        try:
            pre = await self.handle_pre_validation()
        except Exception as e:
            self.status = StepStatus.FAILURE
            self._result.reject(e)
            raise

        self.interrupted = False
        if pre is PreValidation.ALREADY_COMPLETE:
            _LOG.info("Step %s already complete, skipping action", self.key)
            self.status = StepStatus.SUCCESS
            self._result.resolve(self._data)
            return self._data  # type: ignore[return-value]

        self.status = StepStatus.RUNNING
        try:
            data = await self.handle_action()
        except Exception as e:
            self.status = StepStatus.FAILURE
            self._result.reject(e)
            raise

        self._data = data
        if self.get_options().emit_data:
            self.emit(ACTION_EVENT, self, data)
        self.status = StepStatus.SUCCESS
        self._result.resolve(data)
        return data

    async def cancel(self) -> bool:
        if self._status is not StepStatus.SUCCESS:
            raise StepNotSuccessError()
        if not self.get_options().support_rollback:
            raise StepRollbackUnsupportedError()

        self.status = StepStatus.ROLLBACK
        try:
            compensated = await self.handle_cancel()
        except Exception:
            self.status = StepStatus.FAILURE
            raise
        self.status = StepStatus.INIT
        return compensated

    async def wait(self) -> Optional[T]:
        """
        Waits for the outcome of this step's action.

        Settles once: a later rollback or re-run does not change what is
        returned here. A failure nobody has waited on yet is replaced by a
        later successful run.
        """
        return await self._result.wait()

    def to_json(self) -> dict[str, Any]:
        return {"key": self.key, "status": self._status.value, **copy.deepcopy(self.payload)}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self.key!r}, status={self._status.value!r})"
