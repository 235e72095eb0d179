# src/seqtask/engine/result.py
from __future__ import annotations

import asyncio
from enum import StrEnum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class CellState(StrEnum):
    UNSET = "unset"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class ResultCell(Generic[T]):
    """
    Single-resolution result holder.

    A resolution is final. A rejection is final once some wait() has seen it;
    until then a later resolve() or reject() replaces it, so a failed attempt
    nobody waited on does not mask a later success. Waiters that arrive
    before settlement park on a future of the running loop and are woken in
    arrival order; waiters that arrive afterwards get the outcome immediately.
    """

    def __init__(self) -> None:
        self._state = CellState.UNSET
        self._value: Optional[T] = None
        self._error: Optional[BaseException] = None
        self._waiters: list[asyncio.Future] = []
        self._observed = False

    @property
    def state(self) -> CellState:
        return self._state

    @property
    def settled(self) -> bool:
        return self._state is not CellState.UNSET

    def _final(self) -> bool:
        if self._state is CellState.REJECTED:
            return self._observed
        return self.settled

    def resolve(self, value: Optional[T]) -> bool:
        if self._final():
            return False
        self._state = CellState.RESOLVED
        self._value = value
        for fut in self._drain_waiters():
            fut.set_result(value)
        return True

    def reject(self, error: BaseException) -> bool:
        if self._final():
            return False
        self._state = CellState.REJECTED
        self._error = error
        for fut in self._drain_waiters():
            fut.set_exception(error)
        return True

    async def wait(self) -> Optional[T]:
        self._observed = True
        if self._state is CellState.RESOLVED:
            return self._value
        if self._state is CellState.REJECTED:
            assert self._error is not None
            raise self._error
        fut = asyncio.get_running_loop().create_future()
        self._waiters.append(fut)
        return await fut

    def _drain_waiters(self) -> list[asyncio.Future]:
        # a waiter cancelled by its caller is simply dropped
        waiters = [f for f in self._waiters if not f.done()]
        self._waiters.clear()
        return waiters
