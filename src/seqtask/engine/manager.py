# src/seqtask/engine/manager.py
from __future__ import annotations

import asyncio
from typing import Any, Iterable

from seqtask.domain.errors import NotFoundError
from seqtask.logging import get_logger

from .task import Task

_LOG = get_logger(__name__)


class TaskManager:
    """
    In-memory registry of tasks keyed by uuid.

    Adding a task that is not ready starts it in the background on the
    running event loop. Background failures are logged; callers observe
    outcomes through task events, step wait() or the serialized state.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._runs: dict[str, asyncio.Task[None]] = {}

    def __contains__(self, uuid: object) -> bool:
        return uuid in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def import_tasks(self, tasks: Iterable[Task]) -> None:
        """
        Replaces the stored tasks. Nothing is started.
        """
        self._tasks = {task.uuid: task for task in tasks}

    def add_task(self, task: Task) -> str:
        self._tasks[task.uuid] = task
        if not task.is_ready():
            self._start_in_background(task)
        return task.uuid

    def get(self, uuid: str) -> Task:
        task = self._tasks.get(uuid)
        if task is None:
            raise NotFoundError(f"task {uuid} not found", details={"uuid": uuid})
        return task

    async def rollback(self, uuid: str, *, force: bool = False) -> None:
        await self.get(uuid).rollback(force=force)

    def to_json(self) -> list[dict[str, Any]]:
        return [task.to_json() for task in self._tasks.values()]

    def running(self) -> list[str]:
        return [uuid for uuid, run in self._runs.items() if not run.done()]

    async def drain(self) -> None:
        """
        Waits for every background run still in flight.
        """
        runs = [run for run in self._runs.values() if not run.done()]
        if runs:
            _LOG.info("Waiting for %d running task(s)...", len(runs))
            await asyncio.gather(*runs, return_exceptions=True)

    def _start_in_background(self, task: Task) -> None:
        run = asyncio.get_running_loop().create_task(task.start(), name=f"seqtask-{task.uuid}")
        self._runs[task.uuid] = run
        run.add_done_callback(self._on_run_done(task.uuid))

    def _on_run_done(self, uuid: str):
        def _cb(run: asyncio.Task[None]) -> None:
            if self._runs.get(uuid) is run:
                del self._runs[uuid]
            if run.cancelled():
                _LOG.warning("Task %s run was cancelled", uuid)
                return
            try:
                run.result()
            except Exception as e:
                _LOG.exception("Task %s run raised: %r", uuid, e)

        return _cb
