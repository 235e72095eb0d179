# src/seqtask/engine/recovery.py
from __future__ import annotations

from typing import Any, Iterable, Mapping

from seqtask.logging import get_logger

from .manager import TaskManager
from .registry import StepRegistry

_LOG = get_logger(__name__)


def restore_tasks(
    manager: TaskManager,
    snapshots: Iterable[Mapping[str, Any]],
    registry: StepRegistry,
) -> int:
    """
    Crash recovery:
    - Rebuild each persisted task through the registry
    - Add it to the manager, which restarts tasks that are not ready;
      steps left RUNNING are resumed through their pre-validation hook

    Must be called with a running event loop. Returns number of tasks resumed.
    """
    resumed = 0
    restored = 0
    for snapshot in snapshots:
        task = registry.build_task(snapshot)
        if not task.is_ready():
            resumed += 1
        manager.add_task(task)
        restored += 1

    if restored:
        _LOG.info("Recovery restored %d task(s), resumed %d.", restored, resumed)
    return resumed
