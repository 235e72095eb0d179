# src/seqtask/api/routes.py
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from seqtask.domain.errors import (
    ConflictError,
    NotFoundError,
    SeqTaskError,
    TaskAggregateError,
    TaskRollbackUnsupportedError,
    ValidationError,
)
from seqtask.domain.models import (
    ErrorResponse,
    TaskCreate,
    TaskCreateResponse,
    TaskListResponse,
    TaskSnapshot,
)
from seqtask.engine import StepRegistry, TaskManager
from seqtask.logging import get_logger

from .deps import get_manager, get_registry

_LOG = get_logger(__name__)
router = APIRouter()


def _error_response(err: SeqTaskError, http_status: int) -> JSONResponse:
    payload = ErrorResponse(
        error=err.message,
        code=err.code,
        details=err.details or {},
    ).model_dump()
    return JSONResponse(status_code=http_status, content=payload)


def _aggregate_details(err: TaskAggregateError) -> dict[str, Any]:
    return {
        "errors": [
            {"date": e.date.isoformat(), "error": str(e.error), "type": type(e.error).__name__}
            for e in err.errors
        ]
    }


@router.get("/healthz")
def healthz() -> dict:
    return {"ok": True}


@router.post("/tasks", response_model=TaskCreateResponse, status_code=201)
async def submit_task(
    payload: TaskCreate,
    manager: TaskManager = Depends(get_manager),
    registry: StepRegistry = Depends(get_registry),
):
    """
    Submit a task in its persisted shape.

    Notes:
    - Without a uuid a fresh task is created.
    - With a uuid the task is reconstructed as-is and resumed if not ready.
    - Every step key must be registered.
    """
    if payload.uuid is not None and payload.uuid in manager:
        return _error_response(
            ConflictError(f"task {payload.uuid} already exists", details={"uuid": payload.uuid}),
            409,
        )
    try:
        task = registry.build_task(payload)
    except ValidationError as e:
        return _error_response(e, 400)

    uuid = manager.add_task(task)
    _LOG.info("Accepted task %s (%s)", uuid, task.type)
    return TaskCreateResponse(uuid=uuid)


@router.get("/tasks/{uuid}", response_model=TaskSnapshot)
def get_task(
    uuid: str,
    manager: TaskManager = Depends(get_manager),
):
    try:
        return manager.get(uuid).to_json()
    except NotFoundError as e:
        return _error_response(e, 404)


@router.get("/tasks", response_model=TaskListResponse)
def list_tasks(
    limit: int = Query(default=200, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    manager: TaskManager = Depends(get_manager),
):
    tasks = manager.to_json()
    return TaskListResponse(tasks=tasks[offset:offset + limit], total=len(tasks))


@router.post("/tasks/{uuid}/rollback", response_model=None)
async def rollback_task(
    uuid: str,
    force: bool = Query(default=False),
    manager: TaskManager = Depends(get_manager),
):
    if uuid in manager.running():
        return _error_response(
            ConflictError(f"task {uuid} is still running", details={"uuid": uuid}),
            409,
        )
    try:
        await manager.rollback(uuid, force=force)
        return {"uuid": uuid}
    except NotFoundError as e:
        return _error_response(e, 404)
    except TaskRollbackUnsupportedError as e:
        return _error_response(e, 400)
    except TaskAggregateError as e:
        e.details = _aggregate_details(e)
        return _error_response(e, 409)
