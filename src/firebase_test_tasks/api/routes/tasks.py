from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from firebase_test_tasks.api.dependencies import get_connection
from firebase_test_tasks.api.errors import BadRequestError, NotFoundError, StoreError
from firebase_test_tasks.api.openapi import error_responses
from firebase_test_tasks.api.schemas import TaskListResponse, TaskRequest, TaskResponse
from firebase_test_tasks.options import TaskEnvelope, TaskRequestError, UnknownTaskError
from firebase_test_tasks.tasks import TASKS, run_task

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
)


@router.get("", response_model=TaskListResponse, responses=error_responses(500))
def list_tasks() -> TaskListResponse:
    return TaskListResponse(tasks=sorted(TASKS))


@router.post(
    "/{task_name}",
    response_model=TaskResponse,
    responses=error_responses(400, 404, 422, 500, 502),
)
def call_task(
    task_name: str,
    payload: TaskRequest,
    connection: Any = Depends(get_connection),
) -> TaskResponse:
    if task_name not in TASKS:
        raise NotFoundError(f"タスクが存在しません: {task_name}")
    envelope = TaskEnvelope(
        action=payload.action,
        path=payload.path,
        options=payload.options,
        data=payload.data,
    )
    try:
        result = run_task(connection, task_name, envelope)
    except UnknownTaskError as exc:
        raise NotFoundError(str(exc)) from exc
    except TaskRequestError as exc:
        raise BadRequestError(str(exc)) from exc
    except Exception as exc:
        # Already logged with action/path by the dispatcher.
        raise StoreError(
            str(exc) or exc.__class__.__name__,
            details=[{"type": exc.__class__.__name__, "action": payload.action, "path": payload.path}],
        ) from exc
    return TaskResponse(result=result)
