from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from src.common.exceptions import (
    ResourceType,
    invalid_task_response,
    missing_id_response,
    resource_not_found_response,
)
from src.task_store.base import TaskStore
from src.task_store.dependencies import get_task_store
from src.tasks import handlers
from src.tasks.schemas import MessageResponse, Task, TaskList


router = APIRouter(
    prefix="/tasks",
    tags=["Tasks"],
)


@router.get("", response_model=TaskList)
async def list_tasks(
    task_store: TaskStore = Depends(get_task_store),
) -> JSONResponse:
    return await handlers.list_tasks(task_store)


@router.get(
    "/{task_id}",
    response_model=Task,
    responses={
        **missing_id_response,
        **resource_not_found_response(ResourceType.TASK),
    },
)
async def get_task(
    task_id: str, task_store: TaskStore = Depends(get_task_store)
) -> JSONResponse:
    return await handlers.get_task(task_store, task_id)


@router.put(
    "/{task_id}",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
    responses={**invalid_task_response},
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": Task.model_json_schema()}},
        }
    },
)
async def put_task(
    task_id: str,
    request: Request,
    task_store: TaskStore = Depends(get_task_store),
) -> JSONResponse:
    body = await request.body()
    return await handlers.put_task(task_store, task_id, body)


@router.delete(
    "/{task_id}",
    response_model=MessageResponse,
    responses={**missing_id_response},
)
async def delete_task(
    task_id: str, task_store: TaskStore = Depends(get_task_store)
) -> JSONResponse:
    return await handlers.delete_task(task_store, task_id)


# Requests that address a single task without naming it
@router.put("/", include_in_schema=False)
async def put_task_without_id(
    request: Request, task_store: TaskStore = Depends(get_task_store)
) -> JSONResponse:
    body = await request.body()
    return await handlers.put_task(task_store, None, body)


@router.delete("/", include_in_schema=False)
async def delete_task_without_id(
    task_store: TaskStore = Depends(get_task_store),
) -> JSONResponse:
    return await handlers.delete_task(task_store, None)
