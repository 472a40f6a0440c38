"""Request handlers for the task endpoints.

Each handler validates its raw inputs, makes at most one call to the task
store and maps the outcome to a JSON response. Client errors are answered
before the store is touched; any exception raised by the store becomes a 500.
"""

import json
import logging
from typing import Any
from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.common.exceptions import GENERAL_HEADERS, error_response_content
from src.task_store.base import TaskStore
from src.tasks.schemas import MessageResponse, Task, TaskList

logger = logging.getLogger(__name__)

MISSING_ID_MESSAGE = "Missing 'id' parameter in path"
EMPTY_BODY_MESSAGE = "Empty request body"
PARSE_FAILURE_MESSAGE = "Failed to parse task from request body"
ID_MISMATCH_MESSAGE = "Task ID in path does not match task ID in body"
INVALID_TASK_MESSAGE = "Invalid task in request body"
NOT_FOUND_MESSAGE = "Task not found"
CREATED_MESSAGE = "Task created"
DELETED_MESSAGE = "Task deleted"


def json_response(status_code: int, content: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, headers=GENERAL_HEADERS, content=content)


def message_response(status_code: int, message: str) -> JSONResponse:
    return json_response(status_code, MessageResponse(message=message).model_dump())


def error_response(exc: Exception) -> JSONResponse:
    return json_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, error_response_content(exc)
    )


def parse_task_payload(body: bytes | str) -> dict[str, Any] | list[Any]:
    payload = json.loads(body)
    # Arrays count as objects; having no id they fail the id check instead
    if not isinstance(payload, (dict, list)):
        raise ValueError("Parsed task is not an object")
    return payload


def payload_task_id(payload: dict[str, Any] | list[Any]) -> Any:
    return payload.get("id") if isinstance(payload, dict) else None


async def list_tasks(store: TaskStore) -> JSONResponse:
    try:
        tasks = await store.get_tasks()
    except Exception as e:
        logger.exception(f"Unexpected error occurred while trying to retrieve tasks: {e}")
        return error_response(e)

    logger.info(f"Retrieved {len(tasks)} tasks")
    return json_response(status.HTTP_200_OK, TaskList(tasks=tasks).model_dump())


async def get_task(store: TaskStore, task_id: str | None) -> JSONResponse:
    if not task_id:
        logger.warning("Missing 'id' parameter in path while trying to retrieve a task")
        return message_response(status.HTTP_400_BAD_REQUEST, MISSING_ID_MESSAGE)

    try:
        task = await store.get_task(task_id)
    except Exception as e:
        logger.exception(f"Unexpected error occurred while trying to retrieve task '{task_id}': {e}")
        return error_response(e)

    if task is None:
        logger.info(f"Task '{task_id}' not found")
        return message_response(status.HTTP_404_NOT_FOUND, NOT_FOUND_MESSAGE)

    return json_response(status.HTTP_200_OK, task.model_dump())


async def put_task(
    store: TaskStore, task_id: str | None, body: bytes | str | None
) -> JSONResponse:
    if not task_id:
        logger.warning("Missing 'id' parameter in path while trying to create a task")
        return message_response(status.HTTP_400_BAD_REQUEST, MISSING_ID_MESSAGE)

    if not body:
        logger.warning("Empty request body provided while trying to create a task")
        return message_response(status.HTTP_400_BAD_REQUEST, EMPTY_BODY_MESSAGE)

    try:
        payload = parse_task_payload(body)
    except ValueError as e:
        logger.warning(f"Failed to parse task '{task_id}' from request body: {e}")
        return message_response(status.HTTP_400_BAD_REQUEST, PARSE_FAILURE_MESSAGE)

    body_task_id = payload_task_id(payload)
    if body_task_id != task_id:
        logger.warning(
            f"Task ID in path {task_id} does not match task ID in body {body_task_id}"
        )
        return message_response(status.HTTP_400_BAD_REQUEST, ID_MISMATCH_MESSAGE)

    try:
        task = Task.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Invalid task '{task_id}' in request body: {e}")
        return message_response(status.HTTP_400_BAD_REQUEST, INVALID_TASK_MESSAGE)

    try:
        await store.put_task(task)
    except Exception as e:
        logger.exception(f"Unexpected error occurred while trying to create task '{task_id}': {e}")
        return error_response(e)

    logger.info(f"Task '{task_id}' stored")
    return message_response(status.HTTP_201_CREATED, CREATED_MESSAGE)


async def delete_task(store: TaskStore, task_id: str | None) -> JSONResponse:
    if not task_id:
        logger.warning("Missing 'id' parameter in path while trying to delete a task")
        return message_response(status.HTTP_400_BAD_REQUEST, MISSING_ID_MESSAGE)

    try:
        await store.delete_task(task_id)
    except Exception as e:
        logger.exception(f"Unexpected error occurred while trying to delete task '{task_id}': {e}")
        return error_response(e)

    logger.info(f"Task '{task_id}' deleted")
    return message_response(status.HTTP_200_OK, DELETED_MESSAGE)
