from enum import Enum
import logging
from typing import Any
from fastapi import Request, status
from fastapi.responses import JSONResponse

from src.config import get_settings

logger = logging.getLogger(__name__)

GENERAL_HEADERS = {
    "content-type": "application/json",
    "Access-Control-Allow-Origin": "*",
}

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


class ResourceType(str, Enum):
    TASK = "Task"


# Exceptions
class TaskStoreException(Exception):
    """Raised by a task store when the backend fails to serve a request."""

    def __init__(self, operation: str, message: str | None = None):
        self.operation = operation
        super().__init__(message or f"Task store failed to {operation}")


def serialize_error(exc: BaseException) -> dict[str, Any]:
    error: dict[str, Any] = {
        "name": type(exc).__name__,
        "message": str(exc),
    }
    if exc.__cause__ is not None:
        error["cause"] = serialize_error(exc.__cause__)
    return error


def error_response_content(exc: BaseException) -> dict[str, Any]:
    if not get_settings().EXPOSE_ERROR_DETAILS:
        return {"message": UNEXPECTED_ERROR_MESSAGE}
    return serialize_error(exc)


# Last resort for errors raised outside the task handlers
def unexpected_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error while serving {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        headers=GENERAL_HEADERS,
        content={"message": UNEXPECTED_ERROR_MESSAGE},
    )


# Response definitions for OpenAPI documentation
ResponseDict = dict[int | str, dict[str, Any]]


def message_response(status_code: int, description: str, message: str) -> ResponseDict:
    return {
        status_code: {
            "description": description,
            "content": {"application/json": {"example": {"message": message}}},
        }
    }


def resource_not_found_response(resource_type: ResourceType) -> ResponseDict:
    return message_response(
        404, f"{resource_type.value} not found", f"{resource_type.value} not found"
    )


missing_id_response: ResponseDict = message_response(
    400, "Missing identifier", "Missing 'id' parameter in path"
)

invalid_task_response: ResponseDict = {
    400: {
        "description": "Invalid request",
        "content": {
            "application/json": {
                "examples": {
                    "missing_id": {"value": {"message": "Missing 'id' parameter in path"}},
                    "empty_body": {"value": {"message": "Empty request body"}},
                    "parse_failure": {
                        "value": {"message": "Failed to parse task from request body"}
                    },
                    "id_mismatch": {
                        "value": {
                            "message": "Task ID in path does not match task ID in body"
                        }
                    },
                    "invalid_task": {
                        "value": {"message": "Invalid task in request body"}
                    },
                }
            }
        },
    }
}

internal_error_response: ResponseDict = {
    500: {
        "description": "Internal server error",
        "content": {
            "application/json": {
                "example": {
                    "name": "TaskStoreException",
                    "message": "Task store failed to get task",
                    "cause": {"name": "ConnectionError", "message": "Connection refused"},
                }
            }
        },
    }
}
