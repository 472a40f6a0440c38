from typing import Any
from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy import Engine, text

from src.task_store.base import TaskStore
from src.task_store.dependencies import get_task_store
from src.task_store.postgres.store import PostgresTaskStore
from src.task_store.redis.store import RedisTaskStore

router = APIRouter()


def check_postgres(engine: Engine) -> None:
    with engine.connect() as connection:
        result = connection.execute(text("SELECT 1")).scalar()
        if result != 1:
            raise Exception("Postgres health check failed")


@router.get(
    "/healthcheck",
    tags=["Healthcheck"],
    status_code=status.HTTP_200_OK,
    responses={
        200: {
            "description": "Healthcheck status",
            "content": {
                "application/json": {
                    "example": {
                        "api": {"status": "ok"},
                        "redis": {"status": "ok"},
                    }
                }
            },
        },
        503: {
            "description": "Service unavailable",
            "content": {
                "application/json": {
                    "example": {
                        "api": {"status": "ok"},
                        "redis": {"status": "error", "message": "Connection error"},
                    }
                }
            },
        },
    },
)
async def healthcheck(
    task_store: TaskStore = Depends(get_task_store),
) -> JSONResponse:
    health_status: dict[str, Any] = {"api": {"status": "ok"}}
    has_error = False

    # Probe the connections the store already holds
    if isinstance(task_store, RedisTaskStore):
        health_status["redis"] = {"status": "ok"}
        try:
            await task_store.client.ping()
        except Exception as e:
            health_status["redis"].update({"status": "error", "message": str(e)})
            has_error = True

    elif isinstance(task_store, PostgresTaskStore):
        health_status["postgres"] = {"status": "ok"}
        try:
            await run_in_threadpool(check_postgres, task_store.engine)
        except Exception as e:
            health_status["postgres"].update({"status": "error", "message": str(e)})
            has_error = True

    if has_error:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=health_status
        )

    return JSONResponse(status_code=status.HTTP_200_OK, content=health_status)
