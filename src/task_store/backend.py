from src.config import Settings
from src.common.redis import RedisClient
from src.task_store.base import TaskStore
from src.task_store.memory.store import InMemoryTaskStore
from src.task_store.postgres.store import PostgresTaskStore
from src.task_store.redis.store import RedisTaskStore


def get_task_store_backend(
    redis_client: RedisClient | None,
    settings: Settings,
) -> TaskStore:
    if settings.TASK_STORE_BACKEND == "redis":
        if redis_client is None:
            raise ValueError("The redis task store backend requires a Redis client")
        return RedisTaskStore(
            redis_client=redis_client,
            table_name=settings.TASK_TABLE_NAME,
            limit=settings.TASK_LIST_LIMIT,
        )
    elif settings.TASK_STORE_BACKEND == "postgres":
        return PostgresTaskStore(
            database_url=settings.POSTGRES_URL,
            table_name=settings.TASK_TABLE_NAME,
            limit=settings.TASK_LIST_LIMIT,
        )
    elif settings.TASK_STORE_BACKEND == "memory":
        return InMemoryTaskStore(limit=settings.TASK_LIST_LIMIT)
    else:
        raise ValueError(
            f"Unsupported task store backend: {settings.TASK_STORE_BACKEND}"
        )
