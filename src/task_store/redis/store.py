import logging
from redis.exceptions import RedisError

from src.common.redis import RedisClient
from src.common.exceptions import TaskStoreException
from src.common.tracing import traced
from src.task_store.base import DEFAULT_LIST_LIMIT, TaskStore
from src.tasks.schemas import Task

logger = logging.getLogger(__name__)

TASK_FIELDS = ("id", "content", "completed")


def serialize_completed(completed: bool) -> str:
    return "true" if completed else "false"


def deserialize_completed(value: str) -> bool:
    return value == "true"


class RedisTaskStore(TaskStore):
    """Stores each task as a hash at ``{table_name}:{id}``.

    The set at ``{table_name}`` holds the ids of every stored task so that
    listing is a single ``SORT`` instead of a keyspace scan.
    """

    def __init__(
        self,
        *,
        redis_client: RedisClient,
        table_name: str,
        limit: int = DEFAULT_LIST_LIMIT,
    ):
        self.client = redis_client
        self.table_name = table_name
        self.limit = limit

    def _get_task_key(self, task_id: str) -> str:
        return f"{self.table_name}:{task_id}"

    @traced("RedisTaskStore.get_task")
    async def get_task(self, task_id: str) -> Task | None:
        try:
            record = await self.client.hgetall(self._get_task_key(task_id))
        except RedisError as e:
            raise TaskStoreException("get task") from e

        if not record:
            return None

        return Task(
            id=record["id"],
            content=record["content"],
            completed=deserialize_completed(record["completed"]),
        )

    @traced("RedisTaskStore.get_tasks")
    async def get_tasks(self) -> list[Task]:
        try:
            rows = await self.client.sort(
                self.table_name,
                start=0,
                num=self.limit,
                by="nosort",
                get=[f"{self.table_name}:*->{field}" for field in TASK_FIELDS],
                groups=True,
            )
        except RedisError as e:
            raise TaskStoreException("get tasks") from e

        tasks: list[Task] = []
        for task_id, content, completed in rows:
            # Index entry without a hash, e.g. removed outside this store
            if task_id is None:
                continue
            tasks.append(
                Task(
                    id=task_id,
                    content=content,
                    completed=deserialize_completed(completed),
                )
            )
        return tasks

    @traced("RedisTaskStore.put_task")
    async def put_task(self, task: Task) -> None:
        task_key = self._get_task_key(task.id)
        pipeline = self.client.pipeline(transaction=True)
        pipeline.delete(task_key)
        pipeline.hset(
            task_key,
            mapping={
                "id": task.id,
                "content": task.content,
                "completed": serialize_completed(task.completed),
            },
        )
        pipeline.sadd(self.table_name, task.id)

        try:
            await pipeline.execute()
        except RedisError as e:
            raise TaskStoreException("put task") from e

        logger.debug(f"Stored task '{task.id}' at {task_key}")

    @traced("RedisTaskStore.delete_task")
    async def delete_task(self, task_id: str) -> None:
        pipeline = self.client.pipeline(transaction=True)
        pipeline.delete(self._get_task_key(task_id))
        pipeline.srem(self.table_name, task_id)

        try:
            await pipeline.execute()
        except RedisError as e:
            raise TaskStoreException("delete task") from e
