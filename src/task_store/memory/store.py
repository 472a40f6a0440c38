from src.common.tracing import traced
from src.task_store.base import DEFAULT_LIST_LIMIT, TaskStore
from src.tasks.schemas import Task


class InMemoryTaskStore(TaskStore):
    """Process-local store for tests and local development.

    Tasks are copied on the way in and on the way out.
    """

    def __init__(self, *, limit: int = DEFAULT_LIST_LIMIT):
        self.limit = limit
        self._tasks: dict[str, Task] = {}

    @traced("InMemoryTaskStore.get_task")
    async def get_task(self, task_id: str) -> Task | None:
        task = self._tasks.get(task_id)
        return task.model_copy(deep=True) if task else None

    @traced("InMemoryTaskStore.get_tasks")
    async def get_tasks(self) -> list[Task]:
        tasks = list(self._tasks.values())[: self.limit]
        return [task.model_copy(deep=True) for task in tasks]

    @traced("InMemoryTaskStore.put_task")
    async def put_task(self, task: Task) -> None:
        self._tasks[task.id] = task.model_copy(deep=True)

    @traced("InMemoryTaskStore.delete_task")
    async def delete_task(self, task_id: str) -> None:
        self._tasks.pop(task_id, None)
