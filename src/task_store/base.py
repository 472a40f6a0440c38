from abc import ABC, abstractmethod

from src.tasks.schemas import Task

DEFAULT_LIST_LIMIT = 20


class TaskStore(ABC):
    """Persistence contract consumed by the task handlers.

    Implementations raise ``TaskStoreException`` when the backend fails. A
    lookup that finds nothing is not a failure and returns ``None``.
    """

    @abstractmethod
    async def get_task(self, task_id: str) -> Task | None:
        pass

    @abstractmethod
    async def get_tasks(self) -> list[Task]:
        """Return up to the store's list limit of tasks, in no particular order."""
        pass

    @abstractmethod
    async def put_task(self, task: Task) -> None:
        """Create the task, or replace every field of an existing one."""
        pass

    @abstractmethod
    async def delete_task(self, task_id: str) -> None:
        """Delete the task. Deleting a missing task is not an error."""
        pass
