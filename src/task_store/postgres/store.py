import logging
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import Insert, MetaData, Table, create_engine, delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from src.common.exceptions import TaskStoreException
from src.common.tracing import traced
from src.task_store.base import DEFAULT_LIST_LIMIT, TaskStore
from src.task_store.postgres.model import build_task_table
from src.tasks.schemas import Task

logger = logging.getLogger(__name__)

UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def build_upsert(dialect_name: str, table: Table, task: Task) -> Insert:
    """INSERT ... ON CONFLICT (id) DO UPDATE, so concurrent puts resolve last-writer-wins."""
    statement = UPSERT_DIALECTS[dialect_name](table).values(
        id=task.id, content=task.content, completed=task.completed
    )
    return statement.on_conflict_do_update(
        index_elements=[table.c.id],
        set_={
            "content": statement.excluded.content,
            "completed": statement.excluded.completed,
        },
    )


class PostgresTaskStore(TaskStore):
    def __init__(
        self,
        *,
        database_url: str,
        table_name: str,
        limit: int = DEFAULT_LIST_LIMIT,
    ):
        self.engine = create_engine(database_url)
        if self.engine.dialect.name not in UPSERT_DIALECTS:
            raise ValueError(
                f"Unsupported database dialect for task store: {self.engine.dialect.name}"
            )
        self.metadata = MetaData()
        self.table = build_task_table(self.metadata, table_name)
        self.limit = limit
        self.metadata.create_all(self.engine)

    def _row_to_task(self, row) -> Task:
        return Task(id=row.id, content=row.content, completed=row.completed)

    def _get_task(self, task_id: str) -> Task | None:
        with self.engine.connect() as connection:
            row = connection.execute(
                select(self.table).where(self.table.c.id == task_id)
            ).first()
            return self._row_to_task(row) if row else None

    def _get_tasks(self) -> list[Task]:
        with self.engine.connect() as connection:
            rows = connection.execute(select(self.table).limit(self.limit)).all()
            return [self._row_to_task(row) for row in rows]

    def _put_task(self, task: Task) -> None:
        statement = build_upsert(self.engine.dialect.name, self.table, task)
        with self.engine.begin() as connection:
            connection.execute(statement)

    def _delete_task(self, task_id: str) -> None:
        with self.engine.begin() as connection:
            connection.execute(delete(self.table).where(self.table.c.id == task_id))

    @traced("PostgresTaskStore.get_task")
    async def get_task(self, task_id: str) -> Task | None:
        try:
            return await run_in_threadpool(self._get_task, task_id)
        except SQLAlchemyError as e:
            raise TaskStoreException("get task") from e

    @traced("PostgresTaskStore.get_tasks")
    async def get_tasks(self) -> list[Task]:
        try:
            return await run_in_threadpool(self._get_tasks)
        except SQLAlchemyError as e:
            raise TaskStoreException("get tasks") from e

    @traced("PostgresTaskStore.put_task")
    async def put_task(self, task: Task) -> None:
        try:
            await run_in_threadpool(self._put_task, task)
        except SQLAlchemyError as e:
            raise TaskStoreException("put task") from e

        logger.debug(f"Stored task '{task.id}' in {self.table.name}")

    @traced("PostgresTaskStore.delete_task")
    async def delete_task(self, task_id: str) -> None:
        try:
            await run_in_threadpool(self._delete_task, task_id)
        except SQLAlchemyError as e:
            raise TaskStoreException("delete task") from e
