import json
import pytest
from pytest_mock import MockerFixture
from unittest.mock import Mock
from fastapi.responses import JSONResponse
from redis.exceptions import ConnectionError

from src.common.exceptions import TaskStoreException
from src.config import Settings
from src.task_store.base import TaskStore
from src.task_store.memory.store import InMemoryTaskStore
from src.tasks import handlers
from src.tasks.schemas import Task


def response_json(response: JSONResponse):
    return json.loads(response.body)


def store_failure(operation: str) -> TaskStoreException:
    try:
        raise TaskStoreException(operation) from ConnectionError("Connection refused")
    except TaskStoreException as e:
        return e


@pytest.fixture
def task_store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture
def mock_task_store(mocker: MockerFixture) -> Mock:
    return mocker.AsyncMock(spec=TaskStore)


@pytest.fixture
def sample_task() -> Task:
    return Task(id="abc", content="buy milk", completed=False)


@pytest.fixture
def sample_body() -> bytes:
    return b'{"id":"abc","content":"buy milk","completed":false}'


def assert_general_headers(response: JSONResponse) -> None:
    assert response.headers["content-type"] == "application/json"
    assert response.headers["access-control-allow-origin"] == "*"


class TestListTasks:
    @pytest.mark.asyncio
    async def test_success(self, task_store: InMemoryTaskStore, sample_task: Task) -> None:
        await task_store.put_task(sample_task)

        response = await handlers.list_tasks(task_store)

        assert response.status_code == 200
        assert response_json(response) == {
            "tasks": [{"id": "abc", "content": "buy milk", "completed": False}]
        }
        assert_general_headers(response)

    @pytest.mark.asyncio
    async def test_empty(self, task_store: InMemoryTaskStore) -> None:
        response = await handlers.list_tasks(task_store)

        assert response.status_code == 200
        assert response_json(response) == {"tasks": []}

    @pytest.mark.asyncio
    async def test_store_failure(self, mock_task_store: Mock) -> None:
        mock_task_store.get_tasks.side_effect = store_failure("get tasks")

        response = await handlers.list_tasks(mock_task_store)

        assert response.status_code == 500
        assert response_json(response) == {
            "name": "TaskStoreException",
            "message": "Task store failed to get tasks",
            "cause": {"name": "ConnectionError", "message": "Connection refused"},
        }
        assert_general_headers(response)


class TestGetTask:
    @pytest.mark.asyncio
    async def test_found(self, task_store: InMemoryTaskStore, sample_task: Task) -> None:
        await task_store.put_task(sample_task)

        response = await handlers.get_task(task_store, "abc")

        assert response.status_code == 200
        assert response_json(response) == sample_task.model_dump()

    @pytest.mark.asyncio
    async def test_not_found(self, task_store: InMemoryTaskStore) -> None:
        response = await handlers.get_task(task_store, "missing-id")

        assert response.status_code == 404
        assert response_json(response) == {"message": "Task not found"}
        assert_general_headers(response)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("task_id", [None, ""])
    async def test_missing_id(self, mock_task_store: Mock, task_id: str | None) -> None:
        response = await handlers.get_task(mock_task_store, task_id)

        assert response.status_code == 400
        assert response_json(response) == {"message": "Missing 'id' parameter in path"}
        mock_task_store.get_task.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_failure(self, mock_task_store: Mock) -> None:
        mock_task_store.get_task.side_effect = store_failure("get task")

        response = await handlers.get_task(mock_task_store, "abc")

        assert response.status_code == 500
        assert response_json(response)["name"] == "TaskStoreException"

    @pytest.mark.asyncio
    async def test_unexpected_failure_is_server_error(self, mock_task_store: Mock) -> None:
        mock_task_store.get_task.side_effect = RuntimeError("boom")

        response = await handlers.get_task(mock_task_store, "abc")

        assert response.status_code == 500
        assert response_json(response) == {"name": "RuntimeError", "message": "boom"}

    @pytest.mark.asyncio
    async def test_store_failure_redacted(
        self, mock_task_store: Mock, mocker: MockerFixture
    ) -> None:
        mocker.patch(
            "src.common.exceptions.get_settings",
            return_value=Settings(EXPOSE_ERROR_DETAILS=False),
        )
        mock_task_store.get_task.side_effect = store_failure("get task")

        response = await handlers.get_task(mock_task_store, "abc")

        assert response.status_code == 500
        assert response_json(response) == {"message": "An unexpected error occurred"}


class TestPutTask:
    @pytest.mark.asyncio
    async def test_created(
        self, task_store: InMemoryTaskStore, sample_body: bytes, sample_task: Task
    ) -> None:
        response = await handlers.put_task(task_store, "abc", sample_body)

        assert response.status_code == 201
        assert response_json(response) == {"message": "Task created"}
        assert_general_headers(response)
        assert await task_store.get_task("abc") == sample_task

    @pytest.mark.asyncio
    async def test_replaces_existing(
        self, task_store: InMemoryTaskStore, sample_task: Task
    ) -> None:
        await task_store.put_task(sample_task)

        response = await handlers.put_task(
            task_store, "abc", '{"id":"abc","content":"buy oat milk","completed":true}'
        )

        assert response.status_code == 201
        assert await task_store.get_task("abc") == Task(
            id="abc", content="buy oat milk", completed=True
        )

    @pytest.mark.asyncio
    async def test_drops_unknown_fields(self, mock_task_store: Mock) -> None:
        body = b'{"id":"abc","content":"buy milk","completed":false,"owner":"me"}'

        response = await handlers.put_task(mock_task_store, "abc", body)

        assert response.status_code == 201
        stored = mock_task_store.put_task.await_args.args[0]
        assert stored.model_dump() == {"id": "abc", "content": "buy milk", "completed": False}

    @pytest.mark.asyncio
    async def test_missing_id(self, mock_task_store: Mock, sample_body: bytes) -> None:
        response = await handlers.put_task(mock_task_store, None, sample_body)

        assert response.status_code == 400
        assert response_json(response) == {"message": "Missing 'id' parameter in path"}
        mock_task_store.put_task.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [None, b"", ""])
    async def test_empty_body(self, mock_task_store: Mock, body: bytes | str | None) -> None:
        response = await handlers.put_task(mock_task_store, "abc", body)

        assert response.status_code == 400
        assert response_json(response) == {"message": "Empty request body"}
        mock_task_store.put_task.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body", [b"{not json", b'"abc"', b"42", b"null", b"\xff\xfe"]
    )
    async def test_unparseable_body(self, mock_task_store: Mock, body: bytes) -> None:
        response = await handlers.put_task(mock_task_store, "abc", body)

        assert response.status_code == 400
        assert response_json(response) == {
            "message": "Failed to parse task from request body"
        }
        mock_task_store.put_task.assert_not_called()

    @pytest.mark.asyncio
    async def test_id_mismatch(self, mock_task_store: Mock) -> None:
        body = b'{"id":"xyz","content":"buy milk","completed":false}'

        response = await handlers.put_task(mock_task_store, "abc", body)

        assert response.status_code == 400
        assert response_json(response) == {
            "message": "Task ID in path does not match task ID in body"
        }
        mock_task_store.put_task.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [b"[1, 2]", b"[]", b'[{"id":"abc"}]'])
    async def test_array_body_is_mismatch(self, mock_task_store: Mock, body: bytes) -> None:
        response = await handlers.put_task(mock_task_store, "abc", body)

        assert response.status_code == 400
        assert response_json(response) == {
            "message": "Task ID in path does not match task ID in body"
        }
        mock_task_store.put_task.assert_not_called()

    @pytest.mark.asyncio
    async def test_body_without_id_is_mismatch(self, mock_task_store: Mock) -> None:
        response = await handlers.put_task(
            mock_task_store, "abc", b'{"content":"buy milk","completed":false}'
        )

        assert response.status_code == 400
        assert response_json(response) == {
            "message": "Task ID in path does not match task ID in body"
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            b'{"id":"abc","completed":false}',
            b'{"id":"abc","content":"buy milk"}',
            b'{"id":"abc","content":"buy milk","completed":"maybe"}',
        ],
    )
    async def test_invalid_task(self, mock_task_store: Mock, body: bytes) -> None:
        response = await handlers.put_task(mock_task_store, "abc", body)

        assert response.status_code == 400
        assert response_json(response) == {"message": "Invalid task in request body"}
        mock_task_store.put_task.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_failure(self, mock_task_store: Mock, sample_body: bytes) -> None:
        mock_task_store.put_task.side_effect = store_failure("put task")

        response = await handlers.put_task(mock_task_store, "abc", sample_body)

        assert response.status_code == 500
        assert response_json(response)["message"] == "Task store failed to put task"
        assert_general_headers(response)


class TestDeleteTask:
    @pytest.mark.asyncio
    async def test_deleted(self, task_store: InMemoryTaskStore, sample_task: Task) -> None:
        await task_store.put_task(sample_task)

        response = await handlers.delete_task(task_store, "abc")

        assert response.status_code == 200
        assert response_json(response) == {"message": "Task deleted"}
        assert await task_store.get_task("abc") is None

    @pytest.mark.asyncio
    async def test_delete_missing_task(self, task_store: InMemoryTaskStore) -> None:
        response = await handlers.delete_task(task_store, "missing-id")

        assert response.status_code == 200
        assert response_json(response) == {"message": "Task deleted"}

    @pytest.mark.asyncio
    async def test_missing_id(self, mock_task_store: Mock) -> None:
        response = await handlers.delete_task(mock_task_store, None)

        assert response.status_code == 400
        mock_task_store.delete_task.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_failure(self, mock_task_store: Mock) -> None:
        mock_task_store.delete_task.side_effect = store_failure("delete task")

        response = await handlers.delete_task(mock_task_store, "abc")

        assert response.status_code == 500
        assert response_json(response)["cause"]["name"] == "ConnectionError"
