from typing import Generator
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pytest_mock import MockerFixture

from src.config import Settings, get_settings
from src.main import app as main_app


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        TASK_STORE_BACKEND="memory",
        TASK_API_KEY=None,
        OTEL_ENABLED=False,
    )


@pytest.fixture(autouse=True)
def patch_settings(test_settings: Settings, mocker: MockerFixture) -> None:
    mocker.patch("src.main.settings", test_settings)


@pytest.fixture
def test_app(test_settings: Settings) -> Generator[FastAPI, None, None]:
    def get_test_settings() -> Settings:
        return test_settings

    main_app.dependency_overrides[get_settings] = get_test_settings
    yield main_app
    main_app.dependency_overrides.clear()


@pytest.fixture
def test_client(test_app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(test_app) as client:
        yield client
