from functools import lru_cache
from typing import Any, Literal
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application Configuration
    TASK_API_VERSION: str = "v0.1.x"
    API_NAME: str = "Task API"
    API_SUMMARY: str = "A minimal task-management API"

    TASK_API_KEY: str | None = None

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    CORS_ENABLED: bool = False
    CORS_ORIGINS: list[str] = ["*"]

    # When disabled, 500 responses hide the underlying error
    EXPOSE_ERROR_DETAILS: bool = True

    # Database Configuration
    REDIS_URL: str = "redis://localhost:6379"
    POSTGRES_URL: str = "postgresql://localhost:5432/tasks"  # Assumes a local Postgres db named 'tasks' exists

    TASK_STORE_BACKEND: Literal["redis", "postgres", "memory"] = "redis"
    TASK_TABLE_NAME: str = "tasks"
    TASK_LIST_LIMIT: int = 20

    # OpenTelemetry Settings
    OTEL_ENABLED: bool = False
    OTEL_SERVICE_NAME: str = "task-api"

    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: Any):
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("CORS_ORIGINS", mode="before")
    def validate_list_from_string(cls, v: Any):
        if isinstance(v, str):
            return [item.strip() for item in v.split(",")]
        return v

    @field_validator("TASK_LIST_LIMIT")
    def validate_list_limit(cls, v: int):
        if v < 1:
            raise ValueError("TASK_LIST_LIMIT must be at least 1")
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings():
    return Settings()
