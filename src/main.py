import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware

from src.common.api_key import get_api_key
from src.common.exceptions import (
    unexpected_exception_handler,
    internal_error_response,
)
from src.common.opentelemetry import setup_opentelemetry
from src.common.redis import close_redis_client, create_redis_client
from src.config import get_settings
from src.task_store.backend import get_task_store_backend
from src.task_store.postgres.store import PostgresTaskStore
from src.tasks.router import router as tasks_router
from src.healthcheck.router import router as health_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.redis_client = (
        create_redis_client(settings.REDIS_URL)
        if settings.TASK_STORE_BACKEND == "redis"
        else None
    )
    app.state.task_store = get_task_store_backend(app.state.redis_client, settings)
    logger.info(
        f"Using {settings.TASK_STORE_BACKEND} task store with table '{settings.TASK_TABLE_NAME}'"
    )
    yield
    await close_redis_client(app.state.redis_client)
    if isinstance(app.state.task_store, PostgresTaskStore):
        app.state.task_store.engine.dispose()


app = FastAPI(
    title=settings.API_NAME,
    summary=settings.API_SUMMARY,
    dependencies=[Depends(get_api_key)],
    lifespan=lifespan,
    responses={**internal_error_response},
    version=settings.TASK_API_VERSION,
)

if settings.OTEL_ENABLED:
    setup_opentelemetry(settings, app)

if settings.CORS_ENABLED:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.exception_handler(Exception)(unexpected_exception_handler)


app.include_router(health_router)
app.include_router(tasks_router)
