import logging
from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.redis import RedisInstrumentor  # type: ignore
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor  # type: ignore

from src.config import Settings

logger = logging.getLogger(__name__)


def build_tracer_provider(service_name: str) -> TracerProvider:
    provider = TracerProvider(resource=Resource(attributes={SERVICE_NAME: service_name}))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter()))
    return provider


def setup_opentelemetry(settings: Settings, app: FastAPI) -> None:
    """Export spans over OTLP and instrument the app and its task store backend.

    Store methods are traced by ``src.common.tracing.traced`` regardless of
    backend; library instrumentation is only added for the backend in use.
    """
    logger.info(f"Setting up instrumentation for {settings.OTEL_SERVICE_NAME}...")
    trace.set_tracer_provider(build_tracer_provider(settings.OTEL_SERVICE_NAME))

    FastAPIInstrumentor.instrument_app(app)  # type: ignore
    logger.info("FastAPI Instrumentation enabled.")

    if settings.TASK_STORE_BACKEND == "redis":
        RedisInstrumentor().instrument()
        logger.info("Redis Instrumentation enabled.")
