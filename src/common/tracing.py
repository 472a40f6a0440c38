from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

T = TypeVar("T")

tracer = trace.get_tracer("src.task_store")


def traced(span_name: str):
    """Run an async store method inside an OpenTelemetry span.

    The span is tagged with the task id when the call carries one, either as
    a ``task_id`` argument or as a ``task`` model.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            with tracer.start_as_current_span(
                span_name, record_exception=False, set_status_on_exception=False
            ) as span:
                task_id = _task_id_from_call(args, kwargs)
                if task_id is not None:
                    span.set_attribute("task.id", task_id)
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    span.record_exception(e)
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    raise

        return wrapper

    return decorator


def _task_id_from_call(args: tuple[Any, ...], kwargs: dict[str, Any]) -> str | None:
    if "task_id" in kwargs:
        return kwargs["task_id"]
    if "task" in kwargs:
        return getattr(kwargs["task"], "id", None)

    # args[0] is the store instance
    if len(args) > 1:
        first = args[1]
        if isinstance(first, str):
            return first
        return getattr(first, "id", None)
    return None
