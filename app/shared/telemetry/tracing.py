"""Tracing helpers: the @traced span decorator and current-span utilities."""

import asyncio
from collections.abc import Callable
from functools import wraps
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from app.domain.exceptions import LifecycleException

# Only these keys reach span attributes (kwargs and add_span_attributes);
# anything else, e.g. passwords or contact details, is dropped.
_SAFE_SPAN_ATTR_KEYS = frozenset({
    "tenant_id", "organization_id", "plan_id", "user_id", "transaction_id",
    "bucket_name", "status", "step", "failed_step", "record_type", "count",
    "force_delete", "immediate_s3_delete", "delete_s3", "delete_database",
    "success", "error_code", "s3_deletion_type",
})


def _is_safe(key: str) -> bool:
    return not key.startswith("_") and key.lower() in _SAFE_SPAN_ATTR_KEYS


def _record_failure(span: trace.Span, exc: Exception) -> None:
    span.set_status(Status(StatusCode.ERROR, str(exc)))
    span.record_exception(exc)
    if isinstance(exc, LifecycleException):
        span.set_attribute("error_code", exc.error_code)


def traced(operation_name: str | None = None) -> Callable:
    """Wrap a coroutine function in a span named operation_name.

    Allowlisted keyword arguments are recorded as ``arg.<name>``. Exceptions
    mark the span as error and propagate unchanged.
    """

    def decorator(func: Callable) -> Callable:
        if not asyncio.iscoroutinefunction(func):
            raise TypeError(f"@traced requires an async function, got {func.__qualname__}")
        tracer = trace.get_tracer(func.__module__)
        span_name = operation_name or f"{func.__module__}.{func.__name__}"

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(
                span_name, record_exception=False, set_status_on_exception=False
            ) as span:
                for key, value in kwargs.items():
                    if _is_safe(key) and isinstance(value, (str, int, float, bool)):
                        span.set_attribute(f"arg.{key}", value)
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _record_failure(span, e)
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return wrapper

    return decorator


def add_span_attributes(**attributes: str | int | float | bool | None) -> None:
    """Add allowlisted, non-None attributes to the current span."""
    span = trace.get_current_span()
    if not span.is_recording():
        return
    for key, value in attributes.items():
        if value is not None and _is_safe(key):
            span.set_attribute(key, value)


def get_trace_id() -> str | None:
    """Return the current trace ID as 32-char hex, or None."""
    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        return format(ctx.trace_id, "032x")
    return None
