"""OpenTelemetry tracing decorators."""

import functools
import inspect
from collections.abc import Callable
from typing import Any, TypeVar

from opentelemetry import trace

F = TypeVar("F", bound=Callable[..., Any])


def traced(
    span_name: str | None = None, service_name: str = "marketplace-client"
) -> Callable[[F], F]:
    """Decorator that wraps a function call in an OpenTelemetry span.

    Exceptions are recorded on the span and re-raised unchanged.

    Args:
        span_name: Name for the span (defaults to the function name)
        service_name: Tracer name, also set as a span attribute

    Returns:
        Decorated function with tracing

    Example:
        @traced("menu.add")
        async def add(self, item: MenuItemInput) -> MenuItem:
            ...
    """

    def decorator(func: F) -> F:
        name = span_name or func.__name__
        tracer = trace.get_tracer(service_name)

        def _start(span: trace.Span) -> None:
            span.set_attribute("service.name", service_name)
            if span_name:
                span.set_attribute("function.name", func.__name__)

        def _fail(span: trace.Span, e: Exception) -> None:
            span.set_attribute("success", False)
            span.set_attribute("error.type", type(e).__name__)
            span.set_attribute("error.message", str(e))
            span.record_exception(e)

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(name) as span:
                _start(span)
                try:
                    result = await func(*args, **kwargs)
                    span.set_attribute("success", True)
                    return result
                except Exception as e:
                    _fail(span, e)
                    raise

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(name) as span:
                _start(span)
                try:
                    result = func(*args, **kwargs)
                    span.set_attribute("success", True)
                    return result
                except Exception as e:
                    _fail(span, e)
                    raise

        if inspect.iscoroutinefunction(func):
            return async_wrapper  # type: ignore
        return sync_wrapper  # type: ignore

    return decorator
