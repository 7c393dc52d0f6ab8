"""Spans around reorganization runs.

Each planner, scanner and verifier entry point is an async method wrapped in
``traced``. The span carries the run scope (organization, merge pair, dry-run
flag) under the ``reorg.`` prefix, read from the call's bound arguments, so
positional ``tenant_id`` and a ``MergeOperation`` argument are both recorded.
Document contents never reach a span.
"""

import inspect
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

T = TypeVar("T")

ATTRIBUTE_PREFIX = "reorg."

# Run-scope names that may be recorded; anything else is dropped.
SCOPE_ATTRIBUTES = frozenset({
    "tenant_id",
    "source_user_id",
    "target_user_id",
    "dry_run",
    "delete_source",
    "documents_total",
})

SpanValue = str | int | float | bool


def _scope_of(value: Any) -> dict[str, Any]:
    """Scope fields carried by an argument object such as MergeOperation."""
    return {
        name: getattr(value, name)
        for name in SCOPE_ATTRIBUTES
        if hasattr(value, name)
    }


def run_scope(signature: inspect.Signature, args: tuple, kwargs: dict) -> dict[str, SpanValue]:
    """Collect recordable scope from a call's arguments.

    Arguments named after a scope attribute are taken as-is; any other
    argument contributes the scope attributes it exposes. None values are
    skipped (a flat merge has no tenant).
    """
    bound = signature.bind_partial(*args, **kwargs)
    bound.apply_defaults()
    scope: dict[str, Any] = {}
    for name, value in bound.arguments.items():
        if name == "self":
            continue
        if name in SCOPE_ATTRIBUTES:
            scope[name] = value
        else:
            scope.update(_scope_of(value))
    return {k: v for k, v in scope.items() if isinstance(v, (str, int, float, bool))}


def _record(span: trace.Span, scope: dict[str, Any]) -> None:
    for key, value in scope.items():
        if key in SCOPE_ATTRIBUTES and value is not None:
            span.set_attribute(ATTRIBUTE_PREFIX + key, value)


def traced(
    operation_name: str | None = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Run an async entry point inside a span named ``operation_name``.

    The span ends with status OK, or ERROR with the exception recorded and
    re-raised. Decorating a plain function is a TypeError.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"traced() needs an async function, got {func.__qualname__}")
        span_name = operation_name or f"{func.__module__}.{func.__qualname__}"
        signature = inspect.signature(func)

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            tracer = trace.get_tracer(__name__)
            with tracer.start_as_current_span(span_name, record_exception=False) as span:
                _record(span, run_scope(signature, args, kwargs))
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    span.record_exception(e)
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return wrapper

    return decorator


def add_span_attributes(**attributes: SpanValue) -> None:
    """Record run-scope values found mid-run (e.g. documents_total) on the current span."""
    span = trace.get_current_span()
    if span.is_recording():
        _record(span, attributes)
