"""Span helpers for workflow tracing.

Workflow runs are wrapped in a TracedOperation; steps, rollbacks and side
effect failures are recorded as span events on it.
"""

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

# Only these attribute keys are recorded; step results and payloads can hold PII.
_SAFE_SPAN_ATTR_KEYS = frozenset({
    "workflow.id", "workflow.type", "workspace.id", "step", "error.code", "count",
    "entity_type", "entity_id", "action",
})


def _safe(attributes: dict | None) -> dict:
    return {
        k: v
        for k, v in (attributes or {}).items()
        if k.lower() in _SAFE_SPAN_ATTR_KEYS and v is not None
    }


def add_span_event(name: str, attributes: dict | None = None) -> None:
    """Add an event to the current span."""
    span = trace.get_current_span()
    if span and span.is_recording():
        span.add_event(name, attributes=_safe(attributes))


class TracedOperation:
    """Context manager that runs a block as the current span (sync or async)."""

    def __init__(self, operation_name: str, attributes: dict | None = None) -> None:
        self.operation_name = operation_name
        self.attributes = _safe(attributes)
        self.tracer = trace.get_tracer(__name__)
        self._span_cm = None
        self.span: trace.Span | None = None

    def __enter__(self) -> "TracedOperation":
        self._span_cm = self.tracer.start_as_current_span(
            self.operation_name, attributes=self.attributes, end_on_exit=True
        )
        self.span = self._span_cm.__enter__()
        return self

    def __exit__(
        self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object
    ) -> None:
        if self._span_cm is None or self.span is None:
            return
        if exc_val is not None:
            self.span.set_status(Status(StatusCode.ERROR, str(exc_val)))
            self.span.record_exception(exc_val)
        else:
            self.span.set_status(Status(StatusCode.OK))
        self._span_cm.__exit__(exc_type, exc_val, exc_tb)

    async def __aenter__(self) -> "TracedOperation":
        return self.__enter__()

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)
