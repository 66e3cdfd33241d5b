"""Shared telemetry: logging setup, OpenTelemetry config, and tracing helpers."""

from app.shared.telemetry.logging import RequestContextFilter, get_logger, setup_logging
from app.shared.telemetry.telemetry import TelemetryConfig, get_telemetry, set_telemetry
from app.shared.telemetry.tracing import (
    TracedOperation,
    add_span_event,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "RequestContextFilter",
    "TelemetryConfig",
    "get_telemetry",
    "set_telemetry",
    "add_span_event",
    "TracedOperation",
]
