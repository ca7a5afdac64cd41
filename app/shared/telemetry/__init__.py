"""Shared telemetry: logging setup, OpenTelemetry config, and tracing helpers."""

from app.shared.telemetry.logging import get_logger, setup_logging
from app.shared.telemetry.telemetry import TelemetryConfig
from app.shared.telemetry.tracing import (
    add_span_attributes,
    get_trace_id,
    traced,
)

__all__ = [
    "TelemetryConfig",
    "add_span_attributes",
    "get_logger",
    "get_trace_id",
    "setup_logging",
    "traced",
]
