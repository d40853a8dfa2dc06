"""
Observability Package

OpenTelemetry tracing and metrics for the joke-mesh services. Traces and
metrics are exported to the collector via OTLP gRPC.
"""

from jokemesh.observability.metrics import (
    AnalyticsInstruments,
    GatewayInstruments,
    JokesInstruments,
    RequestMetricsMiddleware,
    UserInstruments,
    setup_metrics,
)
from jokemesh.observability.telemetry import Telemetry
from jokemesh.observability.tracing import (
    TracingMiddleware,
    extract_trace_context,
    get_current_span_id,
    get_current_trace_id,
    inject_trace_context,
    setup_tracing,
)

__all__ = [
    "setup_tracing",
    "setup_metrics",
    "Telemetry",
    "TracingMiddleware",
    "RequestMetricsMiddleware",
    "GatewayInstruments",
    "JokesInstruments",
    "AnalyticsInstruments",
    "UserInstruments",
    "get_current_trace_id",
    "get_current_span_id",
    "inject_trace_context",
    "extract_trace_context",
]
