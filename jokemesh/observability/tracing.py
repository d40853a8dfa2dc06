"""
OpenTelemetry Tracing Module

Distributed tracing for the joke-mesh services. Trace context arrives in
W3C ``traceparent``/``baggage`` headers, is continued by a SERVER span per
request, and is injected again into every outbound call (gateway proxy,
jokes -> analytics notification) so a single trace spans all hops.

Spans are exported over plaintext OTLP/gRPC to the collector.
"""

from collections.abc import Iterable
from typing import Any, Callable, Optional

from opentelemetry import trace
from opentelemetry.baggage.propagation import W3CBaggagePropagator
from opentelemetry.context import Context
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.propagate import extract, inject, set_global_textmap
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_ON
from opentelemetry.trace import SpanKind, Status, StatusCode, Tracer
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from jokemesh.core.exceptions import ConfigurationError


def build_resource(
    service_name: str,
    service_version: str,
    environment: str,
) -> Resource:
    """Resource attributes shared by the trace and metric pipelines."""
    return Resource.create(
        {
            SERVICE_NAME: service_name,
            SERVICE_VERSION: service_version,
            "environment": environment,
        }
    )


def install_propagator() -> None:
    """Use W3C TraceContext + Baggage for inject/extract."""
    set_global_textmap(
        CompositePropagator(
            [TraceContextTextMapPropagator(), W3CBaggagePropagator()]
        )
    )


def setup_tracing(
    resource: Resource,
    otlp_endpoint: Optional[str] = None,
    exporter: str = "otlp",
    extra_processors: Iterable[SpanProcessor] = (),
    install_global: bool = True,
) -> TracerProvider:
    """
    Configure an always-sampling TracerProvider.

    Args:
        resource: Resource describing the service
        otlp_endpoint: OTLP/gRPC collector endpoint (plaintext)
        exporter: "otlp", "console" or "none"
        extra_processors: Additional span processors (tests attach in-memory ones)
        install_global: Also register the provider as the global one

    Returns:
        Configured TracerProvider

    Raises:
        ConfigurationError: If the exporter cannot be constructed
    """
    provider = TracerProvider(resource=resource, sampler=ALWAYS_ON)

    if exporter == "otlp":
        try:
            span_exporter = OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)
        except Exception as e:
            raise ConfigurationError(
                f"Failed to create trace exporter: {e}",
                setting="otel_exporter_otlp_endpoint",
            ) from e
        provider.add_span_processor(BatchSpanProcessor(span_exporter))
    elif exporter == "console":
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    for processor in extra_processors:
        provider.add_span_processor(processor)

    install_propagator()
    if install_global:
        trace.set_tracer_provider(provider)

    return provider


def get_current_trace_id() -> Optional[str]:
    """Get the current trace ID as hex string."""
    span_context = trace.get_current_span().get_span_context()

    if span_context.trace_id == 0:
        return None

    return format(span_context.trace_id, "032x")


def get_current_span_id() -> Optional[str]:
    """Get the current span ID as hex string."""
    span_context = trace.get_current_span().get_span_context()

    if span_context.span_id == 0:
        return None

    return format(span_context.span_id, "016x")


def inject_trace_context(headers: Optional[dict[str, str]] = None) -> dict[str, str]:
    """Inject trace context into headers for outbound requests."""
    carrier = headers if headers is not None else {}
    inject(carrier)
    return carrier


def extract_trace_context(headers: dict[str, Any]) -> Context:
    """Extract trace context from incoming headers."""
    return extract(headers)


def mark_span_failed(span: trace.Span, error: BaseException) -> None:
    """Record ``error`` on ``span`` and flag the span as errored."""
    span.record_exception(error)
    span.set_status(Status(StatusCode.ERROR, str(error)))


def _headers_to_dict(headers: list[tuple[bytes, bytes]]) -> dict[str, str]:
    """Convert ASGI headers to dict for propagation."""
    return {
        key.decode("latin-1").lower(): value.decode("latin-1")
        for key, value in headers
    }


class TracingMiddleware:
    """
    ASGI middleware for OpenTelemetry tracing.

    Continues the inbound trace (if any) with a SERVER span named
    ``"<METHOD> <path>"`` that stays current for the whole request, so
    handler spans, outbound injections and log lines all join it.
    """

    def __init__(
        self,
        app: Callable[..., Any],
        tracer: Optional[Tracer] = None,
        exclude_paths: Optional[list[str]] = None,
        tracer_name: str = "jokemesh.http",
    ) -> None:
        self.app = app
        self.exclude_paths = exclude_paths or []
        self.tracer = tracer or trace.get_tracer(tracer_name)

    async def __call__(
        self,
        scope: dict[str, Any],
        receive: Callable[..., Any],
        send: Callable[..., Any],
    ) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "GET")
        path = scope.get("path", "/")

        if path in self.exclude_paths:
            await self.app(scope, receive, send)
            return

        headers = scope.get("headers", [])
        parent_context = extract_trace_context(_headers_to_dict(headers))

        span_name = f"{method} {path}"
        status_code = 500

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
            await send(message)

        with self.tracer.start_as_current_span(
            span_name,
            context=parent_context,
            kind=SpanKind.SERVER,
            record_exception=False,
            set_status_on_exception=False,
        ) as span:
            span.set_attribute("http.method", method)
            span.set_attribute("http.route", path)
            client = scope.get("client")
            if client:
                span.set_attribute("net.peer.ip", client[0])

            try:
                await self.app(scope, receive, send_wrapper)
            except Exception as e:
                span.set_attribute("http.status_code", 500)
                mark_span_failed(span, e)
                raise

            span.set_attribute("http.status_code", status_code)
            if status_code >= 500:
                span.set_status(Status(StatusCode.ERROR))
