"""
OpenTelemetry Metrics

Meter provider setup plus the instruments each service records:

    gateway    http.server.request_count      counter    {request}
               http.server.request_duration   histogram  ms
    jokes      jokes.served                   counter    {joke}
               jokes.latency                  histogram  ms
    analytics  analytics.tracks               counter    {event}
    user       user.favorites.added           counter    {favorite}
"""

import time
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Callable, Optional

from opentelemetry import metrics
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.metrics import Counter, Histogram, Meter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    MetricReader,
    PeriodicExportingMetricReader,
)
from opentelemetry.sdk.resources import Resource

from jokemesh.core.exceptions import ConfigurationError


def setup_metrics(
    resource: Resource,
    otlp_endpoint: Optional[str] = None,
    exporter: str = "otlp",
    extra_readers: Iterable[MetricReader] = (),
    export_interval_ms: int = 60000,
    install_global: bool = True,
) -> MeterProvider:
    """
    Configure a MeterProvider.

    Args:
        resource: Resource describing the service
        otlp_endpoint: OTLP/gRPC collector endpoint (plaintext)
        exporter: "otlp", "console" or "none"
        extra_readers: Additional readers (tests attach in-memory ones)
        export_interval_ms: Export interval in milliseconds
        install_global: Also register the provider as the global one

    Returns:
        Configured MeterProvider

    Raises:
        ConfigurationError: If the exporter cannot be constructed
    """
    readers: list[MetricReader] = []

    if exporter == "otlp":
        try:
            otlp_exporter = OTLPMetricExporter(endpoint=otlp_endpoint, insecure=True)
        except Exception as e:
            raise ConfigurationError(
                f"Failed to create metric exporter: {e}",
                setting="otel_exporter_otlp_endpoint",
            ) from e
        readers.append(
            PeriodicExportingMetricReader(
                otlp_exporter, export_interval_millis=export_interval_ms
            )
        )
    elif exporter == "console":
        readers.append(
            PeriodicExportingMetricReader(
                ConsoleMetricExporter(), export_interval_millis=export_interval_ms
            )
        )

    readers.extend(extra_readers)

    provider = MeterProvider(resource=resource, metric_readers=readers)
    if install_global:
        metrics.set_meter_provider(provider)

    return provider


def elapsed_ms(start: float) -> float:
    """Milliseconds since ``start`` (a time.perf_counter() reading)."""
    return (time.perf_counter() - start) * 1000.0


# =============================================================================
# Service Instruments
# =============================================================================


@dataclass
class GatewayInstruments:
    request_count: Counter
    request_latency: Histogram

    @classmethod
    def create(cls, meter: Meter) -> "GatewayInstruments":
        return cls(
            request_count=meter.create_counter(
                "http.server.request_count",
                unit="{request}",
                description="Total number of HTTP requests",
            ),
            request_latency=meter.create_histogram(
                "http.server.request_duration",
                unit="ms",
                description="HTTP request latency",
            ),
        )


@dataclass
class JokesInstruments:
    jokes_served: Counter
    joke_latency: Histogram

    @classmethod
    def create(cls, meter: Meter) -> "JokesInstruments":
        return cls(
            jokes_served=meter.create_counter(
                "jokes.served",
                unit="{joke}",
                description="Total number of jokes served",
            ),
            joke_latency=meter.create_histogram(
                "jokes.latency",
                unit="ms",
                description="Joke retrieval latency",
            ),
        )


@dataclass
class AnalyticsInstruments:
    tracking_count: Counter

    @classmethod
    def create(cls, meter: Meter) -> "AnalyticsInstruments":
        return cls(
            tracking_count=meter.create_counter(
                "analytics.tracks",
                unit="{event}",
                description="Number of analytics events tracked",
            ),
        )


@dataclass
class UserInstruments:
    favorites_added: Counter

    @classmethod
    def create(cls, meter: Meter) -> "UserInstruments":
        return cls(
            favorites_added=meter.create_counter(
                "user.favorites.added",
                unit="{favorite}",
                description="Number of favorites added",
            ),
        )


# =============================================================================
# Request Metrics Middleware
# =============================================================================


class RequestMetricsMiddleware:
    """
    ASGI middleware recording one request-count increment and one latency
    observation per HTTP request, labelled by method, path and status code.
    """

    def __init__(
        self,
        app: Callable[..., Any],
        instruments: GatewayInstruments,
    ) -> None:
        self.app = app
        self.instruments = instruments

    async def __call__(
        self,
        scope: dict[str, Any],
        receive: Callable[..., Any],
        send: Callable[..., Any],
    ) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status_code = 500

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            attributes = {
                "method": scope.get("method", "GET"),
                "path": scope.get("path", "/"),
                "status_code": status_code,
            }
            self.instruments.request_count.add(1, attributes)
            self.instruments.request_latency.record(elapsed_ms(start), attributes)
