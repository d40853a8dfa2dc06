"""Per-service telemetry bundle: tracer + meter built from Settings."""

from __future__ import annotations

from collections.abc import Iterable

from opentelemetry.metrics import Meter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.trace import Tracer

from jokemesh.core.config import Settings
from jokemesh.core.logging import get_logger
from jokemesh.observability.metrics import setup_metrics
from jokemesh.observability.tracing import build_resource, setup_tracing


logger = get_logger(__name__)


class Telemetry:
    """Owns one service's TracerProvider and MeterProvider.

    Services take their tracer and meter from here instead of the global
    providers, so several services (or tests) can share one process.

    Example:
        telemetry = Telemetry.from_settings(get_jokes_settings())
        with telemetry.tracer.start_as_current_span("work"):
            ...
        telemetry.shutdown()
    """

    def __init__(
        self,
        service_name: str,
        tracer_provider: TracerProvider,
        meter_provider: MeterProvider,
    ) -> None:
        self.service_name = service_name
        self.tracer_provider = tracer_provider
        self.meter_provider = meter_provider
        self.tracer: Tracer = tracer_provider.get_tracer(service_name)
        self.meter: Meter = meter_provider.get_meter(service_name)
        self._shut_down = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        span_processors: Iterable[SpanProcessor] = (),
        metric_readers: Iterable[MetricReader] = (),
        install_global: bool = True,
    ) -> Telemetry:
        """Build both pipelines from settings.

        Raises:
            ConfigurationError: If an exporter cannot be constructed.
        """
        resource = build_resource(
            settings.service_name,
            settings.service_version,
            settings.environment,
        )
        tracer_provider = setup_tracing(
            resource,
            otlp_endpoint=settings.otel_exporter_otlp_endpoint,
            exporter=settings.otel_exporter,
            extra_processors=span_processors,
            install_global=install_global,
        )
        meter_provider = setup_metrics(
            resource,
            otlp_endpoint=settings.otel_exporter_otlp_endpoint,
            exporter=settings.otel_exporter,
            extra_readers=metric_readers,
            install_global=install_global,
        )
        logger.info(
            "Telemetry initialized",
            service=settings.service_name,
            exporter=settings.otel_exporter,
            endpoint=settings.otel_exporter_otlp_endpoint,
        )
        return cls(settings.service_name, tracer_provider, meter_provider)

    def shutdown(self) -> None:
        """Flush and stop both providers. Safe to call more than once."""
        if self._shut_down:
            return
        self._shut_down = True
        self.tracer_provider.shutdown()
        self.meter_provider.shutdown()
