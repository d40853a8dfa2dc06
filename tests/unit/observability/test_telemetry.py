"""Tests for the per-service Telemetry bundle."""

from unittest.mock import patch

import pytest
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from jokemesh.core.config import JokesSettings
from jokemesh.core.exceptions import ConfigurationError
from jokemesh.observability.telemetry import Telemetry


class TestFromSettings:
    def test_builds_tracer_and_meter(self, jokes_settings: JokesSettings) -> None:
        exporter = InMemorySpanExporter()
        reader = InMemoryMetricReader()
        telemetry = Telemetry.from_settings(
            jokes_settings,
            span_processors=[SimpleSpanProcessor(exporter)],
            metric_readers=[reader],
            install_global=False,
        )

        with telemetry.tracer.start_as_current_span("getRandomJoke"):
            pass
        telemetry.meter.create_counter("jokes.served").add(1)

        (span,) = exporter.get_finished_spans()
        assert span.resource.attributes["service.name"] == "jokes-service"
        assert span.resource.attributes["environment"] == "test"
        assert reader.get_metrics_data() is not None
        telemetry.shutdown()

    def test_exporter_failure_is_configuration_error(
        self, jokes_settings: JokesSettings
    ) -> None:
        settings = jokes_settings.model_copy(update={"otel_exporter": "otlp"})
        with patch(
            "jokemesh.observability.tracing.OTLPSpanExporter",
            side_effect=ValueError("bad endpoint"),
        ), pytest.raises(ConfigurationError, match="trace exporter"):
            Telemetry.from_settings(settings, install_global=False)


class TestShutdown:
    def test_shutdown_is_idempotent(self, jokes_settings: JokesSettings) -> None:
        telemetry = Telemetry.from_settings(jokes_settings, install_global=False)
        telemetry.shutdown()
        telemetry.shutdown()
