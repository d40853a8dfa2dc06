"""pytest configuration and fixtures for joke-mesh tests.

Telemetry in tests never leaves the process: spans go to an
InMemorySpanExporter and metrics to an InMemoryMetricReader, and nothing is
installed as the global provider.
"""

from __future__ import annotations

from collections.abc import Callable, Generator, Iterator
from typing import Any

import pytest
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.metrics import Meter
from opentelemetry.trace import Tracer

from jokemesh.core.config import (
    AnalyticsSettings,
    GatewaySettings,
    JokesSettings,
    Settings,
    UserSettings,
)
from jokemesh.core.logging import reset_logging
from jokemesh.observability.telemetry import Telemetry


# =============================================================================
# Constants (S1192: Avoid duplicated string literals)
# =============================================================================

TEST_ENVIRONMENT = "test"
JOKES_HOST = "jokes.test"
USER_HOST = "user.test"
ANALYTICS_HOST = "analytics.test"


# =============================================================================
# Markers
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, no external dependencies)")
    config.addinivalue_line(
        "markers", "integration: Integration tests (several services in one process)"
    )


# =============================================================================
# Logging Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_logging() -> Generator[None, None, None]:
    """Each test starts from unconfigured logging."""
    reset_logging()
    yield
    reset_logging()


# =============================================================================
# Telemetry Fixtures
# =============================================================================


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def metric_reader() -> InMemoryMetricReader:
    return InMemoryMetricReader()


@pytest.fixture
def tracer(span_exporter: InMemorySpanExporter) -> Iterator[Tracer]:
    """Tracer whose finished spans land in span_exporter."""
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    yield provider.get_tracer("jokemesh.tests")
    provider.shutdown()


@pytest.fixture
def meter(metric_reader: InMemoryMetricReader) -> Iterator[Meter]:
    """Meter whose measurements are collected by metric_reader."""
    provider = MeterProvider(metric_readers=[metric_reader])
    yield provider.get_meter("jokemesh.tests")
    provider.shutdown()


TelemetryFactory = Callable[[Settings], tuple[Telemetry, InMemoryMetricReader]]


@pytest.fixture
def make_telemetry(span_exporter: InMemorySpanExporter) -> Iterator[TelemetryFactory]:
    """Build per-service Telemetry sharing one span exporter.

    Each service gets its own metric reader, since a reader can only be
    registered with one MeterProvider.
    """
    created: list[Telemetry] = []

    def factory(settings: Settings) -> tuple[Telemetry, InMemoryMetricReader]:
        reader = InMemoryMetricReader()
        telemetry = Telemetry.from_settings(
            settings,
            span_processors=[SimpleSpanProcessor(span_exporter)],
            metric_readers=[reader],
            install_global=False,
        )
        created.append(telemetry)
        return telemetry, reader

    yield factory

    for telemetry in created:
        telemetry.shutdown()


@pytest.fixture
def metric_points() -> Callable[[InMemoryMetricReader, str], list[Any]]:
    """Return the data points collected for one metric name."""

    def collect(reader: InMemoryMetricReader, name: str) -> list[Any]:
        data = reader.get_metrics_data()
        points: list[Any] = []
        if data is None:
            return points
        for resource_metrics in data.resource_metrics:
            for scope_metrics in resource_metrics.scope_metrics:
                for metric in scope_metrics.metrics:
                    if metric.name == name:
                        points.extend(metric.data.data_points)
        return points

    return collect


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def gateway_settings() -> GatewaySettings:
    return GatewaySettings(
        environment=TEST_ENVIRONMENT,
        otel_exporter="none",
        jokes_service_url=JOKES_HOST,
        user_service_url=USER_HOST,
        analytics_service_url=ANALYTICS_HOST,
    )


@pytest.fixture
def jokes_settings() -> JokesSettings:
    return JokesSettings(
        environment=TEST_ENVIRONMENT,
        otel_exporter="none",
        analytics_service_url=ANALYTICS_HOST,
        simulate_latency=False,
    )


@pytest.fixture
def analytics_settings() -> AnalyticsSettings:
    return AnalyticsSettings(environment=TEST_ENVIRONMENT, otel_exporter="none")


@pytest.fixture
def user_settings() -> UserSettings:
    return UserSettings(environment=TEST_ENVIRONMENT, otel_exporter="none")
