"""Tests for structured logging module.

Tests verify:
- Log output is one JSON object per line with timestamp, level and event
- The configured service name and the active trace/span IDs are attached
- configure_logging() runs once unless forced
"""

import json
from io import StringIO

from opentelemetry.trace import Tracer

from jokemesh.core.logging import configure_logging, get_logger, reset_logging


def _lines(stream: StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


class TestConfigureLogging:
    """Test configure_logging() function."""

    def test_output_is_json(self) -> None:
        stream = StringIO()
        configure_logging(level="INFO", stream=stream)

        get_logger("test.module").info("Joke requested", client_ip="10.0.0.1")

        (event,) = _lines(stream)
        assert event["event"] == "Joke requested"
        assert event["level"] == "info"
        assert event["client_ip"] == "10.0.0.1"
        assert "timestamp" in event

    def test_binds_logger_name(self) -> None:
        stream = StringIO()
        configure_logging(stream=stream)

        get_logger("jokemesh.services.proxy").info("hello")

        (event,) = _lines(stream)
        assert event["logger_name"] == "jokemesh.services.proxy"

    def test_adds_service_name(self) -> None:
        stream = StringIO()
        configure_logging(service_name="jokes-service", stream=stream)

        get_logger("test").info("hello")

        (event,) = _lines(stream)
        assert event["service"] == "jokes-service"

    def test_level_filters_lower_events(self) -> None:
        stream = StringIO()
        configure_logging(level="WARNING", stream=stream)

        logger = get_logger("test")
        logger.info("dropped")
        logger.warning("kept")

        assert [e["event"] for e in _lines(stream)] == ["kept"]

    def test_configure_logging_only_runs_once(self) -> None:
        """A second call without force is a no-op."""
        first, second = StringIO(), StringIO()
        configure_logging(stream=first)
        configure_logging(stream=second)

        get_logger("test").info("hello")

        assert _lines(first)
        assert second.getvalue() == ""

    def test_configure_logging_force_reconfigures(self) -> None:
        first, second = StringIO(), StringIO()
        configure_logging(stream=first)
        configure_logging(stream=second, force=True)

        get_logger("test").info("hello")

        assert first.getvalue() == ""
        assert _lines(second)


class TestTraceContext:
    """trace_id and span_id join log lines to traces."""

    def test_adds_ids_inside_span(self, tracer: Tracer) -> None:
        stream = StringIO()
        configure_logging(stream=stream)

        with tracer.start_as_current_span("work") as span:
            get_logger("test").info("inside")
            context = span.get_span_context()

        (event,) = _lines(stream)
        assert event["trace_id"] == format(context.trace_id, "032x")
        assert event["span_id"] == format(context.span_id, "016x")

    def test_no_ids_outside_span(self) -> None:
        stream = StringIO()
        configure_logging(stream=stream)

        get_logger("test").info("outside")

        (event,) = _lines(stream)
        assert "trace_id" not in event
        assert "span_id" not in event


class TestGetLogger:
    """Test get_logger() function."""

    def test_module_logger_follows_later_configuration(self) -> None:
        """Loggers created before configure_logging() pick up its settings."""
        reset_logging()
        logger = get_logger("early.module")

        stream = StringIO()
        configure_logging(service_name="user-service", stream=stream)
        logger.info("after configure")

        (event,) = _lines(stream)
        assert event["service"] == "user-service"

    def test_get_logger_returns_logger_methods(self) -> None:
        logger = get_logger("test.module")
        for method in ("debug", "info", "warning", "error"):
            assert hasattr(logger, method)
