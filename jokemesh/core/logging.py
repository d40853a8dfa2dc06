"""Structured logging module for the joke-mesh services.

Provides JSON-formatted structured logging using structlog.

Patterns applied:
- Singleton _configured flag prevents reconfiguration
- configure_logging() called ONCE at startup
- Underscore-prefix for unused structlog params
- JSON output via JSONRenderer
- trace_id/span_id taken from the active OpenTelemetry span, so every log
  line can be joined with its trace in the backend
"""

import sys
from typing import Any, TextIO

import structlog
from opentelemetry import trace
from structlog.types import EventDict


# =============================================================================
# Singleton Configuration State
# =============================================================================
_configured: bool = False
_defaults_applied: bool = False
_service_name: str | None = None


# =============================================================================
# Custom Processors
# =============================================================================
def add_trace_context(
    _logger: object, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Add the current trace and span IDs to the log event.

    Nothing is added outside of a recording span.
    """
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        event_dict.setdefault("trace_id", format(span_context.trace_id, "032x"))
        event_dict.setdefault("span_id", format(span_context.span_id, "016x"))
    return event_dict


def add_service_name(
    _logger: object, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Add the configured service name to the log event."""
    if _service_name is not None:
        event_dict.setdefault("service", _service_name)
    return event_dict


def _level_to_int(level: str) -> int:
    """Convert log level string to integer."""
    levels = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    return levels.get(level.upper(), 20)


# =============================================================================
# Singleton Configuration
# =============================================================================
def configure_logging(
    level: str = "INFO",
    service_name: str | None = None,
    stream: TextIO | None = None,
    force: bool = False,
) -> None:
    """Configure structlog ONCE at application startup.

    Subsequent calls are no-ops unless force=True (for testing).

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Added to every event as ``service``.
        stream: Output stream. Defaults to sys.stdout.
        force: Force reconfiguration (for testing only).
    """
    global _configured

    if _configured and not force:
        return

    _apply_configuration(level, service_name, stream)
    _configured = True


def _apply_configuration(
    level: str,
    service_name: str | None,
    stream: TextIO | None,
) -> None:
    global _service_name

    _service_name = service_name

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
        add_service_name,
        add_trace_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_level_to_int(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stdout),
        cache_logger_on_first_use=False,
    )


def reset_logging() -> None:
    """Reset configuration state for test isolation."""
    global _configured, _defaults_applied, _service_name
    _configured = False
    _defaults_applied = False
    _service_name = None


def get_logger(name: str) -> Any:
    """Get configured logger by name.

    Applies the default JSON configuration if nothing has been configured
    yet. Unlike an explicit configure_logging() call, the defaults do not
    lock the configuration: the service lifespan can still set its level and
    service name after module-level loggers were created.

    Args:
        name: Logger name (typically __name__ of the module).

    Returns:
        structlog BoundLogger instance.
    """
    global _defaults_applied

    if not _configured and not _defaults_applied:
        _apply_configuration("INFO", None, None)
        _defaults_applied = True
    return structlog.get_logger(logger_name=name)
