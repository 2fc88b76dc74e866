"""Observability setup for prefix-walk.

Logs are structured JSON written to stderr, keeping stdout free for command
output. When tracing is enabled, every listing call runs in its own span and
log events emitted inside a span carry its trace and span ids.
"""

import logging
import sys
from typing import Any, MutableMapping

import structlog
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from .config import Settings, settings


def setup_tracing(config: Settings = settings) -> None:
    """Set up OpenTelemetry tracing."""
    if not config.otel_enabled:
        return

    resource = Resource.create({"service.name": config.otel_service_name})
    provider = TracerProvider(resource=resource)

    processor = BatchSpanProcessor(ConsoleSpanExporter(out=sys.stderr))
    provider.add_span_processor(processor)

    trace.set_tracer_provider(provider)


def add_trace_context(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Attach the current trace and span ids to a log event."""
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        event_dict["trace_id"] = format(span_context.trace_id, "032x")
        event_dict["span_id"] = format(span_context.span_id, "016x")
    return event_dict


def setup_logging(config: Settings = settings) -> None:
    """Set up structured logging with structlog."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, config.log_level.upper()),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Get a logger instance."""
    return structlog.get_logger(name)


def get_tracer(name: str) -> trace.Tracer:
    """Get a tracer; spans are no-ops unless tracing is enabled."""
    return trace.get_tracer(name)


# Initialize on import
setup_logging()
setup_tracing()
