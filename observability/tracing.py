"""Optional tracing using Logfire/OpenTelemetry.

Spans wrap the pipeline stages (activity extraction, per-project fetches,
aggregation). Tracing is off unless ENABLE_LOGFIRE is set; when off,
trace_operation is a timing-only no-op.

Requirements:
    pip install logfire

Usage:
    >>> from observability.tracing import setup_tracing, trace_operation
    >>> setup_tracing(enabled=True, service_name="chronicle")
    >>> with trace_operation("aggregate", {"projects": 3}) as attrs:
    ...     attrs["sections"] = 2
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Generator

logger = logging.getLogger(__name__)


@dataclass
class TracingContext:
    """Tracing state for the process."""

    enabled: bool = False
    service_name: str = "chronicle"
    token: str = ""
    _logfire_configured: bool = field(default=False, init=False)


_context = TracingContext()


def setup_tracing(
    enabled: bool = False,
    service_name: str = "chronicle",
    token: str = "",
) -> TracingContext:
    """Configure Logfire tracing.

    Args:
        enabled: Whether to enable tracing
        service_name: Service name reported on spans
        token: Logfire authentication token

    Returns:
        The process TracingContext
    """
    _context.enabled = enabled
    _context.service_name = service_name
    _context.token = token

    if not enabled:
        logger.debug("Tracing disabled")
        return _context

    try:
        import logfire

        logfire.configure(service_name=service_name, token=token or None)
        _context._logfire_configured = True
        logger.info("Logfire tracing enabled | service=%s", service_name)
    except ImportError:
        logger.warning("Logfire not installed. Tracing disabled.")
        _context.enabled = False
    except Exception as e:
        logger.error("Failed to configure Logfire: %s", e)
        _context.enabled = False

    return _context


@contextmanager
def trace_operation(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[dict[str, Any], None, None]:
    """Trace an operation as a span.

    Args:
        name: Span name
        attributes: Attributes attached when the span opens

    Yields:
        Dictionary of result attributes set on the span when it closes
    """
    start = time.perf_counter()
    result_attrs: dict[str, Any] = {}
    try:
        if _context.enabled and _context._logfire_configured:
            import logfire

            with logfire.span(name, **(attributes or {})) as span:
                yield result_attrs
                for key, value in result_attrs.items():
                    span.set_attribute(key, value)
        else:
            yield result_attrs
    finally:
        logger.debug("Operation '%s' completed in %.3fs", name, time.perf_counter() - start)
