"""Observability: logging context and optional tracing.

setup_logging / set_run_context / set_project_context:
    Console + rotating file logging with run and project context.

setup_tracing / trace_operation:
    Optional Logfire spans around pipeline stages.

Enable tracing via configuration:
    ENABLE_LOGFIRE=true
    LOGFIRE_TOKEN=your-token  # Optional
"""

from observability.logging import (
    clear_context,
    set_project_context,
    set_run_context,
    setup_logging,
)
from observability.tracing import TracingContext, setup_tracing, trace_operation

__all__ = [
    "clear_context",
    "set_project_context",
    "set_run_context",
    "setup_logging",
    "TracingContext",
    "setup_tracing",
    "trace_operation",
]
