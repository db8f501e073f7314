"""Observability infrastructure: logging and optional tracing.

setup_logging / set_run_context / clear_context:
    Console + rotating file logging with a per-run id on every record.

setup_tracing / trace_operation / PipelineTracer:
    Optional Logfire spans with PydanticAI instrumentation.

Requirements (tracing only):
    pip install '.[tracing]'

Enable via configuration:
    ENABLE_LOGFIRE=true
    LOGFIRE_TOKEN=your-token  # Optional

Example:
    >>> from observability import setup_tracing, trace_operation
    >>> setup_tracing(config)
    >>> with trace_operation("classify"):
    ...     pass
"""

from observability.logging import clear_context, set_run_context, setup_logging
from observability.tracing import PipelineTracer, RunStats, TracingContext, setup_tracing, trace_operation

__all__ = [
    "setup_logging",
    "set_run_context",
    "clear_context",
    "setup_tracing",
    "trace_operation",
    "TracingContext",
    "PipelineTracer",
    "RunStats",
]
