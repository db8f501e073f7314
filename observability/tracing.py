"""Optional Logfire tracing for discovery runs.

When ENABLE_LOGFIRE is set and the ``logfire`` package is installed, each
run becomes a ``discovery_run`` span with one child span per stage, and
pydantic-ai classification calls are instrumented automatically. Without
Logfire every helper here degrades to timing plus a debug log line, so the
pipeline code never branches on whether tracing is on.

Install with: pip install '.[tracing]'

Usage:
    >>> setup_tracing(config)
    >>> tracer = PipelineTracer()
    >>> with tracer.trace_run(run_id):
    ...     with trace_operation("discover_candidates") as attrs:
    ...         attrs["candidates"] = 12
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from typing import Any, Iterator

from config import Config

logger = logging.getLogger(__name__)

SERVICE_NAME = "obituaries"


@dataclass
class TracingContext:
    """Process-wide tracing state."""
    enabled: bool = False
    service_name: str = SERVICE_NAME
    _logfire_configured: bool = field(default=False, init=False)

    @property
    def active(self) -> bool:
        return self.enabled and self._logfire_configured


_context = TracingContext()


def setup_tracing(config: Config, service_name: str = SERVICE_NAME) -> TracingContext:
    """Turn on Logfire tracing when the configuration asks for it.

    Logfire is configured on the first successful call only. A missing
    package or a failing configure call leaves tracing off and the run
    continues untraced.
    """
    _context.enabled = config.enable_logfire
    _context.service_name = service_name

    if not config.enable_logfire or _context._logfire_configured:
        return _context

    try:
        import logfire
    except ImportError:
        logger.warning("ENABLE_LOGFIRE is set but logfire is not installed; tracing disabled")
        _context.enabled = False
        return _context

    try:
        logfire.configure(service_name=service_name, token=config.logfire_token or None)
        logfire.instrument_pydantic_ai()
    except Exception as e:
        logger.error("Failed to configure Logfire | error=%s", e)
        _context.enabled = False
        return _context

    _context._logfire_configured = True
    logger.info("Logfire tracing enabled | service=%s", service_name)
    return _context


@contextmanager
def trace_operation(name: str, attributes: dict[str, Any] | None = None) -> Iterator[dict[str, Any]]:
    """Span around one stage of a run.

    Yields a dict; whatever the block puts in it is set on the span when the
    block exits (counts that are only known afterwards).
    """
    late_attrs: dict[str, Any] = {}
    started = time.perf_counter()

    if not _context.active:
        try:
            yield late_attrs
        finally:
            logger.debug("Stage finished | stage=%s seconds=%.2f", name, time.perf_counter() - started)
        return

    import logfire

    with logfire.span(name, **(attributes or {})) as span:
        try:
            yield late_attrs
        finally:
            for key, value in late_attrs.items():
                span.set_attribute(key, value)
            logger.debug("Stage finished | stage=%s seconds=%.2f", name, time.perf_counter() - started)


@dataclass
class RunStats:
    """Stage counts for one discovery run, flattened onto the run span."""

    run_id: str = "-"
    tweets: int = 0
    news: int = 0
    passed_filter: int = 0
    classified: int = 0
    approved: int = 0
    classification_errors: int = 0
    drafts_new: int = 0
    drafts_created: int = 0
    drafts_failed: int = 0
    duration_seconds: float = 0.0


class PipelineTracer:
    """Collects RunStats while a run executes and attaches them to its span."""

    def __init__(self):
        self.stats = RunStats()

    @contextmanager
    def trace_run(self, run_id: str) -> Iterator[RunStats]:
        self.stats = RunStats(run_id=run_id)
        started = time.perf_counter()
        with trace_operation("discovery_run", {"run_id": run_id}) as attrs:
            try:
                yield self.stats
            finally:
                self.stats.duration_seconds = round(time.perf_counter() - started, 3)
                attrs.update(asdict(self.stats))

    def record_discovery(self, tweets: int, news: int) -> None:
        self.stats.tweets = tweets
        self.stats.news = news

    def record_filter(self, passed: int) -> None:
        self.stats.passed_filter = passed

    def record_classification(self, total: int, approved: int, errors: int) -> None:
        """Record classifier outcomes.

        Args:
            total: Candidates classified successfully
            approved: Candidates recommended for approval
            errors: Candidates whose classification failed
        """
        self.stats.classified = total
        self.stats.approved = approved
        self.stats.classification_errors = errors

    def record_publish(self, new: int, created: int, failed: int) -> None:
        self.stats.drafts_new = new
        self.stats.drafts_created = created
        self.stats.drafts_failed = failed

    def get_summary(self) -> dict[str, Any]:
        return asdict(self.stats)
