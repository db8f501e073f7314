"""Logging setup with structured output and run-id propagation.

Every pipeline run sets a short run id; a filter stamps it on each record
so the lines of one run can be pulled out of the shared log file.

Handlers:
    - Console (stderr, so `main.py run` can print its JSON report to stdout)
    - Rotating file ``obituaries.log`` in LOG_DIR, size- or time-based

Usage:
    >>> from observability.logging import setup_logging, set_run_context
    >>> setup_logging(config)
    >>> set_run_context("a1b2c3d4")
    >>> logger.info("Discovery started")  # Includes run_id automatically
"""

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from typing import Any

LOG_FILE_NAME = "obituaries.log"

# Third-party loggers capped at WARNING
NOISY_LOGGERS = ("aiohttp", "aiohttp.access", "httpx", "httpcore", "anthropic", "asyncio")

run_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("run_id", default="-")

# Anything on a record beyond these was passed through `extra=`
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "run_id", "message", "asctime",
}


def set_run_context(run_id: str) -> None:
    """Set the current run ID for log context propagation."""
    run_id_var.set(run_id)


def clear_context() -> None:
    run_id_var.set("-")


class ContextFilter(logging.Filter):
    """Injects the current run_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = run_id_var.get()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Output format:
        {"timestamp": "...", "level": "INFO", "logger": "...", "message": "...", "run_id": "..."}

    Warnings and above also carry their source location; `extra=` fields are
    copied through, stringified when not JSON-serializable.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": getattr(record, "run_id", "-"),
        }

        if record.levelno >= logging.WARNING:
            log_data["source"] = f"{record.filename}:{record.lineno} in {record.funcName}"

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in vars(record).items():
            if key not in _STANDARD_ATTRS:
                log_data[key] = _jsonable(value)

        return json.dumps(log_data, ensure_ascii=False)


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class TextFormatter(logging.Formatter):
    """Text formatter: TIMESTAMP [LEVEL] [run_id] logger: message"""

    def __init__(self, include_date: bool = False):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] [%(run_id)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S" if include_date else "%H:%M:%S",
        )


def _file_handler(config: Any) -> logging.Handler:
    """Rotating handler for LOG_DIR/obituaries.log.

    LOG_MAX_BYTES > 0 rotates by size, otherwise daily at midnight.

    Raises:
        OSError: If the directory cannot be created or the file opened
    """
    config.log_dir.mkdir(parents=True, exist_ok=True)
    log_file = config.log_dir / LOG_FILE_NAME
    if config.log_max_bytes > 0:
        return RotatingFileHandler(
            log_file,
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
            encoding="utf-8",
        )
    return TimedRotatingFileHandler(
        log_file,
        when="midnight",
        backupCount=config.log_backup_count,
        encoding="utf-8",
    )


def setup_logging(config: Any, verbose: bool = False) -> bool:
    """Configure root logging from LOG_* settings.

    Replaces any handlers already on the root logger, so calling it twice
    does not duplicate output. An unwritable LOG_DIR degrades to console-only.

    Args:
        config: Application configuration with logging settings
        verbose: Force DEBUG on the console regardless of LOG_LEVEL

    Returns:
        True if file logging is enabled, False if console-only (fallback)
    """
    json_output = config.log_format == "json"
    context_filter = ContextFilter()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else getattr(logging, config.log_level, logging.INFO))
    console.setFormatter(JsonFormatter() if json_output else TextFormatter())
    console.addFilter(context_filter)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.addHandler(console)

    try:
        file_handler = _file_handler(config)
    except OSError as e:
        print(
            f"Warning: Cannot write to log directory '{config.log_dir}': {e}. "
            "Falling back to console-only logging.",
            file=sys.stderr,
        )
        file_handler = None
    else:
        file_handler.setLevel(logging.DEBUG)  # File always captures everything
        file_handler.setFormatter(JsonFormatter() if json_output else TextFormatter(include_date=True))
        file_handler.addFilter(context_filter)
        root.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return file_handler is not None
