"""Logging utilities with structured output and context propagation.

This module provides:
    - JSON structured logging for log aggregation systems
    - Run ID and project ID context propagation across log messages
    - Console plus rotating file output with console-only fallback

Project context is stored in a ContextVar, so each asyncio task in the
per-project fetch fan-out logs under its own project without passing it
through every call.

Usage:
    >>> from observability.logging import setup_logging, set_run_context
    >>> setup_logging(config)
    >>> set_run_context(run_id="abc123")
    >>> logger.info("Aggregation started")  # Includes run_id automatically
"""

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from typing import Any

LOG_FILENAME = "chronicle.log"

run_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("run_id", default="-")
project_var: contextvars.ContextVar[str] = contextvars.ContextVar("project", default="-")

# LogRecord attributes that are not user-supplied extras
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "run_id", "project", "message",
})


def set_run_context(run_id: str) -> None:
    """Set the current run ID for log context propagation."""
    run_id_var.set(run_id)


def set_project_context(project_id: str) -> None:
    """Set the tracked project the current task is working on."""
    project_var.set(project_id)


def clear_context() -> None:
    """Reset all logging context variables."""
    run_id_var.set("-")
    project_var.set("-")


class ContextFilter(logging.Filter):
    """Inject run_id and project into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = run_id_var.get()
        record.project = project_var.get()
        return True


class JsonFormatter(logging.Formatter):
    """Single-line JSON formatter.

    Output format:
        {"timestamp": "...", "level": "INFO", "logger": "...", "message": "...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": getattr(record, "run_id", "-"),
        }

        project = getattr(record, "project", "-")
        if project != "-":
            log_data["project"] = project

        if record.levelno >= logging.WARNING:
            log_data["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        return json.dumps(log_data, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Text formatter: ``TIMESTAMP [LEVEL] [run_id] [project] logger: message``."""

    def __init__(self, include_date: bool = False):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] [%(run_id)s] [%(project)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S" if include_date else "%H:%M:%S",
        )


def setup_logging(config: Any, verbose: bool = False) -> bool:
    """Configure logging with console and file handlers.

    If the log directory is not writable, falls back to console-only logging.

    Args:
        config: Application configuration with logging settings
        verbose: If True, override config and use DEBUG level for console

    Returns:
        True if file logging is enabled, False if console-only (fallback)
    """
    console_level = logging.DEBUG if verbose else getattr(logging, config.log_level, logging.INFO)
    context_filter = ContextFilter()

    if config.log_format == "json":
        console_fmt: logging.Formatter = JsonFormatter()
        file_fmt: logging.Formatter = JsonFormatter()
    else:
        console_fmt = TextFormatter(include_date=False)
        file_fmt = TextFormatter(include_date=True)

    # Console goes to stderr; stdout is reserved for command output
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(console_fmt)
    console.addFilter(context_filter)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.addHandler(console)

    file_logging_enabled = False
    try:
        config.log_dir.mkdir(parents=True, exist_ok=True)
        test_file = config.log_dir / ".write_test"
        test_file.touch()
        test_file.unlink()

        log_file = config.log_dir / LOG_FILENAME
        if config.log_max_bytes > 0:
            file_handler: logging.Handler = RotatingFileHandler(
                log_file,
                maxBytes=config.log_max_bytes,
                backupCount=config.log_backup_count,
                encoding="utf-8",
            )
        else:
            file_handler = TimedRotatingFileHandler(
                log_file,
                when="midnight",
                interval=1,
                backupCount=config.log_backup_count,
                encoding="utf-8",
            )

        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_fmt)
        file_handler.addFilter(context_filter)
        root.addHandler(file_handler)
        file_logging_enabled = True

    except OSError as e:
        print(
            f"Warning: Cannot write to log directory '{config.log_dir}': {e}. "
            "Falling back to console-only logging.",
            file=sys.stderr,
        )

    for lib in ("aiohttp", "asyncio", "urllib3"):
        logging.getLogger(lib).setLevel(logging.WARNING)

    return file_logging_enabled
